from datetime import timedelta
from flask import current_app
from quickbite import db
from quickbite.models.models import Shop, MenuItem, Offer, utcnow

SAMPLE_MENU = [
    ('Margherita Pizza', 'Pizza', 12.99, 'Classic pizza with tomato sauce, mozzarella, and basil'),
    ('Pasta Carbonara', 'Pasta', 14.99, 'Creamy pasta with bacon and parmesan'),
    ('Masala Dosa', 'South Indian', 6.50, 'Crisp rice crepe with spiced potato filling'),
    ('Paneer Wrap', 'Wraps', 7.25, 'Grilled paneer, onions and mint chutney'),
    ('Cold Coffee', 'Beverages', 3.75, 'Iced coffee blended with milk'),
]


def seed_sample_data():
    """Insert a shop, a small menu and a running offer into an empty database.

    Returns False without touching anything when a shop already exists.
    """
    if Shop.query.first():
        return False

    now = utcnow()
    db.session.add(Shop(
        name='QuickBite Canteen',
        address='123 Main St',
        contact='555-0123',
        email='hello@quickbite.example',
    ))

    for name, category, price, description in SAMPLE_MENU:
        db.session.add(MenuItem(
            name=name,
            category=category,
            price=price,
            description=description,
            availability=True,
        ))

    db.session.add(Offer(
        title='Welcome 10% off',
        description='Ten percent off every order this month',
        discount_percent=10,
        valid_from=now,
        valid_until=now + timedelta(days=30),
    ))

    db.session.commit()
    current_app.logger.info(f"Seeded 1 shop, {len(SAMPLE_MENU)} menu items and 1 offer")
    return True
