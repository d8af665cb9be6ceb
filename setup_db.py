import os
from quickbite import create_app, db
from quickbite.config import DevelopmentConfig, ProductionConfig
from quickbite.services.seed import seed_sample_data

def setup_database():
    """Setup database based on environment"""
    env = os.environ.get('FLASK_ENV', 'development')

    if env == 'production':
        app = create_app(ProductionConfig)
        print("Setting up production database...")
    else:
        app = create_app(DevelopmentConfig)
        print("Setting up development database...")

    with app.app_context():
        db.create_all()
        print("Database tables created successfully!")

        # Sample data only outside production
        if env != 'production':
            if seed_sample_data():
                print("Sample data created!")
            else:
                print("Sample data already exists.")

if __name__ == '__main__':
    setup_database()
