from flask import Blueprint, request, jsonify
from quickbite.models.models import MenuItem, Offer, utcnow
from quickbite.models.schemas import (
    MenuItemCreate, MenuItemUpdate, MenuItemRecord,
    OfferCreate, OfferUpdate, OfferRecord
)
from quickbite.services import crud

menu_bp = Blueprint('menu', __name__)

menu_item_resource = crud.Resource(
    model=MenuItem,
    record=MenuItemRecord,
    create_schema=MenuItemCreate,
    update_schema=MenuItemUpdate,
    key='menuItem',
    label='Menu item',
    not_found_code='MENU_ITEM_NOT_FOUND',
    search_columns=('name', 'category', 'description'),
)

offer_resource = crud.Resource(
    model=Offer,
    record=OfferRecord,
    create_schema=OfferCreate,
    update_schema=OfferUpdate,
    key='offer',
    label='Offer',
    not_found_code='OFFER_NOT_FOUND',
    search_columns=('title', 'description'),
)


# Menu items

@menu_bp.route('/api/menu-items', methods=['GET'])
def get_menu_items():
    """Get one menu item by ?id= or a page filtered by category/availability"""
    if 'id' in request.args:
        item = crud.get_or_404(menu_item_resource, crud.parse_id(request.args))
        return jsonify(menu_item_resource.serialize(item))

    conditions = []
    category = request.args.get('category')
    if category:
        conditions.append(MenuItem.category == category)

    availability = request.args.get('availability')
    if availability is not None:
        conditions.append(MenuItem.availability == (availability in ('true', '1')))

    items = crud.list_records(menu_item_resource, request.args, conditions)
    return jsonify([menu_item_resource.serialize(item) for item in items])


@menu_bp.route('/api/menu-items', methods=['POST'])
def create_menu_item():
    item = crud.create_record(menu_item_resource, request.get_json(silent=True))
    return jsonify(menu_item_resource.serialize(item)), 201


@menu_bp.route('/api/menu-items', methods=['PUT'])
def update_menu_item():
    """Update a menu item; past order items keep the price they were sold at"""
    item = crud.update_record(menu_item_resource, crud.parse_id(request.args), request.get_json(silent=True))
    return jsonify(menu_item_resource.serialize(item))


@menu_bp.route('/api/menu-items', methods=['DELETE'])
def delete_menu_item():
    return jsonify(crud.delete_record(menu_item_resource, crud.parse_id(request.args)))


# Offers

@menu_bp.route('/api/offers', methods=['GET'])
def get_offers():
    """Get one offer by ?id= or a page of offers; ?active=true keeps running offers only"""
    if 'id' in request.args:
        offer = crud.get_or_404(offer_resource, crud.parse_id(request.args))
        return jsonify(offer_resource.serialize(offer))

    conditions = []
    if request.args.get('active') == 'true':
        now = utcnow()
        conditions.extend([Offer.valid_from <= now, Offer.valid_until >= now])

    offers = crud.list_records(offer_resource, request.args, conditions)
    return jsonify([offer_resource.serialize(offer) for offer in offers])


@menu_bp.route('/api/offers', methods=['POST'])
def create_offer():
    offer = crud.create_record(offer_resource, request.get_json(silent=True))
    return jsonify(offer_resource.serialize(offer)), 201


@menu_bp.route('/api/offers', methods=['PUT'])
def update_offer():
    offer = crud.update_record(offer_resource, crud.parse_id(request.args), request.get_json(silent=True))
    return jsonify(offer_resource.serialize(offer))


@menu_bp.route('/api/offers', methods=['DELETE'])
def delete_offer():
    return jsonify(crud.delete_record(offer_resource, crud.parse_id(request.args)))
