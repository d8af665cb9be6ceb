from flask import Blueprint, request, jsonify
from quickbite.models.models import Shop
from quickbite.models.schemas import ShopCreate, ShopUpdate, ShopRecord
from quickbite.services import crud

shops_bp = Blueprint('shops', __name__)

shop_resource = crud.Resource(
    model=Shop,
    record=ShopRecord,
    create_schema=ShopCreate,
    update_schema=ShopUpdate,
    key='shop',
    label='Shop',
    not_found_code='SHOP_NOT_FOUND',
    search_columns=('name', 'address', 'email'),
)


@shops_bp.route('/api/shops', methods=['GET'])
def get_shops():
    """Get one shop by ?id= or a page of shops"""
    if 'id' in request.args:
        shop = crud.get_or_404(shop_resource, crud.parse_id(request.args))
        return jsonify(shop_resource.serialize(shop))

    shops = crud.list_records(shop_resource, request.args)
    return jsonify([shop_resource.serialize(shop) for shop in shops])


@shops_bp.route('/api/shops', methods=['POST'])
def create_shop():
    shop = crud.create_record(shop_resource, request.get_json(silent=True))
    return jsonify(shop_resource.serialize(shop)), 201


@shops_bp.route('/api/shops', methods=['PUT'])
def update_shop():
    shop = crud.update_record(shop_resource, crud.parse_id(request.args), request.get_json(silent=True))
    return jsonify(shop_resource.serialize(shop))


@shops_bp.route('/api/shops', methods=['DELETE'])
def delete_shop():
    return jsonify(crud.delete_record(shop_resource, crud.parse_id(request.args)))
