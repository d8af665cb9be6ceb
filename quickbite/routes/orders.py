from flask import Blueprint, current_app, request, jsonify
from quickbite import db
from quickbite.models.models import Order, OrderItem, utcnow
from quickbite.models.statuses import normalize_payment_status
from quickbite.models.schemas import (
    OrderCreate, OrderUpdate, OrderRecord,
    OrderItemCreate, OrderItemUpdate, OrderItemRecord
)
from quickbite.routes.auth import staff_required
from quickbite.services import crud, order_lifecycle
from quickbite.services.order_summary import order_details

orders_bp = Blueprint('orders', __name__)

order_resource = crud.Resource(
    model=Order,
    record=OrderRecord,
    create_schema=OrderCreate,
    update_schema=OrderUpdate,
    key='order',
    label='Order',
    not_found_code='ORDER_NOT_FOUND',
    search_columns=('token_number',),
    unique_column='token_number',
    duplicate_code='DUPLICATE_TOKEN_NUMBER',
    duplicate_message='Token number already exists',
    newest_first=True,
    tracks_updates=True,
)

order_item_resource = crud.Resource(
    model=OrderItem,
    record=OrderItemRecord,
    create_schema=OrderItemCreate,
    update_schema=OrderItemUpdate,
    key='orderItem',
    label='Order item',
    not_found_code='ORDER_ITEM_NOT_FOUND',
)


def _announce_status(order, previous_status):
    if order.status != previous_status:
        current_app.logger.info(f"Order {order.token_number} moved from {previous_status} to {order.status}")
        current_app.order_events.status_changed(order_resource.serialize(order), previous_status)


# Orders

@orders_bp.route('/api/orders', methods=['GET'])
def get_orders():
    """Get one order by ?id= or a page of orders, newest first"""
    if 'id' in request.args:
        order = crud.get_or_404(order_resource, crud.parse_id(request.args))
        return jsonify(order_resource.serialize(order))

    conditions = []
    status = request.args.get('status')
    if status:
        conditions.append(Order.status == status)

    payment_status = request.args.get('paymentStatus')
    if payment_status:
        conditions.append(Order.payment_status == (normalize_payment_status(payment_status) or payment_status))

    customer_id = crud.parse_int_filter(request.args, 'customerId')
    if customer_id is not None:
        conditions.append(Order.customer_id == customer_id)

    orders = crud.list_records(order_resource, request.args, conditions)
    return jsonify([order_resource.serialize(order) for order in orders])


@orders_bp.route('/api/orders', methods=['POST'])
def create_order():
    def seed_status(fields):
        fields['status'] = order_lifecycle.check_initial(fields.get('status'))

    order = crud.create_record(order_resource, request.get_json(silent=True), prepare=seed_status)
    current_app.order_events.order_created(order_resource.serialize(order))
    return jsonify(order_resource.serialize(order)), 201


@orders_bp.route('/api/orders', methods=['PUT'])
def update_order():
    """Partially update an order; a new status must be a legal transition"""
    order_id = crud.parse_id(request.args)
    previous_status = crud.get_or_404(order_resource, order_id).status

    def check_status(order, changes):
        if 'status' in changes:
            changes['status'] = order_lifecycle.check_transition(order.status, changes['status'])

    order = crud.update_record(order_resource, order_id, request.get_json(silent=True), prepare=check_status)
    _announce_status(order, previous_status)
    return jsonify(order_resource.serialize(order))


@orders_bp.route('/api/orders', methods=['DELETE'])
def delete_order():
    """Hard delete; items, payments and receipts of the order are left in place"""
    return jsonify(crud.delete_record(order_resource, crud.parse_id(request.args)))


@orders_bp.route('/api/orders/details', methods=['GET'])
def get_order_details():
    """Order with its items, payments and receipts for the order-status page"""
    order = crud.get_or_404(order_resource, crud.parse_id(request.args))
    return jsonify(order_details(order))


def _move_order(compute_status):
    order = crud.get_or_404(order_resource, crud.parse_id(request.args))
    previous_status = order.status
    order.status = compute_status(previous_status)
    order.updated_at = utcnow()
    db.session.commit()
    _announce_status(order, previous_status)
    return jsonify(order_resource.serialize(order))


@orders_bp.route('/api/orders/advance', methods=['POST'])
@staff_required('kitchen', 'admin')
def advance_order():
    """Move an order one step along Order Received -> ... -> Completed"""
    return _move_order(order_lifecycle.next_status)


@orders_bp.route('/api/orders/cancel', methods=['POST'])
@staff_required('admin')
def cancel_order():
    return _move_order(order_lifecycle.cancel_status)


# Order items

@orders_bp.route('/api/order-items', methods=['GET'])
def get_order_items():
    if 'id' in request.args:
        item = crud.get_or_404(order_item_resource, crud.parse_id(request.args))
        return jsonify(order_item_resource.serialize(item))

    conditions = []
    order_id = crud.parse_int_filter(request.args, 'orderId')
    if order_id is not None:
        conditions.append(OrderItem.order_id == order_id)

    menu_item_id = crud.parse_int_filter(request.args, 'menuItemId')
    if menu_item_id is not None:
        conditions.append(OrderItem.menu_item_id == menu_item_id)

    items = crud.list_records(order_item_resource, request.args, conditions)
    return jsonify([order_item_resource.serialize(item) for item in items])


@orders_bp.route('/api/order-items', methods=['POST'])
def create_order_item():
    """Add a line to an order; ``price`` is the unit price snapshot"""
    item = crud.create_record(order_item_resource, request.get_json(silent=True))
    return jsonify(order_item_resource.serialize(item)), 201


@orders_bp.route('/api/order-items', methods=['PUT'])
def update_order_item():
    item = crud.update_record(order_item_resource, crud.parse_id(request.args), request.get_json(silent=True))
    return jsonify(order_item_resource.serialize(item))


@orders_bp.route('/api/order-items', methods=['DELETE'])
def delete_order_item():
    return jsonify(crud.delete_record(order_item_resource, crud.parse_id(request.args)))
