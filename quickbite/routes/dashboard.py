from flask import Blueprint, request, jsonify
from sqlalchemy import func

from quickbite import db
from quickbite.models.models import Order
from quickbite.models.statuses import OrderStatus
from quickbite.routes.auth import staff_required
from quickbite.routes.orders import order_resource
from quickbite.services import crud
from quickbite.services.order_lifecycle import TERMINAL
from quickbite.services.order_summary import order_with_items

dashboard_bp = Blueprint('dashboard', __name__)

KITCHEN_QUEUE = (OrderStatus.CONFIRMED.value, OrderStatus.PREPARING.value)

# Anything else, legacy free-text statuses included, counts as active
CLOSED = {status.value for status in TERMINAL}


@dashboard_bp.route('/api/kitchen/orders', methods=['GET'])
@staff_required('kitchen', 'admin')
def get_kitchen_orders():
    """Orders the kitchen is working on, oldest first"""
    orders = Order.query.filter(Order.status.in_(KITCHEN_QUEUE)) \
        .order_by(Order.created_at.asc(), Order.id.asc()).all()
    return jsonify([order_with_items(order) for order in orders])


@dashboard_bp.route('/api/admin/orders', methods=['GET'])
@staff_required('admin')
def get_admin_orders():
    conditions = []
    status = request.args.get('status')
    if status:
        conditions.append(Order.status == status)

    orders = crud.list_records(order_resource, request.args, conditions)
    return jsonify([order_with_items(order) for order in orders])


@dashboard_bp.route('/api/admin/stats', methods=['GET'])
@staff_required('admin')
def get_admin_stats():
    """Order counts per status and revenue of non-cancelled orders"""
    by_status = dict(
        db.session.query(Order.status, func.count(Order.id)).group_by(Order.status).all()
    )

    revenue = db.session.query(func.coalesce(func.sum(Order.final_amount), 0.0)) \
        .filter(Order.status != OrderStatus.CANCELLED.value).scalar()

    return jsonify({
        'totalOrders': sum(by_status.values()),
        'byStatus': by_status,
        'activeOrders': sum(count for status, count in by_status.items() if status not in CLOSED),
        'revenue': round(float(revenue or 0), 2)
    }), 200
