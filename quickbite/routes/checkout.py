from flask import Blueprint, current_app, request, jsonify
from quickbite.services.checkout_service import checkout_bundle, place_order

checkout_bp = Blueprint('checkout', __name__)


@checkout_bp.route('/api/checkout', methods=['POST'])
def checkout():
    """Turn a cart into an order, its items, a payment and a receipt in one step"""
    order, created = place_order(request.get_json(silent=True))
    bundle = checkout_bundle(order)

    if not created:
        return jsonify(bundle), 200

    current_app.order_events.order_created(bundle['order'])
    return jsonify(bundle), 201
