from flask import Blueprint, request, jsonify
from quickbite.models.models import Payment, Receipt
from quickbite.models.statuses import normalize_payment_status
from quickbite.models.schemas import (
    PaymentCreate, PaymentUpdate, PaymentRecord,
    ReceiptCreate, ReceiptUpdate, ReceiptRecord
)
from quickbite.services import crud

payments_bp = Blueprint('payments', __name__)

payment_resource = crud.Resource(
    model=Payment,
    record=PaymentRecord,
    create_schema=PaymentCreate,
    update_schema=PaymentUpdate,
    key='payment',
    label='Payment',
    not_found_code='PAYMENT_NOT_FOUND',
    search_columns=('transaction_id',),
    unique_column='transaction_id',
    duplicate_code='DUPLICATE_TRANSACTION_ID',
    duplicate_message='Transaction ID already exists',
    require_changes=True,
)

receipt_resource = crud.Resource(
    model=Receipt,
    record=ReceiptRecord,
    create_schema=ReceiptCreate,
    update_schema=ReceiptUpdate,
    key='receipt',
    label='Receipt',
    not_found_code='RECEIPT_NOT_FOUND',
)


# Payments

@payments_bp.route('/api/payments', methods=['GET'])
def get_payments():
    if 'id' in request.args:
        payment = crud.get_or_404(payment_resource, crud.parse_id(request.args))
        return jsonify(payment_resource.serialize(payment))

    conditions = []
    order_id = crud.parse_int_filter(request.args, 'orderId')
    if order_id is not None:
        conditions.append(Payment.order_id == order_id)

    payment_status = request.args.get('paymentStatus')
    if payment_status:
        conditions.append(Payment.payment_status == (normalize_payment_status(payment_status) or payment_status))

    payment_mode = request.args.get('paymentMode')
    if payment_mode:
        conditions.append(Payment.payment_mode == payment_mode)

    payments = crud.list_records(payment_resource, request.args, conditions)
    return jsonify([payment_resource.serialize(payment) for payment in payments])


@payments_bp.route('/api/payments', methods=['POST'])
def create_payment():
    payment = crud.create_record(payment_resource, request.get_json(silent=True))
    return jsonify(payment_resource.serialize(payment)), 201


@payments_bp.route('/api/payments', methods=['PUT'])
def update_payment():
    """Only orderId, paymentMode and paymentStatus can change after the fact"""
    payment = crud.update_record(payment_resource, crud.parse_id(request.args), request.get_json(silent=True))
    return jsonify(payment_resource.serialize(payment))


@payments_bp.route('/api/payments', methods=['DELETE'])
def delete_payment():
    return jsonify(crud.delete_record(payment_resource, crud.parse_id(request.args)))


# Receipts

@payments_bp.route('/api/receipts', methods=['GET'])
def get_receipts():
    if 'id' in request.args:
        receipt = crud.get_or_404(receipt_resource, crud.parse_id(request.args))
        return jsonify(receipt_resource.serialize(receipt))

    conditions = []
    order_id = crud.parse_int_filter(request.args, 'orderId')
    if order_id is not None:
        conditions.append(Receipt.order_id == order_id)

    receipts = crud.list_records(receipt_resource, request.args, conditions)
    return jsonify([receipt_resource.serialize(receipt) for receipt in receipts])


@payments_bp.route('/api/receipts', methods=['POST'])
def create_receipt():
    receipt = crud.create_record(receipt_resource, request.get_json(silent=True))
    return jsonify(receipt_resource.serialize(receipt)), 201


@payments_bp.route('/api/receipts', methods=['PUT'])
def update_receipt():
    receipt = crud.update_record(receipt_resource, crud.parse_id(request.args), request.get_json(silent=True))
    return jsonify(receipt_resource.serialize(receipt))


@payments_bp.route('/api/receipts', methods=['DELETE'])
def delete_receipt():
    return jsonify(crud.delete_record(receipt_resource, crud.parse_id(request.args)))
