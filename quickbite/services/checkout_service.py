"""
Server-side checkout.

The order, its items, the payment and the receipt are written in one
database transaction. A client supplied ``requestId`` makes the call
idempotent: replaying it returns the order created the first time.
"""
import json
import random
import time
from datetime import timedelta

from flask import current_app
from sqlalchemy import exists
from sqlalchemy.exc import IntegrityError

from quickbite import db
from quickbite.errors import Conflict, ValidationFailed
from quickbite.models.models import Customer, MenuItem, Offer, Order, OrderItem, Payment, Receipt, utcnow
from quickbite.models.schemas import CheckoutRequest, validate_body
from quickbite.models.statuses import OrderStatus, initial_payment_status
from quickbite.services.order_summary import order_details

MAX_ID_ATTEMPTS = 5


def generate_token_number():
    """Short, human-readable pickup token: TKN + 6 clock digits + 3 random digits"""
    millis = str(int(time.time() * 1000))
    return f"TKN{millis[-6:]}{random.randint(0, 999):03d}"


def generate_transaction_id():
    return f"TXN{int(time.time() * 1000)}{random.randint(0, 999):03d}"


def _unused(generate, column, code):
    for _ in range(MAX_ID_ATTEMPTS):
        value = generate()
        if not db.session.query(exists().where(column == value)).scalar():
            return value
    raise Conflict('Could not allocate a unique identifier, please retry', code)


def _priced_lines(payload):
    lines = []
    for line in payload.items:
        item = db.session.get(MenuItem, line.menu_item_id)
        if item is None:
            raise ValidationFailed(f'Menu item {line.menu_item_id} not found', 'MENU_ITEM_NOT_FOUND')
        if not item.availability:
            raise ValidationFailed(f'{item.name} is currently unavailable', 'MENU_ITEM_UNAVAILABLE')
        if line.unit_price is not None and abs(line.unit_price - item.price) >= 0.005:
            raise ValidationFailed(f'The price of {item.name} is now {item.price:.2f}', 'PRICE_CHANGED')
        lines.append((item, line.quantity))
    return lines


def _discount(payload, subtotal):
    if payload.offer_id is None:
        return 0.0
    offer = db.session.get(Offer, payload.offer_id)
    if offer is None:
        raise ValidationFailed('Offer not found', 'OFFER_NOT_FOUND')
    if not offer.is_active():
        raise ValidationFailed(f'Offer "{offer.title}" is not currently active', 'OFFER_NOT_ACTIVE')
    return round(subtotal * offer.discount_percent / 100, 2)


def build_receipt(order, lines, payment):
    return {
        'orderId': order.id,
        'tokenNumber': order.token_number,
        'items': [
            {
                'menuItemId': item.id,
                'name': item.name,
                'quantity': quantity,
                'unitPrice': item.price,
                'lineTotal': round(item.price * quantity, 2),
            }
            for item, quantity in lines
        ],
        'subtotal': order.subtotal,
        'discount': order.discount,
        'total': order.final_amount,
        'deliveryMode': order.delivery_mode,
        'paymentMode': payment.payment_mode,
        'paymentStatus': payment.payment_status,
        'transactionId': payment.transaction_id,
        'issuedAt': order.created_at.isoformat(timespec='milliseconds') + 'Z',
    }


def find_by_request_id(request_id):
    if not request_id:
        return None
    return Order.query.filter_by(request_id=request_id).first()


def place_order(data):
    """Validate a cart and materialise it. Returns ``(order, created)``."""
    payload = validate_body(CheckoutRequest, data)

    existing = find_by_request_id(payload.request_id)
    if existing is not None:
        current_app.logger.info(f"Checkout replay {payload.request_id} -> order {existing.id}")
        return existing, False

    if payload.customer_id is not None and db.session.get(Customer, payload.customer_id) is None:
        raise ValidationFailed('Customer not found', 'CUSTOMER_NOT_FOUND')

    lines = _priced_lines(payload)
    subtotal = round(sum(item.price * quantity for item, quantity in lines), 2)
    discount = _discount(payload, subtotal)
    final_amount = round(subtotal - discount, 2)
    if final_amount <= 0:
        raise ValidationFailed('Final amount must be a positive number', 'INVALID_FINAL_AMOUNT')

    now = utcnow()
    ready_at = now + timedelta(minutes=current_app.config['ESTIMATED_PREP_MINUTES'])
    payment_status = initial_payment_status(payload.payment_mode)

    try:
        order = Order(
            customer_id=payload.customer_id,
            token_number=_unused(generate_token_number, Order.token_number, 'DUPLICATE_TOKEN_NUMBER'),
            subtotal=subtotal,
            discount=discount,
            final_amount=final_amount,
            status=OrderStatus.ORDER_RECEIVED.value,
            delivery_mode=payload.delivery_mode,
            payment_status=payment_status,
            estimated_ready_time=ready_at.isoformat(timespec='milliseconds') + 'Z',
            request_id=payload.request_id,
            created_at=now,
            updated_at=now,
        )
        db.session.add(order)
        db.session.flush()  # Get order ID

        for item, quantity in lines:
            db.session.add(OrderItem(
                order_id=order.id,
                menu_item_id=item.id,
                quantity=quantity,
                price=item.price,
                created_at=now,
            ))

        payment = Payment(
            order_id=order.id,
            transaction_id=_unused(generate_transaction_id, Payment.transaction_id, 'DUPLICATE_TRANSACTION_ID'),
            payment_mode=payload.payment_mode,
            amount_paid=final_amount,
            payment_status=payment_status,
            created_at=now,
        )
        db.session.add(payment)
        db.session.add(Receipt(
            order_id=order.id,
            receipt_data=json.dumps(build_receipt(order, lines, payment)),
            created_at=now,
        ))

        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        # A concurrent replay of the same request committed first
        replayed = find_by_request_id(payload.request_id)
        if replayed is not None:
            return replayed, False
        current_app.logger.warning(f"Checkout conflict: {exc.orig}")
        raise Conflict('The order could not be placed, please retry', 'CHECKOUT_CONFLICT') from exc
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        f"Checkout created order {order.id} ({order.token_number}) with {len(lines)} lines, "
        f"total {final_amount:.2f}"
    )
    return order, True


def checkout_bundle(order):
    details = order_details(order)
    return {
        'order': details['order'],
        'items': details['items'],
        'payment': details['payments'][0] if details['payments'] else None,
        'receipt': details['receipts'][0] if details['receipts'] else None,
    }
