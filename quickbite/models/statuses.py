"""
Status vocabularies shared by orders, payments and checkout
"""
import enum


class OrderStatus(str, enum.Enum):
    ORDER_RECEIVED = "Order Received"
    CONFIRMED = "Confirmed"
    PREPARING = "Preparing"
    READY = "Ready"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class PaymentStatus(str, enum.Enum):
    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"
    REFUNDED = "Refunded"


class DeliveryMode(str, enum.Enum):
    PICKUP = "Pickup"
    DELIVERY = "Delivery"


# Older clients wrote "Completed" on payment rows and "Paid" on orders
PAYMENT_STATUS_SYNONYMS = {
    "completed": PaymentStatus.PAID,
}

CASH_PAYMENT_MODE = "cash"


def normalize_payment_status(value):
    """Map a client supplied payment status onto the canonical vocabulary.

    Returns None when the value is not a known status.
    """
    key = value.strip().lower()
    if key in PAYMENT_STATUS_SYNONYMS:
        return PAYMENT_STATUS_SYNONYMS[key].value
    for status in PaymentStatus:
        if status.value.lower() == key:
            return status.value
    return None


def normalize_delivery_mode(value):
    key = value.strip().lower()
    for mode in DeliveryMode:
        if mode.value.lower() == key:
            return mode.value
    return None


def initial_payment_status(payment_mode):
    """Cash is collected at the counter; every other mode is paid up front"""
    if payment_mode.strip().lower() == CASH_PAYMENT_MODE:
        return PaymentStatus.PENDING.value
    return PaymentStatus.PAID.value
