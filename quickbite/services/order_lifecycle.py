"""
Order status state machine.

    Order Received -> Confirmed -> Preparing -> Ready -> Completed

Cancelled is reachable from every non-terminal state. Completed and
Cancelled are terminal.
"""
from flask import current_app

from quickbite.errors import ValidationFailed
from quickbite.models.statuses import OrderStatus

FORWARD = {
    OrderStatus.ORDER_RECEIVED: OrderStatus.CONFIRMED,
    OrderStatus.CONFIRMED: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.COMPLETED,
}

TERMINAL = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

ACTIVE = tuple(status.value for status in OrderStatus if status not in TERMINAL)


def parse_status(value):
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ', '.join(status.value for status in OrderStatus)
        raise ValidationFailed(f'Unknown order status {value!r}; expected one of {allowed}', 'INVALID_STATUS')


def allowed_transitions(current):
    if current in TERMINAL:
        return set()
    return {FORWARD[current], OrderStatus.CANCELLED}


def enforcing():
    return current_app.config['ENFORCE_STATUS_TRANSITIONS']


def check_transition(current, new):
    """Validate moving an order from ``current`` to ``new`` (both strings).

    Returns the status to store. Re-asserting the current status is allowed.
    """
    if not enforcing():
        return new
    target = parse_status(new)
    if current == target.value:
        return target.value
    try:
        source = OrderStatus(current)
    except ValueError:
        # Rows written before enforcement may hold free text
        source = None
    if source is not None and target not in allowed_transitions(source):
        raise ValidationFailed(
            f'Cannot move order from {current} to {target.value}',
            'INVALID_STATUS_TRANSITION',
        )
    return target.value


def check_initial(status):
    if status is None:
        return OrderStatus.ORDER_RECEIVED.value
    if not enforcing():
        return status
    return parse_status(status).value


def next_status(current):
    source = parse_status(current)
    if source in TERMINAL:
        raise ValidationFailed(f'Order is already {current}', 'INVALID_STATUS_TRANSITION')
    return FORWARD[source].value


def cancel_status(current):
    source = parse_status(current)
    if source in TERMINAL:
        raise ValidationFailed(f'Order is already {current}', 'INVALID_STATUS_TRANSITION')
    return OrderStatus.CANCELLED.value
