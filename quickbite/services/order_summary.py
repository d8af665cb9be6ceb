"""
Composite order views used by the order-status page, checkout and dashboards
"""
from quickbite.models.schemas import (
    dump, OrderRecord, OrderItemRecord, PaymentRecord, ReceiptRecord
)


def item_lines(order):
    lines = []
    for item in sorted(order.items, key=lambda item: item.id):
        line = dump(OrderItemRecord, item)
        line['menuItemName'] = item.menu_item.name if item.menu_item else None
        line['lineTotal'] = round(item.price * item.quantity, 2)
        lines.append(line)
    return lines


def order_with_items(order):
    data = dump(OrderRecord, order)
    data['items'] = item_lines(order)
    return data


def order_details(order):
    return {
        'order': dump(OrderRecord, order),
        'items': item_lines(order),
        'payments': [dump(PaymentRecord, payment) for payment in sorted(order.payments, key=lambda p: p.id)],
        'receipts': [dump(ReceiptRecord, receipt) for receipt in sorted(order.receipts, key=lambda r: r.id)],
    }
