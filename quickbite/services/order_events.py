# Live order board: pushes order changes to kitchen screens and tracking pages
from flask import current_app
from flask_socketio import emit, join_room, leave_room

from quickbite import db
from quickbite.models.models import Order
from quickbite.models.schemas import MAX_DB_INT

KITCHEN_ROOM = 'kitchen'


def order_room(order_id):
    return f'order:{order_id}'


class OrderEventService:
    def __init__(self, socketio=None):
        self.socketio = socketio

    def _emit(self, event, data, rooms):
        if not self.socketio:
            return False
        for room in rooms:
            self.socketio.emit(event, data, to=room)
        current_app.logger.debug(f"Sent {event} to {', '.join(rooms)}")
        return True

    def order_created(self, order_record):
        """Announce a new order to the kitchen board"""
        return self._emit('order_created', order_record, [KITCHEN_ROOM])

    def status_changed(self, order_record, previous_status):
        data = {
            'orderId': order_record['id'],
            'tokenNumber': order_record['tokenNumber'],
            'previousStatus': previous_status,
            'status': order_record['status'],
            'updatedAt': order_record['updatedAt'],
        }
        return self._emit('order_status', data, [KITCHEN_ROOM, order_room(order_record['id'])])


def _order_id(data):
    order_id = data.get('orderId') if isinstance(data, dict) else None
    if isinstance(order_id, bool) or not isinstance(order_id, int) or not 0 < order_id <= MAX_DB_INT:
        return None
    return order_id


# Socket.IO event handlers
def register_socket_events(socketio):
    @socketio.on('join_kitchen')
    def handle_join_kitchen(data=None):
        join_room(KITCHEN_ROOM)
        emit('kitchen_joined', {'room': KITCHEN_ROOM})

    @socketio.on('track_order')
    def handle_track_order(data):
        order_id = _order_id(data)
        order = db.session.get(Order, order_id) if order_id else None
        if order is None:
            emit('tracking_error', {'error': 'Order not found', 'code': 'ORDER_NOT_FOUND'})
            return

        join_room(order_room(order.id))
        emit('tracking', {
            'orderId': order.id,
            'tokenNumber': order.token_number,
            'status': order.status,
        })

    @socketio.on('stop_tracking')
    def handle_stop_tracking(data):
        order_id = _order_id(data)
        if order_id:
            leave_room(order_room(order_id))
            emit('tracking_stopped', {'orderId': order_id})
