from flask_socketio import join_room, leave_room, emit
from flask_login import current_user

from clubhouse.services.lifecycle import current_lifecycle
from clubhouse.services.ticker import CLUB_ROOM
from clubhouse import socketio


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_club(data=None):
    join_room(CLUB_ROOM)
    emit('joined', {'room': CLUB_ROOM})
    # Late joiners get the current state without waiting for the next tick
    emit('lifecycle_update', current_lifecycle().to_dict())


def handle_leave_club(data=None):
    leave_room(CLUB_ROOM)
    emit('left', {'room': CLUB_ROOM})


def handle_join_user(data=None):
    if not current_user.is_authenticated:
        emit('error', {'message': 'Login required'})
        return
    room = f"user:{current_user.id}"
    join_room(room)
    emit('joined', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_club', handle_join_club, namespace=namespace)
        socketio.on_event('leave_club', handle_leave_club, namespace=namespace)
        socketio.on_event('join_user', handle_join_user, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
