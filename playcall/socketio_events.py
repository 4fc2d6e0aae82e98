from flask_socketio import join_room, leave_room, emit
from playcall import socketio

NAMESPACE = '/ws'


def game_room(game_id) -> str:
    return f"game:{game_id}"


def broadcast_state(game_id: int) -> None:
    """Tell every client watching the game to refetch its state."""
    socketio.emit('state_update', {'game_id': game_id}, to=game_room(game_id), namespace=NAMESPACE)


def handle_connect():
    emit('connected', {'message': f'Connected to {NAMESPACE}'})


def _game_id_from(data):
    game_id = (data or {}).get('game_id')
    try:
        return int(game_id)
    except (TypeError, ValueError):
        emit('error', {'message': 'game_id is required'})
        return None


def handle_join_game(data):
    game_id = _game_id_from(data)
    if game_id is None:
        return
    room = game_room(game_id)
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_game(data):
    game_id = _game_id_from(data)
    if game_id is None:
        return
    room = game_room(game_id)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = [NAMESPACE, '/'] if testing else [NAMESPACE]
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_game', handle_join_game, namespace=namespace)
        socketio.on_event('leave_game', handle_leave_game, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
