from flask_socketio import join_room, leave_room, emit
from playkers import socketio


def match_room(match_id: str) -> str:
    return f"match:{match_id}"


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_match(data):
    match_id = (data or {}).get('matchId')
    if not match_id:
        emit('error', {'message': 'matchId is required'})
        return
    room = match_room(match_id)
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_match(data):
    match_id = (data or {}).get('matchId')
    if not match_id:
        emit('error', {'message': 'matchId is required'})
        return
    room = match_room(match_id)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def broadcast_match_update(match) -> None:
    """Push the full match document to everyone watching it."""
    socketio.emit('match_update', match.to_dict(), to=match_room(match.id), namespace='/ws')


def register_socketio_handlers(testing: bool = False) -> None:
    """Bind the spectator room events (join_match, leave_match, ping).

    Browsers connect on '/ws'. The Flask-SocketIO test client connects on the
    default namespace, so tests get the same handlers there too.
    """
    for namespace in (('/ws', '/') if testing else ('/ws',)):
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_match', handle_join_match, namespace=namespace)
        socketio.on_event('leave_match', handle_leave_match, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
