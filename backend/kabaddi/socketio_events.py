from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from kabaddi import socketio
from kabaddi.services.matches.realtime import MATCH_LIST_ROOM, NAMESPACE, match_room


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _match_id(data):
    match_id = (data or {}).get('match_id') if isinstance(data, dict) else data
    if match_id in (None, ''):
        emit('error', {'message': 'match_id is required'})
        return None
    return match_id


def handle_connect(auth=None):
    current_app.logger.info(f"[socket] connected sid={_get_sid()}")
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(reason=None):
    current_app.logger.info(f"[socket] disconnected sid={_get_sid()}")


def handle_join_match(data):
    match_id = _match_id(data)
    if match_id is None:
        return
    room = match_room(match_id)
    join_room(room)
    current_app.logger.info(f"[socket] sid={_get_sid()} joined {room}")
    emit('joined', {'room': room})


def handle_leave_match(data):
    match_id = _match_id(data)
    if match_id is None:
        return
    room = match_room(match_id)
    leave_room(room)
    emit('left', {'room': room})


def handle_join_match_list(data=None):
    join_room(MATCH_LIST_ROOM)
    emit('joined', {'room': MATCH_LIST_ROOM})


def handle_leave_match_list(data=None):
    leave_room(MATCH_LIST_ROOM)
    emit('left', {'room': MATCH_LIST_ROOM})


def handle_request_scorecard_refresh(data):
    """Ask every viewer of a match (and of the list) to re-fetch."""
    match_id = _match_id(data)
    if match_id is None:
        return
    socketio.emit('scorecard_updated', {'match_id': match_id}, to=match_room(match_id), namespace=NAMESPACE)
    socketio.emit('match_list_should_refresh', {'match_id': match_id}, to=MATCH_LIST_ROOM, namespace=NAMESPACE)
    current_app.logger.info(f"[socket] scorecard refresh requested match={match_id}")


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the '/ws' namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('join_match', handle_join_match, namespace=NAMESPACE)
    socketio.on_event('leave_match', handle_leave_match, namespace=NAMESPACE)
    socketio.on_event('join_match_list', handle_join_match_list, namespace=NAMESPACE)
    socketio.on_event('leave_match_list', handle_leave_match_list, namespace=NAMESPACE)
    socketio.on_event('request_scorecard_refresh', handle_request_scorecard_refresh, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
