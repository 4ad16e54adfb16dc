import math
import threading
from typing import Optional, Tuple

from flask import current_app, request
from flask_socketio import emit

from app import socketio
from app.services.puck.constants import MAX_MOVE_COMPONENT, MAX_POINTER_COORD, MAX_SHOT_COMPONENT

_loop_lock = threading.Lock()


def _get_sid() -> str:
    return request.sid  # type: ignore


def _match():
    return current_app.extensions['match']


def _number(value, limit: float) -> Optional[float]:
    # bool is an int subclass; true/false is never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        # Integer literal too large for a float
        return None
    if not math.isfinite(number) or abs(number) > limit:
        return None
    return number


def _read_pair(data, x_key: str, y_key: str, limit: float) -> Optional[Tuple[float, float]]:
    if not isinstance(data, dict):
        return None
    x = _number(data.get(x_key), limit)
    y = _number(data.get(y_key), limit)
    if x is None or y is None:
        return None
    return x, y


def _drop(event: str, data) -> None:
    current_app.logger.debug(f"[drop] event={event} sid={_get_sid()} payload={data!r}")


def _ensure_tick_loop(match) -> None:
    """Start the fixed-rate tick once per match, on the first join."""
    if match.loop_started or not current_app.config.get('TICK_LOOP_ENABLED', True):
        return
    with _loop_lock:
        if match.loop_started:
            return
        match.loop_started = True
    interval = 1.0 / int(current_app.config.get('TICK_RATE_HZ', 60))
    match.scheduler.run_every(interval, match.tick, current_app.logger)


def handle_connect():
    emit('connected', {'message': 'Connected to the puck arena'})


def handle_disconnect(reason=None):
    # No resume protocol: a dropped socket simply gives up its seat
    _match().leave(_get_sid())


def handle_join(data=None):
    match = _match()
    result = match.join(_get_sid())
    if result.accepted:
        _ensure_tick_loop(match)


def handle_leave(data=None):
    _match().leave(_get_sid())


def handle_set_pointer(data=None):
    pointer = _read_pair(data, 'x', 'y', MAX_POINTER_COORD)
    if pointer is None:
        _drop('set_pointer', data)
        return
    _match().set_pointer(_get_sid(), *pointer)


def handle_move(data=None):
    intent = _read_pair(data, 'dx', 'dy', MAX_MOVE_COMPONENT)
    if intent is None:
        _drop('move', data)
        return
    _match().set_intent(_get_sid(), *intent)


def handle_shoot(data=None):
    velocity = _read_pair(data, 'vx', 'vy', MAX_SHOT_COMPONENT)
    if velocity is None:
        _drop('shoot', data)
        return
    _match().shoot(_get_sid(), *velocity)


def handle_jolt(data=None):
    pointer = None
    if isinstance(data, dict) and data.get('pointer') is not None:
        pointer = _read_pair(data.get('pointer'), 'x', 'y', MAX_POINTER_COORD)
        if pointer is None:
            _drop('jolt', data)
            return
    _match().jolt(_get_sid(), pointer)


def handle_ping(data=None):
    emit('pong', data or {})


def handle_error(exc):
    # A bad message from one client must never take the server down
    current_app.logger.exception(f"[handler-error] sid={_get_sid()} error={exc!r}")


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the default namespace."""
    socketio.on_event('connect', handle_connect)
    socketio.on_event('disconnect', handle_disconnect)
    socketio.on_event('join', handle_join)
    socketio.on_event('leave', handle_leave)
    socketio.on_event('set_pointer', handle_set_pointer)
    socketio.on_event('move', handle_move)
    socketio.on_event('shoot', handle_shoot)
    socketio.on_event('jolt', handle_jolt)
    socketio.on_event('ping', handle_ping)
    socketio.on_error_default(handle_error)
