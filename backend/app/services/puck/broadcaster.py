from typing import Any


class SocketIOBroadcaster:
    """Fan match events out over a Flask-SocketIO server.

    Uses ``socketio.emit`` rather than the request-bound ``emit`` so the
    tick loop and timer tasks can send outside a handler.
    """

    def __init__(self, socketio, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def emit_all(self, event: str, payload: Any) -> None:
        self.socketio.emit(event, payload, namespace=self.namespace)

    def emit_to(self, sid: str, event: str, payload: Any) -> None:
        self.socketio.emit(event, payload, to=sid, namespace=self.namespace)

    def emit_others(self, sid: str, event: str, payload: Any) -> None:
        self.socketio.emit(event, payload, skip_sid=sid, namespace=self.namespace)
