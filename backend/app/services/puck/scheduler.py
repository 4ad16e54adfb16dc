import time
from typing import Callable


class SocketIOScheduler:
    """Delayed callbacks and the fixed-rate loop as Socket.IO background tasks.

    There is no cancel handle: callbacks are expected to validate whatever
    they captured (generation, deadline) before touching state.
    """

    def __init__(self, socketio):
        self.socketio = socketio

    def call_later(self, delay: float, callback: Callable, *args) -> None:
        def _runner():
            if delay > 0:
                self.socketio.sleep(delay)
            callback(*args)

        self.socketio.start_background_task(_runner)

    def run_every(self, interval: float, callback: Callable, logger) -> None:
        """Call ``callback`` every ``interval`` seconds, forever.

        The schedule is anchored to a monotonic clock so a slow iteration
        shortens the next sleep instead of drifting. An exception in one
        iteration is logged and the loop carries on.
        """

        def _loop():
            logger.info(f"[tick-loop] started interval={interval:.4f}s")
            next_at = time.monotonic()
            while True:
                try:
                    callback()
                except Exception:
                    logger.exception('[tick-loop] tick failed')
                next_at += interval
                delay = next_at - time.monotonic()
                if delay < 0:
                    # Fell behind; resync rather than burst
                    next_at = time.monotonic()
                    delay = 0
                self.socketio.sleep(delay)

        self.socketio.start_background_task(_loop)
