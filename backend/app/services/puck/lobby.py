from typing import Dict, Optional

from .constants import SEATS

LOBBY_FULL_REASON = 'Sorry, the lobby is full.'
ALREADY_SEATED_REASON = 'You have already joined the game.'


class Lobby:
    """Fixed pool of seats keyed by seat number, independent of the socket.

    A vacated seat goes back to the pool and is handed to the next joiner;
    the lowest free seat always wins. Each seat also carries a generation
    counter that moves forward on every release so work scheduled for a
    previous occupant can tell it is stale.
    """

    def __init__(self, seats=SEATS):
        self._free = sorted(seats)
        self._sid_to_seat: Dict[str, int] = {}
        self._generation: Dict[int, int] = {seat: 0 for seat in seats}

    def claim(self, sid: str) -> Optional[int]:
        if sid in self._sid_to_seat or not self._free:
            return None
        seat = self._free.pop(0)
        self._sid_to_seat[sid] = seat
        return seat

    def release(self, sid: str) -> Optional[int]:
        seat = self._sid_to_seat.pop(sid, None)
        if seat is None:
            return None
        self._generation[seat] += 1
        self._free.append(seat)
        self._free.sort()
        return seat

    def seat_for(self, sid: str) -> Optional[int]:
        return self._sid_to_seat.get(sid)

    def generation(self, seat: int) -> int:
        return self._generation[seat]

    def rejection_reason(self, sid: str) -> str:
        if sid in self._sid_to_seat:
            return ALREADY_SEATED_REASON
        return LOBBY_FULL_REASON

    @property
    def free_seats(self):
        return list(self._free)

    @property
    def occupied(self) -> int:
        return len(self._sid_to_seat)
