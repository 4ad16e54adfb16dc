from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .constants import (
    PLAYER_RADIUS,
    PUCK_RADIUS,
    PUCK_START,
    SEATS,
    SPEED_NORMAL,
    START_POSITIONS,
)


@dataclass
class Player:
    seat: int
    sid: str
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    radius: float = PLAYER_RADIUS
    has_puck: bool = False
    can_jolt: bool = True
    # Deadline the jolt cooldown ends at, None while a jolt is available
    jolt_ready_at: Optional[float] = None
    speed_modifier: float = SPEED_NORMAL
    # Monotonic deadline for the pending speed reversion, None while normal
    speed_reverts_at: Optional[float] = None
    pointer: Optional[Tuple[float, float]] = None
    intent: Optional[Tuple[float, float]] = None
    # Bumped on disconnect; timers compare against the value they captured
    generation: int = 0

    @classmethod
    def at_start(cls, seat: int, sid: str, generation: int = 0) -> 'Player':
        x, y = START_POSITIONS[seat]
        return cls(seat=seat, sid=sid, x=x, y=y, generation=generation)

    def reset_to_start(self) -> None:
        self.x, self.y = START_POSITIONS[self.seat]
        self.vx = 0.0
        self.vy = 0.0
        self.has_puck = False
        self.can_jolt = True
        self.jolt_ready_at = None
        self.speed_modifier = SPEED_NORMAL
        self.speed_reverts_at = None
        self.intent = None

    def to_dict(self):
        return {
            'seat': self.seat,
            'x': self.x,
            'y': self.y,
            'vx': self.vx,
            'vy': self.vy,
            'radius': self.radius,
            'has_puck': self.has_puck,
            'can_jolt': self.can_jolt,
            'speed_modifier': self.speed_modifier,
        }


@dataclass
class Puck:
    x: float = PUCK_START[0]
    y: float = PUCK_START[1]
    vx: float = 0.0
    vy: float = 0.0
    radius: float = PUCK_RADIUS
    held_by: Optional[int] = None

    def reset(self) -> None:
        self.x, self.y = PUCK_START
        self.vx = 0.0
        self.vy = 0.0
        self.held_by = None

    def to_dict(self):
        return {
            'x': self.x,
            'y': self.y,
            'vx': self.vx,
            'vy': self.vy,
            'radius': self.radius,
            'held_by': self.held_by,
        }


@dataclass
class Score:
    points: Dict[int, int] = field(default_factory=lambda: {seat: 0 for seat in SEATS})

    def credit(self, seat: int) -> int:
        self.points[seat] += 1
        return self.points[seat]

    def leader_at(self, threshold: int) -> Optional[int]:
        """Return the seat that has reached ``threshold``, if any."""
        for seat in SEATS:
            if self.points[seat] >= threshold:
                return seat
        return None

    def reset(self) -> None:
        for seat in SEATS:
            self.points[seat] = 0

    def to_dict(self):
        # String keys so the payload is identical before and after JSON
        return {str(seat): points for seat, points in self.points.items()}


@dataclass
class World:
    """Players by seat, the single puck and the match score."""

    players: Dict[int, Player] = field(default_factory=dict)
    puck: Puck = field(default_factory=Puck)
    score: Score = field(default_factory=Score)

    def holder(self) -> Optional[Player]:
        if self.puck.held_by is None:
            return None
        return self.players.get(self.puck.held_by)

    def release_puck(self) -> Optional[Player]:
        """Drop possession, returning the previous holder if still seated."""
        previous = self.holder()
        if previous is not None:
            previous.has_puck = False
        self.puck.held_by = None
        return previous

    def reset_positions(self) -> None:
        self.puck.reset()
        for player in self.players.values():
            player.reset_to_start()

    def roster(self):
        return [self.players[seat].to_dict() for seat in sorted(self.players)]

    def snapshot(self):
        return {
            'players': self.roster(),
            'puck': self.puck.to_dict(),
            'score': self.score.to_dict(),
        }
