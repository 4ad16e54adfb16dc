"""Per-tick motion and contact rules.

Plain functions over the world dataclasses. Nothing here locks, emits or
logs; :class:`app.services.puck.match.Match` sequences them inside a tick.
"""

import math
from typing import Optional, Tuple

from .constants import (
    BASE_SPEED,
    COLLISION_DAMPING,
    COMBINED_MASS,
    DEFAULT_FACING,
    GAME_HEIGHT,
    GAME_WIDTH,
    GOAL_BOTTOM,
    GOAL_TOP,
    GOAL_WIDTH,
    LEASH_MARGIN,
    PLAYER_FRICTION,
    PUCK_FRICTION,
)
from .world import Player, Puck


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def distance(ax: float, ay: float, bx: float, by: float) -> float:
    return math.hypot(ax - bx, ay - by)


def unit_vector(dx: float, dy: float) -> Tuple[float, float]:
    """Normalize (dx, dy); a zero-length vector stays (0, 0)."""
    length = math.hypot(dx, dy)
    if length == 0:
        return 0.0, 0.0
    return dx / length, dy / length


def touching(player: Player, puck: Puck) -> bool:
    return distance(player.x, player.y, puck.x, puck.y) < player.radius + puck.radius


def move_free_puck(puck: Puck) -> None:
    """Integrate an unheld puck, decay its speed and bounce it off the walls."""
    puck.x += puck.vx
    puck.y += puck.vy
    puck.vx *= PUCK_FRICTION
    puck.vy *= PUCK_FRICTION

    if puck.x < puck.radius or puck.x > GAME_WIDTH - puck.radius:
        puck.vx = -puck.vx
        puck.x = clamp(puck.x, puck.radius, GAME_WIDTH - puck.radius)
    if puck.y < puck.radius or puck.y > GAME_HEIGHT - puck.radius:
        puck.vy = -puck.vy
        puck.y = clamp(puck.y, puck.radius, GAME_HEIGHT - puck.radius)


def leash_direction(holder: Player) -> Tuple[float, float]:
    if holder.pointer is not None:
        ux, uy = unit_vector(holder.pointer[0] - holder.x, holder.pointer[1] - holder.y)
        if (ux, uy) != (0.0, 0.0):
            return ux, uy
    return DEFAULT_FACING[holder.seat]


def leash_puck(puck: Puck, holder: Player) -> None:
    """Pin a held puck in front of its holder, facing the holder's pointer.

    The leash replaces integration while held, so any stored velocity is
    cleared. The result is clamped to the arena like every other body.
    """
    ux, uy = leash_direction(holder)
    offset = holder.radius + puck.radius + LEASH_MARGIN
    puck.x = clamp(holder.x + ux * offset, puck.radius, GAME_WIDTH - puck.radius)
    puck.y = clamp(holder.y + uy * offset, puck.radius, GAME_HEIGHT - puck.radius)
    puck.vx = 0.0
    puck.vy = 0.0


def goal_scored_by(puck: Puck) -> Optional[int]:
    """Return the seat credited for the puck's current position, if any.

    The left goal credits seat 2 and the right goal credits seat 1.
    """
    if not GOAL_TOP < puck.y < GOAL_BOTTOM:
        return None
    if puck.x - puck.radius <= GOAL_WIDTH:
        return 2
    if puck.x + puck.radius >= GAME_WIDTH - GOAL_WIDTH:
        return 1
    return None


def apply_intent(player: Player) -> None:
    """Turn the stored movement intent into velocity, consuming it."""
    if player.intent is None:
        return
    dx, dy = player.intent
    speed = BASE_SPEED * player.speed_modifier
    player.vx += dx * speed
    player.vy += dy * speed
    player.intent = None


def contain_player(player: Player) -> None:
    player.x = clamp(player.x, player.radius, GAME_WIDTH - player.radius)
    player.y = clamp(player.y, player.radius, GAME_HEIGHT - player.radius)


def move_player(player: Player) -> None:
    player.x += player.vx
    player.y += player.vy
    player.vx *= PLAYER_FRICTION
    player.vy *= PLAYER_FRICTION
    contain_player(player)


def resolve_player_collision(a: Player, b: Player) -> bool:
    """Separate two overlapping players and exchange part of their velocity.

    Each player is pushed out by half the overlap along the line between
    their centers. Velocities move toward each other by
    ``COLLISION_DAMPING * relative_velocity / COMBINED_MASS``. This is a
    damped heuristic and does not conserve momentum along the normal.
    Returns True when the pair was in contact.
    """
    gap = distance(a.x, a.y, b.x, b.y)
    min_gap = a.radius + b.radius
    if gap >= min_gap:
        return False

    if gap == 0:
        # Coincident centers: separate along x
        nx, ny = 1.0, 0.0
    else:
        nx, ny = (a.x - b.x) / gap, (a.y - b.y) / gap
    half_overlap = (min_gap - gap) / 2
    a.x += nx * half_overlap
    a.y += ny * half_overlap
    b.x -= nx * half_overlap
    b.y -= ny * half_overlap

    rel_vx = a.vx - b.vx
    rel_vy = a.vy - b.vy
    a.vx -= COLLISION_DAMPING * rel_vx / COMBINED_MASS
    a.vy -= COLLISION_DAMPING * rel_vy / COMBINED_MASS
    b.vx += COLLISION_DAMPING * rel_vx / COMBINED_MASS
    b.vy += COLLISION_DAMPING * rel_vy / COMBINED_MASS

    contain_player(a)
    contain_player(b)
    return True
