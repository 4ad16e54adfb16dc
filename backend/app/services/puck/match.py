"""The match aggregate: one world, one lock, every way to change it.

Socket handlers, the tick loop and timer callbacks all go through
:class:`Match`. Each public method runs start to finish under a single
re-entrant lock, and the events it produces are emitted while the lock is
held so clients observe them in mutation order.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional, Tuple

from . import physics
from .constants import (
    JOLT_COOLDOWN_SEC,
    JOLT_IMPULSE,
    SPEED_NORMAL,
    SPEED_PENALTY_SEC,
    SPEED_REDUCED,
    WIN_SCORE,
)
from .lobby import Lobby
from .world import Player, World


@dataclass
class JoinResult:
    accepted: bool
    seat: Optional[int] = None
    reason: Optional[str] = None


class Match:
    def __init__(self, broadcaster, scheduler, logger=None, win_score: int = WIN_SCORE,
                 jolt_cooldown: float = JOLT_COOLDOWN_SEC,
                 speed_penalty: float = SPEED_PENALTY_SEC, clock=time.monotonic):
        self.broadcaster = broadcaster
        self.scheduler = scheduler
        self.logger = logger or logging.getLogger(__name__)
        self.win_score = win_score
        self.jolt_cooldown = jolt_cooldown
        self.speed_penalty = speed_penalty
        self.clock = clock

        self.lock = threading.RLock()
        self.world = World()
        self.lobby = Lobby()
        self.tick_count = 0
        self.loop_started = False

    # ------------------------------------------------------------ session

    def join(self, sid: str) -> JoinResult:
        with self.lock:
            seat = self.lobby.claim(sid)
            if seat is None:
                reason = self.lobby.rejection_reason(sid)
                self.logger.info(f"[join-reject] sid={sid} reason={reason!r}")
                self.broadcaster.emit_to(sid, 'joined', {'success': False, 'reason': reason})
                return JoinResult(accepted=False, reason=reason)

            player = Player.at_start(seat, sid, generation=self.lobby.generation(seat))
            self.world.players[seat] = player
            self.logger.info(f"[join] sid={sid} seat={seat}")

            self.broadcaster.emit_to(sid, 'joined', {
                'success': True,
                'seat': seat,
                'message': f'You are Player {seat}',
            })
            self.broadcaster.emit_to(sid, 'roster', {'players': self.world.roster()})
            self.broadcaster.emit_to(sid, 'puck_state', self.world.puck.to_dict())
            self.broadcaster.emit_all('score_updated', self.world.score.to_dict())
            self.broadcaster.emit_others(sid, 'player_added', player.to_dict())
            return JoinResult(accepted=True, seat=seat)

    def leave(self, sid: str) -> Optional[int]:
        """Free the caller's seat. Safe to call for sockets that never joined."""
        with self.lock:
            seat = self.lobby.seat_for(sid)
            if seat is None:
                return None
            if self.world.puck.held_by == seat:
                self.world.release_puck()
            # Release first: bumps the generation so pending timers go stale
            self.lobby.release(sid)
            self.world.players.pop(seat, None)
            self.logger.info(f"[leave] sid={sid} seat={seat}")
            self.broadcaster.emit_all('player_removed', {'seat': seat})
            return seat

    def seat_for(self, sid: str) -> Optional[int]:
        with self.lock:
            return self.lobby.seat_for(sid)

    # ------------------------------------------------------------- input

    def set_intent(self, sid: str, dx: float, dy: float) -> bool:
        with self.lock:
            player = self._player_for(sid)
            if player is None:
                return False
            player.intent = (dx, dy)
            return True

    def set_pointer(self, sid: str, x: float, y: float) -> bool:
        with self.lock:
            player = self._player_for(sid)
            if player is None:
                return False
            player.pointer = (x, y)
            return True

    # ----------------------------------------------------------- actions

    def shoot(self, sid: str, vx: float, vy: float) -> bool:
        with self.lock:
            player = self._player_for(sid)
            puck = self.world.puck
            if player is None or puck.held_by != player.seat:
                return False
            # Next tick integrates from this velocity; nothing re-applies it
            puck.vx = vx
            puck.vy = vy
            self.world.release_puck()
            self.logger.info(f"[shoot] seat={player.seat} vx={vx:.2f} vy={vy:.2f}")
            self._notify_possession(player)
            self.broadcaster.emit_all('puck_shot', puck.to_dict())
            return True

    def jolt(self, sid: str, pointer: Optional[Tuple[float, float]] = None) -> bool:
        with self.lock:
            player = self._player_for(sid)
            if player is None:
                return False
            if player.has_puck or not player.can_jolt:
                return False
            if pointer is not None:
                player.pointer = pointer

            if player.pointer is None:
                ux, uy = 0.0, 0.0
            else:
                ux, uy = physics.unit_vector(player.pointer[0] - player.x, player.pointer[1] - player.y)
            player.vx += ux * JOLT_IMPULSE
            player.vy += uy * JOLT_IMPULSE

            now = self.clock()
            player.can_jolt = False
            player.jolt_ready_at = now + self.jolt_cooldown
            self.scheduler.call_later(self.jolt_cooldown, self._end_jolt_cooldown,
                                      player.seat, player.generation, player.jolt_ready_at)

            player.speed_modifier = SPEED_REDUCED
            player.speed_reverts_at = now + self.speed_penalty
            self.scheduler.call_later(self.speed_penalty, self._end_speed_penalty,
                                      player.seat, player.generation, player.speed_reverts_at)

            self.logger.info(f"[jolt] seat={player.seat} dir=({ux:.2f},{uy:.2f})")
            self._notify_speed(player)
            return True

    # ------------------------------------------------------------ timers

    def _end_jolt_cooldown(self, seat: int, generation: int, deadline: float) -> None:
        with self.lock:
            player = self._live_player(seat, generation)
            if player is None or player.jolt_ready_at != deadline:
                self.logger.debug(f"[timer-abort] kind=jolt-cooldown seat={seat} generation={generation}")
                return
            player.can_jolt = True
            player.jolt_ready_at = None
            self.logger.debug(f"[timer-fire] kind=jolt-cooldown seat={seat}")

    def _end_speed_penalty(self, seat: int, generation: int, deadline: float) -> None:
        with self.lock:
            player = self._live_player(seat, generation)
            if player is None or player.speed_reverts_at != deadline:
                self.logger.debug(f"[timer-abort] kind=speed-penalty seat={seat} generation={generation}")
                return
            player.speed_modifier = SPEED_NORMAL
            player.speed_reverts_at = None
            self.logger.debug(f"[timer-fire] kind=speed-penalty seat={seat}")
            self._notify_speed(player)

    # -------------------------------------------------------------- tick

    def tick(self) -> None:
        """Advance the world by one fixed step and broadcast the result."""
        with self.lock:
            world = self.world
            puck = world.puck
            holder = world.holder()
            if holder is None and puck.held_by is not None:
                # Holder vanished between ticks
                puck.held_by = None

            if holder is None:
                physics.move_free_puck(puck)
                self._acquire()
            else:
                physics.leash_puck(puck, holder)
                self._steal(holder)

            scorer = physics.goal_scored_by(puck)
            if scorer is not None:
                self._score_goal(scorer)

            seats = sorted(world.players)
            for seat in seats:
                player = world.players[seat]
                physics.apply_intent(player)
                physics.move_player(player)

            for i, seat_a in enumerate(seats):
                for seat_b in seats[i + 1:]:
                    physics.resolve_player_collision(world.players[seat_a], world.players[seat_b])

            # Keep a held puck glued to where its holder ended up
            holder = world.holder()
            if holder is not None:
                physics.leash_puck(puck, holder)

            for seat in seats:
                player = world.players[seat]
                self.broadcaster.emit_all('player_moved', {'seat': seat, 'x': player.x, 'y': player.y})
            self.broadcaster.emit_all('puck_state', puck.to_dict())
            self.tick_count += 1

    def _acquire(self) -> None:
        puck = self.world.puck
        for seat in sorted(self.world.players):
            player = self.world.players[seat]
            if player.has_puck or not physics.touching(player, puck):
                continue
            puck.held_by = seat
            player.has_puck = True
            self.logger.info(f"[possession] seat={seat}")
            self._notify_possession(player)
            return

    def _steal(self, holder: Player) -> None:
        puck = self.world.puck
        for seat in sorted(self.world.players):
            if seat == holder.seat:
                continue
            player = self.world.players[seat]
            if not physics.touching(player, puck):
                continue
            holder.has_puck = False
            player.has_puck = True
            puck.held_by = seat
            self.logger.info(f"[steal] seat={seat} from={holder.seat}")
            self._notify_possession(holder)
            self._notify_possession(player)
            return

    def _score_goal(self, seat: int) -> None:
        score = self.world.score
        score.credit(seat)
        self.logger.info(f"[goal] seat={seat} score={score.points}")
        self.broadcaster.emit_all('score_updated', score.to_dict())
        self._reset_positions()

        winner = score.leader_at(self.win_score)
        if winner is not None:
            self.logger.info(f"[match-over] winner={winner} score={score.points}")
            self.broadcaster.emit_all('match_over', {'winning_seat': winner})
            score.reset()
            self._reset_positions()
            self.broadcaster.emit_all('score_updated', score.to_dict())

    def _reset_positions(self) -> None:
        self.world.reset_positions()
        self.broadcaster.emit_all('positions_reset', {
            'players': self.world.roster(),
            'puck': self.world.puck.to_dict(),
        })
        self.broadcaster.emit_all('roster', {'players': self.world.roster()})

    # ----------------------------------------------------------- queries

    def snapshot(self):
        with self.lock:
            state = self.world.snapshot()
            state['free_seats'] = self.lobby.free_seats
            state['tick'] = self.tick_count
            return state

    # ----------------------------------------------------------- helpers

    def _player_for(self, sid: str) -> Optional[Player]:
        seat = self.lobby.seat_for(sid)
        if seat is None:
            return None
        return self.world.players.get(seat)

    def _live_player(self, seat: int, generation: int) -> Optional[Player]:
        player = self.world.players.get(seat)
        if player is None or player.generation != generation:
            return None
        return player

    def _notify_possession(self, player: Player) -> None:
        self.broadcaster.emit_to(player.sid, 'possession', {'seat': player.seat, 'has_puck': player.has_puck})

    def _notify_speed(self, player: Player) -> None:
        self.broadcaster.emit_to(player.sid, 'speed_modifier_changed', {
            'seat': player.seat,
            'modifier': player.speed_modifier,
        })
