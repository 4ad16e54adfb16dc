"""Puck arena simulation: world state, physics, lobby and the match loop.

This package contains the authoritative game mechanics. Socket handlers
translate client messages into calls on :class:`Match`, keeping transport
concerns separated from the simulation itself.
"""

from .match import JoinResult, Match

__all__ = ['JoinResult', 'Match']
