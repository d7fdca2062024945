"""Core engine for RoundRobin."""

from .engine import Engine
from .roster import RosterReconciler

__all__ = ["Engine", "RosterReconciler"]
