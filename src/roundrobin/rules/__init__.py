"""Validation and derivation rules for RoundRobin."""

from .validation import normalize_match, normalize_player, normalize_snapshot
from .winner import derive_winner

__all__ = ["normalize_match", "normalize_player", "normalize_snapshot", "derive_winner"]
