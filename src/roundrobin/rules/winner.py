"""
Winner derivation for recorded matches.

The rule is a plain majority with a fixed tie-break: player 1 wins only on a
strictly higher score, and every other outcome (lower, level, missing or
non-numeric scores) goes to player 2.  Callers who want a different result
for a draw supply the winner explicitly.
"""

from numbers import Real
from typing import Any


def _is_score(value: Any) -> bool:
    # value == value rejects NaN
    return isinstance(value, Real) and not isinstance(value, bool) and value == value


def derive_winner(score1: Any, score2: Any, player1: str, player2: str) -> str:
    """Return the name of the winning side. Never raises."""
    if _is_score(score1) and _is_score(score2) and score1 > score2:
        return player1
    return player2
