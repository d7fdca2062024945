"""
Core orchestration engine for RoundRobin.

This module glues together the validation rules, the winner derivation and
the roster reconciler on top of a persistence gateway, and exposes one
method per service operation.  The engine holds no state of its own; the
API builds a fresh one around each request's gateway.

Every write validates first, so a rejected payload never reaches the store.
"""

import logging
from typing import Any, List

from ..db.gateway import PersistenceGateway
from ..db.models import Match, Player, TournamentSnapshot
from ..rules.validation import (
    normalize_match,
    normalize_player,
    normalize_snapshot,
    require_date,
    require_player_id,
)
from ..rules.winner import derive_winner
from .roster import RosterReconciler

logger = logging.getLogger(__name__)


class Engine:
    """RoundRobin engine orchestrating validation, derivation, and persistence."""

    def __init__(self, gateway: PersistenceGateway, strict_match_validation: bool = False) -> None:
        self.gateway = gateway
        self.strict_match_validation = strict_match_validation
        self.roster = RosterReconciler(gateway)

    # Players

    def list_players(self) -> List[Player]:
        return self.gateway.list_players()

    def upsert_player(self, payload: Any) -> Player:
        return self.roster.upsert(normalize_player(payload))

    def delete_player(self, player_id: Any) -> bool:
        """Delete a player. Succeeds whether or not the id existed."""
        self.roster.delete(require_player_id(player_id))
        return True

    # Matches

    def record_match(self, payload: Any) -> Match:
        """
        Append a match result.

        A supplied winner is kept as is, even if it disagrees with the
        scores.  Resubmitting the same payload appends a second row.
        """
        match = normalize_match(payload, strict=self.strict_match_validation)
        if not match.winner:
            match.winner = derive_winner(match.score1, match.score2, match.player1, match.player2)
        stored = self.gateway.insert_match(match)
        logger.info(f"Recorded match {stored.id}: {stored.player1} vs {stored.player2}, winner {stored.winner}")
        return stored

    def list_matches(self, date: Any) -> List[Match]:
        return self.gateway.list_matches(require_date(date))

    # Tournament snapshots

    def save_snapshot(self, payload: Any) -> TournamentSnapshot:
        snapshot = normalize_snapshot(payload)
        stored = self.gateway.insert_snapshot(snapshot)
        logger.info(f"Saved tournament snapshot {stored.id} for {stored.date} ({stored.key})")
        return stored

    def load_snapshots(self, date: Any) -> List[TournamentSnapshot]:
        return self.gateway.list_snapshots(require_date(date))
