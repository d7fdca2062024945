"""Roster reconciliation: merge an incoming player into the roster by id."""

import logging

from ..db.gateway import PersistenceGateway
from ..db.models import Player

logger = logging.getLogger(__name__)


class RosterReconciler:
    """Decides between creating a roster entry and overwriting an existing one."""

    def __init__(self, gateway: PersistenceGateway) -> None:
        self.gateway = gateway

    def upsert(self, player: Player) -> Player:
        """
        Store ``player`` and return the stored row.

        Without an id the store assigns one.  With an id the gateway issues a
        single insert-or-overwrite statement, so two concurrent submissions
        for the same id both succeed and the last one wins.  Every field is
        replaced; there is no partial patch.
        """
        if player.id is None:
            stored = self.gateway.insert_player(player)
            logger.info(f"Created player {stored.id} ({stored.name})")
            return stored

        stored = self.gateway.upsert_player(player)
        logger.info(f"Upserted player {stored.id} ({stored.name})")
        return stored

    def delete(self, player_id: int) -> None:
        self.gateway.delete_player(player_id)
        logger.info(f"Deleted player {player_id}")
