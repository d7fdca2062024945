"""
Persistence gateway: the only code that reads or writes durable state.

``PersistenceGateway`` is the protocol the engine depends on; ``SQLGateway``
implements it on a SQLModel session.  Every SQLAlchemy failure is rolled
back and re-raised as ``StorageError`` so callers see one error type and no
half-applied writes.
"""

from __future__ import annotations

import datetime
import logging
from contextlib import contextmanager
from typing import Iterator, List, Protocol

from sqlalchemy import delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ..exceptions import StorageError
from .models import Match, Player, TournamentSnapshot

logger = logging.getLogger(__name__)

# Columns overwritten when an upsert hits an existing player id.
PLAYER_FIELDS = ("sno", "name", "phone", "adhaar", "duedate", "gender", "photo")

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class PersistenceGateway(Protocol):
    """Storage operations for players, matches and tournament snapshots."""

    def list_players(self) -> List[Player]:
        """All players ordered by id."""
        ...

    def insert_player(self, player: Player) -> Player:
        """Insert a player without an id; the store assigns one."""
        ...

    def upsert_player(self, player: Player) -> Player:
        """Atomically insert the player, or overwrite every field on id conflict."""
        ...

    def delete_player(self, player_id: int) -> None:
        """Delete by id. Missing ids are not an error."""
        ...

    def insert_match(self, match: Match) -> Match:
        ...

    def list_matches(self, date: datetime.date) -> List[Match]:
        """Matches for a date in insertion order."""
        ...

    def insert_snapshot(self, snapshot: TournamentSnapshot) -> TournamentSnapshot:
        ...

    def list_snapshots(self, date: datetime.date) -> List[TournamentSnapshot]:
        ...


class SQLGateway:
    """``PersistenceGateway`` backed by a SQLModel session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    @contextmanager
    def _unit_of_work(self) -> Iterator[Session]:
        try:
            yield self.session
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(str(e)) from e

    def _read(self, statement):
        try:
            return list(self.session.exec(statement).all())
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(str(e)) from e

    def list_players(self) -> List[Player]:
        return self._read(select(Player).order_by(Player.id))

    def insert_player(self, player: Player) -> Player:
        return self._add(player)

    def upsert_player(self, player: Player) -> Player:
        if player.id is None:
            return self._add(player)

        dialect = self.session.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        values = player.model_dump(include={"id", *PLAYER_FIELDS})

        with self._unit_of_work() as session:
            if insert is None:
                # No ON CONFLICT support: fall back to the ORM's merge
                # inside one transaction.
                logger.debug(f"Dialect {dialect} has no native upsert, using merge")
                session.merge(Player(**values))
            else:
                stmt = insert(Player).values(**values)
                stmt = stmt.on_conflict_do_update(
                    index_elements=["id"],
                    set_={field: stmt.excluded[field] for field in PLAYER_FIELDS},
                )
                session.exec(stmt)

        stored = self._get_player(values["id"])
        if stored is None:
            raise StorageError(f"player {values['id']} vanished after upsert")
        return stored

    def delete_player(self, player_id: int) -> None:
        with self._unit_of_work() as session:
            session.exec(delete(Player).where(Player.id == player_id))

    def insert_match(self, match: Match) -> Match:
        return self._add(match)

    def list_matches(self, date: datetime.date) -> List[Match]:
        return self._read(select(Match).where(Match.date == date).order_by(Match.id))

    def insert_snapshot(self, snapshot: TournamentSnapshot) -> TournamentSnapshot:
        return self._add(snapshot)

    def list_snapshots(self, date: datetime.date) -> List[TournamentSnapshot]:
        return self._read(
            select(TournamentSnapshot)
            .where(TournamentSnapshot.date == date)
            .order_by(TournamentSnapshot.id)
        )

    def _get_player(self, player_id: int):
        try:
            return self.session.get(Player, player_id, populate_existing=True)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(str(e)) from e

    def _add(self, record):
        with self._unit_of_work() as session:
            session.add(record)
        try:
            self.session.refresh(record)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(str(e)) from e
        return record
