"""
SQLModel models for RoundRobin.

Three tables back the service: the player roster, the append-only match
log, and tournament snapshots.  Match players are free text rather than
foreign keys so results survive roster edits, and the snapshot ``data``
column is an opaque JSON document that is never interpreted here.
"""

import datetime
from typing import Any, Optional, Union

from sqlalchemy import JSON, Column, Float, Text
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel


class Score(TypeDecorator):
    """Float column that reads whole numbers back as ints (21, not 21.0)."""

    impl = Float
    cache_ok = True

    def process_result_value(self, value, dialect):
        if value is not None and float(value).is_integer():
            return int(value)
        return value


class Player(SQLModel, table=True):
    __tablename__ = "players"

    id: Optional[int] = Field(default=None, primary_key=True)
    sno: int = 0
    name: str
    phone: str = ""
    adhaar: str = ""  # national ID number
    duedate: Optional[datetime.date] = None
    gender: str = "Boys"
    photo: str = Field(default="", sa_column=Column(Text, nullable=False, default=""))


class Match(SQLModel, table=True):
    __tablename__ = "matches"

    id: Optional[int] = Field(default=None, primary_key=True)
    date: Optional[datetime.date] = Field(default=None, index=True)
    category: str = ""
    gender: str = ""
    player1: str
    player2: str
    score1: Optional[Union[int, float]] = Field(default=None, sa_column=Column(Score, nullable=True))
    score2: Optional[Union[int, float]] = Field(default=None, sa_column=Column(Score, nullable=True))
    winner: str = ""
    roundno: int = 0


class TournamentSnapshot(SQLModel, table=True):
    __tablename__ = "tournaments"

    id: Optional[int] = Field(default=None, primary_key=True)
    date: datetime.date = Field(index=True)
    key: str
    data: Any = Field(default=None, sa_column=Column(JSON, nullable=True))
