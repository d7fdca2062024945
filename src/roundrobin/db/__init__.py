"""Database models, lifecycle and the persistence gateway for RoundRobin."""

from .models import Player, Match, TournamentSnapshot
from .session import Database
from .gateway import PersistenceGateway, SQLGateway

__all__ = [
    "Player",
    "Match",
    "TournamentSnapshot",
    "Database",
    "PersistenceGateway",
    "SQLGateway",
]
