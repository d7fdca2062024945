"""RoundRobin: player roster, match results and tournament snapshot storage."""

__version__ = "0.1.0"
