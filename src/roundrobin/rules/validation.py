"""
Validation and defaulting of incoming payloads.

Request bodies arrive as loosely typed JSON objects from the tournament
front end.  The functions here coerce every field to its stored type, fill
in defaults, and raise ``ValidationError`` only for the few fields the
service cannot do without.  Anything else that fails to parse (a score of
``"abc"``, an unreadable due date) degrades to null or the column default
rather than rejecting the record.

Nothing in this module performs I/O.
"""

from __future__ import annotations

import datetime
import math
from typing import Any, Mapping, Optional, Union

from ..db.models import Match, Player, TournamentSnapshot
from ..exceptions import ValidationError

Number = Union[int, float]

# INTEGER columns are signed 64-bit on both SQLite and PostgreSQL (BIGINT).
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def parse_number(value: Any) -> Optional[Number]:
    """Parse a score-like value, returning None instead of raising."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if isinstance(number, float):
        if not math.isfinite(number):
            return None
        if number.is_integer():
            return int(number)
    return number


def parse_int(value: Any, default: int = 0) -> int:
    """Parse a stored integer column. Out-of-range values fall back to ``default``."""
    number = parse_number(value)
    if number is None:
        return default
    number = int(number)
    if not INT64_MIN <= number <= INT64_MAX:
        return default
    return number


def parse_date(value: Any) -> Optional[datetime.date]:
    """
    Resolve a calendar date from a date, datetime or ISO string.

    ISO date-times (``2024-03-01T00:00:00.000Z`` as sent by browsers) keep
    only their date part.  Unresolvable values give None.
    """
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return datetime.date.fromisoformat(text[:10])
    except ValueError:
        return None


def _text(value: Any, default: str = "") -> str:
    if value is None or value == "":
        return default
    return str(value)


def _player_id(value: Any) -> Optional[int]:
    # 0, "" and null all mean "let the store assign one"
    if value is None or value == "" or value == 0:
        return None
    return require_player_id(value) or None


def require_player_id(value: Any) -> int:
    """Resolve a player id that must fit the INTEGER primary key."""
    if isinstance(value, bool):
        raise ValidationError("id must be an integer")
    number = parse_number(value)
    if not isinstance(number, int) or not INT64_MIN <= number <= INT64_MAX:
        raise ValidationError("id must be an integer")
    return number


def _require_mapping(payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise ValidationError("request body must be a JSON object")
    return payload


def normalize_player(payload: Any) -> Player:
    """Build a ``Player`` from a request body. Raises on a blank name."""
    body = _require_mapping(payload)
    name = body.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name required")

    return Player(
        id=_player_id(body.get("id")),
        sno=parse_int(body.get("sno")),
        name=name,
        phone=_text(body.get("phone")),
        adhaar=_text(body.get("adhaar")),
        duedate=parse_date(body.get("duedate")),
        gender=_text(body.get("gender"), "Boys"),
        photo=_text(body.get("photo")),
    )


def normalize_match(payload: Any, strict: bool = False) -> Match:
    """
    Build a ``Match`` from a request body.

    The winner is copied verbatim when supplied and left empty otherwise;
    the engine derives it afterwards.  With ``strict`` set, a match against
    oneself and a missing score are rejected as well.
    """
    body = _require_mapping(payload)
    player1 = _text(body.get("player1"))
    player2 = _text(body.get("player2"))
    if not player1 or not player2:
        raise ValidationError("players required")

    score1 = parse_number(body.get("score1"))
    score2 = parse_number(body.get("score2"))
    if strict:
        if player1 == player2:
            raise ValidationError("players must differ")
        if score1 is None or score2 is None:
            raise ValidationError("scores required")

    roundno = body.get("roundno")
    if roundno in (None, "", 0):
        roundno = body.get("round")

    return Match(
        date=parse_date(body.get("date")),
        category=_text(body.get("category")),
        gender=_text(body.get("gender")),
        player1=player1,
        player2=player2,
        score1=score1,
        score2=score2,
        winner=_text(body.get("winner")),
        roundno=parse_int(roundno),
    )


def normalize_snapshot(payload: Any) -> TournamentSnapshot:
    body = _require_mapping(payload)
    date = parse_date(body.get("date"))
    key = _text(body.get("key"))
    if date is None or not key:
        raise ValidationError("date and key required")
    return TournamentSnapshot(date=date, key=key, data=body.get("data"))


def require_date(value: Any) -> datetime.date:
    """Resolve a query-string date or raise."""
    date = parse_date(value)
    if date is None:
        raise ValidationError("date required")
    return date
