"""
SQLGateway tests on an in-memory SQLite database.
"""

import datetime
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.exc import OperationalError

from roundrobin.config import Settings
from roundrobin.db import gateway as gateway_module
from roundrobin.db.gateway import SQLGateway
from roundrobin.db.session import Database
from roundrobin.db.models import Match, Player, TournamentSnapshot
from roundrobin.exceptions import StorageError


def test_insert_assigns_id(gateway: SQLGateway) -> None:
    first = gateway.insert_player(Player(name="Asha"))
    second = gateway.insert_player(Player(name="Ravi"))
    assert first.id is not None
    assert second.id > first.id


def test_upsert_inserts_with_caller_id(gateway: SQLGateway) -> None:
    stored = gateway.upsert_player(Player(id=40, name="Asha", phone="123"))
    assert stored.id == 40
    assert [p.id for p in gateway.list_players()] == [40]


def test_upsert_is_idempotent(gateway: SQLGateway) -> None:
    gateway.upsert_player(Player(id=5, name="Asha", phone="123"))
    gateway.upsert_player(Player(id=5, name="Asha", phone="123"))
    players = gateway.list_players()
    assert len(players) == 1
    assert players[0].phone == "123"


def test_upsert_overwrites_every_field(gateway: SQLGateway) -> None:
    gateway.upsert_player(Player(
        id=5, sno=2, name="Asha", phone="123", adhaar="9999",
        duedate=datetime.date(2025, 1, 1), gender="Girls", photo="aGVsbG8=",
    ))
    stored = gateway.upsert_player(Player(id=5, name="Asha K"))
    assert stored.name == "Asha K"
    assert stored.sno == 0
    assert stored.phone == ""
    assert stored.adhaar == ""
    assert stored.duedate is None
    assert stored.gender == "Boys"
    assert stored.photo == ""


def test_delete_missing_player_is_noop(gateway: SQLGateway) -> None:
    gateway.insert_player(Player(name="Asha"))
    gateway.delete_player(12345)
    assert len(gateway.list_players()) == 1


def test_matches_filtered_by_date_in_insertion_order(gateway: SQLGateway) -> None:
    day1 = datetime.date(2024, 3, 1)
    day2 = datetime.date(2024, 3, 2)
    a = gateway.insert_match(Match(date=day1, player1="A", player2="B", winner="B"))
    gateway.insert_match(Match(date=day2, player1="C", player2="D", winner="D"))
    b = gateway.insert_match(Match(date=day1, player1="A", player2="B", winner="B"))

    assert [m.id for m in gateway.list_matches(day1)] == [a.id, b.id]
    assert [m.player1 for m in gateway.list_matches(day2)] == ["C"]


def test_snapshot_payload_round_trips(gateway: SQLGateway) -> None:
    day = datetime.date(2024, 3, 1)
    data = {"rounds": [[{"p1": "A", "p2": "B"}]], "seeded": True}
    gateway.insert_snapshot(TournamentSnapshot(date=day, key="U11-Boys", data=data))
    gateway.insert_snapshot(TournamentSnapshot(date=day, key="U11-Boys", data=[1, 2]))

    snapshots = gateway.list_snapshots(day)
    assert [s.data for s in snapshots] == [data, [1, 2]]
    assert gateway.list_snapshots(datetime.date(2024, 3, 2)) == []


def test_driver_errors_become_storage_errors(gateway: SQLGateway, monkeypatch) -> None:
    def boom(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(gateway.session, "commit", boom)
    with pytest.raises(StorageError, match="disk I/O error"):
        gateway.insert_match(Match(player1="A", player2="B", winner="B"))


def test_concurrent_upserts_of_one_id_leave_one_row(tmp_path) -> None:
    database = Database(Settings(database_url=f"sqlite:///{tmp_path / 'roster.db'}"))
    database.open()

    def upsert(i: int) -> int:
        with database.session() as session:
            return SQLGateway(session).upsert_player(Player(id=7, name=f"P{i}")).id

    try:
        with ThreadPoolExecutor(max_workers=8) as pool:
            ids = list(pool.map(upsert, range(16)))
        with database.session() as session:
            players = SQLGateway(session).list_players()
    finally:
        database.close()

    assert ids == [7] * 16
    assert len(players) == 1
    assert players[0].id == 7
    assert players[0].name in {f"P{i}" for i in range(16)}


def test_upsert_without_native_on_conflict_uses_merge(gateway: SQLGateway, monkeypatch) -> None:
    monkeypatch.setattr(gateway_module, "_UPSERT_DIALECTS", {})

    gateway.upsert_player(Player(id=9, name="Asha", phone="123", gender="Girls"))
    stored = gateway.upsert_player(Player(id=9, name="Asha K"))

    assert stored.name == "Asha K"
    assert stored.phone == ""
    assert stored.gender == "Boys"
    assert [p.id for p in gateway.list_players()] == [9]
