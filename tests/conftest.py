"""Shared fixtures: an in-memory SQLite database and an API client bound to it."""

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from roundrobin.api.main import create_app
from roundrobin.config import Settings
from roundrobin.db.gateway import SQLGateway
from roundrobin.db.session import Database


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite://")


@pytest.fixture
def database(settings: Settings) -> Iterator[Database]:
    db = Database(settings)
    db.open()
    yield db
    db.close()


@pytest.fixture
def gateway(database: Database) -> Iterator[SQLGateway]:
    with database.session() as session:
        yield SQLGateway(session)


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    with TestClient(create_app(settings)) as test_client:
        yield test_client
