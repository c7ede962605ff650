"""Shared fixtures: temporary database, API client, and an in-memory record store."""

from collections.abc import Callable, Iterator
from datetime import UTC, date, datetime
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from ledger.core.db import SessionLocal, Transaction, get_engine, init_db
from ledger.core.settings import Settings, get_settings
from ledger.main import app
from ledger.services.filters import TransactionFilter


class FakeRecordStore:
    """In-memory stand-in for RecordStore with the same ordering rules."""

    def __init__(self) -> None:
        self.records: dict[int, Transaction] = {}
        self._ids = count(1)

    def insert(self, record: Transaction) -> Transaction:
        record.id = next(self._ids)
        self.records[record.id] = record
        return record

    def get(self, record_id: int) -> Transaction | None:
        return self.records.get(record_id)

    def count(self, record_filter: TransactionFilter) -> int:
        return len(self.find(record_filter))

    def find(self, record_filter: TransactionFilter, offset: int = 0, limit: int | None = None) -> list[Transaction]:
        matching = [r for r in self.records.values() if record_filter.matches(r)]
        matching.sort(key=lambda r: (r.occurred_at, r.id), reverse=True)
        end = None if limit is None else offset + limit
        return matching[offset:end]

    def save(self, record: Transaction) -> Transaction:
        self.records[record.id] = record
        return record

    def delete(self, record: Transaction) -> None:
        del self.records[record.id]


@pytest.fixture
def fake_store() -> FakeRecordStore:
    """An empty in-memory store."""
    return FakeRecordStore()


@pytest.fixture
def make_record(fake_store: FakeRecordStore) -> Callable[..., Transaction]:
    """Insert a record into the fake store with sensible defaults."""

    def _make(
        owner_id: str = "u1",
        title: str = "Entry",
        amount: float = 10.0,
        kind: str = "expense",
        category: str | None = None,
        occurred_at: date = date(2025, 1, 10),
    ) -> Transaction:
        stamp = datetime(2025, 1, 1, tzinfo=UTC)
        record = Transaction(
            owner_id=owner_id,
            title=title,
            amount=amount,
            kind=kind,
            category=category,
            occurred_at=occurred_at,
            created_at=stamp,
            updated_at=stamp,
        )
        return fake_store.insert(record)

    return _make


@pytest.fixture
def settings(tmp_path, monkeypatch) -> Iterator[Settings]:
    """Settings pointing at a fresh SQLite file for each test."""
    monkeypatch.setenv("LEDGER_DATABASE_URL", f"sqlite:///{tmp_path / 'ledger.db'}")
    monkeypatch.setenv("LEDGER_JWT_SECRET", "test-secret-for-the-ledger-api-suite")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def session(settings: Settings) -> Iterator[Session]:
    """A session on a real temporary database with the tables created."""
    engine = get_engine(settings.database_url)
    init_db(engine)
    db_session = SessionLocal()
    yield db_session
    db_session.close()
    engine.dispose()


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    """API client running the application lifespan against the temporary database."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client: TestClient) -> Callable[[str], dict[str, str]]:
    """Register a user by name and return bearer headers for them."""

    def _register(name: str) -> dict[str, str]:
        response = client.post(
            "/auth/register",
            json={"name": name, "email": f"{name}@example.com", "password": "s3cret-pass"},
        )
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _register
