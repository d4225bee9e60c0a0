"""Test fixtures for the faction store and account analytics."""

from datetime import datetime, timedelta, UTC

import pytest
from sqlmodel import SQLModel

from factionboard.database.connection import make_engine
from factionboard.database.kv_storage import KeyValueStorage
from factionboard.models import ActivityStatus, Faction, Member, User
from factionboard.services.account_storage_service import AccountStorageService
from factionboard.services.faction_store import FactionStore

FIXED_NOW = datetime(2024, 9, 15, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    """Controllable replacement for datetime.now(UTC)."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class CallCounter:
    """Zero-argument listener that counts its invocations."""

    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


def make_member(name: str = "Member", status: ActivityStatus = ActivityStatus.OFFLINE, **kwargs) -> Member:
    return Member(name=name, rank=kwargs.pop("rank", "Рядовой"), status=status, **kwargs)


def make_user(user_id: int, username: str, **kwargs) -> User:
    return User(id=user_id, username=username, **kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return FactionStore(clock=clock)


@pytest.fixture
def counter(store):
    listener = CallCounter()
    store.subscribe(listener)
    return listener


@pytest.fixture
def faction(store):
    """An empty faction already added to the store."""
    return store.add_faction(Faction(name="Полиция ЛС", color="bg-blue-500"))


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def kv_storage(engine):
    return KeyValueStorage(engine)


@pytest.fixture
def service(kv_storage, clock):
    return AccountStorageService(storage=kv_storage, clock=clock)
