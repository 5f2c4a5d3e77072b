"""
Конфигурация pytest для тестов Stickfix.

Переменные окружения выставляются до импорта stickfix: Settings читается
при импорте модуля config.
"""
import os

os.environ["BOT_TOKEN"] = "123456:test-token"
os.environ["POSTGRES_DSN"] = "sqlite://"
os.environ["STATE_STORE"] = "memory"
os.environ["LOG_LEVEL"] = "DEBUG"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from stickfix.core.port import StoreFailure
from stickfix.core.errors import PersistenceError
from stickfix.core.states import IdleState
from stickfix.core.user import User
from stickfix.storage.db import create_session_factory
from stickfix.storage.locks import LocalUserLocks
from stickfix.storage.memory import MemoryStateStore
from stickfix.storage.models import Base
from stickfix.storage.repo import SqlStateStore


class FailingWritesStore:
    """Обёртка над хранилищем: чтение работает, любая запись состояния падает."""

    def __init__(self, inner):
        self.inner = inner
        self.write_attempts = 0

    def get_user(self, user_id):
        return self.inner.get_user(user_id)

    def upsert_user(self, user):
        return self.inner.upsert_user(user)

    def set_user_state(self, user, state_type, **kwargs):
        self.write_attempts += 1
        return StoreFailure("State write failed", PersistenceError("connection reset"))


@pytest.fixture
def memory_store():
    return MemoryStateStore(LocalUserLocks(timeout=1.0))


@pytest.fixture
def sql_session_factory():
    """SQLite в памяти, одно соединение на весь тест."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def sql_store(sql_session_factory):
    return SqlStateStore(LocalUserLocks(timeout=1.0), session_factory=sql_session_factory)


@pytest.fixture
def failing_store(memory_store):
    return FailingWritesStore(memory_store)


def _put_user(store, state_type=IdleState, user_id=42, username="alice", **attrs):
    """Сохранить пользователя и перевести его в state_type без проверок допустимости."""
    user = store.upsert_user(User(username, user_id, **attrs)).value
    if state_type is not IdleState:
        store.set_user_state(user, state_type)
    return user


@pytest.fixture
def put_user():
    return _put_user


@pytest.fixture
def make_user(memory_store):
    def _make(state_type=IdleState, **kwargs):
        return _put_user(memory_store, state_type, **kwargs)

    return _make
