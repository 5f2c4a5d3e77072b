"""
Блокировки на пользователя: не больше одного перехода на user_id одновременно.

LocalUserLocks достаточно для одного процесса. При нескольких воркерах
gunicorn нужен RedisUserLocks.
"""
import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Protocol

import redis

from stickfix.core.errors import PersistenceError, StoreTimeoutError
from stickfix.logging import logger


class UserLocks(Protocol):
    def hold(self, user_id: int) -> AbstractContextManager[None]:
        ...


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        # сколько потоков держат или ждут эту блокировку
        self.users = 0


class LocalUserLocks:
    def __init__(self, timeout: float):
        self._timeout = timeout
        self._registry_lock = threading.Lock()
        self._locks: dict[int, _LockEntry] = {}

    def active_count(self) -> int:
        """Сколько пользователей сейчас держат или ждут блокировку."""
        with self._registry_lock:
            return len(self._locks)

    def _checkout(self, user_id: int) -> _LockEntry:
        with self._registry_lock:
            entry = self._locks.get(user_id)
            if entry is None:
                entry = self._locks[user_id] = _LockEntry()
            entry.users += 1
            return entry

    def _checkin(self, user_id: int, entry: _LockEntry) -> None:
        with self._registry_lock:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[user_id]

    @contextmanager
    def hold(self, user_id: int) -> Iterator[None]:
        entry = self._checkout(user_id)
        try:
            if not entry.lock.acquire(timeout=self._timeout):
                raise StoreTimeoutError(f"Timed out waiting for lock on user {user_id}")
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            self._checkin(user_id, entry)


class RedisUserLocks:
    def __init__(self, client: redis.Redis, timeout: float, prefix: str = "stickfix:user-lock"):
        self._client = client
        self._timeout = timeout
        self._prefix = prefix

    @contextmanager
    def hold(self, user_id: int) -> Iterator[None]:
        # timeout ограничивает жизнь ключа, если воркер упадёт с захваченной блокировкой.
        # Под ключом идут SELECT FOR UPDATE и COMMIT, каждый не дольше timeout
        lock = self._client.lock(
            f"{self._prefix}:{user_id}",
            timeout=self._timeout * 3,
            blocking_timeout=self._timeout,
        )
        try:
            acquired = lock.acquire()
        except redis.RedisError as e:
            raise PersistenceError(f"Redis lock for user {user_id} unavailable: {e}") from e
        if not acquired:
            raise StoreTimeoutError(f"Timed out waiting for lock on user {user_id}")
        try:
            yield
        finally:
            try:
                lock.release()
            except redis.exceptions.LockError as e:
                logger.warning("Lock for user %d expired before release: %s", user_id, e)


def get_redis(dsn: str) -> redis.Redis:
    return redis.from_url(dsn, decode_responses=True)
