"""
Хранилище состояний в памяти процесса.

Для локального запуска и тестов. Хранит не объекты User, а записи
с именем состояния, поэтому get_user всегда собирает свежий объект.
"""
import threading
from dataclasses import dataclass, replace

from stickfix.core.errors import PersistenceError, StaleStateError, UserNotFoundError
from stickfix.core.modes import PrivateMode, Registration, ShuffleMode
from stickfix.core.port import StoreFailure, StoreResult, StoreSuccess
from stickfix.core.states import IdleState, State, resolve_state
from stickfix.core.user import User
from stickfix.logging import logger
from stickfix.storage.locks import LocalUserLocks, UserLocks


@dataclass(frozen=True)
class UserRecord:
    username: str
    state: str
    private_mode: PrivateMode
    shuffle_mode: ShuffleMode
    registration: Registration


class MemoryStateStore:
    def __init__(self, locks: UserLocks | None = None, lock_timeout: float = 5.0):
        self._locks = locks if locks is not None else LocalUserLocks(lock_timeout)
        self._records: dict[int, UserRecord] = {}
        self._records_lock = threading.Lock()

    def _read(self, user_id: int) -> UserRecord | None:
        with self._records_lock:
            return self._records.get(user_id)

    def _write(self, user_id: int, record: UserRecord) -> None:
        with self._records_lock:
            self._records[user_id] = record

    @staticmethod
    def _to_user(user_id: int, record: UserRecord) -> User:
        user = User(
            record.username,
            user_id,
            private_mode=record.private_mode,
            shuffle_mode=record.shuffle_mode,
            registration=record.registration,
        )
        user.state = resolve_state(record.state, user)
        return user

    def get_user(self, user_id: int) -> StoreResult[User]:
        record = self._read(user_id)
        if record is None:
            return StoreFailure("User lookup failed", UserNotFoundError(user_id))
        return StoreSuccess(self._to_user(user_id, record))

    def upsert_user(self, user: User) -> StoreResult[User]:
        try:
            with self._locks.hold(user.user_id):
                record = self._read(user.user_id)
                if record is None:
                    record = UserRecord(
                        username=user.username,
                        state=IdleState.name,
                        private_mode=user.private_mode,
                        shuffle_mode=user.shuffle_mode,
                        registration=user.registration,
                    )
                    logger.info("New user created: telegram_id=%d, username=%s", user.user_id, user.username)
                else:
                    record = replace(record, username=user.username)
                self._write(user.user_id, record)
        except PersistenceError as e:
            return StoreFailure("User upsert failed", e)
        return StoreSuccess(self._to_user(user.user_id, record))

    def set_user_state(
        self,
        user: User,
        state_type: type[State],
        *,
        expected: str | None = None,
        private_mode: PrivateMode | None = None,
        shuffle_mode: ShuffleMode | None = None,
        registration: Registration | None = None,
    ) -> StoreResult[User]:
        try:
            with self._locks.hold(user.user_id):
                record = self._read(user.user_id)
                if record is None:
                    raise UserNotFoundError(user.user_id)
                if expected is not None and record.state != expected:
                    raise StaleStateError(user.user_id, expected, record.state)
                self._write(
                    user.user_id,
                    UserRecord(
                        username=record.username,
                        state=state_type.name,
                        private_mode=private_mode or record.private_mode,
                        shuffle_mode=shuffle_mode or record.shuffle_mode,
                        registration=registration or record.registration,
                    ),
                )
                # внутри блокировки: объект продвигается в порядке записей
                user.apply_transition(state_type, private_mode, shuffle_mode, registration)
        except PersistenceError as e:
            return StoreFailure("State write failed", e)
        return StoreSuccess(user)
