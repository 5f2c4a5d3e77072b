from typing import Callable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stickfix.core.errors import PersistenceError, StaleStateError, UserNotFoundError
from stickfix.core.modes import PrivateMode, Registration, ShuffleMode
from stickfix.core.port import StoreFailure, StoreResult, StoreSuccess
from stickfix.core.states import IdleState, State, resolve_state
from stickfix.core.user import User
from stickfix.logging import logger
from stickfix.storage.db import get_session
from stickfix.storage.locks import UserLocks
from stickfix.storage.models import User as UserRow


def _to_user(row: UserRow) -> User:
    """Собрать пользователя из строки. Неизвестное имя состояния пробрасывается наружу."""
    user = User(
        row.username,
        row.telegram_id,
        private_mode=PrivateMode.ENABLED if row.private_mode else PrivateMode.DISABLED,
        shuffle_mode=ShuffleMode.ENABLED if row.shuffle_mode else ShuffleMode.DISABLED,
        registration=Registration(row.registration),
    )
    user.state = resolve_state(row.state, user)
    return user


class SqlStateStore:
    """Хранилище состояний в таблице users (Postgres в продакшене)."""

    def __init__(self, locks: UserLocks, session_factory: Callable[[], Session] = get_session):
        self._locks = locks
        self._session_factory = session_factory

    @staticmethod
    def _select_row(session: Session, user_id: int, for_update: bool = False) -> UserRow | None:
        stmt = select(UserRow).where(UserRow.telegram_id == user_id)
        if for_update:
            stmt = stmt.with_for_update()
        return session.execute(stmt).scalar_one_or_none()

    def get_user(self, user_id: int) -> StoreResult[User]:
        session = None
        try:
            session = self._session_factory()
            row = self._select_row(session, user_id)
            if row is None:
                return StoreFailure("User lookup failed", UserNotFoundError(user_id))
            return StoreSuccess(_to_user(row))
        except SQLAlchemyError as e:
            logger.error("DB error reading user %d: %s", user_id, e)
            return StoreFailure("User lookup failed", PersistenceError(str(e)))
        finally:
            if session is not None:
                session.close()

    def upsert_user(self, user: User) -> StoreResult[User]:
        session = None
        try:
            with self._locks.hold(user.user_id):
                session = self._session_factory()
                row = self._select_row(session, user.user_id, for_update=True)
                if row is None:
                    row = UserRow(
                        telegram_id=user.user_id,
                        username=user.username,
                        state=IdleState.name,
                        private_mode=user.private_mode is PrivateMode.ENABLED,
                        shuffle_mode=user.shuffle_mode is ShuffleMode.ENABLED,
                        registration=user.registration.value,
                    )
                    session.add(row)
                    logger.info("New user created: telegram_id=%d, username=%s", user.user_id, user.username)
                else:
                    row.username = user.username
                session.commit()
                return StoreSuccess(_to_user(row))
        except SQLAlchemyError as e:
            logger.error("DB error upserting user %d: %s", user.user_id, e)
            return StoreFailure("User upsert failed", PersistenceError(str(e)))
        except PersistenceError as e:
            return StoreFailure("User upsert failed", e)
        finally:
            if session is not None:
                session.close()

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
        session = None
        try:
            with self._locks.hold(user.user_id):
                session = self._session_factory()
                row = self._select_row(session, user.user_id, for_update=True)
                if row is None:
                    raise UserNotFoundError(user.user_id)
                if expected is not None and row.state != expected:
                    raise StaleStateError(user.user_id, expected, row.state)

                row.state = state_type.name
                if private_mode is not None:
                    row.private_mode = private_mode is PrivateMode.ENABLED
                if shuffle_mode is not None:
                    row.shuffle_mode = shuffle_mode is ShuffleMode.ENABLED
                if registration is not None:
                    row.registration = registration.value
                session.commit()

                user.apply_transition(state_type, private_mode, shuffle_mode, registration)
                return StoreSuccess(user)
        except SQLAlchemyError as e:
            logger.error("DB error writing state %s for user %d: %s", state_type.name, user.user_id, e)
            return StoreFailure("State write failed", PersistenceError(str(e)))
        except PersistenceError as e:
            if session is not None:
                session.rollback()
            return StoreFailure("State write failed", e)
        finally:
            if session is not None:
                session.close()
