"""
Контракт хранилища, от которого зависит машина состояний.

Все операции возвращают StoreSuccess или StoreFailure и не бросают
исключений для восстановимых ошибок. Запись состояния атомарна
для одного пользователя: реализация обязана сериализовать конкурирующие
вызовы с одним user_id.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, Protocol, TypeVar, Union

from stickfix.core.errors import PersistenceError, UserNotFoundError
from stickfix.core.modes import PrivateMode, Registration, ShuffleMode

if TYPE_CHECKING:
    from stickfix.core.states import State
    from stickfix.core.user import User

T = TypeVar("T")


@dataclass(frozen=True)
class StoreSuccess(Generic[T]):
    value: T


@dataclass(frozen=True)
class StoreFailure:
    message: str
    cause: PersistenceError | None = None

    @property
    def is_not_found(self) -> bool:
        return isinstance(self.cause, UserNotFoundError)

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"


StoreResult = Union[StoreSuccess[T], StoreFailure]


class StateStore(Protocol):
    def get_user(self, user_id: int) -> StoreResult[User]:
        """Прочитать пользователя с состоянием, восстановленным из хранилища."""
        ...

    def upsert_user(self, user: User) -> StoreResult[User]:
        """Создать пользователя в IdleState или обновить username существующего."""
        ...

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
        """
        Записать переход в state_type одной транзакцией.

        expected — имя состояния, из которого начинался переход; если в
        хранилище уже другое, запись не выполняется (StaleStateError).
        Экземпляр state_type создаётся только после успешной записи.
        """
        ...
