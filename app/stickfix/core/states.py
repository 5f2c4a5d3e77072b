"""
Состояния пользователя.

Базовый State отклоняет любое событие: возвращает TransitionFailure(self)
без записи в хранилище. Каждый вариант переопределяет только те методы,
которые из него допустимы. Исключение — on_idle: сброс в Idle разрешён
из любого состояния.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from stickfix.core.errors import StaleStateError, StateResolutionError
from stickfix.core.modes import PrivateMode, Registration, ShuffleMode
from stickfix.core.port import StoreFailure
from stickfix.core.results import TransitionFailure, TransitionResult, TransitionSuccess
from stickfix.logging import get_logger

if TYPE_CHECKING:
    from stickfix.core.port import StateStore
    from stickfix.core.user import User

logger = get_logger("states")


class State:
    name: ClassVar[str] = "state"

    def __init__(self, user: User):
        self.user = user

    def __repr__(self) -> str:
        return f"{type(self).__name__}(user={self.user.debug_info})"

    def _reject(self, action: str) -> TransitionResult:
        logger.debug(
            "User %s attempted to %s from state %s",
            self.user.debug_info,
            action,
            self.name,
        )
        return TransitionFailure(self)

    def _transition(
        self,
        store: StateStore,
        state_type: type[State],
        action: str,
        guarded: bool = True,
        **changes,
    ) -> TransitionResult:
        result = store.set_user_state(
            self.user,
            state_type,
            expected=self.name if guarded else None,
            **changes,
        )
        if isinstance(result, StoreFailure):
            if isinstance(result.cause, StaleStateError):
                logger.warning("Lost race to %s for user %s: %s", action, self.user.debug_info, result)
                return TransitionFailure(self._current_state(result.cause))
            logger.error("Failed to %s for user %s: %s", action, self.user.debug_info, result)
            return TransitionFailure(self)

        logger.info(
            "User %s: %s -> %s (%s)",
            self.user.debug_info,
            self.name,
            state_type.name,
            action,
        )
        return TransitionSuccess(result.value.state)

    def _current_state(self, stale: StaleStateError) -> State:
        """
        Состояние, в котором пользователь остался после проигранной гонки.

        Если этот же объект User уже продвинут другим переходом, берём его
        состояние. Иначе (устаревшая копия) собираем то, что лежит в хранилище.
        """
        if self.user.state is not self:
            return self.user.state
        return resolve_state(stale.actual, self.user)

    # Регистрация
    def on_start(self, store: StateStore) -> TransitionResult:
        return self._reject("start")

    def on_start_confirmation(self, store: StateStore) -> TransitionResult:
        return self._reject("confirm start")

    def on_start_rejection(self, store: StateStore) -> TransitionResult:
        return self._reject("reject start")

    # Отзыв регистрации
    def on_revoke(self, store: StateStore) -> TransitionResult:
        return self._reject("revoke")

    def on_revoke_confirmation(self, store: StateStore) -> TransitionResult:
        return self._reject("confirm revoke")

    def on_revoke_rejection(self, store: StateStore) -> TransitionResult:
        return self._reject("reject revoke")

    # Приватный режим
    def on_private_mode(self, store: StateStore) -> TransitionResult:
        return self._reject("set private mode")

    def on_private_mode_enabled(self, store: StateStore) -> TransitionResult:
        return self._reject("enable private mode")

    def on_private_mode_disabled(self, store: StateStore) -> TransitionResult:
        return self._reject("disable private mode")

    # Перемешивание
    def on_shuffle(self, store: StateStore) -> TransitionResult:
        return self._reject("set shuffle mode")

    def on_shuffle_enabled(self, store: StateStore) -> TransitionResult:
        return self._reject("enable shuffle mode")

    def on_shuffle_disabled(self, store: StateStore) -> TransitionResult:
        return self._reject("disable shuffle mode")

    def on_idle(self, store: StateStore) -> TransitionResult:
        return self._transition(store, IdleState, "return to idle", guarded=False)


class IdleState(State):
    name = "idle"

    def on_start(self, store: StateStore) -> TransitionResult:
        return self._transition(store, StartState, "start")

    def on_revoke(self, store: StateStore) -> TransitionResult:
        return self._transition(store, RevokeState, "revoke")

    def on_private_mode(self, store: StateStore) -> TransitionResult:
        return self._transition(store, PrivateModeState, "set private mode")

    def on_shuffle(self, store: StateStore) -> TransitionResult:
        return self._transition(store, ShuffleState, "set shuffle mode")


class StartState(State):
    """Ждём подтверждения регистрации."""
    name = "start"

    def on_start_confirmation(self, store: StateStore) -> TransitionResult:
        return self._transition(
            store, IdleState, "confirm start", registration=Registration.REGISTERED
        )

    def on_start_rejection(self, store: StateStore) -> TransitionResult:
        return self._transition(store, IdleState, "reject start")


class RevokeState(State):
    """Ждём подтверждения отзыва. Входим сюда только из Idle, туда же и возвращаемся."""
    name = "revoke"

    def on_revoke_confirmation(self, store: StateStore) -> TransitionResult:
        return self._transition(
            store, IdleState, "confirm revoke", registration=Registration.REVOKED
        )

    def on_revoke_rejection(self, store: StateStore) -> TransitionResult:
        return self._transition(store, IdleState, "reject revoke")


class PrivateModeState(State):
    name = "private_mode"

    def on_private_mode_enabled(self, store: StateStore) -> TransitionResult:
        return self._transition(
            store, IdleState, "enable private mode", private_mode=PrivateMode.ENABLED
        )

    def on_private_mode_disabled(self, store: StateStore) -> TransitionResult:
        return self._transition(
            store, IdleState, "disable private mode", private_mode=PrivateMode.DISABLED
        )


class ShuffleState(State):
    name = "shuffle"

    def on_shuffle_enabled(self, store: StateStore) -> TransitionResult:
        return self._transition(
            store, IdleState, "enable shuffle mode", shuffle_mode=ShuffleMode.ENABLED
        )

    def on_shuffle_disabled(self, store: StateStore) -> TransitionResult:
        return self._transition(
            store, IdleState, "disable shuffle mode", shuffle_mode=ShuffleMode.DISABLED
        )


STATE_TYPES: dict[str, type[State]] = {
    cls.name: cls
    for cls in (IdleState, StartState, RevokeState, PrivateModeState, ShuffleState)
}


def resolve_state(name: str, user: User) -> State:
    """Восстановить состояние по сохранённому имени. Неизвестное имя — ошибка данных."""
    state_type = STATE_TYPES.get(name.strip().lower())
    if state_type is None:
        raise StateResolutionError(name, sorted(STATE_TYPES))
    return state_type(user)
