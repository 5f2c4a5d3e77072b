from __future__ import annotations

from typing import TYPE_CHECKING, Any

from stickfix.core.modes import PrivateMode, Registration, ShuffleMode
from stickfix.core.states import IdleState

if TYPE_CHECKING:
    from stickfix.core.states import State


class User:
    """Пользователь бота и его текущее состояние (всегда ровно одно)."""

    def __init__(
        self,
        username: str,
        user_id: int,
        private_mode: PrivateMode = PrivateMode.DISABLED,
        shuffle_mode: ShuffleMode = ShuffleMode.DISABLED,
        registration: Registration = Registration.UNREGISTERED,
    ):
        self.username = username
        self.user_id = user_id
        self.private_mode = private_mode
        self.shuffle_mode = shuffle_mode
        self.registration = registration
        self.state: State = IdleState(self)

    @classmethod
    def from_telegram(cls, telegram_user: Any) -> "User":
        """Собрать пользователя из telebot.types.User при первом контакте."""
        return cls(telegram_user.username or "unknown", telegram_user.id)

    @property
    def debug_info(self) -> str:
        if self.username.strip():
            return f"'{self.username}'"
        return str(self.user_id)

    @property
    def is_registered(self) -> bool:
        return self.registration is Registration.REGISTERED

    def apply_transition(
        self,
        state_type: type[State],
        private_mode: PrivateMode | None = None,
        shuffle_mode: ShuffleMode | None = None,
        registration: Registration | None = None,
    ) -> "User":
        """Продвинуть объект после подтверждённой записи. Вызывают только реализации хранилища."""
        if private_mode is not None:
            self.private_mode = private_mode
        if shuffle_mode is not None:
            self.shuffle_mode = shuffle_mode
        if registration is not None:
            self.registration = registration
        self.state = state_type(self)
        return self

    def __repr__(self) -> str:
        return (
            f"User(username={self.username!r}, user_id={self.user_id}, "
            f"state={type(self.state).__name__}, private_mode={self.private_mode.value}, "
            f"shuffle_mode={self.shuffle_mode.value}, registration={self.registration.value})"
        )
