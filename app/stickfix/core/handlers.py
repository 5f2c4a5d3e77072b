"""
Обработчики по возможностям.

Каждый обработчик знает только свою часть словаря событий и передаёт
вызов текущему состоянию пользователя. Своей логики и своего состояния
у них нет.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stickfix.core.port import StateStore
    from stickfix.core.results import TransitionResult
    from stickfix.core.user import User


class _Handler:
    def __init__(self, user: User, store: StateStore):
        self.user = user
        self.store = store


class StartHandler(_Handler):
    def on_start(self) -> TransitionResult:
        return self.user.state.on_start(self.store)

    def on_start_confirmation(self) -> TransitionResult:
        return self.user.state.on_start_confirmation(self.store)

    def on_start_rejection(self) -> TransitionResult:
        return self.user.state.on_start_rejection(self.store)


class IdleHandler(_Handler):
    def on_idle(self) -> TransitionResult:
        return self.user.state.on_idle(self.store)


class RevokeHandler(_Handler):
    def on_revoke(self) -> TransitionResult:
        return self.user.state.on_revoke(self.store)

    def on_revoke_confirmation(self) -> TransitionResult:
        return self.user.state.on_revoke_confirmation(self.store)

    def on_revoke_rejection(self) -> TransitionResult:
        return self.user.state.on_revoke_rejection(self.store)


class PrivateModeHandler(_Handler):
    def on_private_mode(self) -> TransitionResult:
        return self.user.state.on_private_mode(self.store)

    def on_private_mode_enabled(self) -> TransitionResult:
        return self.user.state.on_private_mode_enabled(self.store)

    def on_private_mode_disabled(self) -> TransitionResult:
        return self.user.state.on_private_mode_disabled(self.store)


class ShuffleHandler(_Handler):
    def on_shuffle(self) -> TransitionResult:
        return self.user.state.on_shuffle(self.store)

    def on_shuffle_enabled(self) -> TransitionResult:
        return self.user.state.on_shuffle_enabled(self.store)

    def on_shuffle_disabled(self) -> TransitionResult:
        return self.user.state.on_shuffle_disabled(self.store)


class UserSession:
    """Полный набор возможностей обычного пользователя бота."""

    def __init__(self, user: User, store: StateStore):
        self.user = user
        self.start = StartHandler(user, store)
        self.idle = IdleHandler(user, store)
        self.revoke = RevokeHandler(user, store)
        self.private_mode = PrivateModeHandler(user, store)
        self.shuffle = ShuffleHandler(user, store)
