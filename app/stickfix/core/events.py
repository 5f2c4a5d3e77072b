from enum import Enum
from typing import Callable

from stickfix.core.handlers import UserSession
from stickfix.core.results import TransitionResult


class Event(str, Enum):
    START = "start"
    START_CONFIRMATION = "start_confirmation"
    START_REJECTION = "start_rejection"
    REVOKE = "revoke"
    REVOKE_CONFIRMATION = "revoke_confirmation"
    REVOKE_REJECTION = "revoke_rejection"
    PRIVATE_MODE = "private_mode"
    PRIVATE_MODE_ENABLED = "private_mode_enabled"
    PRIVATE_MODE_DISABLED = "private_mode_disabled"
    SHUFFLE = "shuffle"
    SHUFFLE_ENABLED = "shuffle_enabled"
    SHUFFLE_DISABLED = "shuffle_disabled"
    IDLE = "idle"


_ROUTES: dict[Event, Callable[[UserSession], TransitionResult]] = {
    Event.START: lambda s: s.start.on_start(),
    Event.START_CONFIRMATION: lambda s: s.start.on_start_confirmation(),
    Event.START_REJECTION: lambda s: s.start.on_start_rejection(),
    Event.REVOKE: lambda s: s.revoke.on_revoke(),
    Event.REVOKE_CONFIRMATION: lambda s: s.revoke.on_revoke_confirmation(),
    Event.REVOKE_REJECTION: lambda s: s.revoke.on_revoke_rejection(),
    Event.PRIVATE_MODE: lambda s: s.private_mode.on_private_mode(),
    Event.PRIVATE_MODE_ENABLED: lambda s: s.private_mode.on_private_mode_enabled(),
    Event.PRIVATE_MODE_DISABLED: lambda s: s.private_mode.on_private_mode_disabled(),
    Event.SHUFFLE: lambda s: s.shuffle.on_shuffle(),
    Event.SHUFFLE_ENABLED: lambda s: s.shuffle.on_shuffle_enabled(),
    Event.SHUFFLE_DISABLED: lambda s: s.shuffle.on_shuffle_disabled(),
    Event.IDLE: lambda s: s.idle.on_idle(),
}


def dispatch(session: UserSession, event: Event) -> TransitionResult:
    """Передать событие обработчику нужной возможности."""
    return _ROUTES[event](session)
