from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from stickfix.core.states import State


@dataclass(frozen=True, eq=False)
class TransitionSuccess:
    """Событие принято, next_state — новое текущее состояние."""
    next_state: State


@dataclass(frozen=True, eq=False)
class TransitionFailure:
    """Событие отклонено или не записалось; next_state — тот же объект, что пытался перейти."""
    next_state: State


TransitionResult = Union[TransitionSuccess, TransitionFailure]
