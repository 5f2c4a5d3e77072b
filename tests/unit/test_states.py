"""Unit тесты машины состояний пользователя."""
import threading

import pytest

from stickfix.core.errors import StateResolutionError
from stickfix.core.modes import PrivateMode, Registration, ShuffleMode
from stickfix.core.results import TransitionFailure, TransitionSuccess
from stickfix.core.states import (
    STATE_TYPES,
    IdleState,
    PrivateModeState,
    RevokeState,
    ShuffleState,
    StartState,
    resolve_state,
)
from stickfix.core.user import User
from stickfix.storage.memory import UserRecord

EVENTS = [
    "on_start",
    "on_start_confirmation",
    "on_start_rejection",
    "on_revoke",
    "on_revoke_confirmation",
    "on_revoke_rejection",
    "on_private_mode",
    "on_private_mode_enabled",
    "on_private_mode_disabled",
    "on_shuffle",
    "on_shuffle_enabled",
    "on_shuffle_disabled",
]

LEGAL = {
    IdleState: {
        "on_start": StartState,
        "on_revoke": RevokeState,
        "on_private_mode": PrivateModeState,
        "on_shuffle": ShuffleState,
    },
    StartState: {
        "on_start_confirmation": IdleState,
        "on_start_rejection": IdleState,
    },
    RevokeState: {
        "on_revoke_confirmation": IdleState,
        "on_revoke_rejection": IdleState,
    },
    PrivateModeState: {
        "on_private_mode_enabled": IdleState,
        "on_private_mode_disabled": IdleState,
    },
    ShuffleState: {
        "on_shuffle_enabled": IdleState,
        "on_shuffle_disabled": IdleState,
    },
}

ILLEGAL_PAIRS = [
    (state_type, event)
    for state_type in STATE_TYPES.values()
    for event in EVENTS
    if event not in LEGAL[state_type]
]

LEGAL_PAIRS = [
    (state_type, event, target)
    for state_type, events in LEGAL.items()
    for event, target in events.items()
]


@pytest.mark.parametrize("state_type,event", ILLEGAL_PAIRS)
def test_illegal_event_returns_failure_with_same_state(memory_store, make_user, state_type, event):
    user = make_user(state_type)
    state = user.state

    result = getattr(state, event)(memory_store)

    assert isinstance(result, TransitionFailure)
    assert result.next_state is state
    assert user.state is state
    assert isinstance(memory_store.get_user(user.user_id).value.state, state_type)


@pytest.mark.parametrize("state_type,event,target", LEGAL_PAIRS)
def test_legal_event_moves_to_target_and_persists(memory_store, make_user, state_type, event, target):
    user = make_user(state_type)

    result = getattr(user.state, event)(memory_store)

    assert isinstance(result, TransitionSuccess)
    assert type(result.next_state) is target
    assert user.state is result.next_state
    assert result.next_state.user is user
    assert type(memory_store.get_user(user.user_id).value.state) is target


@pytest.mark.parametrize("state_type,event,target", LEGAL_PAIRS)
def test_persistence_failure_keeps_state(failing_store, make_user, state_type, event, target):
    user = make_user(state_type)
    state = user.state
    before = (user.private_mode, user.shuffle_mode, user.registration)

    result = getattr(state, event)(failing_store)

    assert isinstance(result, TransitionFailure)
    assert result.next_state is state
    assert user.state is state
    assert (user.private_mode, user.shuffle_mode, user.registration) == before
    assert failing_store.write_attempts == 1
    assert type(failing_store.get_user(user.user_id).value.state) is state_type


@pytest.mark.parametrize("state_type", list(STATE_TYPES.values()))
def test_on_idle_from_any_state(memory_store, make_user, state_type):
    user = make_user(state_type)

    result = user.state.on_idle(memory_store)

    assert isinstance(result, TransitionSuccess)
    assert isinstance(result.next_state, IdleState)
    assert isinstance(memory_store.get_user(user.user_id).value.state, IdleState)


def test_on_idle_twice_stays_idle(memory_store, make_user):
    user = make_user(ShuffleState)

    first = user.state.on_idle(memory_store)
    second = user.state.on_idle(memory_store)

    assert isinstance(first, TransitionSuccess)
    assert isinstance(second, TransitionSuccess)
    assert isinstance(first.next_state, IdleState)
    assert isinstance(second.next_state, IdleState)


def test_on_idle_persistence_failure(failing_store, make_user):
    user = make_user(RevokeState)
    state = user.state

    result = state.on_idle(failing_store)

    assert isinstance(result, TransitionFailure)
    assert user.state is state


class TestScenarios:
    """Сквозные сценарии через несколько переходов."""

    def test_start_then_confirm_registers_user(self, memory_store, make_user):
        user = make_user()

        started = user.state.on_start(memory_store)
        assert isinstance(started, TransitionSuccess)
        assert isinstance(started.next_state, StartState)

        confirmed = started.next_state.on_start_confirmation(memory_store)
        assert isinstance(confirmed, TransitionSuccess)
        assert isinstance(confirmed.next_state, IdleState)
        assert user.registration is Registration.REGISTERED
        assert memory_store.get_user(user.user_id).value.registration is Registration.REGISTERED

    def test_start_rejection_leaves_user_unregistered(self, memory_store, make_user):
        user = make_user()
        user.state.on_start(memory_store)

        result = user.state.on_start_rejection(memory_store)

        assert isinstance(result, TransitionSuccess)
        assert user.registration is Registration.UNREGISTERED

    def test_idle_rejects_start_confirmation(self, memory_store, make_user):
        user = make_user()
        idle = user.state

        result = idle.on_start_confirmation(memory_store)

        assert isinstance(result, TransitionFailure)
        assert result.next_state is idle
        assert user.registration is Registration.UNREGISTERED

    def test_private_mode_toggle_requires_flow(self, memory_store, make_user):
        user = make_user()

        result = user.state.on_private_mode_enabled(memory_store)

        assert isinstance(result, TransitionFailure)
        assert user.private_mode is PrivateMode.DISABLED
        assert memory_store.get_user(user.user_id).value.private_mode is PrivateMode.DISABLED

    def test_private_mode_flow_enables_mode(self, memory_store, make_user):
        user = make_user()
        user.state.on_private_mode(memory_store)

        result = user.state.on_private_mode_enabled(memory_store)

        assert isinstance(result, TransitionSuccess)
        assert isinstance(user.state, IdleState)
        assert user.private_mode is PrivateMode.ENABLED
        assert memory_store.get_user(user.user_id).value.private_mode is PrivateMode.ENABLED

    def test_shuffle_flow_is_independent_of_private_mode(self, memory_store, make_user):
        user = make_user(private_mode=PrivateMode.ENABLED)
        user.state.on_shuffle(memory_store)
        user.state.on_shuffle_enabled(memory_store)
        user.state.on_shuffle(memory_store)

        result = user.state.on_shuffle_disabled(memory_store)

        assert isinstance(result, TransitionSuccess)
        stored = memory_store.get_user(user.user_id).value
        assert stored.shuffle_mode is ShuffleMode.DISABLED
        assert stored.private_mode is PrivateMode.ENABLED

    def test_revoke_confirmation_marks_revoked(self, memory_store, make_user):
        user = make_user(registration=Registration.REGISTERED)
        user.state.on_revoke(memory_store)

        result = user.state.on_revoke_confirmation(memory_store)

        assert isinstance(result, TransitionSuccess)
        assert isinstance(result.next_state, IdleState)
        assert memory_store.get_user(user.user_id).value.registration is Registration.REVOKED

    def test_revoke_rejection_returns_to_idle(self, memory_store, make_user):
        user = make_user(registration=Registration.REGISTERED)
        user.state.on_revoke(memory_store)

        result = user.state.on_revoke_rejection(memory_store)

        assert isinstance(result, TransitionSuccess)
        assert isinstance(result.next_state, IdleState)
        assert user.registration is Registration.REGISTERED


class TestConcurrency:
    def test_stale_copy_cannot_transition(self, memory_store, make_user):
        make_user()
        first = memory_store.get_user(42).value
        second = memory_store.get_user(42).value

        assert isinstance(first.state.on_revoke(memory_store), TransitionSuccess)
        stale = second.state
        result = stale.on_revoke(memory_store)

        assert isinstance(result, TransitionFailure)
        assert isinstance(result.next_state, RevokeState)
        assert result.next_state.user is second
        assert isinstance(memory_store.get_user(42).value.state, RevokeState)

    def test_concurrent_revokes_yield_one_transition(self, memory_store, make_user):
        make_user()
        copies = [memory_store.get_user(42).value for _ in range(8)]
        barrier = threading.Barrier(len(copies))
        results = []
        results_lock = threading.Lock()

        def revoke(user):
            barrier.wait()
            result = user.state.on_revoke(memory_store)
            with results_lock:
                results.append(result)

        threads = [threading.Thread(target=revoke, args=(user,)) for user in copies]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sum(isinstance(r, TransitionSuccess) for r in results) == 1
        assert sum(isinstance(r, TransitionFailure) for r in results) == 7
        losers = [r for r in results if isinstance(r, TransitionFailure)]
        assert all(isinstance(r.next_state, RevokeState) for r in losers)
        assert isinstance(memory_store.get_user(42).value.state, RevokeState)

    def test_shared_state_instance_transitions_once(self, memory_store, make_user):
        user = make_user()
        idle = user.state
        barrier = threading.Barrier(4)
        results = []

        def revoke():
            barrier.wait()
            results.append(idle.on_revoke(memory_store))

        threads = [threading.Thread(target=revoke) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sum(isinstance(r, TransitionSuccess) for r in results) == 1
        losers = [r for r in results if isinstance(r, TransitionFailure)]
        assert len(losers) == 3
        assert all(r.next_state is user.state for r in losers)
        assert isinstance(user.state, RevokeState)


class TestResolveState:
    @pytest.mark.parametrize("name,state_type", list(STATE_TYPES.items()))
    def test_known_names(self, name, state_type):
        user = User("bob", 7)

        state = resolve_state(name.upper(), user)

        assert type(state) is state_type
        assert state.user is user

    def test_unknown_name_raises(self):
        with pytest.raises(StateResolutionError) as exc_info:
            resolve_state("registered", User("bob", 7))

        assert "registered" in str(exc_info.value)
        assert "idle" in str(exc_info.value)

    def test_corrupted_record_fails_the_read(self, memory_store, make_user):
        make_user()
        memory_store._write(
            42,
            UserRecord(
                username="alice",
                state="StickerState",
                private_mode=PrivateMode.DISABLED,
                shuffle_mode=ShuffleMode.DISABLED,
                registration=Registration.UNREGISTERED,
            ),
        )

        with pytest.raises(StateResolutionError):
            memory_store.get_user(42)


def test_new_user_starts_idle():
    user = User("carol", 1)

    assert isinstance(user.state, IdleState)
    assert user.state.user is user
    assert user.private_mode is PrivateMode.DISABLED
    assert user.shuffle_mode is ShuffleMode.DISABLED
