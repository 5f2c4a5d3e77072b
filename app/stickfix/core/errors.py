"""
Ошибки ядра.

PersistenceError и наследники — причины StoreFailure: их кладут в результат,
а не выбрасывают. StateResolutionError — единственная ошибка, которая
прерывает обработку запроса.
"""


class PersistenceError(Exception):
    """Хранилище не смогло выполнить операцию."""


class UserNotFoundError(PersistenceError):
    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} is not stored")
        self.user_id = user_id


class StaleStateError(PersistenceError):
    """Состояние в хранилище уже не то, из которого начинался переход."""

    def __init__(self, user_id: int, expected: str, actual: str):
        super().__init__(f"User {user_id} is in state '{actual}', expected '{expected}'")
        self.user_id = user_id
        self.expected = expected
        self.actual = actual


class StoreTimeoutError(PersistenceError):
    """Не дождались блокировки пользователя или ответа хранилища."""


class StateResolutionError(Exception):
    def __init__(self, name: str, known: list[str]):
        super().__init__(f"State resolution failed for state: {name}. Available states: {known}")
        self.name = name
