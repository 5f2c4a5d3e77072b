from typing import Any

from stickfix.core.port import StateStore, StoreFailure
from stickfix.core.user import User
from stickfix.logging import logger


def resolve_user(store: StateStore, telegram_user: Any) -> User | None:
    """
    Найти пользователя по Telegram ID, при первом контакте — создать.

    Возвращает None, если хранилище недоступно: обработчик отвечает
    сервисной ошибкой, переход не выполняется.
    """
    result = store.get_user(telegram_user.id)
    if not isinstance(result, StoreFailure):
        return result.value

    if not result.is_not_found:
        logger.error("Failed to retrieve user %d: %s", telegram_user.id, result)
        return None

    created = store.upsert_user(User.from_telegram(telegram_user))
    if isinstance(created, StoreFailure):
        logger.error("Failed to register user %d on first contact: %s", telegram_user.id, created)
        return None
    return created.value
