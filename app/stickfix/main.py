import time

import sqlalchemy
import telebot
from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext

from stickfix.config import settings
from stickfix.logging import logger
from stickfix.bot.handlers import register_handlers
from stickfix.bot.webhook_server import create_app
from stickfix.core.port import StateStore
from stickfix.storage.locks import LocalUserLocks, RedisUserLocks, UserLocks, get_redis
from stickfix.storage.memory import MemoryStateStore


def create_locks() -> UserLocks:
    if settings.lock_backend == "redis":
        logger.info("Using Redis user locks: %s", settings.redis_dsn)
        return RedisUserLocks(get_redis(settings.redis_dsn), settings.lock_timeout_seconds)
    return LocalUserLocks(settings.lock_timeout_seconds)


def create_store() -> StateStore:
    """Выбрать хранилище состояний по настройкам."""
    locks = create_locks()
    if settings.state_store == "memory":
        logger.warning("Using in-memory state store, user states are lost on restart")
        return MemoryStateStore(locks)

    # Импорт здесь: создание движка требует драйвера Postgres
    from stickfix.storage.repo import SqlStateStore

    return SqlStateStore(locks)


def create_bot(store: StateStore) -> telebot.TeleBot:
    """Создать и настроить экземпляр бота."""
    bot = telebot.TeleBot(settings.bot_token, threaded=False)
    register_handlers(bot, store)
    return bot


def setup_webhook(bot: telebot.TeleBot) -> None:
    """Установить webhook в Telegram."""
    logger.info("Removing old webhook...")
    bot.delete_webhook(drop_pending_updates=True)
    time.sleep(0.5)

    logger.info("Setting webhook: %s", settings.webhook_url)
    bot.set_webhook(
        url=settings.webhook_url,
        secret_token=settings.webhook_secret_token or None,
    )
    logger.info("Webhook set successfully")


def run_migrations() -> None:
    """Применить все pending-миграции Alembic при старте."""
    if settings.state_store != "sql":
        return

    from stickfix.storage.db import engine

    logger.info("Running database migrations...")
    alembic_cfg = Config("alembic.ini")

    # Таблица есть, alembic_version нет: БД создана через create_all, штампуем начальную ревизию
    with engine.connect() as conn:
        context = MigrationContext.configure(conn)
        current_rev = context.get_current_revision()
        has_tables = sqlalchemy.inspect(conn).has_table("users")

    if current_rev is None and has_tables:
        logger.info("Existing database without alembic_version detected, stamping 001_initial...")
        command.stamp(alembic_cfg, "001_initial")

    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations applied")


def main() -> None:
    logger.info("Starting stickfix bot...")

    run_migrations()

    bot = create_bot(create_store())

    if not settings.use_webhook:
        logger.info("No webhook domain configured, starting long polling")
        bot.delete_webhook(drop_pending_updates=True)
        bot.infinity_polling()
        return

    setup_webhook(bot)

    logger.info("Starting webhook server on %s:%d", settings.app_host, settings.app_port)

    # В продакшене приложение поднимает gunicorn через wsgi.py
    create_app(bot).run(host=settings.app_host, port=settings.app_port)


if __name__ == "__main__":
    main()
