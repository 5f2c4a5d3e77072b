import math

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from stickfix.config import settings


def postgres_connect_args(dsn: str, timeout_seconds: float) -> dict:
    """
    Таймауты на стороне Postgres: зависший запрос или ожидание строки
    обрываются ошибкой, которую хранилище превращает в StoreFailure.
    Для остальных СУБД ничего не передаём.
    """
    if not dsn.startswith("postgresql"):
        return {}
    timeout_ms = int(timeout_seconds * 1000)
    return {
        "connect_timeout": math.ceil(timeout_seconds),
        "options": f"-c statement_timeout={timeout_ms} -c lock_timeout={timeout_ms}",
    }


def create_session_factory(bind: Engine) -> sessionmaker[Session]:
    """Фабрика сессий для хранилища. Строки читаются после commit, поэтому без expire."""
    return sessionmaker(bind=bind, autocommit=False, autoflush=False, expire_on_commit=False)


engine = create_engine(
    settings.postgres_dsn,
    echo=False,
    pool_pre_ping=True,
    connect_args=postgres_connect_args(settings.postgres_dsn, settings.lock_timeout_seconds),
)
SessionLocal = create_session_factory(engine)


def get_session() -> Session:
    """Создать новую сессию БД."""
    return SessionLocal()
