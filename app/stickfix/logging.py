import logging
import sys

from stickfix.config import settings

ROOT_LOGGER = "stickfix"


def setup_logging() -> logging.Logger:
    """
    Единый логгер бота: stdout, уровень из настроек.

    Отказы переходов пишутся в дочерний логгер stickfix.states на уровне DEBUG.
    STATE_LOG_LEVEL позволяет включить их, не поднимая уровень всего бота.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(settings.log_level.upper())

    if not logger.handlers:
        # Уровень решают логгеры, обработчик пропускает всё
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    states_logger = get_logger("states")
    if settings.state_log_level:
        states_logger.setLevel(settings.state_log_level.upper())
    else:
        states_logger.setLevel(logging.NOTSET)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Дочерний логгер части бота, пишет через обработчик stickfix."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


logger = setup_logging()
