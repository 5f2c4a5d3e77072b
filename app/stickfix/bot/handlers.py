from typing import Any, Callable

import telebot
from telebot.apihelper import ApiTelegramException
from telebot.types import InlineKeyboardMarkup

from stickfix.logging import logger
from stickfix.bot import keyboards
from stickfix.bot.messages import (
    ALREADY_REGISTERED,
    CANCELLED,
    HELP,
    NOT_AVAILABLE,
    NOT_REGISTERED,
    PRIVATE_DISABLED,
    PRIVATE_ENABLED,
    PRIVATE_PROMPT,
    REVOKE_CONFIRMED,
    REVOKE_PROMPT,
    REVOKE_REJECTED,
    SERVICE_ERROR,
    SHUFFLE_DISABLED,
    SHUFFLE_ENABLED,
    SHUFFLE_PROMPT,
    START_CONFIRMED,
    START_PROMPT,
    START_REJECTED,
    UNKNOWN,
)
from stickfix.core.events import Event, dispatch
from stickfix.core.handlers import UserSession
from stickfix.core.port import StateStore
from stickfix.core.results import TransitionResult, TransitionSuccess
from stickfix.services.users import resolve_user

COMMAND_EVENTS: dict[str, Event] = {
    "/start": Event.START,
    "/revoke": Event.REVOKE,
    "/private": Event.PRIVATE_MODE,
    "/shuffle": Event.SHUFFLE,
    "/cancel": Event.IDLE,
}

CALLBACK_EVENTS: dict[str, Event] = {
    keyboards.START_YES: Event.START_CONFIRMATION,
    keyboards.START_NO: Event.START_REJECTION,
    keyboards.REVOKE_YES: Event.REVOKE_CONFIRMATION,
    keyboards.REVOKE_NO: Event.REVOKE_REJECTION,
    keyboards.PRIVATE_ON: Event.PRIVATE_MODE_ENABLED,
    keyboards.PRIVATE_OFF: Event.PRIVATE_MODE_DISABLED,
    keyboards.SHUFFLE_ON: Event.SHUFFLE_ENABLED,
    keyboards.SHUFFLE_OFF: Event.SHUFFLE_DISABLED,
}

# Команды, доступные только зарегистрированным пользователям
REQUIRES_REGISTRATION = frozenset({Event.REVOKE, Event.PRIVATE_MODE, Event.SHUFFLE})

_SUCCESS_REPLIES: dict[Event, tuple[str, Callable[[], InlineKeyboardMarkup] | None]] = {
    Event.START: (START_PROMPT, keyboards.start_keyboard),
    Event.START_CONFIRMATION: (START_CONFIRMED, None),
    Event.START_REJECTION: (START_REJECTED, None),
    Event.REVOKE: (REVOKE_PROMPT, keyboards.revoke_keyboard),
    Event.REVOKE_CONFIRMATION: (REVOKE_CONFIRMED, None),
    Event.REVOKE_REJECTION: (REVOKE_REJECTED, None),
    Event.PRIVATE_MODE: (PRIVATE_PROMPT, keyboards.private_mode_keyboard),
    Event.PRIVATE_MODE_ENABLED: (PRIVATE_ENABLED, None),
    Event.PRIVATE_MODE_DISABLED: (PRIVATE_DISABLED, None),
    Event.SHUFFLE: (SHUFFLE_PROMPT, keyboards.shuffle_keyboard),
    Event.SHUFFLE_ENABLED: (SHUFFLE_ENABLED, None),
    Event.SHUFFLE_DISABLED: (SHUFFLE_DISABLED, None),
    Event.IDLE: (CANCELLED, None),
}


def extract_command(text: str) -> str:
    tokens = text.strip().split(maxsplit=1)
    if not tokens:
        return ""
    command_token = tokens[0].lower()
    if not command_token.startswith("/"):
        return ""
    if "@" in command_token:
        command_token = command_token.split("@", 1)[0]
    return command_token


def _send(bot: telebot.TeleBot, chat_id: int, text: str, reply_markup: Any = None) -> None:
    try:
        bot.send_message(chat_id, text, reply_markup=reply_markup)
    except ApiTelegramException as e:
        logger.error("Failed to send message to chat %d: %s", chat_id, e)


def send_transition_reply(bot: telebot.TeleBot, chat_id: int, event: Event, result: TransitionResult) -> None:
    """Выбрать ответ по тегу результата. Любой TransitionFailure — общий отказ."""
    if isinstance(result, TransitionSuccess):
        text, keyboard = _SUCCESS_REPLIES[event]
        _send(bot, chat_id, text, keyboard() if keyboard else None)
    else:
        _send(bot, chat_id, NOT_AVAILABLE)


def process_event(
    bot: telebot.TeleBot,
    store: StateStore,
    telegram_user: Any,
    chat_id: int,
    event: Event,
) -> TransitionResult | None:
    """
    Провести событие через машину состояний и ответить пользователю.

    None — переход не запускался (хранилище недоступно или не пройдена
    проверка регистрации); пользователь уже получил ответ.
    """
    user = resolve_user(store, telegram_user)
    if user is None:
        _send(bot, chat_id, SERVICE_ERROR)
        return None

    if event is Event.START and user.is_registered:
        _send(bot, chat_id, ALREADY_REGISTERED)
        return None

    if event in REQUIRES_REGISTRATION and not user.is_registered:
        logger.info("User %s is not registered, cannot %s", user.debug_info, event.value)
        _send(bot, chat_id, NOT_REGISTERED)
        return None

    result = dispatch(UserSession(user, store), event)
    send_transition_reply(bot, chat_id, event, result)
    return result


def process_command(bot: telebot.TeleBot, store: StateStore, message: telebot.types.Message) -> TransitionResult | None:
    command = extract_command(message.text or "")
    event = COMMAND_EVENTS.get(command)
    if event is None:
        return None

    user = message.from_user
    logger.info("%s from user %d (%s)", command, user.id, user.username)
    return process_event(bot, store, user, message.chat.id, event)


def process_callback(bot: telebot.TeleBot, store: StateStore, call: telebot.types.CallbackQuery) -> TransitionResult | None:
    event = CALLBACK_EVENTS.get(call.data or "")

    # Telegram показывает «часики» на кнопке, пока не получит ответ
    try:
        bot.answer_callback_query(call.id)
    except ApiTelegramException as e:
        logger.warning("Failed to answer callback %s: %s", call.id, e)

    if event is None:
        logger.warning("Unknown callback data %r from user %d", call.data, call.from_user.id)
        return None

    logger.info("Callback %s from user %d", call.data, call.from_user.id)
    chat_id = call.message.chat.id
    result = process_event(bot, store, call.from_user, chat_id, event)

    if isinstance(result, TransitionSuccess):
        # Убираем кнопки, чтобы их нельзя было нажать повторно
        try:
            bot.edit_message_reply_markup(chat_id, call.message.message_id, reply_markup=None)
        except ApiTelegramException as e:
            logger.warning("Failed to remove keyboard in chat %d: %s", chat_id, e)
    return result


def register_handlers(bot: telebot.TeleBot, store: StateStore) -> None:
    """Регистрирует все хендлеры бота."""

    @bot.message_handler(commands=["help"])
    def handle_help(message: telebot.types.Message) -> None:
        _send(bot, message.chat.id, HELP)

    @bot.message_handler(commands=[command.lstrip("/") for command in COMMAND_EVENTS])
    def handle_command(message: telebot.types.Message) -> None:
        process_command(bot, store, message)

    @bot.callback_query_handler(func=lambda call: call.data in CALLBACK_EVENTS)
    def handle_callback(call: telebot.types.CallbackQuery) -> None:
        process_callback(bot, store, call)

    @bot.message_handler(func=lambda m: m.chat.type == "private")
    def handle_unknown(message: telebot.types.Message) -> None:
        """Обработка прочих сообщений в ЛС."""
        _send(bot, message.chat.id, UNKNOWN)
