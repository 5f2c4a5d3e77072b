from telebot.types import InlineKeyboardButton, InlineKeyboardMarkup

# callback_data кнопок — используются и в клавиатурах, и для маршрутизации нажатий
START_YES = "start_yes"
START_NO = "start_no"
REVOKE_YES = "revoke_yes"
REVOKE_NO = "revoke_no"
PRIVATE_ON = "private_on"
PRIVATE_OFF = "private_off"
SHUFFLE_ON = "shuffle_on"
SHUFFLE_OFF = "shuffle_off"


def _two_buttons(left: tuple[str, str], right: tuple[str, str]) -> InlineKeyboardMarkup:
    markup = InlineKeyboardMarkup(row_width=2)
    markup.add(
        InlineKeyboardButton(left[0], callback_data=left[1]),
        InlineKeyboardButton(right[0], callback_data=right[1]),
    )
    return markup


def start_keyboard() -> InlineKeyboardMarkup:
    return _two_buttons(("Yes", START_YES), ("No", START_NO))


def revoke_keyboard() -> InlineKeyboardMarkup:
    return _two_buttons(("Yes", REVOKE_YES), ("No", REVOKE_NO))


def private_mode_keyboard() -> InlineKeyboardMarkup:
    return _two_buttons(("Enable", PRIVATE_ON), ("Disable", PRIVATE_OFF))


def shuffle_keyboard() -> InlineKeyboardMarkup:
    return _two_buttons(("Enable", SHUFFLE_ON), ("Disable", SHUFFLE_OFF))
