"""Тексты ответов бота."""

HELP = (
    "Stickfix commands:\n"
    "/start — register to use the bot\n"
    "/revoke — revoke your registration\n"
    "/private — enable or disable private mode\n"
    "/shuffle — enable or disable sticker shuffling\n"
    "/cancel — abort the current action\n"
    "/help — show this message"
)

START_PROMPT = "Welcome to Stickfix! Do you want to register?"
START_CONFIRMED = "You were successfully registered!"
START_REJECTED = "You have chosen not to register. Remember you can always register later!"
ALREADY_REGISTERED = "You are already registered!"

REVOKE_PROMPT = "Are you sure you want to revoke your registration?"
REVOKE_CONFIRMED = "Your registration has been revoked."
REVOKE_REJECTED = "Your registration has not been revoked."

PRIVATE_PROMPT = "Do you want to enable private mode? Stickers you add will only be visible to you."
PRIVATE_ENABLED = "Private mode enabled."
PRIVATE_DISABLED = "Private mode disabled."

SHUFFLE_PROMPT = "Do you want to shuffle your stickers with each request?"
SHUFFLE_ENABLED = "Shuffle mode enabled. Your stickers will now be shuffled with each request."
SHUFFLE_DISABLED = "Shuffle mode disabled. Your stickers will no longer be shuffled with each request."

CANCELLED = "Current action cancelled."

NOT_REGISTERED = "You are not registered. Use /start first."
NOT_AVAILABLE = "This action is not available right now."
SERVICE_ERROR = "Something went wrong on our side, please try again later."
UNKNOWN = "Unknown command. Use /help to see what I can do."
