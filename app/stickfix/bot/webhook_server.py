import telebot
from flask import Flask, request, abort

from stickfix.config import settings
from stickfix.logging import logger


def create_app(bot: telebot.TeleBot) -> Flask:
    """Flask-приложение, принимающее webhook-апдейты для данного бота."""
    app = Flask(__name__)

    @app.route(f"/{settings.webhook_path}", methods=["POST"])
    def webhook() -> tuple[str, int]:
        if settings.webhook_secret_token:
            token = request.headers.get("X-Telegram-Bot-Api-Secret-Token", "")
            if token != settings.webhook_secret_token:
                logger.warning("Invalid secret token in webhook request")
                abort(403)

        if request.headers.get("content-type") != "application/json":
            logger.warning("Invalid content-type: %s", request.headers.get("content-type"))
            abort(400)

        update = telebot.types.Update.de_json(request.get_data(as_text=True))
        bot.process_new_updates([update])
        return "OK", 200

    @app.route("/health", methods=["GET"])
    def health() -> tuple[str, int]:
        return "OK", 200

    return app
