"""WSGI entrypoint для gunicorn."""
from stickfix.main import create_bot, create_store, setup_webhook, run_migrations
from stickfix.bot.webhook_server import create_app
from stickfix.logging import logger

logger.info("WSGI: Initializing application...")

run_migrations()

bot = create_bot(create_store())
setup_webhook(bot)

logger.info("WSGI: Application ready")

# gunicorn ищет переменную `application` или `app`
application = create_app(bot)
