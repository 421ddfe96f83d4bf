"""Bot process entrypoint."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties

from src.app import create_app
from src.bot.router import router
from src.config.logging import configure_logging
from src.config.settings import load_settings

logger = logging.getLogger(__name__)


async def main() -> None:
    """Run the Telegram bot polling loop and the latest-episodes refresher."""

    settings = load_settings()
    configure_logging()

    app = create_app(settings)
    refresher = asyncio.create_task(app.latest.run(settings.latest_refresh_s))

    bot = Bot(token=settings.telegram_bot_token, default=DefaultBotProperties(parse_mode=None))
    dp = Dispatcher()
    dp.include_router(router)

    try:
        await dp.start_polling(bot, app=app)
    finally:
        logger.info("shutting down")
        refresher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await refresher
        await app.aclose()


if __name__ == "__main__":
    asyncio.run(main())
