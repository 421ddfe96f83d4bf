"""Bot router composition."""

from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command

from src.bot.handlers import handle_help, handle_latest, handle_message

router = Router(name="root")
router.message.register(handle_help, Command("start", "help"))
router.message.register(handle_latest, Command("latest"))
router.message.register(handle_message, F.text)
