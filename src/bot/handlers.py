"""aiogram message handlers.

Every free-text message gets a "finding" status line followed by exactly one outcome reply. Users
only ever see short sentences; errors and stack traces go to the log.
"""

from __future__ import annotations

import logging
from time import monotonic

from aiogram.types import Message

from src.app import App
from src.backend.schema import Candidate, Episode, StreamResult
from src.request.orchestrator import Outcome, Status, SubtitleStatus, subtitle_language
from src.subtitles.progress import ProgressReporter

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "Welcome!\n"
    "Send a title and an episode number to get a stream, e.g. \"naruto episode 3\".\n"
    "Optional: add \"subtitle in <language>\"."
)
FINDING_TEXT = "Finding your episode..."
LATEST_PENDING_TEXT = "Latest episodes are being prepared..."
GENERIC_FAILURE_TEXT = "Something went wrong."

_STATUS_TEXT: dict[Status, str] = {
    Status.could_not_understand: "Could not understand request",
    Status.not_found: "Title not found",
    Status.no_episodes: "Episodes unavailable",
    Status.stream_unavailable: "Could not generate stream",
}


def progress_text(language: str, percent: int) -> str:
    return f"Generating {language} subtitle... {percent}%"


def result_caption(entity: Candidate, episode: Episode, stream: StreamResult) -> str:
    return f"{entity.title} - Episode {episode.number}\nWatch: {stream.player_url}"


async def _log_usage(app: App, message: Message, reply: str) -> None:
    if app.usage is None:
        return
    user = message.from_user
    await app.usage.record(
        user_id=str(user.id) if user else "0000",
        username=(user.username or user.full_name) if user else "Unknown",
        message=message.text or "",
        reply=reply,
        country=(user.language_code or "Unknown") if user else "Unknown",
    )


async def handle_help(message: Message, app: App) -> None:
    """`/start` and `/help`: usage text."""

    await message.answer(HELP_TEXT)
    await _log_usage(app, message, "Welcome message sent")


async def handle_latest(message: Message, app: App) -> None:
    """`/latest`: the cached digest of recent releases."""

    digest = app.latest.digest
    if digest is None:
        await message.answer(LATEST_PENDING_TEXT)
        await _log_usage(app, message, "Latest episodes preparing")
        return

    await message.answer(digest)
    await _log_usage(app, message, "Sent latest episodes")


async def _send_result(message: Message, entity: Candidate, caption: str) -> None:
    if entity.poster_url:
        await message.answer_photo(photo=entity.poster_url, caption=caption)
    else:
        await message.answer(caption)


async def _send_subtitle(message: Message, app: App, outcome: Outcome, language: str) -> Outcome:
    existing = await app.orchestrator.find_existing_subtitle(outcome)
    if existing is not None:
        await message.answer(f"Subtitle already available: {existing.subtitle_language}.")
        return existing

    status_message = await message.answer(progress_text(language, 0))

    async def render(percent: int) -> None:
        await status_message.edit_text(progress_text(language, percent))

    async with ProgressReporter(render) as reporter:
        outcome = await app.orchestrator.generate_subtitle(outcome, reporter.report)

    if outcome.subtitle_status == SubtitleStatus.generated and outcome.subtitle is not None:
        await message.answer(f"{language} subtitle ready: {outcome.subtitle.url}")
        await status_message.delete()
    else:
        await status_message.edit_text(f"Failed to generate {language} subtitle")
    return outcome


async def handle_message(message: Message, app: App) -> None:
    """Handle a free-text episode request."""

    started = monotonic()
    text = (message.text or message.caption or "").strip()
    if not text:
        return

    reply = GENERIC_FAILURE_TEXT
    # noinspection PyBroadException
    try:
        await message.answer(FINDING_TEXT)
        outcome = await app.orchestrator.resolve(text)

        entity, episode, stream = outcome.entity, outcome.episode, outcome.stream
        if entity is None or episode is None or stream is None:
            reply = _STATUS_TEXT.get(outcome.status, GENERIC_FAILURE_TEXT)
            await message.answer(reply)
        else:
            caption = result_caption(entity, episode, stream)
            await _send_result(message, entity, caption)
            reply = caption.replace("\n", " - ")
            if outcome.wants_subtitle and outcome.intent is not None:
                language = subtitle_language(outcome.intent)
                outcome = await _send_subtitle(message, app, outcome, language)

        logger.info(
            "handled status=%s subtitle=%s latency_ms=%d",
            outcome.status,
            outcome.subtitle_status,
            int((monotonic() - started) * 1000),
        )
    except Exception:
        # Handler boundary: any internal error becomes one generic sentence.
        logger.exception("handler failed")
        await message.answer(GENERIC_FAILURE_TEXT)

    await _log_usage(app, message, reply)
