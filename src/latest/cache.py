"""In-memory digest of the latest releases, refreshed on a timer."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Protocol

from src.backend.schema import LatestRelease, StreamResult
from src.errors import ServiceError

logger = logging.getLogger(__name__)


class LatestFeed(Protocol):
    async def latest(self) -> list[LatestRelease]: ...


class StreamGenerator(Protocol):
    async def generate(self, episode_id: str) -> StreamResult: ...


def format_digest(entries: list[tuple[LatestRelease, StreamResult]]) -> str:
    lines = ["Latest Episodes", ""]
    for release, stream in entries:
        heading = f"Episode {release.episode_number}" if release.episode_number else "Episode"
        if release.episode_title:
            heading = f"{heading}: {release.episode_title}"
        lines += [release.title, heading, f"Watch: {stream.player_url}", ""]
    return "\n".join(lines).rstrip()


class LatestEpisodesCache:
    """Owns the digest text; `digest` stays `None` until the first successful refresh."""

    def __init__(self, *, feed: LatestFeed, streams: StreamGenerator, limit: int = 5) -> None:
        self._feed = feed
        self._streams = streams
        self._limit = limit
        self._digest: str | None = None
        self._updated_at: datetime | None = None

    @property
    def digest(self) -> str | None:
        return self._digest

    @property
    def updated_at(self) -> datetime | None:
        return self._updated_at

    async def _stream_or_none(self, release: LatestRelease) -> StreamResult | None:
        try:
            return await self._streams.generate(release.episode_id)
        except ServiceError as exc:
            logger.info("latest stream skipped episode_id=%s reason=%s", release.episode_id, exc)
            return None

    async def refresh(self) -> bool:
        """Rebuild the digest. On failure the previous digest is kept."""

        try:
            releases = (await self._feed.latest())[: self._limit]
        except ServiceError as exc:
            logger.warning("latest cache refresh failed reason=%s", exc)
            return False

        streams = await asyncio.gather(*(self._stream_or_none(r) for r in releases))
        entries = [(r, s) for r, s in zip(releases, streams, strict=True) if s is not None]

        self._digest = format_digest(entries)
        self._updated_at = datetime.now(UTC)
        logger.info("latest cache updated entries=%d", len(entries))
        return True

    async def run(self, interval_s: float) -> None:
        """Refresh now and then every `interval_s` seconds until cancelled."""

        while True:
            await self.refresh()
            await asyncio.sleep(interval_s)
