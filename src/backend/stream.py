"""Stream backend client: stream generation and subtitle storage/translation."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from src.backend.http import decode_json, request
from src.backend.schema import StreamResult, SubtitleTrack
from src.errors import GenerationError, ParseError
from src.subtitles.chunking import SubtitleChunk

logger = logging.getLogger(__name__)


class StreamClient:
    """Client for the stream-generation host."""

    def __init__(
            self,
            http: httpx.AsyncClient,
            *,
            api_base: str,
            generate_timeout_s: float = 40.0,
    ) -> None:
        self._http = http
        self._base = api_base.rstrip("/")
        self._generate_timeout_s = generate_timeout_s

    def player_url(self, episode_id: str) -> str:
        return str(httpx.URL(f"{self._base}/player/", params={"episode_id": episode_id}))

    def subtitle_url(self, episode_id: str, filename: str) -> str:
        return f"{self._base}/episodes/{episode_id}/{filename}"

    async def generate(self, episode_id: str) -> StreamResult:
        """Ask the backend to prepare a stream for an episode.

        Raises:
            TransportError: On network failure or timeout.
            GenerationError: If the backend reports `success: false`.
            ParseError: If a successful payload carries malformed links.
        """

        resp = await request(
            self._http, "GET", f"{self._base}/generate_episode.php",
            params={"episode_id": episode_id},
            timeout=self._generate_timeout_s,
            operation="stream generation",
        )
        data = decode_json(resp, operation="stream generation")
        if not isinstance(data, dict) or not data.get("success"):
            raise GenerationError(f"stream generation failed episode_id={episode_id}")

        try:
            return StreamResult(
                player_url=self.player_url(episode_id),
                master_url=data.get("master") or None,
                subtitle_url=data.get("subtitle") or None,
            )
        except ValidationError as exc:
            raise ParseError(
                f"stream generation: malformed payload episode_id={episode_id}"
            ) from exc

    async def available_subtitles(self, episode_id: str) -> list[SubtitleTrack]:
        """List subtitle tracks that already exist for an episode."""

        resp = await request(
            self._http, "GET", f"{self._base}/getsubs.php", params={"episode_id": episode_id},
            operation="subtitle list",
        )
        data: Any = decode_json(resp, operation="subtitle list") or []
        if not isinstance(data, list):
            raise ParseError("subtitle list: expected a JSON array")

        tracks = []
        for item in data:
            try:
                tracks.append(SubtitleTrack.model_validate(item))
            except ValidationError:
                logger.warning("subtitle list skipped malformed track episode_id=%s", episode_id)
        return tracks

    async def translate_chunk(self, episode_id: str, language: str, chunk: SubtitleChunk) -> str:
        """Translate one line range of the episode transcript.

        The service addresses lines with an inclusive `end_line`.
        """

        resp = await request(
            self._http, "POST", f"{self._base}/translate_chunk.php",
            json={
                "lang": language,
                "episode_id": episode_id,
                "start_line": chunk.start_line,
                "end_line": chunk.end_line - 1,
            },
            operation="chunk translation",
        )
        return resp.text.strip()

    async def save_subtitle(self, episode_id: str, filename: str, content: str) -> None:
        """Persist a subtitle file next to the episode's stream."""

        await request(
            self._http, "POST", f"{self._base}/save_subtitle.php",
            json={"episode_id": episode_id, "filename": filename, "content": content},
            operation="subtitle save",
        )
