"""Request orchestration: free text -> intent -> entity -> episode -> stream (+ subtitle).

Steps run strictly in sequence. Each early exit has its own status so the chat layer can render a
specific message and log the outcome.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Protocol

import httpx

from src.backend.schema import Candidate, Episode, StreamResult, SubtitleTrack
from src.errors import NotFoundError, ServiceError
from src.intent.parser import parse_intent_with_source
from src.intent.schema import Intent
from src.llm.client import LLMConfig
from src.resolve.candidates import CandidateResolver
from src.resolve.episodes import select_episode
from src.subtitles.pipeline import ProgressFn, SubtitleArtifact, SubtitlePipeline

logger = logging.getLogger(__name__)

DEFAULT_SUBTITLE_LANGUAGE = "English"


class Status(StrEnum):
    """Terminal status of one handled request."""

    understood = "understood"
    could_not_understand = "could_not_understand"
    not_found = "not_found"
    no_episodes = "no_episodes"
    stream_unavailable = "stream_unavailable"


class SubtitleStatus(StrEnum):
    not_requested = "not_requested"
    existing = "existing"
    generated = "generated"
    failed = "failed"


@dataclass(frozen=True)
class Outcome:
    """Result of one request; fields are filled up to the step that was reached."""

    status: Status
    intent: Intent | None = None
    entity: Candidate | None = None
    episode: Episode | None = None
    stream: StreamResult | None = None
    subtitle_status: SubtitleStatus = SubtitleStatus.not_requested
    subtitle_language: str | None = None
    subtitle: SubtitleArtifact | None = None

    @property
    def wants_subtitle(self) -> bool:
        return (
            self.status == Status.understood
            and self.intent is not None
            and self.intent.subtitle_requested
        )


class Catalog(Protocol):
    async def search(self, title: str) -> list[Candidate]: ...

    async def episodes(self, entity_id: str) -> list[Episode]: ...


class Streams(Protocol):
    async def generate(self, episode_id: str) -> StreamResult: ...

    async def available_subtitles(self, episode_id: str) -> list[SubtitleTrack]: ...


def subtitle_language(intent: Intent) -> str:
    return intent.subtitle_language or DEFAULT_SUBTITLE_LANGUAGE


def find_track(tracks: list[SubtitleTrack], language: str) -> SubtitleTrack | None:
    wanted = language.strip().lower()
    for track in tracks:
        if track.lang.strip().lower() == wanted:
            return track
    return None


class RequestOrchestrator:
    """Sequences intent extraction, resolution, stream generation and subtitles."""

    def __init__(
            self,
            *,
            catalog: Catalog,
            streams: Streams,
            resolver: CandidateResolver,
            subtitles: SubtitlePipeline,
            http: httpx.AsyncClient | None = None,
            llm_config: LLMConfig | None = None,
    ) -> None:
        self._catalog = catalog
        self._streams = streams
        self._resolver = resolver
        self._subtitles = subtitles
        self._http = http
        self._llm_config = llm_config

    async def find_candidates(self, title: str) -> list[Candidate]:
        """Search the catalog.

        Raises:
            NotFoundError: If the search fails or yields no candidates.
        """

        try:
            candidates = await self._catalog.search(title)
        except ServiceError as exc:
            raise NotFoundError(f"catalog search failed title={title!r}: {exc}") from exc
        if not candidates:
            raise NotFoundError(f"no candidates title={title!r}")
        return candidates

    async def list_episodes(self, entity_id: str) -> list[Episode]:
        """Fetch an entity's episode list.

        Raises:
            NotFoundError: If the lookup fails or the list is empty.
        """

        try:
            episodes = await self._catalog.episodes(entity_id)
        except ServiceError as exc:
            raise NotFoundError(f"episode list failed entity_id={entity_id}: {exc}") from exc
        if not episodes:
            raise NotFoundError(f"no episodes entity_id={entity_id}")
        return episodes

    async def resolve(self, text: str) -> Outcome:
        """Run every step up to the playable stream."""

        parsed = await parse_intent_with_source(text, http=self._http, llm_config=self._llm_config)
        if parsed is None:
            return Outcome(status=Status.could_not_understand)
        intent = parsed.intent
        logger.info(
            "intent source=%s title=%r season=%s episode=%s subtitle=%s",
            parsed.source, intent.title, intent.season, intent.episode, intent.subtitle_language,
        )

        try:
            candidates = await self.find_candidates(intent.title)
        except NotFoundError as exc:
            logger.info("not found reason=%s", exc)
            return Outcome(status=Status.not_found, intent=intent)

        entity = await self._resolver.resolve(intent, candidates)

        try:
            episodes = await self.list_episodes(entity.id)
        except NotFoundError as exc:
            logger.info("no episodes reason=%s", exc)
            return Outcome(status=Status.no_episodes, intent=intent, entity=entity)

        episode = select_episode(episodes, intent.episode)

        try:
            stream = await self._streams.generate(episode.id)
        except ServiceError as exc:
            logger.warning("stream generation failed episode_id=%s reason=%s", episode.id, exc)
            return Outcome(
                status=Status.stream_unavailable, intent=intent, entity=entity, episode=episode
            )

        return Outcome(
            status=Status.understood,
            intent=intent,
            entity=entity,
            episode=episode,
            stream=stream,
        )

    async def _existing_track(self, episode_id: str, language: str) -> SubtitleTrack | None:
        try:
            tracks = await self._streams.available_subtitles(episode_id)
        except ServiceError as exc:
            logger.info("subtitle list unavailable episode_id=%s reason=%s", episode_id, exc)
            return None
        return find_track(tracks, language)

    async def find_existing_subtitle(self, outcome: Outcome) -> Outcome | None:
        """Return the outcome marked `existing` if the requested track is already available."""

        if not outcome.wants_subtitle or outcome.episode is None or outcome.intent is None:
            return None

        language = subtitle_language(outcome.intent)
        existing = await self._existing_track(outcome.episode.id, language)
        if existing is None:
            return None
        return replace(
            outcome,
            subtitle_status=SubtitleStatus.existing,
            subtitle_language=existing.lang,
        )

    async def generate_subtitle(
            self,
            outcome: Outcome,
            on_progress: ProgressFn | None = None,
    ) -> Outcome:
        """Run the subtitle pipeline for the requested language."""

        if not outcome.wants_subtitle or outcome.episode is None or outcome.intent is None:
            return outcome

        language = subtitle_language(outcome.intent)
        artifact = await self._subtitles.generate(outcome.episode.id, language, on_progress)
        return replace(
            outcome,
            subtitle_status=SubtitleStatus.generated if artifact else SubtitleStatus.failed,
            subtitle_language=language,
            subtitle=artifact,
        )

    async def ensure_subtitle(
            self,
            outcome: Outcome,
            on_progress: ProgressFn | None = None,
    ) -> Outcome:
        """Reuse an existing track in the requested language, or generate one."""

        existing = await self.find_existing_subtitle(outcome)
        if existing is not None:
            return existing
        return await self.generate_subtitle(outcome, on_progress)

    async def handle(self, text: str, on_progress: ProgressFn | None = None) -> Outcome:
        """Resolve a request end-to-end, including the optional subtitle step."""

        outcome = await self.resolve(text)
        return await self.ensure_subtitle(outcome, on_progress)
