"""Translated subtitle generation.

State machine per run:

    fetching -> chunking -> translating -> assembling -> publishing -> done
    (any state) -> failed

Fetching and publishing failures are terminal (`generate` returns `None`). Translation failures are
chunk-local: the chunk's text becomes empty and its siblings keep running.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from src.errors import ServiceError
from src.subtitles.chunking import (
    DEFAULT_CHUNK_LINES,
    ChunkResult,
    SubtitleChunk,
    assemble,
    plan_chunks,
    split_lines,
)

logger = logging.getLogger(__name__)

ProgressFn = Callable[[int], None]

SUBTITLE_EXTENSION = ".vtt"


class PipelineState(StrEnum):
    fetching = "fetching"
    chunking = "chunking"
    translating = "translating"
    assembling = "assembling"
    publishing = "publishing"
    done = "done"
    failed = "failed"


@dataclass(frozen=True)
class SubtitleArtifact:
    """The reassembled transcript, persisted by the stream backend and reachable at `url`."""

    language: str
    content: str
    url: str


class TranscriptSource(Protocol):
    async def transcript(self, episode_id: str) -> str: ...


class SubtitleBackend(Protocol):
    async def translate_chunk(
            self, episode_id: str, language: str, chunk: SubtitleChunk
    ) -> str: ...

    async def save_subtitle(self, episode_id: str, filename: str, content: str) -> None: ...

    def subtitle_url(self, episode_id: str, filename: str) -> str: ...


def subtitle_filename(language: str) -> str:
    return language.strip().lower() + SUBTITLE_EXTENSION


def _percent(completed: int, total: int) -> int:
    return (completed * 100) // total if total else 100


class SubtitlePipeline:
    """Fetch, chunk, translate concurrently, reassemble and publish one subtitle track."""

    def __init__(
            self,
            *,
            source: TranscriptSource,
            backend: SubtitleBackend,
            chunk_lines: int = DEFAULT_CHUNK_LINES,
            max_concurrency: int | None = None,
    ) -> None:
        if chunk_lines <= 0:
            raise ValueError("chunk_lines must be positive")
        self._source = source
        self._backend = backend
        self._chunk_lines = chunk_lines
        self._max_concurrency = max_concurrency

    async def translate_transcript(
            self,
            episode_id: str,
            transcript: str,
            language: str,
            on_progress: ProgressFn | None = None,
    ) -> str:
        """Chunk, translate and reassemble a transcript. Never raises on chunk failures."""

        report = on_progress or (lambda _percent: None)

        _log_state(PipelineState.chunking, episode_id, language)
        chunks = plan_chunks(len(split_lines(transcript)), self._chunk_lines)
        if not chunks:
            report(100)
            return ""

        _log_state(PipelineState.translating, episode_id, language, chunks=len(chunks))
        total = len(chunks)
        completed = 0
        limiter = (
            asyncio.Semaphore(self._max_concurrency)
            if self._max_concurrency
            else contextlib.nullcontext()
        )

        async def run_chunk(chunk: SubtitleChunk) -> ChunkResult:
            nonlocal completed
            try:
                async with limiter:
                    text = await self._backend.translate_chunk(episode_id, language, chunk)
            except ServiceError as exc:
                logger.warning(
                    "chunk translation failed episode_id=%s index=%d reason=%s",
                    episode_id, chunk.index, exc,
                )
                text = ""
            # Single-threaded loop: the counter update and report are not interleaved.
            completed += 1
            report(_percent(completed, total))
            return ChunkResult(index=chunk.index, translated_text=text)

        results = await asyncio.gather(*(run_chunk(chunk) for chunk in chunks))

        _log_state(PipelineState.assembling, episode_id, language)
        return assemble(results)

    async def generate(
            self,
            episode_id: str,
            language: str,
            on_progress: ProgressFn | None = None,
    ) -> SubtitleArtifact | None:
        """Run the whole pipeline; `None` on a terminal failure."""

        _log_state(PipelineState.fetching, episode_id, language)
        try:
            transcript = await self._source.transcript(episode_id)
        except ServiceError as exc:
            _log_failure(PipelineState.fetching, episode_id, language, exc)
            return None

        content = await self.translate_transcript(episode_id, transcript, language, on_progress)

        _log_state(PipelineState.publishing, episode_id, language)
        filename = subtitle_filename(language)
        try:
            await self._backend.save_subtitle(episode_id, filename, content)
        except ServiceError as exc:
            _log_failure(PipelineState.publishing, episode_id, language, exc)
            return None

        _log_state(PipelineState.done, episode_id, language)
        return SubtitleArtifact(
            language=language,
            content=content,
            url=self._backend.subtitle_url(episode_id, filename),
        )


def _log_state(state: PipelineState, episode_id: str, language: str, **extra: object) -> None:
    details = "".join(f" {k}={v}" for k, v in extra.items())
    logger.info("subtitle state=%s episode_id=%s lang=%s%s", state, episode_id, language, details)


def _log_failure(
        stage: PipelineState, episode_id: str, language: str, exc: BaseException
) -> None:
    logger.warning(
        "subtitle state=%s stage=%s episode_id=%s lang=%s reason=%s",
        PipelineState.failed, stage, episode_id, language, exc,
    )
