"""Application composition root.

This module wires together configuration, the shared HTTP client, backend clients and the request
pipeline for the bot runtime.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from src.backend.catalog import CatalogClient
from src.backend.http import create_http_client
from src.backend.stream import StreamClient
from src.backend.usage import UsageLogger
from src.config.settings import Settings
from src.latest.cache import LatestEpisodesCache
from src.llm.client import LLMConfig
from src.request.orchestrator import RequestOrchestrator
from src.resolve.candidates import CandidateResolver
from src.subtitles.pipeline import SubtitlePipeline


@dataclass(frozen=True)
class App:
    """Shared application dependencies for handlers."""

    settings: Settings
    http: httpx.AsyncClient
    orchestrator: RequestOrchestrator
    latest: LatestEpisodesCache
    usage: UsageLogger | None = None

    async def aclose(self) -> None:
        await self.http.aclose()


def llm_config_from_settings(settings: Settings) -> LLMConfig | None:
    """Build the LLM config, or `None` when the model-backed steps are disabled."""

    if not settings.llm_enabled or not settings.llm_api_key:
        return None
    return LLMConfig(
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        api_base=settings.llm_api_base,
        timeout_s=settings.llm_timeout_s,
    )


def create_app(settings: Settings, *, http: httpx.AsyncClient | None = None) -> App:
    """Create the application container.

    Note:
        The latest-episodes cache is empty until its refresh loop runs (see `src.bot.main`).
    """

    http = http or create_http_client(timeout_s=settings.http_timeout_s)
    llm_config = llm_config_from_settings(settings)

    catalog = CatalogClient(http, api_base=settings.catalog_api_base)
    streams = StreamClient(
        http,
        api_base=settings.stream_api_base,
        generate_timeout_s=settings.stream_timeout_s,
    )
    orchestrator = RequestOrchestrator(
        catalog=catalog,
        streams=streams,
        resolver=CandidateResolver(http=http, llm_config=llm_config),
        subtitles=SubtitlePipeline(
            source=catalog,
            backend=streams,
            chunk_lines=settings.subtitle_chunk_lines,
            max_concurrency=settings.translate_max_concurrency,
        ),
        http=http,
        llm_config=llm_config,
    )
    latest = LatestEpisodesCache(feed=catalog, streams=streams, limit=settings.latest_limit)
    usage = None
    if settings.usage_log_enabled:
        usage = UsageLogger(http, api_base=settings.catalog_api_base)

    return App(
        settings=settings,
        http=http,
        orchestrator=orchestrator,
        latest=latest,
        usage=usage,
    )
