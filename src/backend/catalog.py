"""Catalog backend client: title search, episode lists, latest releases and transcripts."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from src.backend.http import decode_json, request
from src.backend.schema import Candidate, Episode, LatestRelease
from src.errors import ParseError

logger = logging.getLogger(__name__)


def _items(payload: Any, key: str, *, operation: str) -> list[Any]:
    if not isinstance(payload, dict):
        raise ParseError(f"{operation}: expected a JSON object")
    items = payload.get(key) or []
    if not isinstance(items, list):
        raise ParseError(f"{operation}: `{key}` is not a list")
    return items


class CatalogClient:
    """Read-only access to the title catalog."""

    def __init__(self, http: httpx.AsyncClient, *, api_base: str) -> None:
        self._http = http
        self._base = api_base.rstrip("/")

    async def search(self, title: str) -> list[Candidate]:
        """Return candidates for a title query, in the catalog's own relevance order."""

        resp = await request(
            self._http, "GET", f"{self._base}/anime_search.php", params={"q": title},
            operation="catalog search",
        )
        items = _items(decode_json(resp, operation="catalog search"), "results",
                       operation="catalog search")
        return _validate_each(Candidate, items, operation="catalog search")

    async def episodes(self, entity_id: str) -> list[Episode]:
        """Return the episode list of one catalog entity."""

        resp = await request(
            self._http, "GET", f"{self._base}/episodes_proxy.php", params={"id": entity_id},
            operation="episode list",
        )
        items = _items(decode_json(resp, operation="episode list"), "episodes",
                       operation="episode list")
        return _validate_each(Episode, items, operation="episode list")

    async def latest(self) -> list[LatestRelease]:
        """Return the most recent releases (newest first)."""

        resp = await request(
            self._http, "GET", f"{self._base}/lastep.php", operation="latest releases",
        )
        items = _items(decode_json(resp, operation="latest releases"), "results",
                       operation="latest releases")
        return _validate_each(LatestRelease, items, operation="latest releases")

    async def transcript(self, episode_id: str) -> str:
        """Return the raw subtitle transcript of an episode as plain text."""

        resp = await request(
            self._http, "GET", f"{self._base}/vttreader.php", params={"episode_id": episode_id},
            operation="transcript fetch",
        )
        return resp.text


def _validate_each(model: type[Any], items: list[Any], *, operation: str) -> list[Any]:
    """Validate list items, skipping malformed entries instead of failing the whole list."""

    out = []
    for item in items:
        try:
            out.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning("%s skipped malformed item errors=%d", operation, exc.error_count())
    return out
