"""Usage records posted to the catalog backend.

Usage logging is best-effort: failures are logged and never affect the chat reply.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

import httpx

from src.backend.http import request
from src.errors import TransportError

logger = logging.getLogger(__name__)


class UsageLogger:
    """Posts one record per handled message."""

    def __init__(self, http: httpx.AsyncClient, *, api_base: str) -> None:
        self._http = http
        self._url = api_base.rstrip("/") + "/log_usage.php"

    async def record(
            self,
            *,
            user_id: str,
            username: str,
            message: str,
            reply: str,
            country: str = "Unknown",
    ) -> None:
        payload = {
            "user_id": user_id,
            "username": username,
            "message": message,
            "reply": reply,
            "country": country,
            "date": datetime.now(UTC).isoformat(),
        }
        try:
            await request(self._http, "POST", self._url, json=payload, operation="usage log")
        except TransportError as exc:
            logger.warning("usage log failed reason=%s", exc)
