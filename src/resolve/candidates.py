"""Candidate resolution: pick one catalog entity for a requested title.

The ranking model only ever *selects* among the supplied candidates. Whatever it answers, the
result is a member of the input list; the catalog's own first result is the fallback.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence

import httpx

from src.backend.schema import Candidate
from src.errors import ParseError, ServiceError
from src.intent.schema import Intent
from src.llm.client import LLMConfig, complete, load_prompt

logger = logging.getLogger(__name__)

_ID_TOKEN_RE = re.compile(r"\d+")


def parse_ranked_id(text: str) -> str:
    """Return the first integer-looking token of the model output."""

    match = _ID_TOKEN_RE.search(text or "")
    if match is None:
        raise ParseError("ranking output holds no id")
    return match.group(0)


def find_candidate(candidates: Sequence[Candidate], candidate_id: str) -> Candidate | None:
    for candidate in candidates:
        if candidate.id == candidate_id:
            return candidate
    return None


def _ranking_prompt(intent: Intent, candidates: Sequence[Candidate]) -> str:
    minimal = [{"id": c.id, "title": c.title} for c in candidates]
    return f'User searching: "{intent.title}"\nCandidates: {json.dumps(minimal, ensure_ascii=False)}'


class CandidateResolver:
    """Selects the best matching candidate, model-ranked when configured."""

    def __init__(
            self,
            *,
            http: httpx.AsyncClient | None = None,
            llm_config: LLMConfig | None = None,
    ) -> None:
        self._http = http
        self._llm_config = llm_config

    async def _try_rank(self, intent: Intent, candidates: Sequence[Candidate]) -> Candidate | None:
        if self._http is None or self._llm_config is None:
            return None

        try:
            content = await complete(
                self._http,
                self._llm_config,
                system=load_prompt("prompt_rank_v1.md"),
                user=_ranking_prompt(intent, candidates),
                operation="candidate ranking",
            )
            candidate_id = parse_ranked_id(content)
        except ServiceError as exc:
            logger.info("ranking unavailable reason=%s", exc)
            return None

        chosen = find_candidate(candidates, candidate_id)
        if chosen is None:
            logger.info("ranking returned unknown id=%s", candidate_id)
        return chosen

    async def resolve(self, intent: Intent, candidates: Sequence[Candidate]) -> Candidate:
        """Return one member of `candidates` (which must be non-empty)."""

        if not candidates:
            raise ValueError("candidates must not be empty")
        if len(candidates) == 1:
            return candidates[0]

        chosen = await self._try_rank(intent, candidates)
        return chosen if chosen is not None else candidates[0]
