"""Intent parser orchestration (LLM optional; rules-based fallback)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

import httpx
from pydantic import ValidationError

from src.errors import ServiceError
from src.intent.llm_parser import parse_intent_json_via_llm
from src.intent.rules_parser import RulesParserError
from src.intent.rules_parser import parse_intent as parse_rules_intent
from src.intent.schema import Intent, intent_from_obj
from src.llm.client import LLMConfig

logger = logging.getLogger(__name__)

ParseSource = Literal["llm", "rules"]


@dataclass(frozen=True)
class ParseResult:
    """Validated intent plus information about which parser produced it."""

    intent: Intent
    source: ParseSource


async def try_llm_intent(
        text: str,
        *,
        http: httpx.AsyncClient,
        config: LLMConfig,
) -> Intent | None:
    """Primary path: ask the LLM for Intent JSON. Returns `None` instead of raising."""

    try:
        obj = await parse_intent_json_via_llm(text, http=http, config=config)
        return intent_from_obj(obj)
    except ValidationError as exc:
        logger.info("llm intent rejected errors=%d", exc.error_count())
    except ServiceError as exc:
        logger.info("llm intent unavailable reason=%s", exc)
    return None


def try_rules_intent(text: str) -> Intent | None:
    """Fallback path: deterministic regex parser. Returns `None` if the text is not understood."""

    try:
        return parse_rules_intent(text)
    except RulesParserError as exc:
        logger.info("rules intent rejected reason=%s", exc)
        return None


async def parse_intent_with_source(
        text: str,
        *,
        http: httpx.AsyncClient | None = None,
        llm_config: LLMConfig | None = None,
) -> ParseResult | None:
    """Parse text into an Intent object.

    Strategy:
        1) If an LLM config is given, ask the LLM to produce Intent JSON and validate it.
        2) If that yields nothing, use the deterministic rules parser.
        3) If rules parsing fails too, return `None` ("could not understand request").
    """

    if llm_config is not None and http is not None:
        intent = await try_llm_intent(text, http=http, config=llm_config)
        if intent is not None:
            return ParseResult(intent=intent, source="llm")

    intent = try_rules_intent(text)
    if intent is None:
        return None
    return ParseResult(intent=intent, source="rules")


async def parse_intent(
        text: str,
        *,
        http: httpx.AsyncClient | None = None,
        llm_config: LLMConfig | None = None,
) -> Intent | None:
    """Parse text into a validated Intent object (convenience wrapper)."""

    result = await parse_intent_with_source(text, http=http, llm_config=llm_config)
    return result.intent if result is not None else None
