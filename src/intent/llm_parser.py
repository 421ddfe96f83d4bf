"""Optional LLM-based intent parser (feature-flagged).

The LLM is only allowed to produce **Intent JSON**. The output must be validated against the schema.
"""

from __future__ import annotations

import json
import re
from typing import Any

import httpx

from src.errors import ParseError
from src.llm.client import LLMConfig, complete, load_prompt

_JSON_OBJECT_RE = re.compile(r"\{.*\}", flags=re.DOTALL)
_FENCE_RE = re.compile(r"```(?:json)?", flags=re.IGNORECASE)


def _strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def extract_json_object(text: str) -> dict[str, Any]:
    """Extract the first JSON object from model output, tolerating code fences and chatter."""

    match = _JSON_OBJECT_RE.search(_strip_code_fences(text))
    if match is None:
        raise ParseError("LLM did not return a JSON object")

    try:
        obj = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise ParseError("LLM did not return valid JSON") from exc
    if not isinstance(obj, dict):
        raise ParseError("LLM JSON is not an object")
    return obj


async def parse_intent_json_via_llm(
        user_text: str,
        *,
        http: httpx.AsyncClient,
        config: LLMConfig,
) -> dict[str, Any]:
    """Call the LLM and return the decoded Intent JSON object.

    Raises:
        TransportError: If the model endpoint is unreachable or fails.
        ParseError: If the output holds no JSON object, or the model reports `notFound`.
    """

    content = await complete(
        http,
        config,
        system=load_prompt("prompt_intent_v1.md"),
        user=user_text,
        operation="intent extraction",
    )
    obj = extract_json_object(content)
    if obj.get("notFound"):
        raise ParseError("LLM reported the request as not found")
    return obj
