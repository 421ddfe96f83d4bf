"""OpenAI-style Chat Completions client used by the model-backed steps.

The model is treated as a black box returning best-effort text. Every failure is reported as a
`TransportError` or `ParseError`; callers fall back to deterministic logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import httpx

from src.backend.http import decode_json, request
from src.errors import ParseError

_PROMPT_DIR = Path(__file__).resolve().parent


@dataclass(frozen=True)
class LLMConfig:
    """Configuration for the OpenAI-style Chat Completions API call."""

    api_key: str
    model: str = "gpt-4o-mini"
    api_base: str = "https://api.openai.com/v1"
    timeout_s: float = 30.0


def load_prompt(name: str) -> str:
    """Read a versioned system prompt shipped next to this module."""

    return (_PROMPT_DIR / name).read_text(encoding="utf-8")


def _chat_completions_url(api_base: str) -> str:
    return api_base.rstrip("/") + "/chat/completions"


async def complete(
        http: httpx.AsyncClient,
        config: LLMConfig,
        *,
        system: str,
        user: str,
        operation: str,
) -> str:
    """Run one chat completion and return the assistant message text."""

    payload = {
        "model": config.model,
        "temperature": 0,
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
    }

    resp = await request(
        http,
        "POST",
        _chat_completions_url(config.api_base),
        headers={"Authorization": f"Bearer {config.api_key}"},
        json=payload,
        timeout=config.timeout_s,
        operation=operation,
    )
    decoded = decode_json(resp, operation=operation)

    try:
        content = decoded["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ParseError(f"{operation}: unexpected LLM response format") from exc
    if not isinstance(content, str):
        raise ParseError(f"{operation}: LLM content is not text")
    return content
