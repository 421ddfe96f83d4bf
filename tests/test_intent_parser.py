"""Tests for the two-stage intent extraction (LLM primary, rules fallback)."""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from conftest import LLM_BASE, llm_reply
from src.intent.llm_parser import extract_json_object
from src.intent.parser import parse_intent, parse_intent_with_source
from src.errors import ParseError

_COMPLETIONS = f"{LLM_BASE}/chat/completions"


def test_extract_json_object_tolerates_code_fences() -> None:
    text = 'Sure!\n```json\n{"title": "Naruto", "episode": 3}\n```'
    assert extract_json_object(text) == {"title": "Naruto", "episode": 3}


@pytest.mark.parametrize("text", ["", "no json here", "```json\n{broken\n```", "[1, 2]"])
def test_extract_json_object_rejects_garbage(text: str) -> None:
    with pytest.raises(ParseError):
        extract_json_object(text)


@pytest.mark.asyncio
async def test_rules_only_when_llm_disabled() -> None:
    result = await parse_intent_with_source("naruto episode 3")
    assert result is not None
    assert result.source == "rules"
    assert result.intent.title == "naruto"
    assert result.intent.episode == 3


@pytest.mark.asyncio
async def test_not_understood_returns_none() -> None:
    assert await parse_intent("hello there") is None


@pytest.mark.asyncio
async def test_llm_json_is_used(llm_config) -> None:
    content = "```json\n" + json.dumps(
        {
            "title": "Shingeki no Kyojin",
            "season": 2,
            "episode": 5,
            "subtitle": True,
            "subtitleLang": "French",
            "notFound": False,
        }
    ) + "\n```"
    with respx.mock:
        route = respx.post(_COMPLETIONS).respond(200, json=llm_reply(content))
        async with httpx.AsyncClient() as http:
            result = await parse_intent_with_source(
                "attack on titan s2 ep 5 subs fr", http=http, llm_config=llm_config
            )

    assert route.called
    sent = json.loads(route.calls.last.request.content)
    assert sent["temperature"] == 0
    assert sent["messages"][1]["content"] == "attack on titan s2 ep 5 subs fr"
    assert route.calls.last.request.headers["Authorization"] == "Bearer test-key"

    assert result is not None
    assert result.source == "llm"
    assert result.intent.title == "Shingeki no Kyojin"
    assert result.intent.season == 2
    assert result.intent.subtitle_language == "French"


@pytest.mark.asyncio
async def test_llm_transport_error_falls_back_to_rules(llm_config) -> None:
    with respx.mock:
        respx.post(_COMPLETIONS).mock(side_effect=httpx.ConnectError("down"))
        async with httpx.AsyncClient() as http:
            result = await parse_intent_with_source("naruto episode 3", http=http, llm_config=llm_config)

    assert result is not None
    assert result.source == "rules"
    assert result.intent.episode == 3


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500),
        httpx.Response(200, json={"unexpected": True}),
        httpx.Response(200, json=llm_reply("I am not sure what you mean")),
        httpx.Response(200, json=llm_reply('{"title": "", "episode": 3}')),
        httpx.Response(200, json=llm_reply('{"title": "x", "episode": 3, "notFound": true}')),
    ],
)
async def test_llm_bad_output_falls_back_to_rules(llm_config, response: httpx.Response) -> None:
    with respx.mock:
        respx.post(_COMPLETIONS).mock(return_value=response)
        async with httpx.AsyncClient() as http:
            result = await parse_intent_with_source("naruto episode 3", http=http, llm_config=llm_config)

    assert result is not None
    assert result.source == "rules"
    assert result.intent.title == "naruto"


@pytest.mark.asyncio
async def test_llm_failure_and_unparseable_text_returns_none(llm_config) -> None:
    with respx.mock:
        respx.post(_COMPLETIONS).respond(503)
        async with httpx.AsyncClient() as http:
            assert await parse_intent("what's up", http=http, llm_config=llm_config) is None
