"""Tests for the Intent Pydantic schema."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.intent.schema import Intent, intent_from_obj


def test_intent_from_llm_json_uses_aliases() -> None:
    intent = intent_from_obj(
        {
            "title": "One Piece",
            "season": None,
            "episode": "12",
            "subtitle": True,
            "subtitleLang": "French",
            "notFound": False,
        }
    )
    assert intent.title == "One Piece"
    assert intent.episode == 12
    assert intent.subtitle_requested is True
    assert intent.subtitle_language == "French"


def test_language_implies_subtitle_request() -> None:
    intent = intent_from_obj({"title": "Naruto", "episode": 1, "subtitle": False, "subtitleLang": "German"})
    assert intent.subtitle_requested is True


def test_blank_language_is_dropped() -> None:
    intent = Intent(title="Naruto", episode=1, subtitle_language="  ")
    assert intent.subtitle_language is None
    assert intent.subtitle_requested is False


def test_episode_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Intent(title="Naruto", episode=0)


def test_title_is_required() -> None:
    with pytest.raises(ValidationError):
        intent_from_obj({"title": "  ", "episode": 1})


def test_intent_is_immutable() -> None:
    intent = Intent(title="Naruto", episode=1)
    with pytest.raises(ValidationError):
        intent.episode = 2  # type: ignore[misc]
