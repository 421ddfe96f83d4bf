"""Tests for the deterministic rules-based request parser."""

from __future__ import annotations

import pytest

from src.intent.rules_parser import RulesParserError, parse_intent


def test_parse_title_and_episode() -> None:
    intent = parse_intent("naruto episode 3")
    assert intent.title == "naruto"
    assert intent.episode == 3
    assert intent.season is None
    assert intent.subtitle_requested is False
    assert intent.subtitle_language is None


def test_episode_span_is_case_insensitive_and_removed() -> None:
    intent = parse_intent("Attack on Titan Episode 7")
    assert intent.title == "Attack on Titan"
    assert intent.episode == 7


def test_short_ep_form() -> None:
    intent = parse_intent("Bleach ep12")
    assert intent.title == "Bleach"
    assert intent.episode == 12


def test_season_is_extracted_and_stripped() -> None:
    intent = parse_intent("Demon Slayer season 2 episode 5")
    assert intent.title == "Demon Slayer"
    assert intent.season == 2
    assert intent.episode == 5


def test_subtitle_with_language() -> None:
    intent = parse_intent("one piece episode 1 subtitle in french")
    assert intent.title == "one piece"
    assert intent.episode == 1
    assert intent.subtitle_requested is True
    assert intent.subtitle_language == "french"


def test_subtitle_without_in() -> None:
    intent = parse_intent("Frieren episode 4 subtitle Spanish")
    assert intent.subtitle_language == "Spanish"
    assert intent.title == "Frieren"


def test_bare_subtitle_request_has_no_language() -> None:
    intent = parse_intent("Frieren episode 4 subtitles")
    assert intent.subtitle_requested is True
    assert intent.subtitle_language is None
    assert intent.title == "Frieren"


def test_episode_word_inside_other_word_is_not_matched() -> None:
    with pytest.raises(RulesParserError):
        parse_intent("deep 3")


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "naruto",
        "episode 3",
        "show me something good",
        "naruto episode 0",
    ],
)
def test_unsupported_text_is_rejected(text: str) -> None:
    with pytest.raises(RulesParserError):
        parse_intent(text)


def test_episode_glued_to_number_is_not_taken_as_language() -> None:
    intent = parse_intent("naruto subtitle in ep3")
    assert intent.title == "naruto"
    assert intent.episode == 3
    assert intent.subtitle_requested is True
    assert intent.subtitle_language is None
