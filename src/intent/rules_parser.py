"""Rules-based request parser (deterministic fallback).

This parser recognizes a small set of English patterns:
    - `episode N` / `ep N` (case-insensitive) for the episode number,
    - `season N` for the season number,
    - `subtitle [in] <language>` for a subtitle request.

The matched spans are removed from the text and what remains is the title. A request is only
accepted when both a title and an episode number were found.
"""

from __future__ import annotations

import re

from pydantic import ValidationError

from src.intent.schema import Intent


class RulesParserError(ValueError):
    """Raised when the rules parser cannot produce a valid intent."""


_EPISODE_RE = re.compile(r"\bep(?:isode)?\.?\s*(?P<n>\d+)\b", flags=re.IGNORECASE)
_SEASON_RE = re.compile(r"\bseason\s*(?P<n>\d+)\b", flags=re.IGNORECASE)
_SUBTITLE_RE = re.compile(
    r"\bsubtitles?\b(?:\s+in\b)?(?:\s+(?!(?:ep|episode|season)(?:\b|\d))(?P<lang>[a-z]+))?",
    flags=re.IGNORECASE,
)
_MULTISPACE_RE = re.compile(r"\s+")
_EDGE_PUNCT = " \t,;:-"


def _remove_span(text: str, match: re.Match[str] | None) -> str:
    if match is None:
        return text
    return text[: match.start()] + " " + text[match.end():]


def _clean_title(text: str) -> str:
    return _MULTISPACE_RE.sub(" ", text).strip(_EDGE_PUNCT)


def parse_intent(text: str) -> Intent:
    """Parse text into a validated Intent.

    Raises:
        RulesParserError: If no title or no episode number could be found.
    """

    value = (text or "").strip()

    episode_match = _EPISODE_RE.search(value)
    if episode_match is None:
        raise RulesParserError("no episode number")

    season_match = _SEASON_RE.search(value)
    subtitle_match = _SUBTITLE_RE.search(value)

    # Remove right-most spans first so earlier offsets stay valid.
    remaining = value
    for match in sorted(
            (m for m in (episode_match, season_match, subtitle_match) if m is not None),
            key=lambda m: m.start(),
            reverse=True,
    ):
        remaining = _remove_span(remaining, match)

    title = _clean_title(remaining)
    if not title:
        raise RulesParserError("no title")

    try:
        return Intent(
            title=title,
            season=int(season_match.group("n")) if season_match else None,
            episode=int(episode_match.group("n")),
            subtitle_requested=subtitle_match is not None,
            subtitle_language=subtitle_match.group("lang") if subtitle_match else None,
        )
    except ValidationError as exc:
        # e.g. "episode 0": not a positive episode number.
        raise RulesParserError(f"invalid intent: {exc.error_count()} error(s)") from exc
