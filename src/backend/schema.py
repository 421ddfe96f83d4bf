"""Pydantic models for payloads exchanged with the catalog and stream backends.

Backend ids arrive as either JSON numbers or strings; they are always kept as strings so that
equality checks against model output (a bare id token) are representation-independent.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
        populate_by_name=True,
    )


class Candidate(_Payload):
    """One catalog search result."""

    id: str = Field(min_length=1)
    title: str
    poster_url: str | None = Field(default=None, alias="poster")


class Episode(_Payload):
    """One entry of an entity's episode list."""

    id: str = Field(min_length=1)
    number: int
    title: str | None = None


class StreamResult(_Payload):
    """Playable links produced by stream generation."""

    player_url: str
    master_url: str | None = None
    subtitle_url: str | None = None


class SubtitleTrack(_Payload):
    """An already available subtitle track of an episode."""

    lang: str
    url: str | None = None


class LatestRelease(_Payload):
    """One entry of the latest releases feed."""

    episode_id: str = Field(min_length=1)
    title: str = Field(alias="anime_title")
    episode_number: int | None = Field(default=None, alias="latest_episode_number")
    episode_title: str | None = None
