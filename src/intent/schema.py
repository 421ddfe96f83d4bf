"""Intent schema (Pydantic models).

This schema is the contract between the text parsers (rules/LLM) and the request orchestrator.
All parsing must validate against it; otherwise the request is treated as not understood.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator, model_validator


class Intent(BaseModel):
    """A validated, immutable interpretation of one chat message.

    `episode=None` means "first episode" downstream.
    """

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    title: str = Field(min_length=1)
    season: PositiveInt | None = None
    episode: PositiveInt | None = None
    subtitle_requested: bool = Field(default=False, alias="subtitle")
    subtitle_language: str | None = Field(default=None, alias="subtitleLang")

    @field_validator("subtitle_language")
    @classmethod
    def drop_blank_language(cls, value: str | None) -> str | None:
        return value or None

    @model_validator(mode="before")
    @classmethod
    def language_implies_request(cls, data: Any) -> Any:
        """A requested subtitle language implies a subtitle request."""

        if not isinstance(data, dict):
            return data
        language = data.get("subtitle_language", data.get("subtitleLang"))
        if isinstance(language, str) and language.strip():
            data = {k: v for k, v in data.items() if k not in ("subtitle", "subtitle_requested")}
            data["subtitle_requested"] = True
        return data


def intent_from_obj(obj: Any) -> Intent:
    """Validate and parse an Intent from an arbitrary decoded JSON object."""

    return Intent.model_validate(obj)
