"""Transcript partitioning into fixed-width line ranges."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

DEFAULT_CHUNK_LINES = 100

_NEWLINE_RE = re.compile(r"\r?\n")


@dataclass(frozen=True)
class SubtitleChunk:
    """A half-open line range `[start_line, end_line)` of one transcript."""

    index: int
    start_line: int
    end_line: int

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line


@dataclass(frozen=True)
class ChunkResult:
    """Translated text of one chunk; empty when its translation failed."""

    index: int
    translated_text: str


def split_lines(text: str) -> list[str]:
    """Split a transcript on `\\n` or `\\r\\n`. An empty transcript has no lines."""

    if not text:
        return []
    return _NEWLINE_RE.split(text)


def plan_chunks(line_count: int, width: int = DEFAULT_CHUNK_LINES) -> list[SubtitleChunk]:
    """Partition `[0, line_count)` into consecutive ranges of `width` lines.

    Only the last range may be shorter. Indices are `0..n-1` in line order.
    """

    if width <= 0:
        raise ValueError("width must be positive")
    if line_count < 0:
        raise ValueError("line_count must not be negative")

    return [
        SubtitleChunk(index=index, start_line=start, end_line=min(start + width, line_count))
        for index, start in enumerate(range(0, line_count, width))
    ]


def assemble(results: Iterable[ChunkResult]) -> str:
    """Join chunk texts by ascending index, regardless of completion order."""

    ordered = sorted(results, key=lambda r: r.index)
    return "\n".join(r.translated_text for r in ordered)
