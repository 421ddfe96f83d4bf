"""Tests for transcript partitioning and ordered reassembly."""

from __future__ import annotations

import math

import pytest

from src.subtitles.chunking import ChunkResult, assemble, plan_chunks, split_lines


def test_split_lines_handles_both_newline_conventions() -> None:
    assert split_lines("a\r\nb\nc") == ["a", "b", "c"]


def test_empty_transcript_has_no_lines_and_no_chunks() -> None:
    assert split_lines("") == []
    assert plan_chunks(0) == []


@pytest.mark.parametrize("line_count", [1, 99, 100, 101, 250, 300, 1234])
def test_chunks_cover_all_lines_exactly_once(line_count: int) -> None:
    chunks = plan_chunks(line_count, 100)

    assert len(chunks) == math.ceil(line_count / 100)
    assert [c.index for c in chunks] == list(range(len(chunks)))
    assert chunks[0].start_line == 0
    assert chunks[-1].end_line == line_count
    for prev, nxt in zip(chunks, chunks[1:]):
        assert prev.end_line == nxt.start_line
    assert all(c.line_count == 100 for c in chunks[:-1])
    assert chunks[-1].line_count == (line_count % 100 or 100)


def test_width_must_be_positive() -> None:
    with pytest.raises(ValueError):
        plan_chunks(10, 0)


def test_assemble_restores_index_order() -> None:
    results = [ChunkResult(2, "c"), ChunkResult(0, "a"), ChunkResult(1, "b")]
    assert assemble(results) == "a\nb\nc"


def test_assemble_keeps_empty_segment_position() -> None:
    results = [ChunkResult(0, "a"), ChunkResult(1, ""), ChunkResult(2, "c")]
    assert assemble(results) == "a\n\nc"
