"""Episode selection within a resolved entity."""

from __future__ import annotations

from collections.abc import Sequence

from src.backend.schema import Episode


def select_episode(episodes: Sequence[Episode], requested_number: int | str | None) -> Episode:
    """Return the episode numbered `requested_number`, or the first episode.

    Numbers are compared as integers so `"3"` and `3` match. Unparseable requests fall back to the
    first episode like a missing one.
    """

    if not episodes:
        raise ValueError("episodes must not be empty")
    if requested_number is None:
        return episodes[0]

    try:
        wanted = int(requested_number)
    except (TypeError, ValueError):
        return episodes[0]

    for episode in episodes:
        if episode.number == wanted:
            return episode
    return episodes[0]
