from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from playlist_backend.errors import InvalidReorderSetError
from playlist_backend.models import Song


def _assume_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware inserts.
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def song_sort_key(song: Song) -> tuple[int, datetime, str]:
    """Total read order: position, then created_at, then id.

    Positions are unique under correct use; the tail of the key only matters
    if a weaker backend ever lets two appends land on the same position.
    """
    return (song.position, _assume_utc(song.created_at), song.id)


def sort_songs(songs: Iterable[Song]) -> list[Song]:
    return sorted(songs, key=song_sort_key)


def next_position_after(max_position: int | None) -> int:
    return 0 if max_position is None else max_position + 1


def plan_reorder(*, current_ids: Iterable[str], ordered_ids: Sequence[str]) -> dict[str, int]:
    """Map each id to its new position (its index in `ordered_ids`).

    `ordered_ids` must be a permutation of `current_ids`: no duplicates, nothing
    missing, nothing extra. This is a full replacement, not a move.
    """

    current = set(current_ids)

    seen: set[str] = set()
    duplicates: list[str] = []
    for song_id in ordered_ids:
        if song_id in seen:
            duplicates.append(song_id)
        seen.add(song_id)

    missing = sorted(current - seen)
    unknown = sorted(seen - current)

    if duplicates or missing or unknown:
        raise InvalidReorderSetError(
            "song ids must match the playlist's current songs exactly",
            details={
                "duplicate_ids": sorted(set(duplicates)),
                "missing_ids": missing,
                "unknown_ids": unknown,
            },
        )

    return {song_id: index for index, song_id in enumerate(ordered_ids)}
