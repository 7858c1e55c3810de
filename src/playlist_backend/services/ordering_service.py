from __future__ import annotations

from collections.abc import Sequence

from sqlmodel.ext.asyncio.session import AsyncSession

from playlist_backend.domain.ordering import next_position_after, plan_reorder, sort_songs
from playlist_backend.models import Song
from playlist_backend.repositories import playlists_repo


async def next_position(session: AsyncSession, *, playlist_id: str) -> int:
    # Must run in the same transaction as the insert that uses it.
    max_position = await playlists_repo.get_max_position(session, playlist_id=playlist_id)
    return next_position_after(max_position)


async def apply_reorder(
    session: AsyncSession,
    *,
    playlist_id: str,
    ordered_song_ids: Sequence[str],
) -> list[Song]:
    """Rewrite positions to 0..N-1 following `ordered_song_ids`.

    Runs inside the caller's transaction. Positions are first parked on
    distinct negative values so the (playlist_id, position) unique constraint
    never sees two rows on the same slot while rows are updated one by one.
    """

    songs = await playlists_repo.list_songs(session, playlist_id=playlist_id)
    positions = plan_reorder(current_ids=[s.id for s in songs], ordered_ids=ordered_song_ids)

    for index, song in enumerate(songs):
        song.position = -(index + 1)
        session.add(song)
    await session.flush()

    for song in songs:
        song.position = positions[song.id]
        session.add(song)
    await session.flush()

    return sort_songs(songs)
