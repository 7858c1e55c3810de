from __future__ import annotations

from typing import Final

from sqlmodel.ext.asyncio.session import AsyncSession

from playlist_backend.db import run_in_transaction
from playlist_backend.errors import InvalidFieldsError, NotFoundError
from playlist_backend.identifiers import new_id
from playlist_backend.models import Song, SongComment, utc_now
from playlist_backend.repositories import playlists_repo

AUTHOR_NAME_MAX_LEN: Final = 50
BODY_MAX_LEN: Final = 500


def _validate(*, author_name: str, body: str) -> tuple[str, str]:
    author_v = (author_name or "").strip()
    body_v = (body or "").strip()
    if not author_v or not body_v:
        raise InvalidFieldsError("author name and comment body are required")
    if len(author_v) > AUTHOR_NAME_MAX_LEN:
        raise InvalidFieldsError(
            f"author name must be at most {AUTHOR_NAME_MAX_LEN} characters",
            details={"field": "author_name"},
        )
    if len(body_v) > BODY_MAX_LEN:
        raise InvalidFieldsError(
            f"comment must be at most {BODY_MAX_LEN} characters",
            details={"field": "body"},
        )
    return author_v, body_v


async def _require_song(session: AsyncSession, *, song_id: str) -> Song:
    song = await playlists_repo.get_song(session, song_id=song_id)
    if song is None:
        raise NotFoundError("song not found")
    return song


async def add_comment(
    session: AsyncSession,
    *,
    song_id: str,
    author_name: str,
    body: str,
) -> SongComment:
    # Comments are open to anyone holding the song id, PIN or not, and they do
    # not touch the playlist's updated_at.
    author_v, body_v = _validate(author_name=author_name, body=body)

    async def _apply() -> SongComment:
        song = await _require_song(session, song_id=song_id)
        comment = SongComment(
            id=new_id(),
            song_id=song.id,
            author_name=author_v,
            body=body_v,
            created_at=utc_now(),
        )
        session.add(comment)
        return comment

    return await run_in_transaction(session, _apply)


async def list_comments(session: AsyncSession, *, song_id: str) -> list[SongComment]:
    """Comments of a song, newest first."""
    song = await _require_song(session, song_id=song_id)
    return await playlists_repo.list_comments(session, song_id=song.id)
