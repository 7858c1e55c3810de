from __future__ import annotations

from typing import cast

from sqlalchemy import delete, func
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from playlist_backend.models import Playlist, RetiredSlug, Song, SongComment


def _col(attr: object) -> ColumnElement[object]:
    return cast(ColumnElement[object], attr)


async def get_playlist_by_slug(session: AsyncSession, *, slug: str) -> Playlist | None:
    stmt = select(Playlist).where(Playlist.slug == slug)
    return (await session.exec(stmt)).first()


async def slug_taken(session: AsyncSession, *, slug: str) -> bool:
    live = (await session.exec(select(Playlist.id).where(Playlist.slug == slug))).first()
    if live is not None:
        return True
    retired = (await session.exec(select(RetiredSlug.slug).where(RetiredSlug.slug == slug))).first()
    return retired is not None


async def list_songs(session: AsyncSession, *, playlist_id: str) -> list[Song]:
    stmt = (
        select(Song)
        .where(Song.playlist_id == playlist_id)
        .order_by(
            _col(Song.position).asc(),
            _col(Song.created_at).asc(),
            _col(Song.id).asc(),
        )
    )
    return list((await session.exec(stmt)).all())


async def get_max_position(session: AsyncSession, *, playlist_id: str) -> int | None:
    stmt = select(func.max(Song.position)).where(Song.playlist_id == playlist_id)
    return (await session.exec(stmt)).one()


async def get_song(session: AsyncSession, *, song_id: str) -> Song | None:
    return (await session.exec(select(Song).where(Song.id == song_id))).first()


async def get_song_in_playlist(
    session: AsyncSession, *, playlist_id: str, song_id: str
) -> Song | None:
    stmt = select(Song).where(Song.playlist_id == playlist_id).where(Song.id == song_id)
    return (await session.exec(stmt)).first()


async def list_comments(session: AsyncSession, *, song_id: str) -> list[SongComment]:
    stmt = (
        select(SongComment)
        .where(SongComment.song_id == song_id)
        .order_by(_col(SongComment.created_at).desc(), _col(SongComment.id).desc())
    )
    return list((await session.exec(stmt)).all())


async def delete_comments_for_songs(session: AsyncSession, *, song_ids: list[str]) -> None:
    if not song_ids:
        return
    await session.exec(delete(SongComment).where(_col(SongComment.song_id).in_(song_ids)))


async def delete_songs_for_playlist(session: AsyncSession, *, playlist_id: str) -> list[str]:
    song_ids = list(
        (await session.exec(select(Song.id).where(Song.playlist_id == playlist_id))).all()
    )
    await delete_comments_for_songs(session, song_ids=song_ids)
    await session.exec(delete(Song).where(_col(Song.playlist_id) == playlist_id))
    return song_ids
