"""Playlists and their songs.

The PIN for a protected playlist may come from the JSON body (`pin`), the
`X-Playlist-Pin` header or the `pin` query parameter, checked in that order.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from playlist_backend.cover import render_cover
from playlist_backend.db import get_session
from playlist_backend.models import Playlist as PlaylistRow
from playlist_backend.models import Song as SongRow
from playlist_backend.schemas_common import OkResponse
from playlist_backend.schemas_playlists import (
    Playlist,
    PlaylistCreated,
    PlaylistCreateRequest,
    PlaylistUpdateRequest,
    PlaylistView,
    Song,
    SongCreateRequest,
    SongList,
    SongReorderRequest,
)
from playlist_backend.services import playlists_service
from playlist_backend.services.playlists_service import MetadataPatch, SongFields

router = APIRouter(prefix="/playlists", tags=["playlists"])


def supplied_pin(
    x_playlist_pin: str | None = Header(default=None, alias="X-Playlist-Pin"),
    pin: str | None = Query(default=None),
) -> str | None:
    return _first_pin(x_playlist_pin, pin)


def _first_pin(*candidates: str | None) -> str | None:
    for candidate in candidates:
        if candidate:
            return candidate
    return None


def _to_song(row: SongRow) -> Song:
    return Song(
        id=row.id,
        playlist_id=row.playlist_id,
        title=row.title,
        artist=row.artist,
        album=row.album,
        artwork_url=row.artwork_url,
        external_id=row.external_id,
        position=row.position,
        created_at=row.created_at,
    )


def _playlist_fields(row: PlaylistRow) -> dict[str, object]:
    return {
        "id": row.id,
        "slug": row.slug,
        "name": row.name,
        "description": row.description,
        "is_protected": bool(row.is_protected),
        "created_at": row.created_at,
        "updated_at": row.updated_at,
    }


def _to_playlist(row: PlaylistRow) -> Playlist:
    return Playlist.model_validate(_playlist_fields(row))


@router.post("", response_model=PlaylistCreated, status_code=status.HTTP_201_CREATED)
async def create_playlist(
    payload: PlaylistCreateRequest,
    session: AsyncSession = Depends(get_session),
) -> PlaylistCreated:
    row = await playlists_service.create_playlist(
        session=session,
        name=payload.name,
        description=payload.description,
        is_protected=payload.is_protected,
        pin=payload.pin,
    )
    return PlaylistCreated.model_validate({**_playlist_fields(row), "pin": row.pin})


@router.get("/{slug}", response_model=PlaylistView)
async def get_playlist(
    slug: str,
    pin: str | None = Depends(supplied_pin),
    session: AsyncSession = Depends(get_session),
) -> PlaylistView:
    row, songs = await playlists_service.get_playlist_view(session=session, slug=slug, pin=pin)
    return PlaylistView.model_validate(
        {
            **_playlist_fields(row),
            "cover_url": render_cover(row.name),
            "songs": [_to_song(s) for s in songs],
        }
    )


@router.patch("/{slug}", response_model=Playlist)
async def update_playlist(
    slug: str,
    payload: PlaylistUpdateRequest,
    pin: str | None = Depends(supplied_pin),
    session: AsyncSession = Depends(get_session),
) -> Playlist:
    row = await playlists_service.update_playlist_metadata(
        session=session,
        slug=slug,
        pin=_first_pin(payload.pin, pin),
        patch=MetadataPatch.from_request(payload),
    )
    return _to_playlist(row)


@router.delete("/{slug}", response_model=OkResponse)
async def delete_playlist(
    slug: str,
    pin: str | None = Depends(supplied_pin),
    session: AsyncSession = Depends(get_session),
) -> OkResponse:
    await playlists_service.delete_playlist(session=session, slug=slug, pin=pin)
    return OkResponse()


@router.post("/{slug}/songs", response_model=Song, status_code=status.HTTP_201_CREATED)
async def add_song(
    slug: str,
    payload: SongCreateRequest,
    pin: str | None = Depends(supplied_pin),
    session: AsyncSession = Depends(get_session),
) -> Song:
    row = await playlists_service.add_song(
        session=session,
        slug=slug,
        pin=_first_pin(payload.pin, pin),
        fields=SongFields(
            title=payload.title,
            artist=payload.artist,
            album=payload.album,
            artwork_url=payload.artwork_url,
            external_id=payload.external_id,
        ),
    )
    return _to_song(row)


@router.put("/{slug}/songs/order", response_model=SongList)
async def reorder_songs(
    slug: str,
    payload: SongReorderRequest,
    pin: str | None = Depends(supplied_pin),
    session: AsyncSession = Depends(get_session),
) -> SongList:
    rows = await playlists_service.reorder_songs(
        session=session,
        slug=slug,
        pin=_first_pin(payload.pin, pin),
        song_ids=payload.song_ids,
    )
    return SongList(songs=[_to_song(r) for r in rows])


@router.delete("/{slug}/songs/{song_id}", response_model=OkResponse)
async def remove_song(
    slug: str,
    song_id: str,
    pin: str | None = Depends(supplied_pin),
    session: AsyncSession = Depends(get_session),
) -> OkResponse:
    await playlists_service.remove_song(session=session, slug=slug, pin=pin, song_id=song_id)
    return OkResponse()
