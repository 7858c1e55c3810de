from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Final

from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from playlist_backend.access_guard import require_access
from playlist_backend.config import settings
from playlist_backend.db import run_in_transaction
from playlist_backend.domain.ordering import sort_songs
from playlist_backend.errors import (
    ConflictError,
    InvalidFieldsError,
    InvalidItemFieldsError,
    InvalidNameError,
    InvalidPinFormatError,
    NotFoundError,
)
from playlist_backend.identifiers import generate_pin, generate_slug, new_id
from playlist_backend.models import Playlist, RetiredSlug, Song, utc_now
from playlist_backend.repositories import playlists_repo
from playlist_backend.schemas_playlists import PlaylistUpdateRequest
from playlist_backend.services import ordering_service

logger = logging.getLogger(__name__)

NAME_MAX_LEN: Final = 100
DESCRIPTION_MAX_LEN: Final = 500
SONG_TEXT_MAX_LEN: Final = 500
ARTWORK_URL_MAX_LEN: Final = 2000
EXTERNAL_ID_MAX_LEN: Final = 128

_PIN_RE = re.compile(r"[0-9]{4}")


class _Unset(Enum):
    UNSET = "UNSET"


UNSET: Final = _Unset.UNSET


@dataclass(frozen=True)
class MetadataPatch:
    """Partial metadata update.

    name: UNSET keeps the current name, a string replaces it.
    description: UNSET keeps it, None clears it, a string replaces it.
    """

    name: str | _Unset = UNSET
    description: str | None | _Unset = UNSET

    @classmethod
    def from_request(cls, payload: PlaylistUpdateRequest) -> "MetadataPatch":
        changed = set(payload.model_fields_set)

        name: str | _Unset = UNSET
        if "name" in changed and payload.name is not None and payload.name.strip():
            name = payload.name.strip()

        description: str | None | _Unset = UNSET
        if "description" in changed:
            description = (payload.description or "").strip() or None

        return cls(name=name, description=description)


@dataclass(frozen=True)
class SongFields:
    title: str
    artist: str
    album: str | None = None
    artwork_url: str | None = None
    external_id: str | None = None


class _SlugTaken(Exception):
    pass


def _validate_name(name: str | None) -> str:
    v = (name or "").strip()
    if not v:
        raise InvalidNameError("name is required")
    if len(v) > NAME_MAX_LEN:
        raise InvalidNameError(f"name must be at most {NAME_MAX_LEN} characters")
    return v


def _validate_description(description: str | None) -> str | None:
    v = (description or "").strip()
    if not v:
        return None
    if len(v) > DESCRIPTION_MAX_LEN:
        raise InvalidFieldsError(
            f"description must be at most {DESCRIPTION_MAX_LEN} characters",
            details={"field": "description"},
        )
    return v


def _optional_text(value: str | None, *, field: str, max_len: int) -> str | None:
    v = (value or "").strip()
    if not v:
        return None
    if len(v) > max_len:
        raise InvalidItemFieldsError(
            f"{field} must be at most {max_len} characters", details={"field": field}
        )
    return v


def _validate_song_fields(fields: SongFields) -> SongFields:
    title = (fields.title or "").strip()
    artist = (fields.artist or "").strip()
    if not title or not artist:
        raise InvalidItemFieldsError("title and artist are required")
    for field, value in (("title", title), ("artist", artist)):
        if len(value) > SONG_TEXT_MAX_LEN:
            raise InvalidItemFieldsError(
                f"{field} must be at most {SONG_TEXT_MAX_LEN} characters",
                details={"field": field},
            )
    return SongFields(
        title=title,
        artist=artist,
        album=_optional_text(fields.album, field="album", max_len=SONG_TEXT_MAX_LEN),
        artwork_url=_optional_text(
            fields.artwork_url, field="artwork_url", max_len=ARTWORK_URL_MAX_LEN
        ),
        external_id=_optional_text(
            fields.external_id, field="external_id", max_len=EXTERNAL_ID_MAX_LEN
        ),
    )


def _resolve_create_pin(*, is_protected: bool, pin: str | None) -> str | None:
    if not is_protected:
        # An unprotected playlist never stores a PIN, even if one was sent.
        return None
    if pin is None:
        return generate_pin()
    if not _PIN_RE.fullmatch(pin):
        raise InvalidPinFormatError("pin must be exactly 4 digits")
    return pin


async def _load_playlist(session: AsyncSession, *, slug: str) -> Playlist:
    playlist = await playlists_repo.get_playlist_by_slug(session, slug=slug)
    if playlist is None:
        raise NotFoundError("playlist not found")
    return playlist


def _touch(session: AsyncSession, playlist: Playlist) -> None:
    playlist.updated_at = utc_now()
    session.add(playlist)


async def create_playlist(
    session: AsyncSession,
    *,
    name: str,
    is_protected: bool,
    pin: str | None = None,
    description: str | None = None,
) -> Playlist:
    """Create a playlist; the returned row carries the PIN (show it once)."""

    name_v = _validate_name(name)
    description_v = _validate_description(description)
    pin_v = _resolve_create_pin(is_protected=is_protected, pin=pin)

    attempts = max(0, settings.slug_max_attempts)
    for attempt in range(1, attempts + 1):
        slug = generate_slug()

        async def _apply() -> Playlist:
            if await playlists_repo.slug_taken(session, slug=slug):
                raise _SlugTaken(slug)
            now = utc_now()
            playlist = Playlist(
                id=new_id(),
                slug=slug,
                name=name_v,
                description=description_v,
                is_protected=is_protected,
                pin=pin_v,
                created_at=now,
                updated_at=now,
            )
            session.add(playlist)
            return playlist

        try:
            playlist = await run_in_transaction(session, _apply)
        except (_SlugTaken, IntegrityError):
            logger.warning("slug collision attempt=%d/%d", attempt, attempts)
            continue

        logger.info("playlist created slug=%s protected=%s", playlist.slug, is_protected)
        return playlist

    raise ConflictError("could not allocate a unique slug")


async def get_playlist_view(
    session: AsyncSession,
    *,
    slug: str,
    pin: str | None,
) -> tuple[Playlist, list[Song]]:
    playlist = await _load_playlist(session, slug=slug)
    require_access(playlist, pin)
    songs = await playlists_repo.list_songs(session, playlist_id=playlist.id)
    return playlist, sort_songs(songs)


async def update_playlist_metadata(
    session: AsyncSession,
    *,
    slug: str,
    pin: str | None,
    patch: MetadataPatch,
) -> Playlist:
    async def _apply() -> Playlist:
        playlist = await _load_playlist(session, slug=slug)
        require_access(playlist, pin)

        if not isinstance(patch.name, _Unset):
            playlist.name = _validate_name(patch.name)
        if not isinstance(patch.description, _Unset):
            playlist.description = _validate_description(patch.description)

        _touch(session, playlist)
        return playlist

    return await run_in_transaction(session, _apply)


async def add_song(
    session: AsyncSession,
    *,
    slug: str,
    pin: str | None,
    fields: SongFields,
) -> Song:
    fields_v = _validate_song_fields(fields)

    async def _apply() -> Song:
        playlist = await _load_playlist(session, slug=slug)
        require_access(playlist, pin)

        position = await ordering_service.next_position(session, playlist_id=playlist.id)
        song = Song(
            id=new_id(),
            playlist_id=playlist.id,
            title=fields_v.title,
            artist=fields_v.artist,
            album=fields_v.album,
            artwork_url=fields_v.artwork_url,
            external_id=fields_v.external_id,
            position=position,
            created_at=utc_now(),
        )
        session.add(song)
        _touch(session, playlist)
        return song

    attempts = max(0, settings.song_insert_max_attempts)
    for attempt in range(1, attempts + 1):
        try:
            return await run_in_transaction(session, _apply)
        except IntegrityError:
            # Another append won the same position; recompute and try again.
            logger.warning("song position conflict slug=%s attempt=%d/%d", slug, attempt, attempts)

    raise ConflictError("concurrent update; please retry")


async def remove_song(
    session: AsyncSession,
    *,
    slug: str,
    pin: str | None,
    song_id: str,
) -> None:
    async def _apply() -> None:
        playlist = await _load_playlist(session, slug=slug)
        require_access(playlist, pin)

        # Scoped to this playlist: a song id from another playlist is simply "not found".
        song = await playlists_repo.get_song_in_playlist(
            session, playlist_id=playlist.id, song_id=song_id
        )
        if song is None:
            raise NotFoundError("song not found in this playlist")

        await playlists_repo.delete_comments_for_songs(session, song_ids=[song.id])
        await session.delete(song)
        _touch(session, playlist)

    await run_in_transaction(session, _apply)


async def reorder_songs(
    session: AsyncSession,
    *,
    slug: str,
    pin: str | None,
    song_ids: Sequence[str],
) -> list[Song]:
    async def _apply() -> list[Song]:
        playlist = await _load_playlist(session, slug=slug)
        require_access(playlist, pin)

        songs = await ordering_service.apply_reorder(
            session, playlist_id=playlist.id, ordered_song_ids=song_ids
        )
        _touch(session, playlist)
        return songs

    return await run_in_transaction(session, _apply)


async def delete_playlist(session: AsyncSession, *, slug: str, pin: str | None) -> None:
    async def _apply() -> int:
        playlist = await _load_playlist(session, slug=slug)
        require_access(playlist, pin)

        song_ids = await playlists_repo.delete_songs_for_playlist(
            session, playlist_id=playlist.id
        )
        await session.delete(playlist)
        session.add(RetiredSlug(slug=playlist.slug, retired_at=utc_now()))
        return len(song_ids)

    removed = await run_in_transaction(session, _apply)
    logger.info("playlist deleted slug=%s songs=%d", slug, removed)
