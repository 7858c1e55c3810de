# basedpyright: reportAssignmentType=false
# basedpyright: reportIncompatibleVariableOverride=false

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Text, UniqueConstraint
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Playlist(SQLModel, table=True):
    __tablename__ = "playlists"  # pyright: ignore[reportAssignmentType,reportIncompatibleVariableOverride]

    id: str = Field(primary_key=True, min_length=1, max_length=36)
    # The only external locator; the internal id never leaves the API as a lookup key.
    slug: str = Field(index=True, unique=True, min_length=1, max_length=16)

    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    # Both fixed at creation. pin is set iff is_protected.
    is_protected: bool = Field(default=False, index=True)
    pin: Optional[str] = Field(default=None, max_length=4)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, index=True)


class Song(SQLModel, table=True):
    __tablename__ = "songs"  # pyright: ignore[reportAssignmentType,reportIncompatibleVariableOverride]
    __table_args__ = (
        # Backstop for concurrent appends racing to the same position.
        UniqueConstraint("playlist_id", "position", name="uq_songs_playlist_id_position"),
    )

    id: str = Field(primary_key=True, min_length=1, max_length=36)
    playlist_id: str = Field(
        index=True, foreign_key="playlists.id", ondelete="CASCADE", min_length=1, max_length=36
    )

    title: str = Field(min_length=1, max_length=500)
    artist: str = Field(min_length=1, max_length=500)
    album: Optional[str] = Field(default=None, max_length=500)
    artwork_url: Optional[str] = Field(default=None, max_length=2000)
    # Catalog id of the search provider (iTunes trackId).
    external_id: Optional[str] = Field(default=None, max_length=128)

    position: int = Field(default=0, index=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)


class SongComment(SQLModel, table=True):
    __tablename__ = "song_comments"  # pyright: ignore[reportAssignmentType,reportIncompatibleVariableOverride]

    id: str = Field(primary_key=True, min_length=1, max_length=36)
    song_id: str = Field(
        index=True, foreign_key="songs.id", ondelete="CASCADE", min_length=1, max_length=36
    )

    author_name: str = Field(min_length=1, max_length=50)
    body: str = Field(sa_column=Column(Text, nullable=False))

    created_at: datetime = Field(default_factory=utc_now, index=True)


class RetiredSlug(SQLModel, table=True):
    __tablename__ = "retired_slugs"  # pyright: ignore[reportAssignmentType,reportIncompatibleVariableOverride]

    # Slugs of deleted playlists; never handed out again.
    slug: str = Field(primary_key=True, min_length=1, max_length=16)
    retired_at: datetime = Field(default_factory=utc_now, index=True)
