from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


# Request bounds here only cap payload size; the service layer owns the
# trimmed-length rules and raises typed errors for them.


class PlaylistCreateRequest(BaseModel):
    name: str = Field(max_length=1000)
    description: str | None = Field(default=None, max_length=5000)
    is_protected: bool = False
    # Optional: when omitted for a protected playlist the server generates one.
    pin: str | None = None


class PlaylistUpdateRequest(BaseModel):
    # Absent = keep; blank name = keep; null/blank description = clear.
    name: str | None = Field(default=None, max_length=1000)
    description: str | None = Field(default=None, max_length=5000)
    pin: str | None = None


class SongCreateRequest(BaseModel):
    title: str = Field(max_length=1000)
    artist: str = Field(max_length=1000)
    album: str | None = Field(default=None, max_length=1000)
    artwork_url: str | None = Field(default=None, max_length=4000)
    external_id: str | None = Field(default=None, max_length=256)
    pin: str | None = None


class SongReorderRequest(BaseModel):
    song_ids: list[str] = Field(default_factory=list, max_length=10_000)
    pin: str | None = None


class SongCommentCreateRequest(BaseModel):
    author_name: str = Field(max_length=1000)
    body: str = Field(max_length=5000)


class Song(BaseModel):
    id: str
    playlist_id: str
    title: str
    artist: str
    album: str | None = None
    artwork_url: str | None = None
    external_id: str | None = None
    position: int
    created_at: datetime


class SongList(BaseModel):
    songs: list[Song] = Field(default_factory=list)


class Playlist(BaseModel):
    """Playlist metadata. Deliberately has no pin field."""

    id: str
    slug: str
    name: str
    description: str | None = None
    is_protected: bool
    created_at: datetime
    updated_at: datetime


class PlaylistCreated(Playlist):
    # Only ever returned once, by the create call.
    pin: str | None = None


class PlaylistView(Playlist):
    cover_url: str
    songs: list[Song] = Field(default_factory=list)


class SongComment(BaseModel):
    id: str
    song_id: str
    author_name: str
    body: str
    created_at: datetime


class SongCommentList(BaseModel):
    comments: list[SongComment] = Field(default_factory=list)
