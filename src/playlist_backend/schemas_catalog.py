from __future__ import annotations

from pydantic import BaseModel, Field


class CatalogSong(BaseModel):
    external_id: str
    title: str
    artist: str
    album: str | None = None
    artwork_url: str | None = None


class CatalogSearchResponse(BaseModel):
    songs: list[CatalogSong] = Field(default_factory=list)
    # False when the upstream provider failed; an empty list alone means "no hits".
    available: bool = True


class LyricsResponse(BaseModel):
    lyrics: str | None = None
    available: bool = True


class CoverResponse(BaseModel):
    cover_url: str
