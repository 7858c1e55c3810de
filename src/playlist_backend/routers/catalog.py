from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from playlist_backend.cover import render_cover
from playlist_backend.integrations.catalog_search import CatalogSearch, get_catalog_search
from playlist_backend.integrations.lyrics import LyricsLookup, get_lyrics_lookup
from playlist_backend.schemas_catalog import (
    CatalogSearchResponse,
    CatalogSong,
    CoverResponse,
    LyricsResponse,
)

router = APIRouter(tags=["catalog"])


@router.get("/search", response_model=CatalogSearchResponse)
async def search_songs(
    q: str = Query(max_length=200),
    catalog: CatalogSearch = Depends(get_catalog_search),
) -> CatalogSearchResponse:
    result = await catalog.search(q)
    return CatalogSearchResponse(
        songs=[
            CatalogSong(
                external_id=s.external_id,
                title=s.title,
                artist=s.artist,
                album=s.album,
                artwork_url=s.artwork_url,
            )
            for s in result.songs
        ],
        available=result.available,
    )


@router.get("/lyrics", response_model=LyricsResponse)
async def get_lyrics(
    artist: str = Query(max_length=500),
    title: str = Query(max_length=500),
    lyrics: LyricsLookup = Depends(get_lyrics_lookup),
) -> LyricsResponse:
    result = await lyrics.fetch_lyrics(artist=artist, title=title)
    return LyricsResponse(lyrics=result.lyrics, available=result.available)


@router.get("/covers", response_model=CoverResponse)
async def get_cover(name: str = Query(max_length=1000)) -> CoverResponse:
    return CoverResponse(cover_url=render_cover(name))
