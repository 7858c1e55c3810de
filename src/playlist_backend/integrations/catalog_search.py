"""Song catalog search (iTunes Search API).

Best-effort collaborator: any upstream failure is reported as
`available=False` instead of raising, so a flaky provider never breaks the
playlist itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from playlist_backend.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogSong:
    external_id: str
    title: str
    artist: str
    album: str | None
    artwork_url: str | None


@dataclass(frozen=True)
class CatalogSearchResult:
    songs: list[CatalogSong] = field(default_factory=list)
    available: bool = True


UNAVAILABLE = CatalogSearchResult(songs=[], available=False)


class CatalogSearch(Protocol):
    async def search(self, query: str) -> CatalogSearchResult: ...


def _upgrade_artwork(url: object) -> str | None:
    if not isinstance(url, str) or not url:
        return None
    # Provider serves 100x100 by default; the same path serves larger renditions.
    return url.replace("100x100bb", "600x600bb")


def _parse_track(obj: dict[str, Any]) -> CatalogSong | None:
    track_id = obj.get("trackId")
    title = obj.get("trackName")
    artist = obj.get("artistName")
    if track_id is None or not isinstance(title, str) or not isinstance(artist, str):
        return None
    album = obj.get("collectionName")
    return CatalogSong(
        external_id=str(track_id),
        title=title,
        artist=artist,
        album=album if isinstance(album, str) else None,
        artwork_url=_upgrade_artwork(obj.get("artworkUrl100")),
    )


def parse_search_payload(data: object) -> list[CatalogSong]:
    if not isinstance(data, dict):
        raise ValueError("search payload is not an object")
    results = data.get("results")
    if not isinstance(results, list):
        raise ValueError("search payload has no results list")
    songs: list[CatalogSong] = []
    for obj in results:
        if not isinstance(obj, dict):
            continue
        song = _parse_track(obj)
        if song is not None:
            songs.append(song)
    return songs


class HttpxCatalogSearch:
    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float,
        limit: int,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._limit = limit
        self._client = client

    async def _get(self, url: str, params: dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, params=params)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.get(url, params=params)

    async def search(self, query: str) -> CatalogSearchResult:
        term = (query or "").strip()
        if not term:
            return CatalogSearchResult(songs=[], available=True)

        url = f"{self._base_url}/search"
        params: dict[str, Any] = {
            "term": term,
            "media": "music",
            "entity": "song",
            "limit": self._limit,
        }
        try:
            resp = await self._get(url, params)
        except httpx.HTTPError as e:
            logger.warning("catalog search request failed: %s", e.__class__.__name__)
            return UNAVAILABLE

        if not 200 <= resp.status_code < 300:
            logger.warning("catalog search failed status=%s", resp.status_code)
            return UNAVAILABLE

        try:
            songs = parse_search_payload(resp.json())
        except ValueError:
            # json decode errors are ValueError subclasses too.
            logger.warning("catalog search returned an unparsable payload")
            return UNAVAILABLE

        return CatalogSearchResult(songs=songs, available=True)


def get_catalog_search() -> CatalogSearch:
    return HttpxCatalogSearch(
        base_url=settings.catalog_search_base_url,
        timeout_seconds=settings.upstream_request_timeout_seconds,
        limit=settings.catalog_search_limit,
    )
