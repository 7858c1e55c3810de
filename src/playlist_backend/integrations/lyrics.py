from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

import httpx

from playlist_backend.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LyricsResult:
    # lyrics=None with available=True means the provider has no lyrics for the song.
    lyrics: str | None
    available: bool = True


NOT_FOUND = LyricsResult(lyrics=None, available=True)
UNAVAILABLE = LyricsResult(lyrics=None, available=False)


class LyricsLookup(Protocol):
    async def fetch_lyrics(self, *, artist: str, title: str) -> LyricsResult: ...


class HttpxLyricsLookup:
    """lyrics.ovh client: GET {base}/v1/{artist}/{title} -> {"lyrics": "..."}."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._client = client

    async def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.get(url)

    async def fetch_lyrics(self, *, artist: str, title: str) -> LyricsResult:
        artist_v = (artist or "").strip()
        title_v = (title or "").strip()
        if not artist_v or not title_v:
            return NOT_FOUND

        url = f"{self._base_url}/v1/{quote(artist_v, safe='')}/{quote(title_v, safe='')}"
        try:
            resp = await self._get(url)
        except httpx.HTTPError as e:
            logger.warning("lyrics request failed: %s", e.__class__.__name__)
            return UNAVAILABLE

        if resp.status_code == 404:
            return NOT_FOUND
        if not 200 <= resp.status_code < 300:
            logger.warning("lyrics lookup failed status=%s", resp.status_code)
            return UNAVAILABLE

        try:
            data = resp.json()
        except ValueError:
            logger.warning("lyrics lookup returned an unparsable payload")
            return UNAVAILABLE

        lyrics = data.get("lyrics") if isinstance(data, dict) else None
        if not isinstance(lyrics, str) or not lyrics.strip():
            return NOT_FOUND
        return LyricsResult(lyrics=lyrics, available=True)


def get_lyrics_lookup() -> LyricsLookup:
    return HttpxLyricsLookup(
        base_url=settings.lyrics_base_url,
        timeout_seconds=settings.upstream_request_timeout_seconds,
    )
