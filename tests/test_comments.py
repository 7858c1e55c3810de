from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from alembic import command
from alembic.config import Config

from playlist_backend.config import settings
from playlist_backend.db import reset_engine_cache, session_scope
from playlist_backend.errors import InvalidFieldsError, NotFoundError
from playlist_backend.main import app  # pyright: ignore[reportMissingTypeStubs]
from playlist_backend.services import comments_service, playlists_service
from playlist_backend.services.playlists_service import SongFields


def _make_async_client() -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


def _alembic_upgrade_head() -> None:
    cfg = Config("alembic.ini")
    command.upgrade(cfg, "head")


async def _protected_song() -> tuple[str, str]:
    async with session_scope() as session:
        playlist = await playlists_service.create_playlist(
            session, name="Road Trip", is_protected=True, pin="4821"
        )
    async with session_scope() as session:
        song = await playlists_service.add_song(
            session,
            slug=playlist.slug,
            pin="4821",
            fields=SongFields(title="Holiday", artist="Green Day"),
        )
    return playlist.slug, song.id


@pytest.mark.anyio
async def test_comments_service_validation_and_order(tmp_path: Path) -> None:
    old_db = settings.database_url
    try:
        settings.database_url = f"sqlite:///{tmp_path / 'test-comments-service.db'}"
        reset_engine_cache()
        _alembic_upgrade_head()

        _slug, song_id = await _protected_song()

        async with session_scope() as session:
            first = await comments_service.add_comment(
                session, song_id=song_id, author_name="  ana ", body=" first "
            )
        assert first.author_name == "ana"
        assert first.body == "first"

        async with session_scope() as session:
            await comments_service.add_comment(
                session, song_id=song_id, author_name="bo", body="second"
            )

        async with session_scope() as session:
            comments = await comments_service.list_comments(session, song_id=song_id)
        assert [c.body for c in comments] == ["second", "first"]

        for author, body in (("", "x"), ("x", "  "), ("a" * 51, "x"), ("x", "b" * 501)):
            async with session_scope() as session:
                with pytest.raises(InvalidFieldsError):
                    await comments_service.add_comment(
                        session, song_id=song_id, author_name=author, body=body
                    )

        async with session_scope() as session:
            with pytest.raises(NotFoundError):
                await comments_service.add_comment(
                    session, song_id="no-such-song", author_name="a", body="b"
                )
        async with session_scope() as session:
            with pytest.raises(NotFoundError):
                await comments_service.list_comments(session, song_id="no-such-song")
    finally:
        settings.database_url = old_db
        reset_engine_cache()


@pytest.mark.anyio
async def test_comments_api_is_open_and_does_not_touch_playlist(tmp_path: Path) -> None:
    old_db = settings.database_url
    try:
        settings.database_url = f"sqlite:///{tmp_path / 'test-comments-api.db'}"
        reset_engine_cache()
        _alembic_upgrade_head()

        slug, song_id = await _protected_song()

        async with _make_async_client() as client:
            before = (
                await client.get(f"/api/v1/playlists/{slug}", headers={"X-Playlist-Pin": "4821"})
            ).json()

            # No PIN needed to discuss a song.
            r_add = await client.post(
                f"/api/v1/songs/{song_id}/comments",
                json={"author_name": "ana", "body": "great opener"},
            )
            assert r_add.status_code == 201
            assert r_add.json()["song_id"] == song_id

            r_list = await client.get(f"/api/v1/songs/{song_id}/comments")
            assert r_list.status_code == 200
            assert [c["body"] for c in r_list.json()["comments"]] == ["great opener"]

            r_bad = await client.post(
                f"/api/v1/songs/{song_id}/comments", json={"author_name": "ana", "body": " "}
            )
            assert r_bad.status_code == 400
            assert r_bad.json()["error"] == "invalid_fields"

            r_missing = await client.get("/api/v1/songs/nope/comments")
            assert r_missing.status_code == 404

            after = (
                await client.get(f"/api/v1/playlists/{slug}", headers={"X-Playlist-Pin": "4821"})
            ).json()
            assert after["updated_at"] == before["updated_at"]
    finally:
        settings.database_url = old_db
        reset_engine_cache()
