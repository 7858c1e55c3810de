from __future__ import annotations

from pathlib import Path
from typing import Any

import httpx
import pytest
from alembic import command
from alembic.config import Config

from playlist_backend.config import settings
from playlist_backend.db import reset_engine_cache
from playlist_backend.main import app  # pyright: ignore[reportMissingTypeStubs]
from playlist_backend.schemas_common import ErrorResponse


def _make_async_client() -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


def _alembic_upgrade_head() -> None:
    cfg = Config("alembic.ini")
    command.upgrade(cfg, "head")


def _pin(pin: str) -> dict[str, str]:
    return {"X-Playlist-Pin": pin}


def _assert_no_pin(payload: Any) -> None:
    # Recursively: no response other than create may carry a "pin" key.
    if isinstance(payload, dict):
        assert "pin" not in payload
        for value in payload.values():
            _assert_no_pin(value)
    elif isinstance(payload, list):
        for value in payload:
            _assert_no_pin(value)


@pytest.mark.anyio
async def test_protected_playlist_end_to_end(tmp_path: Path) -> None:
    old_db = settings.database_url
    try:
        settings.database_url = f"sqlite:///{tmp_path / 'test-playlists-api.db'}"
        reset_engine_cache()
        _alembic_upgrade_head()

        async with _make_async_client() as client:
            r_create = await client.post(
                "/api/v1/playlists",
                json={"name": "Road Trip", "is_protected": True, "pin": "4821"},
            )
            assert r_create.status_code == 201
            created = r_create.json()
            assert created["pin"] == "4821"
            assert created["is_protected"] is True
            slug = created["slug"]
            assert len(slug) == 8

            r_missing = await client.get(f"/api/v1/playlists/{slug}")
            assert r_missing.status_code == 401
            err_missing = ErrorResponse.model_validate(r_missing.json())
            assert err_missing.error == "pin_required"
            assert err_missing.details == {"requires_pin": True}
            assert err_missing.request_id == r_missing.headers["x-request-id"]

            r_wrong = await client.get(f"/api/v1/playlists/{slug}", headers=_pin("0000"))
            assert r_wrong.status_code == 403
            assert ErrorResponse.model_validate(r_wrong.json()).error == "pin_invalid"

            # An overlong wrong PIN is still just a wrong PIN.
            r_long_query = await client.get(f"/api/v1/playlists/{slug}", params={"pin": "9" * 100})
            assert r_long_query.status_code == 403
            assert r_long_query.json()["error"] == "pin_invalid"

            r_long_body = await client.post(
                f"/api/v1/playlists/{slug}/songs",
                json={"title": "T", "artist": "A", "pin": "1" * 100},
            )
            assert r_long_body.status_code == 403
            assert r_long_body.json()["error"] == "pin_invalid"

            # The body PIN wins over header and query.
            r_song1 = await client.post(
                f"/api/v1/playlists/{slug}/songs",
                headers=_pin("0000"),
                json={"title": "Holiday", "artist": "Green Day", "pin": "4821"},
            )
            assert r_song1.status_code == 201
            song1 = r_song1.json()
            assert song1["position"] == 0

            r_song2 = await client.post(
                f"/api/v1/playlists/{slug}/songs",
                params={"pin": "4821"},
                json={"title": "Roadhouse Blues", "artist": "The Doors"},
            )
            assert r_song2.status_code == 201
            song2 = r_song2.json()
            assert song2["position"] == 1

            r_bad_song = await client.post(
                f"/api/v1/playlists/{slug}/songs",
                headers=_pin("4821"),
                json={"title": " ", "artist": "x"},
            )
            assert r_bad_song.status_code == 400
            assert r_bad_song.json()["error"] == "invalid_item_fields"

            r_order = await client.put(
                f"/api/v1/playlists/{slug}/songs/order",
                headers=_pin("4821"),
                json={"song_ids": [song2["id"], song1["id"]]},
            )
            assert r_order.status_code == 200
            assert [s["id"] for s in r_order.json()["songs"]] == [song2["id"], song1["id"]]
            assert [s["position"] for s in r_order.json()["songs"]] == [0, 1]

            r_bad_order = await client.put(
                f"/api/v1/playlists/{slug}/songs/order",
                headers=_pin("4821"),
                json={"song_ids": [song2["id"]]},
            )
            assert r_bad_order.status_code == 409
            bad_order = ErrorResponse.model_validate(r_bad_order.json())
            assert bad_order.error == "invalid_reorder_set"
            assert isinstance(bad_order.details, dict)
            assert bad_order.details["missing_ids"] == [song1["id"]]

            r_patch = await client.patch(
                f"/api/v1/playlists/{slug}",
                json={"description": "windows down", "pin": "4821"},
            )
            assert r_patch.status_code == 200
            patched = r_patch.json()
            assert patched["name"] == "Road Trip"
            assert patched["description"] == "windows down"

            r_view = await client.get(f"/api/v1/playlists/{slug}", params={"pin": "4821"})
            assert r_view.status_code == 200
            view = r_view.json()
            assert [s["title"] for s in view["songs"]] == ["Roadhouse Blues", "Holiday"]
            assert view["cover_url"].startswith("data:image/svg+xml;base64,")

            # Reads are idempotent.
            r_view2 = await client.get(f"/api/v1/playlists/{slug}", headers=_pin("4821"))
            assert r_view2.json() == view

            for payload in (r_song1.json(), r_order.json(), patched, view):
                _assert_no_pin(payload)

            r_remove = await client.delete(
                f"/api/v1/playlists/{slug}/songs/{song1['id']}", headers=_pin("4821")
            )
            assert r_remove.status_code == 200

            r_delete_no_pin = await client.delete(f"/api/v1/playlists/{slug}")
            assert r_delete_no_pin.status_code == 401

            r_delete = await client.delete(f"/api/v1/playlists/{slug}", headers=_pin("4821"))
            assert r_delete.status_code == 200
            assert r_delete.json() == {"ok": True}

            r_gone = await client.get(f"/api/v1/playlists/{slug}", headers=_pin("4821"))
            assert r_gone.status_code == 404
            assert r_gone.json()["error"] == "not_found"
    finally:
        settings.database_url = old_db
        reset_engine_cache()


@pytest.mark.anyio
async def test_unprotected_playlist_and_create_validation(tmp_path: Path) -> None:
    old_db = settings.database_url
    try:
        settings.database_url = f"sqlite:///{tmp_path / 'test-playlists-api-open.db'}"
        reset_engine_cache()
        _alembic_upgrade_head()

        async with _make_async_client() as client:
            r_create = await client.post("/api/v1/playlists", json={"name": "Open", "pin": "1234"})
            assert r_create.status_code == 201
            created = r_create.json()
            assert created["is_protected"] is False
            assert created.get("pin") is None
            slug = created["slug"]

            r_view = await client.get(f"/api/v1/playlists/{slug}")
            assert r_view.status_code == 200
            assert r_view.json()["songs"] == []

            # Any (or no) PIN works on an unprotected playlist.
            r_song = await client.post(
                f"/api/v1/playlists/{slug}/songs",
                headers={"X-Playlist-Pin": "9999"},
                json={"title": "Song", "artist": "Band"},
            )
            assert r_song.status_code == 201

            r_bad_name = await client.post("/api/v1/playlists", json={"name": "  "})
            assert r_bad_name.status_code == 400
            assert r_bad_name.json()["error"] == "invalid_name"

            r_bad_pin = await client.post(
                "/api/v1/playlists", json={"name": "P", "is_protected": True, "pin": "12ab"}
            )
            assert r_bad_pin.status_code == 400
            assert r_bad_pin.json()["error"] == "invalid_pin_format"

            r_generated = await client.post(
                "/api/v1/playlists", json={"name": "P", "is_protected": True}
            )
            assert r_generated.status_code == 201
            generated_pin = r_generated.json()["pin"]
            assert len(generated_pin) == 4 and generated_pin.isdigit()

            r_unknown = await client.get("/api/v1/playlists/nope0000")
            assert r_unknown.status_code == 404

            r_validation = await client.post("/api/v1/playlists", json={})
            assert r_validation.status_code == 422
            assert r_validation.json()["error"] == "validation_error"
    finally:
        settings.database_url = old_db
        reset_engine_cache()


@pytest.mark.anyio
async def test_health_and_request_id_echo() -> None:
    async with _make_async_client() as client:
        r = await client.get("/health", headers={"X-Request-Id": "req-123"})
        assert r.status_code == 200
        assert r.json() == {"ok": True}
        assert r.headers["x-request-id"] == "req-123"

        r_generated = await client.get("/health")
        assert r_generated.headers["x-request-id"]

        r_unknown = await client.get("/api/v1/does-not-exist")
        assert r_unknown.status_code == 404
        assert r_unknown.json()["error"] == "not_found"
