from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

import httpx
import pytest
from alembic import command
from alembic.config import Config

from playlist_backend.config import settings
from playlist_backend.db import reset_engine_cache
from playlist_backend.log_redaction import redact_query_string
from playlist_backend.main import app  # pyright: ignore[reportMissingTypeStubs]


def test_redact_query_string_masks_pin_and_secret_only() -> None:
    assert redact_query_string("") == ""
    assert redact_query_string("pin=4821") == "pin=***"
    assert redact_query_string("q=holiday&PIN=4821&secret=s&x=1") == "q=holiday&PIN=***&secret=***&x=1"
    assert redact_query_string("q=pin%3D4821") == "q=pin%3D4821"
    assert redact_query_string("pin") == "pin=***"


@pytest.mark.anyio
async def test_access_log_never_contains_the_pin(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="playlist_backend.access")
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        r = await client.get("/api/v1/covers", params={"name": "x", "pin": "4821"})
    assert r.status_code == 200

    records = [rec for rec in caplog.records if rec.name == "playlist_backend.access"]
    assert records
    text = "\n".join(rec.getMessage() for rec in records)
    assert "4821" not in text
    assert "pin=***" in text
    assert "/api/v1/covers" in text


def _alembic_upgrade_head() -> None:
    cfg = Config("alembic.ini")
    command.upgrade(cfg, "head")


@pytest.mark.anyio
async def test_failed_write_logs_hide_bound_parameters(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    old_db = settings.database_url
    db_file = tmp_path / "test-log-redaction-locked.db"
    try:
        settings.database_url = f"sqlite:///{db_file}"
        reset_engine_cache()
        _alembic_upgrade_head()
        # Alembic's fileConfig replaces the root handlers; re-attach capture.
        logging.getLogger().addHandler(caplog.handler)

        caplog.set_level(logging.INFO)

        # A second writer holding the lock makes the INSERT fail after the busy timeout.
        blocker = sqlite3.connect(str(db_file), timeout=0, isolation_level=None)
        try:
            blocker.execute("BEGIN IMMEDIATE")
            transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                r = await client.post(
                    "/api/v1/playlists",
                    json={"name": "Road Trip", "is_protected": True, "pin": "4821"},
                )
        finally:
            blocker.execute("ROLLBACK")
            blocker.close()

        assert r.status_code == 500
        assert r.json()["error"] == "internal_error"

        formatter = logging.Formatter()
        text = "\n".join(formatter.format(rec) for rec in caplog.records)
        assert "INSERT INTO playlists" in text
        assert "SQL parameters hidden" in text
        assert "'4821'" not in text
    finally:
        logging.getLogger().removeHandler(caplog.handler)
        settings.database_url = old_db
        reset_engine_cache()
