"""init schema (playlists + songs + song comments + retired slugs)

Revision ID: 20261017_0001
Revises: None
Create Date: 2026-10-17 00:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def _table_exists(table_name: str) -> bool:
    bind = op.get_bind()
    insp = inspect(bind)
    return table_name in insp.get_table_names()


def upgrade() -> None:
    if not _table_exists("playlists"):
        op.create_table(
            "playlists",
            sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
            sa.Column("slug", sa.String(length=16), nullable=False),
            sa.Column("name", sa.String(length=100), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("is_protected", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("pin", sa.String(length=4), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index("ix_playlists_slug", "playlists", ["slug"], unique=True)
        op.create_index("ix_playlists_is_protected", "playlists", ["is_protected"], unique=False)
        op.create_index("ix_playlists_created_at", "playlists", ["created_at"], unique=False)
        op.create_index("ix_playlists_updated_at", "playlists", ["updated_at"], unique=False)

    if not _table_exists("songs"):
        op.create_table(
            "songs",
            sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
            sa.Column(
                "playlist_id",
                sa.String(length=36),
                sa.ForeignKey("playlists.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("title", sa.String(length=500), nullable=False),
            sa.Column("artist", sa.String(length=500), nullable=False),
            sa.Column("album", sa.String(length=500), nullable=True),
            sa.Column("artwork_url", sa.String(length=2000), nullable=True),
            sa.Column("external_id", sa.String(length=128), nullable=True),
            sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.UniqueConstraint("playlist_id", "position", name="uq_songs_playlist_id_position"),
        )
        op.create_index("ix_songs_playlist_id", "songs", ["playlist_id"], unique=False)
        op.create_index("ix_songs_position", "songs", ["position"], unique=False)
        op.create_index("ix_songs_created_at", "songs", ["created_at"], unique=False)

    if not _table_exists("song_comments"):
        op.create_table(
            "song_comments",
            sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
            sa.Column(
                "song_id",
                sa.String(length=36),
                sa.ForeignKey("songs.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("author_name", sa.String(length=50), nullable=False),
            sa.Column("body", sa.Text(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index("ix_song_comments_song_id", "song_comments", ["song_id"], unique=False)
        op.create_index(
            "ix_song_comments_created_at", "song_comments", ["created_at"], unique=False
        )

    if not _table_exists("retired_slugs"):
        op.create_table(
            "retired_slugs",
            sa.Column("slug", sa.String(length=16), primary_key=True, nullable=False),
            sa.Column("retired_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index("ix_retired_slugs_retired_at", "retired_slugs", ["retired_at"], unique=False)


def downgrade() -> None:
    op.drop_table("retired_slugs")
    op.drop_table("song_comments")
    op.drop_table("songs")
    op.drop_table("playlists")
