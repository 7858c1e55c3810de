"""Per-song discussion. Open to anyone holding the song id."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from playlist_backend.db import get_session
from playlist_backend.models import SongComment as SongCommentRow
from playlist_backend.schemas_playlists import (
    SongComment,
    SongCommentCreateRequest,
    SongCommentList,
)
from playlist_backend.services import comments_service

router = APIRouter(tags=["comments"])


def _to_comment(row: SongCommentRow) -> SongComment:
    return SongComment(
        id=row.id,
        song_id=row.song_id,
        author_name=row.author_name,
        body=row.body,
        created_at=row.created_at,
    )


@router.get("/songs/{song_id}/comments", response_model=SongCommentList)
async def list_comments(
    song_id: str,
    session: AsyncSession = Depends(get_session),
) -> SongCommentList:
    rows = await comments_service.list_comments(session=session, song_id=song_id)
    return SongCommentList(comments=[_to_comment(r) for r in rows])


@router.post(
    "/songs/{song_id}/comments",
    response_model=SongComment,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    song_id: str,
    payload: SongCommentCreateRequest,
    session: AsyncSession = Depends(get_session),
) -> SongComment:
    row = await comments_service.add_comment(
        session=session,
        song_id=song_id,
        author_name=payload.author_name,
        body=payload.body,
    )
    return _to_comment(row)
