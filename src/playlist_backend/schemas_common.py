from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    ok: bool = True


class OkResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    """Pinned error contract for every API error.

    `error` is a stable machine code (e.g. pin_required, invalid_reorder_set);
    `message` is human readable; `details` is optional structured context.
    """

    error: str
    message: str
    request_id: str | None = None
    details: object | None = None
