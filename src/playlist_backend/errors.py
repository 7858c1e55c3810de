"""Typed failures of the playlist core.

Every error is an HTTPException carrying a stable `code`; the error handlers
render it as ErrorResponse.error so clients can branch on the code rather than
on status or message text. Messages never include the stored PIN.
"""

from __future__ import annotations

from typing import ClassVar

from fastapi import HTTPException, status


class PlaylistError(HTTPException):
    code: ClassVar[str] = "bad_request"
    status_code_default: ClassVar[int] = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, details: object | None = None) -> None:
        detail: object = message if details is None else {"message": message, "details": details}
        super().__init__(status_code=self.status_code_default, detail=detail)
        self.message = message
        self.details = details


# Validation (caller-fixable).


class InvalidNameError(PlaylistError):
    code = "invalid_name"


class InvalidPinFormatError(PlaylistError):
    code = "invalid_pin_format"


class InvalidItemFieldsError(PlaylistError):
    code = "invalid_item_fields"


class InvalidFieldsError(PlaylistError):
    code = "invalid_fields"


class InvalidReorderSetError(PlaylistError):
    # 409: usually means the client's view of the playlist is stale.
    code = "invalid_reorder_set"
    status_code_default = status.HTTP_409_CONFLICT


# Authorization.


class PinRequiredError(PlaylistError):
    code = "pin_required"
    status_code_default = status.HTTP_401_UNAUTHORIZED


class PinInvalidError(PlaylistError):
    code = "pin_invalid"
    status_code_default = status.HTTP_403_FORBIDDEN


class NotFoundError(PlaylistError):
    code = "not_found"
    status_code_default = status.HTTP_404_NOT_FOUND


class ConflictError(PlaylistError):
    code = "conflict"
    status_code_default = status.HTTP_409_CONFLICT
