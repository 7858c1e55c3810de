from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Literal

from playlist_backend.errors import PinInvalidError, PinRequiredError
from playlist_backend.models import Playlist

DenyReason = Literal["pin_required", "pin_invalid"]


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: DenyReason | None = None


ALLOWED = AccessDecision(allowed=True)


def authorize(playlist: Playlist, supplied_pin: str | None) -> AccessDecision:
    """Decide whether a request may read or mutate `playlist`.

    Unprotected playlists are always open (a supplied PIN is ignored). For
    protected ones a missing PIN is distinguished from a wrong one so the
    client can prompt instead of reject. Stateless: no lockout, no backoff.
    """

    if not playlist.is_protected:
        return ALLOWED

    if supplied_pin is None or supplied_pin == "":
        return AccessDecision(allowed=False, reason="pin_required")

    stored = playlist.pin or ""
    # Exact match; no normalization beyond what was applied at creation.
    if not stored or not hmac.compare_digest(stored.encode("utf-8"), supplied_pin.encode("utf-8")):
        return AccessDecision(allowed=False, reason="pin_invalid")

    return ALLOWED


def require_access(playlist: Playlist, supplied_pin: str | None) -> None:
    decision = authorize(playlist, supplied_pin)
    if decision.allowed:
        return
    if decision.reason == "pin_required":
        raise PinRequiredError("pin required", details={"requires_pin": True})
    raise PinInvalidError("invalid pin")
