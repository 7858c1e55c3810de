from __future__ import annotations

from urllib.parse import unquote_plus

# Query parameters whose values must never reach the logs.
SENSITIVE_QUERY_KEYS = frozenset({"pin", "secret"})

REDACTED = "***"


def redact_query_string(query_string: str) -> str:
    """Mask sensitive values in a raw query string, keeping order and other params."""

    if not query_string:
        return ""

    out: list[str] = []
    for part in query_string.split("&"):
        if not part:
            continue
        key, _sep, _value = part.partition("=")
        if unquote_plus(key).strip().lower() in SENSITIVE_QUERY_KEYS:
            out.append(f"{key}={REDACTED}")
        else:
            out.append(part)
    return "&".join(out)
