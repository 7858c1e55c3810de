from __future__ import annotations

import secrets
import string
import uuid

SLUG_LENGTH = 8
# URL-safe alphabet (same character set as nanoid / token_urlsafe).
SLUG_ALPHABET = string.ascii_letters + string.digits + "_-"

PIN_LENGTH = 4


def new_id() -> str:
    return str(uuid.uuid4())


def generate_slug() -> str:
    """8 URL-safe characters (64^8 values); uniqueness is still enforced by the caller."""
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(SLUG_LENGTH))


def generate_pin() -> str:
    """Uniform 4-digit PIN, leading zeros included.

    10,000 values is a low-friction deterrent, not a security boundary.
    """
    return f"{secrets.randbelow(10**PIN_LENGTH):0{PIN_LENGTH}d}"
