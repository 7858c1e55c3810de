from __future__ import annotations

import base64

_COVER_SIZE = 400


def _name_hash(name: str) -> int:
    # 32-bit string hash (h * 31 + c), wrapped to a signed int each step.
    h = 0
    for ch in name:
        h = (ord(ch) + ((h << 5) - h)) & 0xFFFFFFFF
        if h >= 0x80000000:
            h -= 0x100000000
    return h


def cover_gradient(name: str) -> tuple[str, str]:
    hue1 = abs(_name_hash(name)) % 360
    hue2 = (hue1 + 60) % 360
    return f"oklch(0.6 0.25 {hue1})", f"oklch(0.5 0.25 {hue2})"


def cover_initials(name: str) -> str:
    words = name.split()
    if len(words) <= 1:
        # Single word (or blank): first two characters of the name as given.
        return name[:2].upper()
    return (words[0][0] + words[1][0]).upper()


def _escape_xml(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def render_cover(name: str) -> str:
    """Deterministic gradient cover for a playlist name, as an SVG data URL."""

    start, end = cover_gradient(name)
    initials = _escape_xml(cover_initials(name))
    svg = (
        f'<svg width="{_COVER_SIZE}" height="{_COVER_SIZE}" xmlns="http://www.w3.org/2000/svg">'
        '<defs><linearGradient id="grad" x1="0%" y1="0%" x2="100%" y2="100%">'
        f'<stop offset="0%" style="stop-color:{start};stop-opacity:1" />'
        f'<stop offset="100%" style="stop-color:{end};stop-opacity:1" />'
        "</linearGradient></defs>"
        f'<rect width="{_COVER_SIZE}" height="{_COVER_SIZE}" fill="url(#grad)" rx="16"/>'
        '<text x="50%" y="50%" font-family="system-ui, -apple-system, sans-serif" '
        'font-size="120" font-weight="bold" fill="white" text-anchor="middle" '
        f'dominant-baseline="central" opacity="0.9">{initials}</text>'
        "</svg>"
    )
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"
