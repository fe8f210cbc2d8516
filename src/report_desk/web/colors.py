"""Shared CSS color constants for the web UI.

Maps report status and tag names to Tailwind CSS classes so the flat table
and the date groups color-code reports the same way.
"""

from __future__ import annotations

import zlib

STATUS_CSS_COLORS: dict[bool, dict[str, str]] = {
    True: {
        "text": "text-blue-400",
        "bg": "bg-blue-500/10",
    },
    False: {
        "text": "text-gray-400",
        "bg": "bg-gray-500/10",
    },
}

# Tag chips cycle through this palette; a tag always maps to the same entry.
TAG_CSS_PALETTE: list[dict[str, str]] = [
    {"text": "text-sky-300", "bg": "bg-sky-500/20", "border": "border-sky-500"},
    {"text": "text-emerald-300", "bg": "bg-emerald-500/20", "border": "border-emerald-500"},
    {"text": "text-amber-300", "bg": "bg-amber-500/20", "border": "border-amber-500"},
    {"text": "text-fuchsia-300", "bg": "bg-fuchsia-500/20", "border": "border-fuchsia-500"},
    {"text": "text-rose-300", "bg": "bg-rose-500/20", "border": "border-rose-500"},
    {"text": "text-violet-300", "bg": "bg-violet-500/20", "border": "border-violet-500"},
]


def get_status_css(active: bool) -> dict[str, str]:
    """Get Tailwind CSS classes for a report status.

    Args:
        active: Report ``is_active`` flag.

    Returns:
        Dict with "text" and "bg" Tailwind class strings.
    """
    return STATUS_CSS_COLORS[bool(active)]


def get_tag_css(tag: str) -> dict[str, str]:
    """Get Tailwind CSS classes for a tag chip.

    The palette entry is chosen from a CRC32 of the lowercased tag, so the
    color is stable across sessions and processes.

    Args:
        tag: Tag name.

    Returns:
        Dict with "text", "bg", and "border" Tailwind class strings.
    """
    index = zlib.crc32(tag.lower().encode("utf-8")) % len(TAG_CSS_PALETTE)
    return TAG_CSS_PALETTE[index]
