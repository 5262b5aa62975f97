# barbershop/sanitize.py

import re
from typing import Optional

import bleach

_CONTROL_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def sanitize_notes(value: Optional[str], max_length: int = 500) -> Optional[str]:
    """
    Neutralize free-text notes before storing them.

    Input is cut to ``max_length`` first, then every tag is stripped and the
    remaining text HTML-escaped by bleach, so stored notes are safe to render.

    Returns None when nothing is left.
    """
    if value is None:
        return None
    value = _CONTROL_RE.sub("", value).strip()[:max_length]
    if not value:
        return None

    cleaned = bleach.clean(value, tags=set(), attributes={}, strip=True).strip()
    return cleaned or None


def sanitize_name(value: Optional[str]) -> str:
    """Letters (including accented), spaces, hyphens, apostrophes and dots."""
    if not value:
        return ""
    return re.sub(r"[^A-Za-zÀ-ÿ\s\-'.]", "", value).strip()


def sanitize_phone(value: Optional[str]) -> str:
    if not value:
        return ""
    return re.sub(r"[^\d+\-\s()]", "", value).strip()
