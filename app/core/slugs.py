# app/core/slugs.py
from __future__ import annotations

import datetime as dt
import re
import secrets
import string

from app.core.config import settings

LOWER_ALNUM = string.ascii_lowercase + string.digits
MIXED_ALNUM = string.ascii_uppercase + string.ascii_lowercase + string.digits

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def generate_slug(length: int = 10, alphabet: str = LOWER_ALNUM) -> str:
    """Sorteio uniforme (com reposição) de `length` símbolos do alfabeto."""
    if length < 1:
        raise ValueError("length must be >= 1")
    if not alphabet:
        raise ValueError("alphabet must not be empty")
    return "".join(secrets.choice(alphabet) for _ in range(length))


def slugify(text: str | None) -> str:
    s = (text or "").strip().lower()
    s = s.replace("'", "").replace('"', "")
    s = _NON_ALNUM.sub("-", s)
    return s.strip("-")


def build_event_slug(artist_name: str, event_name: str, start: dt.date | str) -> str:
    start_iso = start.isoformat() if isinstance(start, dt.date) else str(start)
    base = "-".join(p for p in (slugify(artist_name), slugify(event_name), start_iso) if p)
    suffix = generate_slug(settings.EVENT_SLUG_SUFFIX_LENGTH, LOWER_ALNUM)
    return f"{base}-{suffix}" if base else suffix


def new_qr_id() -> str:
    return generate_slug(settings.QR_ID_LENGTH, LOWER_ALNUM)
