"""Sanitizing helpers for identifiers, log output and file names."""

import re
import unicodedata

_ID_RE = re.compile(r"[^a-zA-Z0-9_\-]")
_SLUG_RE = re.compile(r"[^a-z0-9]+")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")

MAX_LOG_LEN = 160


def id_string(s: str | None) -> str:
    """Strip everything but letters, digits, dashes and underscores from an ID."""
    if not s:
        return ""
    return _ID_RE.sub("", s)[:64]


def log(s: object) -> str:
    """Quote a user supplied value for safe inclusion in a log line."""
    text = _CONTROL_RE.sub("", str(s))
    if len(text) > MAX_LOG_LEN:
        text = text[:MAX_LOG_LEN] + "..."
    return f"'{text}'"


def slugify(s: str | None) -> str:
    """Lowercase ASCII slug: 'Summer in Rome!' -> 'summer-in-rome'."""
    if not s:
        return ""
    ascii_text = unicodedata.normalize("NFKD", s).encode("ascii", "ignore").decode()
    return _SLUG_RE.sub("-", ascii_text.lower()).strip("-")[:160]


def title_slug(s: str | None) -> str:
    """Slug with capitalized words, used for shareable file names."""
    return "-".join(part.capitalize() for part in slugify(s).split("-") if part)
