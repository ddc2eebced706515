from __future__ import annotations

import re
from typing import Any, Mapping

WHITESPACE_RE = re.compile(r"\s+")
NON_SLUG_RE = re.compile(r"[^\w\-]+", flags=re.ASCII)
DASH_RUN_RE = re.compile(r"-{2,}")
IDENTITY_FIELD = "id"
TITLE_FALLBACK_FIELDS = ("title", "name")


class _NoIdentity:
    def __repr__(self) -> str:
        return "NO_IDENTITY"

    def __bool__(self) -> bool:
        return False


# Records without an id are never deduplicated.
NO_IDENTITY = _NoIdentity()


def slugify(text: object) -> str:
    """Map any value to a URL-safe identifier; "Some Term!" becomes "some-term".

    Falsy input yields "". The result only contains lower-case ASCII letters,
    digits, "_" and single "-" separators, so slugify(slugify(x)) == slugify(x).
    """
    if not text:
        return ""
    value = str(text).lower().strip()
    value = WHITESPACE_RE.sub("-", value)
    value = NON_SLUG_RE.sub("", value)
    value = DASH_RUN_RE.sub("-", value)
    return value.strip("-")


def record_identity(record: Mapping[str, Any]) -> object:
    value = record.get(IDENTITY_FIELD)
    if value is None:
        return NO_IDENTITY
    return value


def record_label(record: Mapping[str, Any], position: int | None = None) -> str:
    identity = record_identity(record)
    if identity is not NO_IDENTITY:
        return f"id={identity!r}"
    if position is not None:
        return f"#{position}"
    return "<no id>"


def record_title(record: Mapping[str, Any], title_field: str = "title") -> str:
    for field in (title_field, *TITLE_FALLBACK_FIELDS):
        value = record.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()
    identity = record_identity(record)
    if identity is not NO_IDENTITY:
        return str(identity)
    return "Untitled"


def record_summary(record: Mapping[str, Any], limit: int = 200) -> str:
    value = record.get("description") or record.get("summary") or ""
    if not isinstance(value, str):
        return ""
    summary = value.strip().replace("\n", " ")
    return summary[:limit] + ("..." if len(summary) > limit else "")
