"""Slug, PRD path and branch name derivation.

sanitize() is the single source of the slug used in both the destination
file name and the publish branch name.
"""

import re
from datetime import UTC, datetime

DEFAULT_SLUG = "data-product-prd"
MAX_SLUG_LENGTH = 100

_INVALID_SLUG_CHARS_RE = re.compile(r"[^a-z0-9]+")
_DOUBLE_DASH_RE = re.compile(r"-+")
_VALID_SLUG_RE = re.compile(r"^[a-z0-9-]*$")


def sanitize(name: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Turn a product name into a filesystem and branch safe slug.

    Lowercases, replaces runs of characters outside [a-z0-9] with a
    single dash, strips and collapses dashes, and truncates to max_length
    without leaving a trailing dash.

    Args:
        name: Human-readable product name.
        max_length: Maximum slug length (default 100).

    Returns:
        The slug, or DEFAULT_SLUG when nothing usable is left.
    """
    s = _INVALID_SLUG_CHARS_RE.sub("-", (name or "").lower())
    s = s.strip("-")
    s = _DOUBLE_DASH_RE.sub("-", s)
    if len(s) > max_length:
        s = s[:max_length].rstrip("-")
    return s or DEFAULT_SLUG


def is_valid_slug(slug: str) -> bool:
    """Only [a-z0-9-], no leading, trailing or doubled dash."""
    if not _VALID_SLUG_RE.match(slug):
        return False
    if slug.startswith("-") or slug.endswith("-"):
        return False
    return "--" not in slug


def prd_path(domain: str, product_name: str, prds_dir: str = "prds") -> str:
    """Destination path of a PRD in the registry repo: prds/{domain}/{slug}.md."""
    return f"{prds_dir.strip('/')}/{domain}/{sanitize(product_name)}.md"


def iso_timestamp(now: datetime | None = None) -> str:
    """UTC ISO-8601 with millisecond precision and Z suffix (2024-01-15T10:30:45.123Z)."""
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def branch_timestamp(now: datetime | None = None) -> str:
    """iso_timestamp() with ':' and '.' replaced by '-' (2024-01-15T10-30-45-123Z)."""
    return iso_timestamp(now).replace(":", "-").replace(".", "-")


def branch_name(domain: str, product_name: str, timestamp: str) -> str:
    """Publish branch: prd/{domain}/{slug}-{timestamp}.

    The timestamp is passed in so the caller generates it once and reuses
    it for every place the branch name appears.
    """
    return f"prd/{domain}/{sanitize(product_name)}-{timestamp}"
