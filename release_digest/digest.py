from __future__ import annotations

from typing import Iterable, List, Optional

from .extract import (
    ReleaseRecord,
    SecurityAnnouncement,
    extract_announcement,
    extract_release,
)
from .sections import split_sections


DEFAULT_LIMIT = 6
MIN_LIMIT = 1
MAX_LIMIT = 10

RELEASE_SEPARATOR = "\n\n---\n\n"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_releases(markdown: Optional[str]) -> List[ReleaseRecord]:
    return [extract_release(section) for section in split_sections(markdown)]


def parse_security_announcements(markdown: Optional[str]) -> List[SecurityAnnouncement]:
    return [extract_announcement(section) for section in split_sections(markdown)]


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------

def rank_announcements(items: Iterable[SecurityAnnouncement]) -> List[SecurityAnnouncement]:
    """Newest ``last_updated_iso`` first; undated items follow in document order."""

    items = list(items)
    dated = [item for item in items if item.last_updated_iso]
    undated = [item for item in items if not item.last_updated_iso]
    # Canonical dates are zero-padded, so string order is calendar order.
    dated.sort(key=lambda item: item.last_updated_iso, reverse=True)
    return dated + undated


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def indent(text: str, spaces: int = 2) -> str:
    pad = " " * spaces
    return "\n".join(pad + line if line else line for line in text.split("\n"))


def format_release(record: ReleaseRecord) -> str:
    header = f"## {record.version}"
    if record.date:
        header += f" — {record.date}"
    return f"{header}\n{record.details.lstrip()}"


def format_announcement(item: SecurityAnnouncement) -> str:
    header = f"\n## {item.title}"
    if item.last_updated_iso:
        header += f" — updated {item.last_updated_iso}"
    lines = [header]

    meta: List[str] = []
    if item.product:
        meta.append(f"Product: {item.product}")
    if item.version:
        meta.append(f"Version: {item.version}")
    if item.cves:
        meta.append(f"CVEs: {', '.join(item.cves)}")
    if meta:
        lines.append("\n".join(f"- {bit}" for bit in meta))

    lines.append("Details:")
    lines.append(indent(item.details_markdown, 2))
    return "\n".join(lines)


def render_releases(markdown: Optional[str], limit: int = DEFAULT_LIMIT) -> str:
    """Digest of the first ``limit`` releases, in document order.

    The release notes page lists the newest release first, so no sorting
    happens here.
    """

    records = parse_releases(markdown)[:limit]
    return RELEASE_SEPARATOR.join(format_release(record) for record in records)


def render_security_announcements(markdown: Optional[str], limit: int = DEFAULT_LIMIT) -> str:
    """Digest of the ``limit`` most recently updated security announcements."""

    ranked = rank_announcements(parse_security_announcements(markdown))[:limit]
    return "\n".join(format_announcement(item) for item in ranked)
