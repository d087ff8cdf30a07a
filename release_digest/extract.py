from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple

from .dates import normalize_date
from .sections import RawSection


ProductVersion = Tuple[Optional[str], Optional[str]]


@dataclass(frozen=True)
class ReleaseRecord:
    """One release-notes entry."""

    version: str
    date: Optional[str]
    details: str


@dataclass(frozen=True)
class SecurityAnnouncement:
    """One security-announcements entry."""

    title: str
    last_updated_iso: Optional[str]
    last_updated_raw: Optional[str]
    product: Optional[str]
    version: Optional[str]
    cves: Tuple[str, ...]
    details_markdown: str


# ---------------------------------------------------------------------------
# Body cleaning
# ---------------------------------------------------------------------------

RELEASE_SHORTCODES = ("release-date", "desktop-install", "desktop-install-v2")
SECURITY_SHORTCODES = ("rss-button",)

_ADMONITION_RE = re.compile(r"^[ \t]*>[ \t]*\[!\w+\][ \t]*$", re.MULTILINE)
_TRAILING_WS_RE = re.compile(r"[ \t]+$", re.MULTILINE)


def _shortcode_re(name: str) -> re.Pattern[str]:
    return re.compile(
        r"\{\{<\s*" + re.escape(name) + r"(?![\w-])[^\n]*?>\}\}[ \t]*\n?",
        re.IGNORECASE,
    )


def strip_shortcodes(text: str, names: Iterable[str]) -> str:
    """Remove ``{{< name ... >}}`` directives together with their line break."""
    for name in names:
        text = _shortcode_re(name).sub("", text)
    return text


def clean_body(text: str) -> str:
    """Collapse admonition headers to ``>``, drop trailing blanks, trim edges.

    Running it on its own output changes nothing.
    """

    text = _ADMONITION_RE.sub(">", text)
    text = _TRAILING_WS_RE.sub("", text)
    return text.strip("\n")


# ---------------------------------------------------------------------------
# Releases
# ---------------------------------------------------------------------------

_RELEASE_VERSION_RE = re.compile(r"^\s*(\d+\.\d+\.\d+)\b")
_RELEASE_DATE_RE = re.compile(r"\{\{<\s*release-date\s+date=\"([^\"]+)\"\s*>\}\}")


def extract_release(section: RawSection) -> ReleaseRecord:
    heading = section.heading.strip()
    version_match = _RELEASE_VERSION_RE.match(heading)
    # Headings without a leading x.y.z keep their full text as the version.
    version = version_match.group(1) if version_match else heading

    date_match = _RELEASE_DATE_RE.search(section.body)
    details = clean_body(strip_shortcodes(section.body, RELEASE_SHORTCODES))

    return ReleaseRecord(
        version=version,
        date=date_match.group(1) if date_match else None,
        details=details,
    )


# ---------------------------------------------------------------------------
# Security announcements
# ---------------------------------------------------------------------------

_LAST_UPDATED_RE = re.compile(
    r"^_Last updated[ \t]+(.+?)_[ \t]*(?:\n|$)", re.IGNORECASE | re.MULTILINE
)
_CVE_RE = re.compile(r"(?<![A-Za-z0-9])CVE-\d{4}-\d{4,7}(?!\d)", re.IGNORECASE)
_VERSION_TOKEN = r"\d+\.\d+(?:\.\d+)?"


@dataclass(frozen=True)
class ExtractorRule:
    """A heading pattern paired with the function that turns its match into
    ``(product, version)``."""

    name: str
    pattern: re.Pattern[str]
    build: Callable[[re.Match[str]], ProductVersion]

    def apply(self, title: str) -> Optional[ProductVersion]:
        match = self.pattern.search(title)
        if not match:
            return None
        return self.build(match)


def _strip_product(text: str) -> Optional[str]:
    return text.strip().rstrip(":,-– \t").strip() or None


PRODUCT_RULES: Tuple[ExtractorRule, ...] = (
    # "Docker Desktop 4.44.3 security update"
    ExtractorRule(
        name="docker-product-version",
        pattern=re.compile(r"^(Docker\s+\w+)\s+(" + _VERSION_TOKEN + r")", re.IGNORECASE),
        build=lambda m: (m.group(1).strip(), m.group(2)),
    ),
    # "runc v1.1.12: ...", "Moby - 25.0.2"
    ExtractorRule(
        name="prefix-version",
        pattern=re.compile(
            r"^(.*?)(?:^|[\s:,\-]+)v?(" + _VERSION_TOKEN + r")(?!\d)", re.IGNORECASE
        ),
        build=lambda m: (_strip_product(m.group(1)), m.group(2)),
    ),
    # "Docker Security Advisory: Multiple Vulnerabilities in ..."
    ExtractorRule(
        name="docker-product",
        pattern=re.compile(r"^(Docker(?:\s+\w+)*)(?=:|\s|$)", re.IGNORECASE),
        build=lambda m: (m.group(1).strip(), None),
    ),
)


def extract_product_and_version(title: str) -> ProductVersion:
    for rule in PRODUCT_RULES:
        result = rule.apply(title)
        if result is not None:
            return result
    return None, None


def extract_cves(text: str) -> Tuple[str, ...]:
    return tuple(sorted({cve.upper() for cve in _CVE_RE.findall(text)}))


def extract_announcement(section: RawSection) -> SecurityAnnouncement:
    title = section.heading.strip()
    body = strip_shortcodes(section.body, SECURITY_SHORTCODES)

    last_updated_raw: Optional[str] = None
    last_updated_iso: Optional[str] = None
    match = _LAST_UPDATED_RE.search(body)
    if match:
        last_updated_raw = match.group(1).strip()
        last_updated_iso = normalize_date(last_updated_raw)
        body = body[: match.start()] + body[match.end():]

    product, version = extract_product_and_version(title)

    return SecurityAnnouncement(
        title=title,
        last_updated_iso=last_updated_iso,
        last_updated_raw=last_updated_raw,
        product=product,
        version=version,
        cves=extract_cves(title + "\n" + body),
        details_markdown=clean_body(body).strip(),
    )
