from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Optional

from dateutil import parser as date_parser


MONTHS = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

_ISO_RE = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")
_MONTH_DAY_YEAR_RE = re.compile(r"\b([A-Za-z]+)\s+(\d{1,2}),?\s*(\d{4})\b")
_MONTH_YEAR_RE = re.compile(r"\b([A-Za-z]+)\s+(\d{4})\b")
_YEAR_RE = re.compile(r"\b\d{4}\b")
_COMMA_YEAR_RE = re.compile(r"\s*,\s*(\d{4})")
_PARSE_DEFAULT = datetime(1900, 1, 1)


def month_number(name: str) -> Optional[int]:
    try:
        return MONTHS.index(name.lower()) + 1
    except ValueError:
        return None


def _canonical(year: int, month: int, day: int) -> Optional[str]:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def _from_iso_token(text: str) -> Optional[str]:
    match = _ISO_RE.search(text)
    if not match:
        return None
    year, month, day = (int(g) for g in match.groups())
    if _canonical(year, month, day) is None:
        return None
    return match.group(0)


def _from_month_day_year(text: str) -> Optional[str]:
    match = _MONTH_DAY_YEAR_RE.search(text)
    if not match:
        return None
    month = month_number(match.group(1))
    day = int(match.group(2))
    if month is None or not 1 <= day <= 31:
        return None
    return _canonical(int(match.group(3)), month, day)


def _from_month_year(text: str) -> Optional[str]:
    match = _MONTH_YEAR_RE.search(text)
    if not match:
        return None
    month = month_number(match.group(1))
    if month is None:
        return None
    return _canonical(int(match.group(2)), month, 1)


def _from_general_parse(text: str) -> Optional[str]:
    # Missing month/day fall back to _PARSE_DEFAULT; the year must be explicit.
    if not _YEAR_RE.search(text):
        return None
    try:
        parsed = date_parser.parse(text, default=_PARSE_DEFAULT)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None
    return parsed.date().isoformat()


_RULES = (
    _from_iso_token,
    _from_month_day_year,
    _from_month_year,
    _from_general_parse,
)


def normalize_date(raw: Optional[str]) -> Optional[str]:
    """Convert a loosely formatted human date into ``YYYY-MM-DD``.

    Tried in order, first hit wins:

    - an embedded ``YYYY-MM-DD`` token, returned as-is
    - ``<Month> <Day>, <Year>`` (comma optional)
    - ``<Month> <Year>``, pinned to the first of the month
    - a general dateutil parse of the string

    Returns None when nothing yields a real calendar date.
    """

    if not raw or not raw.strip():
        return None

    # "July, 2024" -> "July 2024"
    text = _COMMA_YEAR_RE.sub(r" \1", raw).strip()
    for rule in _RULES:
        result = rule(text)
        if result is not None:
            return result
    return None
