from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional


# "## <text>" only; "#" and "###" lines belong to the enclosing section.
_HEADING_RE = re.compile(r"^##\s+(\S.*)$")


@dataclass(frozen=True)
class RawSection:
    """One top-level section of a markdown document, before field extraction."""

    heading: str
    body: str


def normalize_newlines(text: Optional[str]) -> str:
    return re.sub(r"\r\n?", "\n", text or "")


def _heading_text(line: str) -> Optional[str]:
    match = _HEADING_RE.match(line)
    if not match:
        return None
    return match.group(1).strip()


def split_sections(markdown: Optional[str]) -> List[RawSection]:
    """Split a markdown document on its top-level (``##``) headings.

    Scans line by line. Anything before the first heading is dropped; each
    section's body is every line up to the next top-level heading or the end
    of the document.
    """

    sections: List[RawSection] = []
    heading: Optional[str] = None  # None while before the first heading
    body_lines: List[str] = []

    for line in normalize_newlines(markdown).split("\n"):
        text = _heading_text(line)
        if text is None:
            if heading is not None:
                body_lines.append(line)
            continue

        if heading is not None:
            sections.append(RawSection(heading=heading, body="\n".join(body_lines)))
        heading = text
        body_lines = []

    if heading is not None:
        sections.append(RawSection(heading=heading, body="\n".join(body_lines)))

    return sections
