from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .patterns import HEADING_MARKER_PATTERN, HEADING_TRAILING_MARKS_PATTERN


NO_HEADING_FOUND = "no header found"


@dataclass(frozen=True)
class Heading:
    """ATX heading found in a single text snapshot.

    Attributes:
        level: Number of leading ``#`` characters (1-6).
        text: Heading text with the closing ``#`` run and whitespace removed.
        start_offset: Character offset of the heading's line start. Only
            meaningful against the exact text that was parsed.
    """
    level: int
    text: str
    start_offset: int


def parse_headings(text: str) -> list[Heading]:
    """
    Parse ATX headings from Markdown text in document order.

    A line counts as a heading when, after leading whitespace, it starts with
    one to six ``#`` followed by whitespace or the end of the line. Headings
    whose text is empty after trimming are dropped.

    Args:
        text: Markdown text.

    Returns:
        list[Heading]: Headings with strictly increasing ``start_offset``.
    """
    headings: list[Heading] = []
    offset = 0
    for line in text.split("\n"):
        stripped = line.lstrip()
        if stripped.startswith("#"):
            match = HEADING_MARKER_PATTERN.match(stripped)
            if match:
                remainder = stripped[match.end():]
                heading_text = HEADING_TRAILING_MARKS_PATTERN.sub("", remainder).strip()
                if heading_text:
                    headings.append(
                        Heading(
                            level=len(match.group("marks")),
                            text=heading_text,
                            start_offset=offset,
                        )
                    )
        # The final line is counted as if it were terminated too.
        offset += len(line) + 1
    return headings


def nearest_heading_before(headings: Sequence[Heading], offset: int) -> str:
    """Return the text of the last heading starting at or before ``offset``.

    Falls back to ``NO_HEADING_FOUND`` when the offset precedes every heading
    or the index is empty.
    """
    for heading in reversed(headings):
        if heading.start_offset <= offset:
            return heading.text
    return NO_HEADING_FOUND


__all__ = ["Heading", "NO_HEADING_FOUND", "nearest_heading_before", "parse_headings"]
