from __future__ import annotations

from dataclasses import dataclass

from .patterns import MERMAID_BLOCK_PATTERN, TABLE_BLOCK_PATTERN


TABLE_KIND = "table"


@dataclass
class StructuralBlock:
    """Located diagram block or table inside one text snapshot.

    Attributes:
        sequence_number: 1-based position among the blocks of its scan; passes
            may shift it to continue a document-wide numbering.
        start_offset: Current start of the span in the text being rewritten.
        end_offset: Current exclusive end of the span.
        payload: Captured text (diagram code, or the whole table).
        kind: Diagram type token for figures, ``"table"`` for tables.
        source_start: Span start in the scanned snapshot. Never shifted.
        source_end: Span end in the scanned snapshot. Never shifted.
        derived_name: Nearest heading text (or the not-found sentinel).
        target: Planned output (image file for figures), set before rewriting.
        output_ref: Reference produced by a successful rewrite.
        succeeded: Whether the rewrite engine replaced this block.
    """
    sequence_number: int
    start_offset: int
    end_offset: int
    payload: str
    kind: str
    source_start: int
    source_end: int
    derived_name: str = ""
    target: str = ""
    output_ref: str = ""
    succeeded: bool = False


def extract_diagram_type(payload: str) -> str:
    """
    Return the declared diagram kind of a Mermaid payload.

    Uses the first whitespace-separated token of the first non-empty line and
    drops a trailing ``;`` (``"graph TD;"`` -> ``"graph"``). Reporting only.
    """
    for line in payload.split("\n"):
        tokens = line.split()
        if not tokens:
            continue
        first = tokens[0]
        return first[:-1] if first.endswith(";") else first
    return ""


def scan_diagram_blocks(text: str) -> list[StructuralBlock]:
    """
    Locate fenced Mermaid blocks, leftmost and non-overlapping.

    Args:
        text: Markdown text snapshot.

    Returns:
        list[StructuralBlock]: Blocks ordered by ``start_offset``. The span
        runs from the opening fence line start through the closing fence;
        ``payload`` is the text strictly between the fence lines (empty for
        a block whose closing fence directly follows the opening one).
    """
    blocks: list[StructuralBlock] = []
    for number, match in enumerate(MERMAID_BLOCK_PATTERN.finditer(text), start=1):
        payload = match.group("payload") or ""
        blocks.append(
            StructuralBlock(
                sequence_number=number,
                start_offset=match.start(),
                end_offset=match.end(),
                payload=payload,
                kind=extract_diagram_type(payload),
                source_start=match.start(),
                source_end=match.end(),
            )
        )
    return blocks


def scan_tables(text: str) -> list[StructuralBlock]:
    """
    Locate pipe tables (header lines, separator, body lines).

    Args:
        text: Markdown text snapshot.

    Returns:
        list[StructuralBlock]: Tables ordered by ``start_offset``; the span is
        exactly the run of table lines and is also stored as ``payload``.
    """
    blocks: list[StructuralBlock] = []
    for number, match in enumerate(TABLE_BLOCK_PATTERN.finditer(text), start=1):
        blocks.append(
            StructuralBlock(
                sequence_number=number,
                start_offset=match.start(),
                end_offset=match.end(),
                payload=match.group(0),
                kind=TABLE_KIND,
                source_start=match.start(),
                source_end=match.end(),
            )
        )
    return blocks


__all__ = [
    "StructuralBlock",
    "TABLE_KIND",
    "extract_diagram_type",
    "scan_diagram_blocks",
    "scan_tables",
]
