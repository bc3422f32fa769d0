from __future__ import annotations

from dataclasses import dataclass, field

from docuwrite.core.markdown.blocks import StructuralBlock, scan_tables
from docuwrite.core.markdown.headings import nearest_heading_before, parse_headings
from docuwrite.core.markdown.patterns import TABLE_CAPTION_PATTERN
from docuwrite.core.markdown.rewrite import Replacement, rewrite_blocks


EXISTING_CAPTION_TARGET = "existing-caption"


@dataclass
class TablePassResult:
    text: str
    tables: list[StructuralBlock] = field(default_factory=list)

    @property
    def captions_added(self) -> int:
        return sum(1 for table in self.tables if table.target != EXISTING_CAPTION_TARGET)


def _existing_caption(text: str, start: int) -> str | None:
    """Caption text when the last non-blank line before ``start`` is ``Table: ...``."""
    end = start
    while end > 0:
        line_start = text.rfind("\n", 0, end - 1) + 1
        line = text[line_start:end]
        if line.strip():
            match = TABLE_CAPTION_PATTERN.match(line)
            return match.group("caption") if match else None
        end = line_start
    return None


def table_caption(name: str) -> str:
    return f"Table: {name}"


def mark_tables(text: str) -> TablePassResult:
    """
    Insert a pandoc ``Table:`` caption line before every pipe table.

    Markdown tables carry no names, so each caption uses the nearest heading
    before the table. Tables already preceded by a ``Table:`` line are
    reported with their existing caption and left alone, which makes the pass
    idempotent.
    """
    tables = scan_tables(text)
    if not tables:
        return TablePassResult(text=text, tables=[])

    headings = parse_headings(text)
    for table in tables:
        table.derived_name = nearest_heading_before(headings, table.source_start)
        existing = _existing_caption(text, table.source_start)
        if existing is not None:
            table.target = EXISTING_CAPTION_TARGET
            table.output_ref = table_caption(existing)

    def _produce(block: StructuralBlock, span: str) -> Replacement:
        if block.target == EXISTING_CAPTION_TARGET:
            return Replacement(text=span, output_ref=block.output_ref)
        caption = table_caption(block.derived_name)
        return Replacement(text=f"\n{caption}\n\n{span}", output_ref=caption)

    rewritten = rewrite_blocks(text, tables, _produce)
    return TablePassResult(text=rewritten, tables=tables)


__all__ = ["EXISTING_CAPTION_TARGET", "TablePassResult", "mark_tables", "table_caption"]
