"""Markdown structure: headings, diagram blocks, tables, TODO markers."""

from docuwrite.core.markdown.blocks import (
    StructuralBlock,
    extract_diagram_type,
    scan_diagram_blocks,
    scan_tables,
)
from docuwrite.core.markdown.headings import (
    NO_HEADING_FOUND,
    Heading,
    nearest_heading_before,
    parse_headings,
)
from docuwrite.core.markdown.rewrite import Replacement, rewrite_blocks
from docuwrite.core.markdown.todos import Todo, extract_todos, format_todo_list, label_todos

__all__ = [
    "Heading",
    "NO_HEADING_FOUND",
    "Replacement",
    "StructuralBlock",
    "Todo",
    "extract_diagram_type",
    "extract_todos",
    "format_todo_list",
    "label_todos",
    "nearest_heading_before",
    "parse_headings",
    "rewrite_blocks",
    "scan_diagram_blocks",
    "scan_tables",
]
