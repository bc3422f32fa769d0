from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from .headings import nearest_heading_before, parse_headings
from .patterns import TODO_EXISTING_LABELS, TODO_INLINE_SPACE, TODO_LABEL_PREFIX, TODO_MARKER


@dataclass(frozen=True)
class Todo:
    section: str
    item: str


def todo_label(index: int) -> str:
    """Label for the 1-based ``index``-th extracted TODO."""
    return f"{TODO_LABEL_PREFIX}{index}"


def extract_todos(text: str) -> list[Todo]:
    """
    Collect ``TODO:`` lines together with the section they appear in.

    A line qualifies when its trimmed, lower-cased form starts with ``todo:``.
    The section is the nearest heading at or before the line start, looked up
    in a heading index built from this same text.
    """
    headings = parse_headings(text)
    todos: list[Todo] = []
    line_start = 0
    for line in text.split("\n"):
        stripped = line.strip()
        if stripped.lower().startswith(TODO_MARKER):
            todos.append(
                Todo(
                    section=nearest_heading_before(headings, line_start),
                    item=stripped[len(TODO_MARKER):].strip(),
                )
            )
        line_start += len(line) + 1
    return todos


def label_todos(text: str, todos: Sequence[Todo]) -> str:
    """
    Append a ``\\label{todo-item-N}`` token after each extracted TODO line.

    Matching is by literal ``TODO:`` + item text on the whole line (labels
    added by earlier iterations are tolerated), not by offsets. Identical TODO
    lines therefore all receive the labels of every duplicate; this is a known
    limitation of substring matching and is left visible rather than guessed
    around.
    """
    for index, todo in enumerate(todos, start=1):
        label = todo_label(index)
        pattern = re.compile(
            r"(?m)(^" + TODO_INLINE_SPACE + r"*(?i:TODO:)" + TODO_INLINE_SPACE + "*"
            + re.escape(todo.item) + TODO_EXISTING_LABELS + r")(?=" + TODO_INLINE_SPACE + r"*$)"
        )
        text = pattern.sub(lambda m, label=label: f"{m.group(1)} \\label{{{label}}}", text)
    return text


def _escape_cell(value: str) -> str:
    return value.replace("|", "\\|")


def format_todo_list(todos: Sequence[Todo], message: str) -> str:
    lines = [
        "# TODO List",
        "",
        message,
        "",
        "| Section | TODO Item | Page |",
        "|---------|-----------|------|",
    ]
    for index, todo in enumerate(todos, start=1):
        lines.append(
            f"| {_escape_cell(todo.section)} | {_escape_cell(todo.item)} | \\pageref{{{todo_label(index)}}} |"
        )
    return "\n".join(lines) + "\n"


__all__ = ["Todo", "extract_todos", "format_todo_list", "label_todos", "todo_label"]
