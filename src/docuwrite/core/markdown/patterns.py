from __future__ import annotations

import re


# Headings are matched against the line with leading whitespace removed.
HEADING_MARKER_PATTERN = re.compile(r"^(?P<marks>#{1,6})(?:[ \t]+|$)")
HEADING_TRAILING_MARKS_PATTERN = re.compile(r"#+$")
# Looser form used when spacing headings out before scanning.
HEADING_LINE_PATTERN = re.compile(r"^#+\s")

MERMAID_BLOCK_PATTERN = re.compile(
    r"^[ \t]*(?P<fence>```|~~~|:::)mermaid[ \t]*\n"
    r"(?:(?P<payload>.*?)\n)??"
    r"[ \t]*(?P=fence)[ \t]*$",
    re.MULTILINE | re.DOTALL,
)
# Code fences open on ``` or ~~~; ::: only opens a fence for a mermaid block.
FENCE_OPEN_PATTERN = re.compile(r"^[ \t]*(?P<fence>```|~~~|:::(?=mermaid))")

TABLE_BLOCK_PATTERN = re.compile(
    r"(?:^|(?<=\n))"
    r"(?:\|.+\|[ \t]*\r?\n)+"          # header line(s)
    r"\|[-:| ]+\|[ \t]*\r?\n"           # separator
    r"(?:\|.+\|[ \t]*(?:\r?\n|\Z))+"   # body lines
)
TABLE_CAPTION_PATTERN = re.compile(r"^\s*Table:\s*(?P<caption>.*?)\s*$")

TODO_MARKER = "todo:"
TODO_LABEL_PREFIX = "todo-item-"
# Any whitespace except a line break.
TODO_INLINE_SPACE = r"[^\S\n]"
TODO_EXISTING_LABELS = r"(?:[^\S\n]*\\label\{[^}]*\})*"

SLUG_STRIP_PATTERN = re.compile(r"[^a-z0-9\s-]+")
SLUG_SPACE_PATTERN = re.compile(r"[\s-]+")
