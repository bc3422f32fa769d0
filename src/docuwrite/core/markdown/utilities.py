from __future__ import annotations

import unicodedata

from .patterns import (
    FENCE_OPEN_PATTERN,
    HEADING_LINE_PATTERN,
    SLUG_SPACE_PATTERN,
    SLUG_STRIP_PATTERN,
)


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def slugify(text: str) -> str:
    """Lower-case ASCII slug with hyphens (``"CI/CD Pipeline"`` -> ``"cicd-pipeline"``)."""
    ascii_text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    t = SLUG_STRIP_PATTERN.sub("", ascii_text.lower())
    t = SLUG_SPACE_PATTERN.sub("-", t.strip())
    return t.strip("-")


def figure_file_name(unit_name: str, number: int, heading_text: str) -> str:
    """Image file name for a figure: ``<unit>-<NN>-<heading-slug>.png``."""
    return f"{unit_name}-{number:02d}-{slugify(heading_text)}.png"


def space_headings(text: str) -> str:
    """
    Ensure every heading line has a blank line before and after it.

    Headings glued to paragraphs are otherwise folded into the paragraph by
    the renderer. Lines inside ``` and ~~~ code fences and ``:::mermaid``
    blocks are left untouched; other ``:::`` fenced divs are not code.
    """
    lines = text.split("\n")
    out: list[str] = []
    fence: str | None = None

    for idx, line in enumerate(lines):
        if fence is not None:
            if line.lstrip().startswith(fence):
                fence = None
            out.append(line)
            continue
        fence_match = FENCE_OPEN_PATTERN.match(line)
        if fence_match:
            fence = fence_match.group("fence")
            out.append(line)
            continue

        is_heading = bool(HEADING_LINE_PATTERN.match(line.strip()))
        if is_heading and out and out[-1].strip() != "":
            out.append("")
        out.append(line)
        if is_heading and idx + 1 < len(lines) and lines[idx + 1].strip() != "":
            out.append("")
    return "\n".join(out)


__all__ = ["figure_file_name", "slugify", "space_headings"]
