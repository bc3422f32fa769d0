from __future__ import annotations

from pathlib import Path

from docuwrite.core.markdown.utilities import _normalize_newlines
from docuwrite.errors import SourceReadError


MARKDOWN_SUFFIX = ".md"


def read_order_file(order_path: Path) -> list[str]:
    """Non-blank, stripped entries of an order manifest, in file order."""
    entries: list[str] = []
    for line in order_path.read_text(encoding="utf-8").splitlines():
        entry = line.strip()
        if entry:
            entries.append(entry)
    return entries


def resolve_source_files(input_path: Path, order_file: str = ".order") -> list[Path]:
    """
    Resolve the ordered list of Markdown source units.

    Preference order:
    1. A single file input is returned as-is.
    2. A directory holding ``order_file`` yields its entries in listed order.
       Listed files that do not exist are kept so the assembly step can record
       them as skipped units.
    3. Otherwise every ``*.md`` file directly in the directory, sorted by name.

    Raises:
        FileNotFoundError: If ``input_path`` does not exist.
    """
    if input_path.is_file():
        print(f"[sources] single file: {input_path}")
        return [input_path]
    if not input_path.is_dir():
        raise FileNotFoundError(f"Input is neither a file nor a directory: {input_path}")

    order_path = input_path / order_file
    if order_path.is_file():
        files = [input_path / entry for entry in read_order_file(order_path)]
        missing = [p.name for p in files if not p.exists()]
        for name in missing:
            print(f"[sources] listed in {order_file} but not found: {name}")
        print(f"[sources] {len(files)} file(s) listed in {order_file}")
        return files

    files = sorted(
        (p for p in input_path.iterdir() if p.is_file() and p.suffix.lower() == MARKDOWN_SUFFIX),
        key=lambda p: p.name,
    )
    print(f"[sources] {len(files)} markdown file(s) found in {input_path}")
    return files


def read_source_unit(path: Path, *, encoding: str = "utf-8") -> str:
    """
    Read one source unit with newlines normalized to ``\\n``.

    Raises:
        SourceReadError: If the file is missing or cannot be decoded.
    """
    try:
        raw = path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceReadError(f"Failed to read source unit {path}: {exc}") from exc
    return _normalize_newlines(raw)


__all__ = ["read_order_file", "read_source_unit", "resolve_source_files"]
