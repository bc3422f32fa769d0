from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from docuwrite.config import DEFAULT_TODO_MESSAGE
from docuwrite.core.markdown.blocks import StructuralBlock
from docuwrite.core.markdown.todos import Todo, extract_todos, format_todo_list, label_todos
from docuwrite.core.markdown.utilities import space_headings
from docuwrite.errors import FatalAssemblyError, SourceReadError
from docuwrite.io.sources import read_source_unit
from docuwrite.pipelines.figures import FigurePassResult, annotate_figures
from docuwrite.pipelines.tables import TablePassResult, mark_tables
from docuwrite.render.mermaid import Rasterizer


UNIT_PROCESSED = "processed"
UNIT_SKIPPED = "skipped"


@dataclass(frozen=True)
class UnitStatus:
    unit: str
    status: str
    error: str = ""


@dataclass
class AssemblyResult:
    text: str
    figure_passes: list[FigurePassResult] = field(default_factory=list)
    table_pass: TablePassResult | None = None
    todos: list[Todo] = field(default_factory=list)
    units: list[UnitStatus] = field(default_factory=list)

    @property
    def figures(self) -> list[StructuralBlock]:
        return [fig for fp in self.figure_passes for fig in fp.figures]

    @property
    def failed_figures(self) -> list[StructuralBlock]:
        return [fig for fig in self.figures if not fig.succeeded]

    @property
    def tables(self) -> list[StructuralBlock]:
        return self.table_pass.tables if self.table_pass is not None else []

    @property
    def processed_units(self) -> list[str]:
        return [u.unit for u in self.units if u.status == UNIT_PROCESSED]

    @property
    def skipped_units(self) -> list[str]:
        return [u.unit for u in self.units if u.status == UNIT_SKIPPED]


def _unit_label(path: Path, base_dir: Path | None) -> str:
    if base_dir is not None:
        try:
            return path.relative_to(base_dir).as_posix()
        except ValueError:
            pass
    return path.name


def failed_unit_stub(path: Path) -> str:
    return f"# File: {path.name}\n\nAn error occurred while processing this file.\n\n"


def build_preface(*, source_url: str | None = None, message: str | None = None) -> str:
    parts: list[str] = []
    if message:
        parts.append(message.strip())
    if source_url:
        parts.append(f"Source: <{source_url.strip()}>")
    return "\n\n".join(parts) + "\n\n" if parts else ""


def finalize_document(text: str, *, todo_message: str = DEFAULT_TODO_MESSAGE) -> tuple[str, list[Todo], TablePassResult]:
    """
    Run the merged-document passes: TODO extraction and labeling, TODO list,
    then table captions.
    """
    todos = extract_todos(text)
    if todos:
        text = label_todos(text, todos)
        text = text.rstrip("\n") + "\n\n" + format_todo_list(todos, todo_message)
    print(f"[todos] {len(todos)} TODO item(s) extracted")

    table_pass = mark_tables(text)
    print(f"[tables] {len(table_pass.tables)} table(s) found, {table_pass.captions_added} caption(s) added")
    return table_pass.text, todos, table_pass


def assemble_document(
    paths: Sequence[Path],
    *,
    output_dir: Path,
    rasterizer: Rasterizer,
    todo_message: str = DEFAULT_TODO_MESSAGE,
    workers: int = 1,
    base_dir: Path | None = None,
    source_url: str | None = None,
    message: str | None = None,
    verbose: bool = False,
) -> AssemblyResult:
    """
    Merge source units into one annotated Markdown document.

    Each unit is read, its headings spaced out, and its Mermaid blocks turned
    into figures (numbering continues across units). Units that cannot be
    read are replaced with a short placeholder and recorded as skipped. The
    merged text then gets TODO labels, a TODO list, and table captions.

    Args:
        paths: Source units in document order.
        output_dir: Destination for rasterized figures.
        rasterizer: Diagram rasterizer collaborator.
        todo_message: Intro paragraph of the TODO list.
        workers: Maximum concurrent rasterizer calls per unit.
        base_dir: Directory unit labels are reported relative to.
        source_url: Optional source link placed before the first unit.
        message: Optional intro paragraph placed before the first unit.
        verbose: Print diagram details for failed figures.

    Returns:
        AssemblyResult: Final text plus figure, table, TODO and unit records.

    Raises:
        FatalAssemblyError: If nothing but whitespace was merged.
    """
    result = AssemblyResult(text="")
    chunks: list[str] = []
    figure_count = 0

    for path in paths:
        label = _unit_label(path, base_dir)
        try:
            raw = read_source_unit(path)
        except SourceReadError as exc:
            print(f"[sources] error processing {label}: {exc}")
            chunks.append(failed_unit_stub(path))
            result.units.append(UnitStatus(unit=label, status=UNIT_SKIPPED, error=str(exc)))
            continue

        figure_pass = annotate_figures(
            space_headings(raw),
            unit_name=path.stem,
            output_dir=output_dir,
            rasterizer=rasterizer,
            starting_figure_number=figure_count,
            workers=workers,
            verbose=verbose,
        )
        figure_count += len(figure_pass.figures)
        result.figure_passes.append(figure_pass)
        result.units.append(UnitStatus(unit=label, status=UNIT_PROCESSED))
        if figure_pass.text.strip():
            chunks.append(figure_pass.text.strip("\n") + "\n\n")

    merged = "".join(chunks)
    if not merged.strip():
        raise FatalAssemblyError("No content was successfully merged.")

    merged = build_preface(source_url=source_url, message=message) + merged
    result.text, result.todos, result.table_pass = finalize_document(merged, todo_message=todo_message)
    return result


__all__ = [
    "AssemblyResult",
    "UNIT_PROCESSED",
    "UNIT_SKIPPED",
    "UnitStatus",
    "assemble_document",
    "build_preface",
    "failed_unit_stub",
    "finalize_document",
]
