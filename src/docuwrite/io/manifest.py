from __future__ import annotations

import os
from collections import Counter
from pathlib import Path
from typing import TYPE_CHECKING

import polars as pl

from docuwrite.config import MANIFEST_FORMATS
from docuwrite.core.markdown.todos import todo_label
from docuwrite.pipelines.tables import EXISTING_CAPTION_TARGET

if TYPE_CHECKING:
    from docuwrite.pipelines.assemble import AssemblyResult


class FigureSchema:
    schema = {
        "figure_number": pl.Int64,
        "kind": pl.Utf8,
        "name": pl.Utf8,
        "image_file": pl.Utf8,
        "succeeded": pl.Boolean,
        "unit": pl.Utf8,
    }


class TableSchema:
    schema = {
        "table_number": pl.Int64,
        "name": pl.Utf8,
        "caption_added": pl.Boolean,
    }


class TodoSchema:
    schema = {
        "label": pl.Utf8,
        "section": pl.Utf8,
        "item": pl.Utf8,
    }


class UnitSchema:
    schema = {
        "unit": pl.Utf8,
        "status": pl.Utf8,
        "error": pl.Utf8,
    }


def figures_frame(result: AssemblyResult) -> pl.DataFrame:
    records = [
        {
            "figure_number": fig.sequence_number,
            "kind": fig.kind,
            "name": fig.derived_name,
            "image_file": fig.target,
            "succeeded": fig.succeeded,
            "unit": fp.unit_name,
        }
        for fp in result.figure_passes
        for fig in fp.figures
    ]
    return pl.DataFrame(records, schema=FigureSchema.schema)


def tables_frame(result: AssemblyResult) -> pl.DataFrame:
    records = [
        {
            "table_number": table.sequence_number,
            "name": table.derived_name,
            "caption_added": table.target != EXISTING_CAPTION_TARGET,
        }
        for table in result.tables
    ]
    return pl.DataFrame(records, schema=TableSchema.schema)


def todos_frame(result: AssemblyResult) -> pl.DataFrame:
    records = [
        {"label": todo_label(i), "section": todo.section, "item": todo.item}
        for i, todo in enumerate(result.todos, start=1)
    ]
    return pl.DataFrame(records, schema=TodoSchema.schema)


def units_frame(result: AssemblyResult) -> pl.DataFrame:
    records = [{"unit": u.unit, "status": u.status, "error": u.error} for u in result.units]
    return pl.DataFrame(records, schema=UnitSchema.schema)


def manifest_frames(result: AssemblyResult) -> dict[str, pl.DataFrame]:
    return {
        "figures": figures_frame(result),
        "tables": tables_frame(result),
        "todos": todos_frame(result),
        "units": units_frame(result),
    }


def summarize(result: AssemblyResult) -> list[str]:
    """Human-readable run summary, one line per entry."""
    lines = [
        f"Processed units: {len(result.processed_units)}",
        f"Skipped units: {len(result.skipped_units)}",
    ]
    lines.extend(f"  skipped: {name}" for name in result.skipped_units)

    figures = result.figures
    counts = Counter(fig.kind or "unknown" for fig in figures)
    lines.append(f"Diagrams: {len(figures)}")
    lines.extend(f"  {kind}: {count}" for kind, count in sorted(counts.items()))

    failed = result.failed_figures
    lines.append(f"Failed diagrams: {len(failed)}")
    for fig in failed:
        lines.append(
            f"  #{fig.sequence_number} type={fig.kind or 'unknown'} "
            f"name={fig.derived_name} image={fig.target}"
        )

    captions_added = result.table_pass.captions_added if result.table_pass is not None else 0
    lines.append(f"Tables: {len(result.tables)} ({captions_added} caption(s) added)")
    lines.append(f"TODO items: {len(result.todos)}")
    return lines


def _write_frame(df: pl.DataFrame, out_path: Path, fmt: str) -> None:
    tmp_path = out_path.with_name(out_path.name + ".tmp")
    try:
        tmp_path.unlink(missing_ok=True)
        if fmt == "csv":
            df.write_csv(tmp_path)
        elif fmt == "parquet":
            df.write_parquet(tmp_path)
        else:
            df.write_json(tmp_path)
        os.replace(tmp_path, out_path)
    finally:
        tmp_path.unlink(missing_ok=True)


def write_manifest(result: AssemblyResult, out_dir: Path, fmt: str = "csv") -> dict[str, Path]:
    """
    Write the figure, table, TODO and unit records of a run.

    Args:
        result: Assembly result to describe.
        out_dir: Directory receiving ``manifest_<name>.<fmt>`` files.
        fmt: One of ``csv``, ``parquet`` or ``json``.

    Returns:
        dict[str, Path]: Written file per frame name.
    """
    if fmt not in MANIFEST_FORMATS:
        raise ValueError(f"fmt must be one of {MANIFEST_FORMATS}, got {fmt!r}")
    out_dir.mkdir(parents=True, exist_ok=True)
    paths: dict[str, Path] = {}
    for name, df in manifest_frames(result).items():
        out_path = out_dir / f"manifest_{name}.{fmt}"
        _write_frame(df, out_path, fmt)
        paths[name] = out_path
        print(f"[manifest] {name}: {df.height} row(s) -> {out_path.name}")
    return paths


__all__ = [
    "FigureSchema",
    "TableSchema",
    "TodoSchema",
    "UnitSchema",
    "figures_frame",
    "manifest_frames",
    "summarize",
    "tables_frame",
    "todos_frame",
    "units_frame",
    "write_manifest",
]
