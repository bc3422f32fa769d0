from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from docuwrite.core.markdown.blocks import StructuralBlock, scan_diagram_blocks
from docuwrite.core.markdown.headings import nearest_heading_before, parse_headings
from docuwrite.core.markdown.rewrite import Replacement, rewrite_blocks
from docuwrite.core.markdown.utilities import figure_file_name
from docuwrite.errors import RenderError
from docuwrite.render.mermaid import Rasterizer


@dataclass
class FigurePassResult:
    text: str
    figures: list[StructuralBlock] = field(default_factory=list)
    unit_name: str = ""


def image_reference(name: str, image_file: str) -> str:
    return f"![{name}]({image_file})"


def _rasterize_one(
    rasterizer: Rasterizer,
    figure: StructuralBlock,
    output_dir: Path,
) -> RenderError | None:
    try:
        rasterizer.render(figure.payload, output_dir / figure.target)
    except RenderError as exc:
        return exc
    return None


def _rasterize_all(
    rasterizer: Rasterizer,
    figures: list[StructuralBlock],
    output_dir: Path,
    workers: int,
) -> list[RenderError | None]:
    # Results stay indexed by document position whatever the completion order.
    if workers <= 1 or len(figures) <= 1:
        return [_rasterize_one(rasterizer, fig, output_dir) for fig in figures]
    with ThreadPoolExecutor(max_workers=min(workers, len(figures))) as ex:
        futures = [ex.submit(_rasterize_one, rasterizer, fig, output_dir) for fig in figures]
        return [fut.result() for fut in futures]


def annotate_figures(
    text: str,
    *,
    unit_name: str,
    output_dir: Path,
    rasterizer: Rasterizer,
    starting_figure_number: int = 0,
    workers: int = 1,
    verbose: bool = False,
) -> FigurePassResult:
    """
    Replace Mermaid blocks in one source unit with image references.

    Figures are numbered by document position continuing from
    ``starting_figure_number`` and named after their nearest heading. Each is
    rasterized to ``<unit>-<NN>-<slug>.png`` under ``output_dir`` (optionally
    on a small thread pool), then successful figures are swapped for
    ``![name](image)`` by the rewrite engine. A figure whose rasterization
    fails keeps its fenced code and is reported with ``succeeded=False``.

    Args:
        text: Markdown of a single source unit.
        unit_name: File stem used as the image name prefix.
        output_dir: Destination for images and ``.mmd`` sources.
        rasterizer: Diagram rasterizer collaborator.
        starting_figure_number: Figures already numbered in earlier units.
        workers: Maximum concurrent rasterizer calls.
        verbose: Print diagram details for failed figures.

    Returns:
        FigurePassResult: Rewritten text and the figure records.
    """
    figures = scan_diagram_blocks(text)
    if not figures:
        return FigurePassResult(text=text, figures=[], unit_name=unit_name)

    headings = parse_headings(text)
    for figure in figures:
        figure.sequence_number += starting_figure_number
        figure.derived_name = nearest_heading_before(headings, figure.start_offset)
        figure.target = figure_file_name(unit_name, figure.sequence_number, figure.derived_name)

    output_dir.mkdir(parents=True, exist_ok=True)
    errors = _rasterize_all(rasterizer, figures, output_dir, workers)
    failures = {fig.sequence_number: err for fig, err in zip(figures, errors) if err is not None}

    def _produce(block: StructuralBlock, _span: str) -> Replacement:
        if block.sequence_number in failures:
            raise failures[block.sequence_number]
        return Replacement(
            text=f"\n{image_reference(block.derived_name, block.target)}\n",
            output_ref=block.target,
        )

    rewritten = rewrite_blocks(text, figures, _produce)

    for figure, err in zip(figures, errors):
        if err is None:
            print(f"[figures] #{figure.sequence_number} {figure.kind or '?'} -> {figure.target}")
            continue
        print(
            f"[figures] warning: unable to render diagram {figure.sequence_number}; "
            "it is left as-is in the document."
        )
        if verbose:
            print(f"[figures]   type: {figure.kind}")
            print(f"[figures]   name: {figure.derived_name}")
            print(f"[figures]   error: {err}")
            print(f"[figures]   content:\n{figure.payload}")

    return FigurePassResult(text=rewritten, figures=figures, unit_name=unit_name)


__all__ = ["FigurePassResult", "annotate_figures", "image_reference"]
