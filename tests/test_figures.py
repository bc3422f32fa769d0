from __future__ import annotations

import threading
import time
from pathlib import Path

from docuwrite.core.markdown.headings import NO_HEADING_FOUND
from docuwrite.errors import RenderError
from docuwrite.pipelines.figures import annotate_figures, image_reference


class RecordingRasterizer:
    """Writes a placeholder image and remembers every call."""

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.calls: list[tuple[str, Path]] = []
        self._lock = threading.Lock()

    def render(self, payload: str, destination: Path) -> Path:
        with self._lock:
            self.calls.append((payload, destination))
        if any(marker in payload for marker in self.fail_on):
            raise RenderError(f"cannot render {destination.name}")
        destination.write_bytes(b"png")
        return destination


THREE_FIGURES = (
    "# Overview\n\n"
    "```mermaid\ngraph TD;\na-->b\n```\n\n"
    "## Broken Diagram\n\n"
    "```mermaid\nsequenceDiagram\nBROKEN\n```\n\n"
    "## CI/CD Pipeline\n\n"
    "```mermaid\nflowchart LR\nbuild-->deploy\n```\n"
)


def test_annotate_figures_replaces_blocks_with_image_references(tmp_path: Path) -> None:
    rasterizer = RecordingRasterizer()
    result = annotate_figures(
        "# Overview\n\n```mermaid\ngraph TD;\na-->b\n```\n\nAfter.\n",
        unit_name="guide",
        output_dir=tmp_path,
        rasterizer=rasterizer,
    )
    (figure,) = result.figures
    assert figure.succeeded
    assert figure.derived_name == "Overview"
    assert figure.target == "guide-01-overview.png"
    assert figure.output_ref == "guide-01-overview.png"
    assert "```mermaid" not in result.text
    assert "\n![Overview](guide-01-overview.png)\n" in result.text
    assert result.text.startswith("# Overview\n\n")
    assert result.text.endswith("After.\n")
    assert (tmp_path / "guide-01-overview.png").exists()
    assert rasterizer.calls == [("graph TD;\na-->b", tmp_path / "guide-01-overview.png")]


def test_annotate_figures_failed_figure_keeps_fenced_block(tmp_path: Path) -> None:
    rasterizer = RecordingRasterizer(fail_on={"BROKEN"})
    result = annotate_figures(
        THREE_FIGURES,
        unit_name="testfile",
        output_dir=tmp_path,
        rasterizer=rasterizer,
    )

    assert [f.sequence_number for f in result.figures] == [1, 2, 3]
    assert [f.succeeded for f in result.figures] == [True, False, True]
    failed = result.figures[1]
    assert failed.output_ref == ""
    assert failed.kind == "sequenceDiagram"
    assert failed.derived_name == "Broken Diagram"
    assert "```mermaid\nsequenceDiagram\nBROKEN\n```" in result.text
    assert result.text[failed.start_offset:failed.end_offset] == "```mermaid\nsequenceDiagram\nBROKEN\n```"

    last = result.figures[2]
    assert last.target == "testfile-03-cicd-pipeline.png"
    assert "![CI/CD Pipeline](testfile-03-cicd-pipeline.png)" in result.text
    assert result.text[last.start_offset:last.end_offset] == (
        "\n" + image_reference("CI/CD Pipeline", "testfile-03-cicd-pipeline.png") + "\n"
    )


def test_annotate_figures_continues_numbering(tmp_path: Path) -> None:
    result = annotate_figures(
        "```mermaid\ngantt\n```\n",
        unit_name="later",
        output_dir=tmp_path,
        rasterizer=RecordingRasterizer(),
        starting_figure_number=4,
    )
    (figure,) = result.figures
    assert figure.sequence_number == 5
    assert figure.derived_name == NO_HEADING_FOUND
    assert figure.target == "later-05-no-header-found.png"


def test_annotate_figures_without_diagrams_is_identity(tmp_path: Path) -> None:
    rasterizer = RecordingRasterizer()
    text = "# Plain\n\n```python\nprint('hi')\n```\n"
    result = annotate_figures(text, unit_name="plain", output_dir=tmp_path, rasterizer=rasterizer)
    assert result.text == text
    assert result.figures == []
    assert rasterizer.calls == []


class SlowFirstRasterizer(RecordingRasterizer):
    def render(self, payload: str, destination: Path) -> Path:
        if payload.startswith("graph"):
            time.sleep(0.05)
        return super().render(payload, destination)


def test_annotate_figures_worker_pool_keeps_document_order(tmp_path: Path) -> None:
    rasterizer = SlowFirstRasterizer(fail_on={"BROKEN"})
    result = annotate_figures(
        THREE_FIGURES,
        unit_name="testfile",
        output_dir=tmp_path,
        rasterizer=rasterizer,
        workers=3,
    )
    assert [f.succeeded for f in result.figures] == [True, False, True]
    assert [f.target for f in result.figures] == [
        "testfile-01-overview.png",
        "testfile-02-broken-diagram.png",
        "testfile-03-cicd-pipeline.png",
    ]
    assert result.text.index("testfile-01-overview.png") < result.text.index("BROKEN")
    assert result.text.index("BROKEN") < result.text.index("testfile-03-cicd-pipeline.png")


def test_annotate_figures_verbose_reports_failure_details(tmp_path: Path, capsys) -> None:
    annotate_figures(
        THREE_FIGURES,
        unit_name="testfile",
        output_dir=tmp_path,
        rasterizer=RecordingRasterizer(fail_on={"BROKEN"}),
        verbose=True,
    )
    out = capsys.readouterr().out
    assert "unable to render diagram 2" in out
    assert "type: sequenceDiagram" in out
    assert "cannot render testfile-02-broken-diagram.png" in out
