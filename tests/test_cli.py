from __future__ import annotations

from pathlib import Path

import pytest

from docuwrite import cli
from docuwrite.errors import RenderError


class FakeRasterizer:
    instances: list["FakeRasterizer"] = []

    def __init__(self, *, executable: str = "mmdc", **kwargs) -> None:
        self.executable = executable
        self.closed = False
        FakeRasterizer.instances.append(self)

    def render(self, payload: str, destination: Path) -> Path:
        if "BROKEN" in payload:
            raise RenderError("Parse error on line 2")
        destination.write_bytes(b"png")
        return destination

    def __enter__(self) -> "FakeRasterizer":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.closed = True


@pytest.fixture
def docs_dir(tmp_path: Path) -> Path:
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "01-intro.md").write_text("# Intro\nWelcome.\n\nTODO: write more\n", encoding="utf-8")
    (docs / "02-design.md").write_text(
        "# Design\n\n```mermaid\ngraph TD;\na-->b\n```\n\n## Broken\n\n```mermaid\ngraph TD;\nBROKEN\n```\n",
        encoding="utf-8",
    )
    return docs


@pytest.fixture(autouse=True)
def fake_rasterizer(monkeypatch: pytest.MonkeyPatch) -> None:
    FakeRasterizer.instances = []
    monkeypatch.setattr(cli, "MermaidCliRasterizer", FakeRasterizer)


def test_cli_skip_pdf_writes_processed_markdown_and_manifest(docs_dir: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "out"
    rc = cli.main(
        [
            "--input",
            str(docs_dir),
            "--output-dir",
            str(out_dir),
            "--skip-pdf",
            "--ignore-mermaid-errors",
            "--mermaid-executable",
            "/opt/mmdc",
        ]
    )
    assert rc == 0
    processed = (out_dir / cli.PROCESSED_MARKDOWN_NAME).read_text(encoding="utf-8")
    assert processed.index("# Intro") < processed.index("# Design")
    assert "![Design](02-design-01-design.png)" in processed
    assert "BROKEN" in processed
    assert "TODO: write more \\label{todo-item-1}" in processed
    assert (out_dir / "02-design-01-design.png").exists()
    assert (out_dir / "manifest_figures.csv").exists()
    assert (out_dir / "manifest_units.csv").exists()

    (rasterizer,) = FakeRasterizer.instances
    assert rasterizer.executable == "/opt/mmdc"
    assert rasterizer.closed is True


def test_cli_figure_failures_set_exit_code(docs_dir: Path, tmp_path: Path, capsys) -> None:
    rc = cli.main(["-i", str(docs_dir), "--output-dir", str(tmp_path / "out"), "--skip-pdf"])
    assert rc == 1
    out = capsys.readouterr().out
    assert "[summary] Failed diagrams: 1" in out
    assert "--ignore-mermaid-errors" in out


def test_cli_renders_pdf_with_pandoc(docs_dir: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list = []

    def _render(input_file, output_file, options, **kwargs):
        calls.append((input_file, output_file, options, kwargs))
        return True

    monkeypatch.setattr(cli, "render_document", _render)
    out_dir = tmp_path / "out"
    rc = cli.main(
        [
            "-i",
            str(docs_dir),
            "--output-dir",
            str(out_dir),
            "-o",
            "handbook.pdf",
            "--title",
            "Handbook",
            "--no-toc",
            "--toc-depth",
            "2",
            "--ignore-mermaid-errors",
            "--manifest-format",
            "json",
        ]
    )
    assert rc == 0
    ((input_file, output_file, options, kwargs),) = calls
    assert input_file == out_dir / cli.PROCESSED_MARKDOWN_NAME
    assert output_file == out_dir / "handbook.pdf"
    assert options.table_of_contents is False
    assert options.toc_depth == 2
    assert kwargs["title"] == "Handbook"
    assert out_dir.resolve() in kwargs["resource_paths"]
    assert (out_dir / "manifest_todos.json").exists()


def test_cli_pandoc_failure_exit_code(docs_dir: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "render_document", lambda *args, **kwargs: False)
    rc = cli.main(["-i", str(docs_dir), "--output-dir", str(tmp_path / "out"), "--ignore-mermaid-errors"])
    assert rc == 1


def test_cli_reads_yaml_config(docs_dir: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "from-config"
    config_path = tmp_path / "docuwrite.yaml"
    config_path.write_text(
        f"input_path: {docs_dir.as_posix()}\n"
        f"output_dir: {out_dir.as_posix()}\n"
        "skip_pdf: true\n"
        "ignore_mermaid_errors: true\n"
        "todo_message: Outstanding work\n",
        encoding="utf-8",
    )
    rc = cli.main(["--config", str(config_path)])
    assert rc == 0
    processed = (out_dir / cli.PROCESSED_MARKDOWN_NAME).read_text(encoding="utf-8")
    assert "# TODO List\n\nOutstanding work\n" in processed


def test_cli_clean_output_dir(docs_dir: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    stale = out_dir / "stale.png"
    stale.write_bytes(b"old")

    cli.main(["-i", str(docs_dir), "--output-dir", str(out_dir), "--skip-pdf", "--ignore-mermaid-errors"])
    assert stale.exists()

    cli.main(
        ["-i", str(docs_dir), "--output-dir", str(out_dir), "--skip-pdf", "--ignore-mermaid-errors", "--clean-output-dir"]
    )
    assert not stale.exists()


def test_cli_missing_input_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        cli.main(["--skip-pdf"])
    with pytest.raises(SystemExit):
        cli.main(["-i", str(tmp_path / "absent"), "--skip-pdf"])


def test_cli_blank_sources_exit(tmp_path: Path) -> None:
    docs = tmp_path / "blank"
    docs.mkdir()
    (docs / "empty.md").write_text("\n\n", encoding="utf-8")
    with pytest.raises(SystemExit, match="No content"):
        cli.main(["-i", str(docs), "--output-dir", str(tmp_path / "out"), "--skip-pdf"])


def test_cli_rejects_unknown_config_keys(tmp_path: Path) -> None:
    config_path = tmp_path / "bad.yaml"
    config_path.write_text("colour: blue\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        cli.main(["--config", str(config_path)])
