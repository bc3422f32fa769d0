from __future__ import annotations

import os
import subprocess
from collections.abc import Sequence
from pathlib import Path

from docuwrite.config import DEFAULT_TITLE, RenderOptions


def _format_margin(margin_inches: float) -> str:
    return f"{margin_inches:g}in"


def build_pandoc_command(
    input_file: Path,
    output_file: Path,
    options: RenderOptions,
    *,
    resource_paths: Sequence[Path] = (),
    title: str | None = None,
    executable: str = "pandoc",
) -> list[str]:
    """Build the pandoc argument list for one annotated Markdown file."""
    command = [executable, str(input_file), "-o", str(output_file)]
    if options.markdown_extensions:
        command.extend(["--from", "markdown" + "".join(options.markdown_extensions)])
    if resource_paths:
        command.append("--resource-path=" + os.pathsep.join(str(p) for p in resource_paths))
    command.extend(["--metadata", f"title={title or DEFAULT_TITLE}"])
    command.append(f"--pdf-engine={options.pdf_engine}")
    command.extend(["-V", f"geometry:margin={_format_margin(options.margin_inches)}"])
    if options.standalone:
        command.append("--standalone")
    if options.table_of_contents:
        command.extend(["--toc", f"--toc-depth={options.toc_depth}"])
    if options.list_of_tables:
        command.extend(["-V", "lot"])
    if options.list_of_figures:
        command.extend(["-V", "lof"])
    if options.number_sections:
        command.append("--number-sections")
    if options.header_includes:
        command.extend(["-V", "header-includes=" + "\n".join(options.header_includes)])
    return command


def _run_command(*, command: list[str], cwd: Path | None = None) -> int:
    print(f"> {' '.join(command)}")
    result = subprocess.run(command, cwd=cwd, check=False)
    return int(result.returncode)


def render_document(
    input_file: Path,
    output_file: Path,
    options: RenderOptions,
    *,
    resource_paths: Sequence[Path] = (),
    title: str | None = None,
    executable: str = "pandoc",
) -> bool:
    """
    Render the annotated Markdown with pandoc.

    Returns:
        bool: ``True`` when pandoc exits cleanly and the output file exists.
    """
    input_file = input_file.resolve()
    output_file = output_file.resolve()
    output_file.parent.mkdir(parents=True, exist_ok=True)
    command = build_pandoc_command(
        input_file,
        output_file,
        options,
        resource_paths=resource_paths,
        title=title,
        executable=executable,
    )
    try:
        returncode = _run_command(command=command, cwd=input_file.parent)
    except OSError as exc:
        print(f"[render] could not start {executable}: {exc}")
        return False
    if returncode != 0:
        print(f"[render] pandoc failed with exit code {returncode}")
        return False
    if not output_file.exists():
        print(f"[render] pandoc finished but {output_file} is missing")
        return False
    return True


__all__ = ["build_pandoc_command", "render_document"]
