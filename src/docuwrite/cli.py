from __future__ import annotations

import argparse
import shutil
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from docuwrite.config import MANIFEST_FORMATS, DocuWriteConfig, build_config, load_config_file
from docuwrite.errors import FatalAssemblyError
from docuwrite.io.manifest import summarize, write_manifest
from docuwrite.io.sources import resolve_source_files
from docuwrite.pipelines.assemble import assemble_document
from docuwrite.render.mermaid import MermaidCliRasterizer
from docuwrite.render.pandoc import render_document


PROCESSED_MARKDOWN_NAME = "temp_processed.md"

_RENDER_ARGS = {
    "toc": "table_of_contents",
    "toc_depth": "toc_depth",
    "number_sections": "number_sections",
    "list_of_tables": "list_of_tables",
    "list_of_figures": "list_of_figures",
    "margin_inches": "margin_inches",
    "pdf_engine": "pdf_engine",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docuwrite",
        description="Merge Markdown sources, rasterize Mermaid diagrams, caption tables, list TODOs and render a PDF.",
    )
    parser.add_argument("-i", "--input", dest="input_path", type=Path, help="Markdown file or directory of sources.")
    parser.add_argument("--output-dir", type=Path, help="Directory for images, processed Markdown and manifests.")
    parser.add_argument(
        "-o",
        "--output",
        dest="output_file",
        type=Path,
        help="PDF file name; relative paths are placed under --output-dir.",
    )
    parser.add_argument("--order", dest="order_file", help="Order manifest file name inside the input directory.")
    parser.add_argument("--config", type=Path, help="YAML config file; command-line flags take precedence.")
    parser.add_argument("--title", help="Document title metadata.")
    parser.add_argument("--source-url", help="Source link placed before the first unit.")
    parser.add_argument("--message", help="Intro paragraph placed before the first unit.")
    parser.add_argument("--todo-message", help="Intro paragraph of the TODO list.")
    parser.add_argument(
        "--ignore-mermaid-errors",
        action="store_true",
        default=None,
        help="Exit 0 even when some diagrams could not be rendered.",
    )
    parser.add_argument("--workers", type=int, help="Concurrent diagram rasterizations per unit.")
    parser.add_argument("--mermaid-executable", help="Mermaid CLI executable (default: mmdc).")
    parser.add_argument("--pandoc-executable", help="Pandoc executable (default: pandoc).")
    parser.add_argument("--manifest-format", choices=MANIFEST_FORMATS, help="Manifest file format.")
    parser.add_argument("--skip-pdf", action="store_true", default=None, help="Stop after writing processed Markdown.")
    parser.add_argument(
        "--clean-output-dir",
        action="store_true",
        default=None,
        help="Delete the output directory before running.",
    )
    parser.add_argument("--verbose", action="store_true", default=None, help="Print details for failed diagrams.")

    render = parser.add_argument_group("render options")
    render.add_argument("--toc", action=argparse.BooleanOptionalAction, default=None)
    render.add_argument("--toc-depth", type=int)
    render.add_argument("--number-sections", action=argparse.BooleanOptionalAction, default=None)
    render.add_argument("--list-of-tables", action=argparse.BooleanOptionalAction, default=None)
    render.add_argument("--list-of-figures", action=argparse.BooleanOptionalAction, default=None)
    render.add_argument("--margin-inches", type=float)
    render.add_argument("--pdf-engine")
    return parser


def _overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    values = vars(args).copy()
    values.pop("config", None)
    values["render"] = {field: values.pop(arg) for arg, field in _RENDER_ARGS.items()}
    return values


def load_cli_config(argv: Sequence[str] | None = None) -> DocuWriteConfig:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        file_values = load_config_file(args.config) if args.config else None
        return build_config(_overrides_from_args(args), file_values=file_values)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))
        raise


def _prepare_output_dir(output_dir: Path, *, clean: bool) -> Path:
    if clean and output_dir.exists():
        print(f"[sources] cleaning output directory {output_dir}")
        shutil.rmtree(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def _output_pdf_path(config: DocuWriteConfig) -> Path:
    if config.output_file.is_absolute():
        return config.output_file
    return config.output_dir / config.output_file


def run(config: DocuWriteConfig) -> int:
    """
    Execute one conversion with a resolved config.

    Returns:
        int: ``0`` on success; ``1`` when pandoc fails, or when diagrams failed
        and ``ignore_mermaid_errors`` is off.
    """
    if config.input_path is None:
        raise SystemExit("input is required (--input or 'input_path' in the config file).")
    if not config.input_path.exists():
        raise SystemExit(f"input not found: {config.input_path}")

    output_dir = _prepare_output_dir(config.output_dir, clean=config.clean_output_dir)
    sources = resolve_source_files(config.input_path, config.order_file)
    if not sources:
        raise SystemExit(f"no markdown sources found in {config.input_path}")
    base_dir = config.input_path if config.input_path.is_dir() else config.input_path.parent

    with MermaidCliRasterizer(executable=config.mermaid_executable) as rasterizer:
        try:
            result = assemble_document(
                sources,
                output_dir=output_dir,
                rasterizer=rasterizer,
                todo_message=config.todo_message,
                workers=config.workers,
                base_dir=base_dir,
                source_url=config.source_url,
                message=config.message,
                verbose=config.verbose,
            )
        except FatalAssemblyError as exc:
            raise SystemExit(f"[sources] {exc}") from exc

    processed_path = output_dir / PROCESSED_MARKDOWN_NAME
    processed_path.write_text(result.text, encoding="utf-8")
    print(f"[render] processed markdown -> {processed_path}")

    write_manifest(result, output_dir, config.manifest_format)
    for line in summarize(result):
        print(f"[summary] {line}")

    exit_code = 0
    if result.failed_figures:
        if config.ignore_mermaid_errors:
            print("[summary] diagram errors ignored (--ignore-mermaid-errors)")
        else:
            print("[summary] some diagrams failed; re-run with --ignore-mermaid-errors to exit 0")
            exit_code = 1

    if config.skip_pdf:
        print("[render] skipped (--skip-pdf)")
        return exit_code

    pdf_path = _output_pdf_path(config)
    ok = render_document(
        processed_path,
        pdf_path,
        config.render,
        resource_paths=[output_dir.resolve(), base_dir.resolve()],
        title=config.title,
        executable=config.pandoc_executable,
    )
    if not ok:
        return 1
    print(f"[render] PDF written -> {pdf_path}")
    return exit_code


def main(argv: Sequence[str] | None = None) -> int:
    return run(load_cli_config(argv))


if __name__ == "__main__":
    raise SystemExit(main())
