from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml


MANIFEST_FORMATS = ("csv", "parquet", "json")
DEFAULT_TODO_MESSAGE = "TODO List"
DEFAULT_TITLE = "Documentation"


@dataclass(frozen=True)
class RenderOptions:
    pdf_engine: str = "xelatex"
    margin_inches: float = 1.0
    standalone: bool = True
    table_of_contents: bool = True
    toc_depth: int = 3
    list_of_tables: bool = True
    list_of_figures: bool = True
    number_sections: bool = True
    header_includes: tuple[str, ...] = ()
    markdown_extensions: tuple[str, ...] = ()


@dataclass(frozen=True)
class DocuWriteConfig:
    input_path: Path | None = None
    output_dir: Path = Path("output")
    output_file: Path = Path("output.pdf")
    order_file: str = ".order"
    title: str | None = None
    source_url: str | None = None
    message: str | None = None
    todo_message: str = DEFAULT_TODO_MESSAGE
    ignore_mermaid_errors: bool = False
    workers: int = 1
    mermaid_executable: str = "mmdc"
    pandoc_executable: str = "pandoc"
    manifest_format: str = "csv"
    skip_pdf: bool = False
    clean_output_dir: bool = False
    verbose: bool = False
    render: RenderOptions = field(default_factory=RenderOptions)


_PATH_FIELDS = {"input_path", "output_dir", "output_file"}
_TUPLE_RENDER_FIELDS = {"header_includes", "markdown_extensions"}


@lru_cache(maxsize=1)
def load_render_defaults() -> dict[str, Any]:
    """Packaged pandoc defaults (``render/pandoc_defaults.json``)."""
    data_path = resources.files("docuwrite.render").joinpath("pandoc_defaults.json")
    with data_path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def _field_names(cls: type) -> set[str]:
    return {f.name for f in dataclasses.fields(cls)}


def _coerce_render_values(values: dict[str, Any], *, source: str) -> dict[str, Any]:
    allowed = _field_names(RenderOptions)
    unknown = sorted(set(values) - allowed)
    if unknown:
        raise ValueError(f"Unknown render option(s) in {source}: {', '.join(unknown)}")
    coerced: dict[str, Any] = {}
    for key, value in values.items():
        if key in _TUPLE_RENDER_FIELDS:
            if isinstance(value, str):
                value = (value,)
            coerced[key] = tuple(str(v) for v in (value or ()))
        elif key == "margin_inches":
            coerced[key] = float(value)
        elif key == "toc_depth":
            depth = int(value)
            if not 1 <= depth <= 6:
                raise ValueError(f"toc_depth must be between 1 and 6, got {depth}")
            coerced[key] = depth
        else:
            coerced[key] = value
    return coerced


def default_render_options() -> RenderOptions:
    return RenderOptions(**_coerce_render_values(load_render_defaults(), source="packaged defaults"))


def load_config_file(path: Path) -> dict[str, Any]:
    """
    Read a YAML config file.

    Top-level keys mirror ``DocuWriteConfig`` fields; render options live
    under a nested ``render`` mapping. An empty file yields ``{}``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the document is not a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return loaded


def build_config(
    overrides: dict[str, Any] | None = None,
    *,
    file_values: dict[str, Any] | None = None,
) -> DocuWriteConfig:
    """
    Merge packaged defaults, config-file values and command-line overrides.

    ``None`` values in ``overrides`` mean "not given" and do not shadow file
    values. Later sources win: defaults < file < overrides.
    """
    allowed = _field_names(DocuWriteConfig)
    render_values: dict[str, Any] = dict(load_render_defaults())
    values: dict[str, Any] = {}

    for source, layer in (("config file", file_values or {}), ("arguments", overrides or {})):
        layer = {k: v for k, v in layer.items() if v is not None}
        unknown = sorted(set(layer) - allowed)
        if unknown:
            raise ValueError(f"Unknown option(s) in {source}: {', '.join(unknown)}")
        nested = layer.pop("render", None)
        if nested is not None:
            if not isinstance(nested, dict):
                raise ValueError(f"'render' in {source} must be a mapping")
            render_values.update({k: v for k, v in nested.items() if v is not None})
        values.update(layer)

    for key in _PATH_FIELDS & set(values):
        values[key] = Path(values[key])
    if "workers" in values:
        values["workers"] = max(1, int(values["workers"]))
    fmt = values.get("manifest_format")
    if fmt is not None and fmt not in MANIFEST_FORMATS:
        raise ValueError(f"manifest_format must be one of {MANIFEST_FORMATS}, got {fmt!r}")

    render = RenderOptions(**_coerce_render_values(render_values, source="render options"))
    return DocuWriteConfig(render=render, **values)


__all__ = [
    "DEFAULT_TITLE",
    "DEFAULT_TODO_MESSAGE",
    "DocuWriteConfig",
    "MANIFEST_FORMATS",
    "RenderOptions",
    "build_config",
    "default_render_options",
    "load_config_file",
    "load_render_defaults",
]
