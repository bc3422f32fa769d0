"""Adapters for the external diagram rasterizer and document renderer."""

from docuwrite.render.mermaid import MermaidCliRasterizer, Rasterizer, write_diagram_source
from docuwrite.render.pandoc import build_pandoc_command, render_document

__all__ = [
    "MermaidCliRasterizer",
    "Rasterizer",
    "build_pandoc_command",
    "render_document",
    "write_diagram_source",
]
