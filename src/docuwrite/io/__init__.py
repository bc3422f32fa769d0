"""Source discovery and run manifests."""

from docuwrite.io.manifest import manifest_frames, summarize, write_manifest
from docuwrite.io.sources import read_order_file, read_source_unit, resolve_source_files

__all__ = [
    "manifest_frames",
    "read_order_file",
    "read_source_unit",
    "resolve_source_files",
    "summarize",
    "write_manifest",
]
