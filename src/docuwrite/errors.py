from __future__ import annotations


class DocuWriteError(Exception):
    """Base class for errors raised by the assembly pipeline."""


class RenderError(DocuWriteError, RuntimeError):
    """A single diagram could not be rasterized. Recovered per figure."""


class SourceReadError(DocuWriteError, OSError):
    """A source unit could not be read. Recovered per unit."""


class FatalAssemblyError(DocuWriteError, ValueError):
    """Nothing usable was merged; the run cannot continue."""


__all__ = ["DocuWriteError", "FatalAssemblyError", "RenderError", "SourceReadError"]
