from .config import DocuWriteConfig, RenderOptions, build_config
from .errors import DocuWriteError, FatalAssemblyError, RenderError, SourceReadError
from .pipelines.assemble import AssemblyResult, assemble_document

__all__ = [
    "AssemblyResult",
    "DocuWriteConfig",
    "DocuWriteError",
    "FatalAssemblyError",
    "RenderError",
    "RenderOptions",
    "SourceReadError",
    "assemble_document",
    "build_config",
]
