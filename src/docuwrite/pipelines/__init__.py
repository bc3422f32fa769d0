"""Document passes: figures per unit, then TODOs and tables over the merged text."""

from docuwrite.pipelines.assemble import AssemblyResult, assemble_document
from docuwrite.pipelines.figures import FigurePassResult, annotate_figures
from docuwrite.pipelines.tables import TablePassResult, mark_tables

__all__ = [
    "AssemblyResult",
    "FigurePassResult",
    "TablePassResult",
    "annotate_figures",
    "assemble_document",
    "mark_tables",
]
