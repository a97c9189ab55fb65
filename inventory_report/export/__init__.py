"""
Report export.

Rasterization of laid-out reports and paginated PDF output.
"""

from .pdf import DocumentExporter, ExportError, ExportResult
from .rasterizer import RasterOptions, rasterize

__all__ = ["DocumentExporter", "ExportError", "ExportResult", "RasterOptions", "rasterize"]
