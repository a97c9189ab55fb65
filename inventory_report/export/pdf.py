"""
PDF export of rendered reports.

Rasterizes the report region once and tiles the bitmap across A4 pages with
reportlab. Page geometry comes from core.pagination so the drawing stage
only consumes a placement list. The tiling step (295 mm) is shorter than the
A4 page (297 mm), so each page repeats the last 2 mm of the previous one.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple, Union

from PIL import Image
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as rl_canvas

from ..core.layout import ReportDocument
from ..core.pagination import PAGE_STEP_MM, A4_WIDTH_MM, PagePlacement, compute_page_placements
from .rasterizer import RasterOptions, rasterize

logger = logging.getLogger(__name__)

DEFAULT_FILE_PREFIX = "envanter-raporu"
EXPORT_FAILED_MESSAGE = "PDF oluşturulurken bir hata oluştu"


class ExportError(Exception):
    """Raised when a report cannot be rasterized or assembled into a document."""


@dataclass(frozen=True)
class ExportResult:
    """Outcome of a successful export."""
    path: Path
    page_count: int
    bitmap_size: Tuple[int, int]


def build_filename(prefix: str, component_id: Union[int, str], export_date: date) -> str:
    """Name an exported report, e.g. ``envanter-raporu-42-2026-10-17.pdf``."""
    return f"{prefix}-{component_id}-{export_date.isoformat()}.pdf"


def draw_pages(
    pdf: rl_canvas.Canvas,
    image: Image.Image,
    placements: List[PagePlacement],
    page_height: float,
) -> None:
    """Draw the same image once per placement, one page each.

    ``page_height`` is the physical page height in millimetres.

    Placement offsets are measured downward from the page top; reportlab
    measures upward from the bottom, so the image bottom edge is converted
    here. Whatever falls outside the page is clipped by the page boundary.
    """
    reader = ImageReader(image)
    for placement in placements:
        bottom = page_height - placement.offset - placement.image_height
        pdf.drawImage(
            reader,
            0,
            bottom * mm,
            width=placement.image_width * mm,
            height=placement.image_height * mm,
        )
        pdf.showPage()


class DocumentExporter:
    """Exports report documents as paginated PDF files."""

    def __init__(
        self,
        output_dir: Union[str, Path] = ".",
        file_prefix: str = DEFAULT_FILE_PREFIX,
        raster_options: Optional[RasterOptions] = None,
        page_width_mm: float = A4_WIDTH_MM,
        page_height_mm: float = PAGE_STEP_MM,
        page_size: Tuple[float, float] = A4,
    ):
        """Initialize exporter.

        Args:
            output_dir: Directory the PDF is saved into
            file_prefix: File name prefix
            raster_options: Oversampling factor and background color
            page_width_mm: Width the image is scaled to, in millimetres
            page_height_mm: Vertical step between pages, in millimetres
            page_size: PDF page size in points (A4 portrait)

        Raises:
            ValueError: If prefix is empty or page size is not positive
        """
        if not file_prefix or not file_prefix.strip():
            raise ValueError("file_prefix is required and cannot be empty")
        if page_width_mm <= 0 or page_height_mm <= 0:
            raise ValueError("page dimensions must be > 0")

        self.output_dir = Path(output_dir)
        self.file_prefix = file_prefix
        self.raster_options = raster_options or RasterOptions()
        self.page_width_mm = page_width_mm
        self.page_height_mm = page_height_mm
        self.page_size = page_size

    async def export(
        self,
        document: ReportDocument,
        component_id: Union[int, str],
        export_date: Optional[date] = None,
    ) -> ExportResult:
        """Rasterize a report and save it as a paginated PDF.

        Rasterization and file assembly run in a worker thread and are awaited.
        Nothing is left on disk when the export fails.

        Args:
            document: Laid-out report to capture
            component_id: Part identifier used in the file name
            export_date: Date used in the file name (defaults to today)

        Returns:
            ExportResult with the saved path and page count

        Raises:
            ExportError: If rasterization or document assembly fails
        """
        export_date = export_date or date.today()
        path = self.output_dir / build_filename(self.file_prefix, component_id, export_date)

        try:
            image = await asyncio.to_thread(rasterize, document, self.raster_options)
            placements = compute_page_placements(
                image.width, image.height, self.page_width_mm, self.page_height_mm
            )
            await asyncio.to_thread(self._write_pdf, image, placements, path)
        except ExportError:
            raise
        except Exception as exc:
            logger.error("PDF export failed for component %s: %s", component_id, exc)
            raise ExportError(f"{EXPORT_FAILED_MESSAGE}: {exc}") from exc

        logger.info("Exported %d page(s) to %s", len(placements), path)
        return ExportResult(path=path, page_count=len(placements), bitmap_size=image.size)

    def _write_pdf(self, image: Image.Image, placements: List[PagePlacement], path: Path) -> None:
        """Assemble the PDF in a temporary file and move it into place."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        partial = path.with_name(path.name + ".part")
        try:
            pdf = rl_canvas.Canvas(
                str(partial),
                pagesize=self.page_size,
            )
            pdf.setTitle(path.stem)
            draw_pages(pdf, image, placements, self.page_size[1] / mm)
            pdf.save()
            os.replace(partial, path)
        except Exception:
            partial.unlink(missing_ok=True)
            raise
