"""
Unit tests for rasterization and PDF export.

Exports are written to pytest's tmp_path at scale 1 to keep them fast.
"""

from datetime import date
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas as rl_canvas

from inventory_report.core.formatting import Formatter
from inventory_report.core.layout import build_report_document
from inventory_report.core.models import DateRange, ReportPayload
from inventory_report.core.pagination import PAGE_STEP_MM, compute_page_placements
from inventory_report.core.statistics import compute_statistics
from inventory_report.export.pdf import (
    DocumentExporter,
    ExportError,
    build_filename,
    draw_pages,
)
from inventory_report.export.rasterizer import REGION_WIDTH, RasterOptions, rasterize

JANUARY = DateRange(date(2026, 1, 1), date(2026, 1, 31))
EXPORT_DATE = date(2026, 2, 1)


def _document(report_json):
    payload = ReportPayload.from_json(report_json)
    return build_report_document(
        payload=payload,
        statistics=compute_statistics(payload, JANUARY),
        date_range=JANUARY,
        formatter=Formatter(),
        component_id=42,
        generated_on=EXPORT_DATE,
    )


def _exporter(tmp_path, **kwargs):
    return DocumentExporter(output_dir=tmp_path, raster_options=RasterOptions(scale=1), **kwargs)


class TestRasterize:
    """Test bitmap rendering."""

    def test_width_follows_scale(self, report_json):
        image = rasterize(_document(report_json), RasterOptions(scale=2))

        assert image.mode == "RGB"
        assert image.width == REGION_WIDTH * 2

    def test_opaque_white_background(self, report_json):
        image = rasterize(_document(report_json), RasterOptions(scale=1))
        assert image.getpixel((1, image.height - 1)) == (255, 255, 255)

    def test_custom_background(self, report_json):
        report_json["component"].pop("company")
        image = rasterize(_document(report_json), RasterOptions(scale=1, background="#000000"))
        assert image.getpixel((1, 1)) == (0, 0, 0)

    def test_more_rows_make_taller_image(self, report_json):
        short = rasterize(_document(report_json), RasterOptions(scale=1))
        report_json["usageHistory"] = report_json["usageHistory"] * 20
        tall = rasterize(_document(report_json), RasterOptions(scale=1))

        assert tall.height > short.height

    def test_empty_document(self):
        doc = build_report_document(
            payload=None,
            statistics=None,
            date_range=JANUARY,
            formatter=Formatter(),
            component_id=42,
            generated_on=EXPORT_DATE,
        )
        image = rasterize(doc, RasterOptions(scale=1))
        assert image.height > 0

    def test_invalid_scale(self):
        with pytest.raises(ValueError, match="scale must be >= 1"):
            RasterOptions(scale=0)


class TestBuildFilename:
    """Test export file naming."""

    def test_filename(self):
        assert build_filename("envanter-raporu", 42, date(2026, 10, 17)) == "envanter-raporu-42-2026-10-17.pdf"


class TestDocumentExporter:
    """Test PDF assembly."""

    def test_empty_prefix(self, tmp_path):
        with pytest.raises(ValueError, match="file_prefix is required"):
            DocumentExporter(output_dir=tmp_path, file_prefix=" ")

    def test_invalid_page_size(self, tmp_path):
        with pytest.raises(ValueError, match="page dimensions must be > 0"):
            DocumentExporter(output_dir=tmp_path, page_height_mm=0)

    @pytest.mark.asyncio
    async def test_export_writes_pdf(self, tmp_path, report_json):
        result = await _exporter(tmp_path).export(_document(report_json), 42, EXPORT_DATE)

        assert result.path == tmp_path / "envanter-raporu-42-2026-02-01.pdf"
        assert result.path.read_bytes().startswith(b"%PDF")
        assert result.page_count == len(compute_page_placements(*result.bitmap_size))
        assert [p.name for p in tmp_path.iterdir()] == [result.path.name]

    @pytest.mark.asyncio
    async def test_long_report_spans_pages(self, tmp_path, report_json):
        report_json["usageHistory"] = report_json["usageHistory"] * 40

        result = await _exporter(tmp_path).export(_document(report_json), 42, EXPORT_DATE)

        assert result.page_count > 1
        assert result.page_count == len(compute_page_placements(*result.bitmap_size))

    @pytest.mark.asyncio
    async def test_creates_output_dir(self, tmp_path, report_json):
        target = tmp_path / "reports" / "2026"
        exporter = DocumentExporter(output_dir=target, raster_options=RasterOptions(scale=1))

        result = await exporter.export(_document(report_json), 42, EXPORT_DATE)

        assert result.path.parent == target
        assert result.path.exists()

    @pytest.mark.asyncio
    async def test_rasterize_failure(self, tmp_path, report_json):
        with patch("inventory_report.export.pdf.rasterize", side_effect=RuntimeError("no memory")):
            with pytest.raises(ExportError, match="PDF oluşturulurken bir hata oluştu: no memory"):
                await _exporter(tmp_path).export(_document(report_json), 42, EXPORT_DATE)

        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_assembly_failure_leaves_no_file(self, tmp_path, report_json):
        with patch("inventory_report.export.pdf.draw_pages", side_effect=OSError("disk full")):
            with pytest.raises(ExportError, match="disk full"):
                await _exporter(tmp_path).export(_document(report_json), 42, EXPORT_DATE)

        assert list(tmp_path.iterdir()) == []


class TestPageSize:
    """Test that pages are A4 while tiling steps by the shorter page step."""

    @pytest.mark.asyncio
    async def test_pages_are_a4_portrait(self, tmp_path, report_json):
        captured = {}
        real_canvas = rl_canvas.Canvas

        def canvas(*args, **kwargs):
            captured["pagesize"] = kwargs["pagesize"]
            return real_canvas(*args, **kwargs)

        with patch("inventory_report.export.pdf.rl_canvas.Canvas", side_effect=canvas):
            await _exporter(tmp_path).export(_document(report_json), 42, EXPORT_DATE)

        assert captured["pagesize"] == A4
        assert captured["pagesize"][1] / mm == pytest.approx(297.0)

    def test_image_top_aligned_to_each_page(self):
        """Each page shifts the image up by one step from the A4 page top."""
        pdf = MagicMock()
        image = Image.new("RGB", (794, 2000), "#ffffff")
        placements = compute_page_placements(794, 2000)

        draw_pages(pdf, image, placements, A4[1] / mm)

        image_height = placements[0].image_height
        bottoms = [call.args[2] / mm for call in pdf.drawImage.call_args_list]
        assert len(bottoms) == len(placements)
        assert bottoms[0] == pytest.approx(297.0 - image_height)
        assert bottoms[1] == pytest.approx(297.0 + PAGE_STEP_MM - image_height)
        assert pdf.showPage.call_count == len(placements)
