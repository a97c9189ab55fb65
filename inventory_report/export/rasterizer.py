"""
Report rasterization using Pillow.

Draws a ReportDocument onto a single tall bitmap at an oversampling factor
so the PDF stays sharp when printed.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from ..core.layout import ReportDocument, Section

# Logical width of the report region in CSS-like pixels (A4 at 96 dpi).
REGION_WIDTH = 794
DEFAULT_SCALE = 2
DEFAULT_BACKGROUND = "#ffffff"

_TEXT = (17, 24, 39)
_MUTED = (75, 85, 99)
_BORDER = (229, 231, 235)
_PANEL = (249, 250, 251)
_ACCENT = (22, 163, 74)
_BLUE = (37, 99, 235)


def _load_font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont:
    """Load a sans-serif font with Turkish glyphs, with fallback."""
    names = (
        ["/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", "DejaVuSans-Bold.ttf"]
        if bold else
        ["/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf", "DejaVuSans.ttf"]
    )
    names.append("/usr/share/fonts/google-noto-vf/NotoSans[wght].ttf")
    for path in names:
        try:
            return ImageFont.truetype(path, size)
        except (OSError, IOError):
            continue
    return ImageFont.load_default(size)


@dataclass(frozen=True)
class RasterOptions:
    """Rasterization settings."""
    scale: int = DEFAULT_SCALE
    background: str = DEFAULT_BACKGROUND
    width: int = REGION_WIDTH

    def __post_init__(self):
        if self.scale < 1:
            raise ValueError("scale must be >= 1")
        if self.width <= 0:
            raise ValueError("width must be > 0")


class _Painter:
    """Lays out and optionally draws a document.

    With ``draw`` set to None only the cursor advances, which gives the
    total height needed before the real image is allocated.
    """

    def __init__(self, options: RasterOptions, draw: Optional[ImageDraw.ImageDraw]):
        s = options.scale
        self.s = s
        self.draw = draw
        self.width = options.width * s
        self.margin = 24 * s
        self.y = self.margin
        self._measure = ImageDraw.Draw(Image.new("RGB", (1, 1)))
        self.fonts = {
            "h1": _load_font(24 * s, bold=True),
            "h2": _load_font(20 * s, bold=True),
            "h3": _load_font(15 * s, bold=True),
            "big": _load_font(20 * s, bold=True),
            "body": _load_font(11 * s),
            "bold": _load_font(11 * s, bold=True),
            "small": _load_font(9 * s),
        }

    def line_height(self, font: str) -> int:
        bbox = self._measure.textbbox((0, 0), "ÇĞİÖŞÜgjy", font=self.fonts[font])
        return int((bbox[3] - bbox[1]) * 1.4)

    def text_width(self, text: str, font: str) -> float:
        return self._measure.textlength(text, font=self.fonts[font])

    def fit(self, text: str, font: str, width: float) -> str:
        """Truncate text with an ellipsis to fit a cell width."""
        if self.text_width(text, font) <= width:
            return text
        while text and self.text_width(text + "…", font) > width:
            text = text[:-1]
        return text + "…"

    def text(self, x: float, y: float, text: str, font: str, fill=_TEXT) -> None:
        if self.draw is not None:
            self.draw.text((x, y), text, font=self.fonts[font], fill=fill)

    def rect(self, box: Tuple[float, float, float, float], fill=None, outline=None) -> None:
        if self.draw is not None:
            self.draw.rectangle(box, fill=fill, outline=outline, width=self.s)

    def hline(self, y: float, fill=_BORDER, width: int = 1) -> None:
        if self.draw is not None:
            self.draw.line([(self.margin, y), (self.width - self.margin, y)], fill=fill, width=width * self.s)

    # -- blocks ---------------------------------------------------------------

    def header(self, doc: ReportDocument) -> None:
        header = doc.header
        if header is None:
            return
        s = self.s
        left = self.margin
        top = self.y
        badge_w = 230 * s
        self.text(left, self.y, header.company_name, "h1")
        y = self.y + self.line_height("h1") + 4 * s
        col_w = (self.width - 2 * self.margin - badge_w) / 2
        for col, lines in enumerate((header.address_lines, header.contact_lines)):
            cy = y
            for i, line in enumerate(lines):
                self.text(left + col * col_w, cy, self.fit(line, "body", col_w - 8 * s),
                          "bold" if i == 0 else "body", _MUTED)
                cy += self.line_height("body")
        rows = max(len(header.address_lines), len(header.contact_lines))
        text_bottom = y + rows * self.line_height("body")

        bx = self.width - self.margin - badge_w
        by = top
        badge_h = self.line_height("h3") + len(header.badge_lines) * self.line_height("body") + 20 * s
        self.rect((bx, by, bx + badge_w, by + badge_h), fill=(255, 255, 255), outline=_BORDER)
        self.text(bx + 10 * s, by + 8 * s, header.badge, "h3", _ACCENT)
        ly = by + 10 * s + self.line_height("h3")
        for line in header.badge_lines:
            self.text(bx + 10 * s, ly, self.fit(line, "body", badge_w - 20 * s), "body", _MUTED)
            ly += self.line_height("body")

        self.y = max(text_bottom, by + badge_h) + 12 * s
        self.hline(self.y, fill=_ACCENT, width=4)
        self.y += 16 * s

    def title(self, doc: ReportDocument) -> None:
        self.text(self.margin, self.y, doc.title, "h2")
        self.y += self.line_height("h2")
        self.text(self.margin, self.y, doc.subtitle, "body", _MUTED)
        self.y += self.line_height("body")
        self.text(self.margin, self.y, doc.date_range_line, "body", _MUTED)
        self.y += self.line_height("body") + 8 * self.s
        self.hline(self.y)
        self.y += 16 * self.s

    def section(self, section: Section) -> None:
        s = self.s
        top = self.y
        inner_left = self.margin + 16 * s
        inner_width = self.width - 2 * self.margin - 32 * s
        self.y += 14 * s
        self.text(inner_left, self.y, section.title, "h3")
        self.y += self.line_height("h3") + 6 * s

        if section.fields:
            self._fields(section.fields, inner_left, inner_width)
        if section.cards:
            self._cards(section, inner_left, inner_width)
        if section.groups:
            self._groups(section.groups, inner_left, inner_width)
        if section.table is not None:
            self._table(section.table.headers, section.table.rows, inner_left, inner_width)

        self.y += 10 * s
        self.rect((self.margin, top, self.width - self.margin, self.y), outline=_BORDER)
        self.y += 16 * s

    def _fields(self, fields: Sequence[Tuple[str, str]], left: float, width: float) -> None:
        col_w = width / max(len(fields), 1)
        for i, (label, value) in enumerate(fields):
            x = left + i * col_w
            self.text(x, self.y, self.fit(label + ":", "small", col_w - 8 * self.s), "small", _MUTED)
            self.text(x, self.y + self.line_height("small"),
                      self.fit(value, "bold", col_w - 8 * self.s), "bold")
        self.y += self.line_height("small") + self.line_height("bold") + 4 * self.s

    def _cards(self, section: Section, left: float, width: float) -> None:
        col_w = width / len(section.cards)
        for i, card in enumerate(section.cards):
            cx = left + i * col_w + col_w / 2
            value = self.fit(card.value, "big", col_w - 8 * self.s)
            self.text(cx - self.text_width(value, "big") / 2, self.y, value, "big", _BLUE)
            label_y = self.y + self.line_height("big")
            self.text(cx - self.text_width(card.label, "small") / 2, label_y, card.label, "small", _MUTED)
        self.y += self.line_height("big") + self.line_height("small") + 12 * self.s

    def _groups(self, groups, left: float, width: float) -> None:
        s = self.s
        gap = 12 * s
        col_w = (width - gap * (len(groups) - 1)) / len(groups)
        rows = max(len(items) for _, items in groups)
        box_h = 16 * s + self.line_height("bold") + rows * self.line_height("body")
        for i, (title, items) in enumerate(groups):
            x = left + i * (col_w + gap)
            self.rect((x, self.y, x + col_w, self.y + box_h), fill=_PANEL)
            self.text(x + 8 * s, self.y + 8 * s, title, "bold")
            ry = self.y + 8 * s + self.line_height("bold")
            for label, value in items:
                self.text(x + 8 * s, ry, label + ":", "body")
                self.text(x + col_w - 8 * s - self.text_width(value, "bold"), ry, value, "bold")
                ry += self.line_height("body")
        self.y += box_h + 6 * s

    def _table(self, headers: Sequence[str], rows: Sequence[Sequence[str]], left: float, width: float) -> None:
        s = self.s
        col_w = width / len(headers)
        row_h = self.line_height("body") + 10 * s
        self.rect((left, self.y, left + width, self.y + row_h), fill=_PANEL)
        for i, head in enumerate(headers):
            self.text(left + i * col_w + 6 * s, self.y + 5 * s,
                      self.fit(head.upper(), "small", col_w - 12 * s), "small", _MUTED)
        self.y += row_h
        for row in rows:
            for i, cell in enumerate(row):
                self.text(left + i * col_w + 6 * s, self.y + 5 * s,
                          self.fit(cell, "body", col_w - 12 * s), "body")
            self.y += row_h
            if self.draw is not None:
                self.draw.line([(left, self.y), (left + width, self.y)], fill=_BORDER, width=s)

    def footer(self, doc: ReportDocument) -> None:
        if not doc.footer_lines:
            return
        s = self.s
        top = self.y + 8 * s
        height = 16 * s + len(doc.footer_lines) * self.line_height("small")
        self.rect((0, top, self.width, top + height), fill=_PANEL)
        ly = top + 8 * s
        for line in doc.footer_lines:
            self.text((self.width - self.text_width(line, "small")) / 2, ly, line, "small", _MUTED)
            ly += self.line_height("small")
        self.y = top + height

    def empty(self, message: str) -> None:
        self.y += 40 * self.s
        self.text((self.width - self.text_width(message, "h3")) / 2, self.y, message, "h3", _MUTED)
        self.y += self.line_height("h3") + 40 * self.s

    def paint(self, doc: ReportDocument) -> int:
        self.header(doc)
        self.title(doc)
        if doc.empty_message:
            self.empty(doc.empty_message)
        for section in doc.sections:
            self.section(section)
        self.footer(doc)
        return int(self.y + self.margin)


def rasterize(document: ReportDocument, options: Optional[RasterOptions] = None) -> Image.Image:
    """Render a report document to an opaque RGB bitmap.

    The bitmap is ``options.width * options.scale`` pixels wide and as tall
    as the content requires; the background is always filled opaque.

    Args:
        document: Laid-out report
        options: Rasterization settings

    Returns:
        PIL image in RGB mode
    """
    options = options or RasterOptions()
    height = _Painter(options, draw=None).paint(document)
    image = Image.new("RGB", (options.width * options.scale, height), options.background)
    _Painter(options, draw=ImageDraw.Draw(image)).paint(document)
    return image
