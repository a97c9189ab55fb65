"""
Page tiling geometry for exported reports.

Maps a single tall bitmap onto fixed-size pages. The same full image is
placed on every page, shifted upward so each page shows the next slice.
"""

from dataclasses import dataclass
from typing import List

A4_WIDTH_MM = 210.0
# Vertical distance between consecutive pages; the A4 page itself is 297 mm.
PAGE_STEP_MM = 295.0

# Float tolerance so content exactly N pages tall does not spill a blank page.
_EPSILON = 1e-6


@dataclass(frozen=True)
class PagePlacement:
    """Where the scaled image sits on one page.

    ``offset`` is the vertical position of the image top relative to the page
    top, in page units. It is zero on the first page and negative after.
    """
    page_index: int
    offset: float
    image_width: float
    image_height: float


def scaled_image_height(bitmap_width: int, bitmap_height: int, page_width: float) -> float:
    """Height of the bitmap once scaled to exactly fill the page width."""
    if bitmap_width <= 0 or bitmap_height <= 0:
        raise ValueError("bitmap dimensions must be > 0")
    return bitmap_height * (page_width / bitmap_width)


def compute_page_placements(
    bitmap_width: int,
    bitmap_height: int,
    page_width: float = A4_WIDTH_MM,
    page_height: float = PAGE_STEP_MM,
) -> List[PagePlacement]:
    """Compute the ordered page placements for a bitmap.

    Args:
        bitmap_width: Width of the rasterized region in pixels
        bitmap_height: Height of the rasterized region in pixels
        page_width: Page width in output units
        page_height: Page height in output units

    Returns:
        One placement per page, in page order

    Raises:
        ValueError: If any dimension is not positive
    """
    if page_width <= 0 or page_height <= 0:
        raise ValueError("page dimensions must be > 0")

    image_height = scaled_image_height(bitmap_width, bitmap_height, page_width)

    placements = [PagePlacement(0, 0.0, page_width, image_height)]
    remaining = image_height - page_height
    while remaining > _EPSILON:
        page_index = len(placements)
        placements.append(PagePlacement(
            page_index=page_index,
            offset=-page_index * page_height,
            image_width=page_width,
            image_height=image_height,
        ))
        remaining -= page_height

    return placements
