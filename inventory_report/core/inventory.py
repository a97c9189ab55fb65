"""
Inventory list computations.

Stock status, search/stock filtering and the summary shown under the
parts list.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional

from .models import ComponentInfo


class StockStatus(Enum):
    """Stock level of a part relative to its reorder level."""
    IN = "in"
    LOW = "low"
    OUT = "out"


class StockFilter(Enum):
    """Stock filter choices offered on the inventory list."""
    ALL = "all"
    LOW = "low"
    OUT = "out"
    IN = "in"


@dataclass(frozen=True)
class InventorySummary:
    """Totals shown under the inventory list."""
    total_parts: int
    sufficient_stock: int
    low_stock: int
    out_of_stock: int
    total_value: Decimal


def stock_status(component: ComponentInfo) -> StockStatus:
    """Classify a part: OUT at zero stock, LOW at or under reorder level."""
    if component.stock_count == 0:
        return StockStatus.OUT
    if component.stock_count <= component.reorder_level:
        return StockStatus.LOW
    return StockStatus.IN


def _matches_search(component: ComponentInfo, term: str) -> bool:
    term = term.lower()
    if term in component.name.lower():
        return True
    return bool(component.part_number) and term in component.part_number.lower()


def _matches_stock(component: ComponentInfo, stock_filter: StockFilter) -> bool:
    if stock_filter == StockFilter.ALL:
        return True
    if stock_filter == StockFilter.LOW:
        # Zero stock also counts as low here; the summary separates them.
        return component.stock_count <= component.reorder_level
    if stock_filter == StockFilter.OUT:
        return component.stock_count == 0
    return component.stock_count > component.reorder_level


def filter_components(
    components: Iterable[ComponentInfo],
    search: Optional[str] = None,
    stock_filter: StockFilter = StockFilter.ALL,
) -> List[ComponentInfo]:
    """Filter parts by search term (name or part number) and stock filter.

    Order of the input is preserved.
    """
    return [
        component for component in components
        if (not search or _matches_search(component, search))
        and _matches_stock(component, stock_filter)
    ]


def summarize_inventory(components: Iterable[ComponentInfo]) -> InventorySummary:
    """Summarize stock levels and total stock value."""
    components = list(components)
    return InventorySummary(
        total_parts=len(components),
        sufficient_stock=sum(1 for c in components if c.stock_count > c.reorder_level),
        low_stock=sum(1 for c in components if 0 < c.stock_count <= c.reorder_level),
        out_of_stock=sum(1 for c in components if c.stock_count == 0),
        total_value=sum((c.price * c.stock_count for c in components), Decimal("0")),
    )
