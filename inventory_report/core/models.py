"""
Data models for inventory usage reports.

Immutable records parsed from the upstream REST API payloads.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple


class InputRangeError(ValueError):
    """Raised when a date range starts after it ends and swapping is not allowed."""


def parse_date(value: Any) -> date:
    """Parse an upstream date value.

    Accepts ``YYYY-MM-DD`` strings, full ISO timestamps (the date part is
    kept) and ``date``/``datetime`` instances.

    Raises:
        ValueError: If the value cannot be interpreted as a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        raise ValueError(f"Invalid date value: {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise ValueError(f"Invalid date value: {value!r}")


def parse_amount(value: Any, name: str) -> Decimal:
    """Parse a non-negative currency amount into a Decimal."""
    if value is None:
        return Decimal("0")
    if isinstance(value, bool):
        raise ValueError(f"'{name}' must be a number")
    try:
        # str() keeps floats like 12.3 from turning into 12.2999...
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"'{name}' must be a number, got {value!r}")
    if amount < 0:
        raise ValueError(f"'{name}' cannot be negative")
    return amount


def parse_count(value: Any, name: str) -> int:
    """Parse a whole-number count; fractional values are rejected, not truncated."""
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError(f"'{name}' must be an integer")
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"'{name}' must be an integer, got {value!r}")
    if not number.is_finite() or number != number.to_integral_value():
        raise ValueError(f"'{name}' must be an integer, got {value!r}")
    return int(number)


def require_mapping(data: Any, name: str) -> Dict[str, Any]:
    """Return data if it is a JSON object, otherwise raise ValueError."""
    if not isinstance(data, dict):
        raise ValueError(f"'{name}' must be a JSON object, got {type(data).__name__}")
    return data


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar date range for a report request.

    Ordering is not validated here: an inverted range is representable so
    callers can decide whether to reject or swap it.
    """
    start_date: date
    end_date: date

    @property
    def is_inverted(self) -> bool:
        return self.start_date > self.end_date

    @property
    def total_days(self) -> int:
        """Whole days between start and end (negative when inverted)."""
        return (self.end_date - self.start_date).days

    def normalized(self) -> "DateRange":
        """Return the range with start and end swapped if inverted."""
        if self.is_inverted:
            return DateRange(start_date=self.end_date, end_date=self.start_date)
        return self

    def to_query(self) -> Dict[str, str]:
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
        }

    @classmethod
    def current_month(cls, today: Optional[date] = None) -> "DateRange":
        """First day of the current month through today."""
        today = today or date.today()
        return cls(start_date=today.replace(day=1), end_date=today)


@dataclass(frozen=True)
class UsageRecord:
    """One consumption of a part by a service.

    ``cost`` is authoritative as delivered upstream and may differ from
    ``quantity * unit_price`` because of historical pricing.
    """
    service_date: date
    vehicle_plate_no: str
    quantity: int
    unit_price: Decimal
    cost: Decimal

    def __post_init__(self):
        """Validate quantity and amounts."""
        if self.quantity < 0:
            raise ValueError("quantity cannot be negative")
        if self.unit_price < 0:
            raise ValueError("unit_price cannot be negative")
        if self.cost < 0:
            raise ValueError("cost cannot be negative")

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "UsageRecord":
        data = require_mapping(data, "usageHistory item")
        return cls(
            service_date=parse_date(data.get("serviceDate")),
            vehicle_plate_no=data.get("vehiclePlateNo") or "",
            quantity=parse_count(data.get("quantity"), "quantity"),
            unit_price=parse_amount(data.get("unitPrice"), "unitPrice"),
            cost=parse_amount(data.get("cost"), "cost"),
        )


@dataclass(frozen=True)
class PriceChangeRecord:
    """One historical price revision of a part."""
    change_date: date
    old_price: Decimal
    new_price: Decimal
    reason: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "PriceChangeRecord":
        data = require_mapping(data, "priceHistory item")
        return cls(
            change_date=parse_date(data.get("changeDate")),
            old_price=parse_amount(data.get("oldPrice"), "oldPrice"),
            new_price=parse_amount(data.get("newPrice"), "newPrice"),
            reason=data.get("reason") or None,
        )


@dataclass(frozen=True)
class Company:
    """Company owning a part, printed in the report header and footer."""
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Company":
        data = require_mapping(data, "company")
        return cls(
            name=data.get("name") or "",
            address=data.get("address"),
            phone=data.get("phone"),
            email=data.get("email"),
        )


@dataclass(frozen=True)
class ComponentInfo:
    """Spare-part metadata as returned by the inventory endpoints."""
    name: str
    price: Decimal = Decimal("0")
    stock_count: int = 0
    part_number: Optional[str] = None
    company: Optional[Company] = None
    id: Optional[int] = None
    reorder_level: int = 0
    service_usage_count: int = 0

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ComponentInfo":
        data = require_mapping(data, "component")
        company = data.get("company")
        return cls(
            id=data.get("id"),
            name=data.get("name") or "",
            part_number=data.get("partNumber") or None,
            price=parse_amount(data.get("price"), "price"),
            stock_count=parse_count(data.get("stockCount"), "stockCount"),
            reorder_level=parse_count(data.get("reorderLevel"), "reorderLevel"),
            company=Company.from_json(company) if company else None,
            service_usage_count=len(data.get("serviceComponents") or []),
        )


@dataclass(frozen=True)
class ReportPayload:
    """Aggregate root for one usage-report request.

    ``usage_history`` is ``None`` when the upstream document omits it, which
    is distinct from an empty history.
    """
    component: ComponentInfo
    usage_history: Optional[Tuple[UsageRecord, ...]] = None
    price_history: Tuple[PriceChangeRecord, ...] = field(default_factory=tuple)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ReportPayload":
        """Build a payload from the usage-report JSON document.

        Raises:
            ValueError: If the document is not an object or holds invalid values
        """
        if not isinstance(data, dict):
            raise ValueError("Usage report payload must be a JSON object")

        usage_raw = data.get("usageHistory")
        usage_history = None
        if usage_raw is not None:
            if not isinstance(usage_raw, list):
                raise ValueError("'usageHistory' must be a list")
            usage_history = tuple(UsageRecord.from_json(item) for item in usage_raw)

        price_raw = data.get("priceHistory") or []
        if not isinstance(price_raw, list):
            raise ValueError("'priceHistory' must be a list")

        return cls(
            component=ComponentInfo.from_json(data.get("component") or {}),
            usage_history=usage_history,
            price_history=tuple(PriceChangeRecord.from_json(item) for item in price_raw),
        )
