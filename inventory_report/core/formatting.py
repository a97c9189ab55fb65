"""
Locale-aware number, currency and date formatting.

Reports are printed with the conventions of a configured locale rather
than a hardcoded one.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Union

Number = Union[int, float, Decimal]


@dataclass(frozen=True)
class LocaleConventions:
    """Separators and patterns for one locale."""
    thousands_sep: str
    decimal_sep: str
    date_pattern: str
    symbol_first: bool
    symbol_space: bool


LOCALES: Dict[str, LocaleConventions] = {
    "tr-TR": LocaleConventions(
        thousands_sep=".",
        decimal_sep=",",
        date_pattern="{day:02d}.{month:02d}.{year}",
        symbol_first=True,
        symbol_space=False,
    ),
    "en-US": LocaleConventions(
        thousands_sep=",",
        decimal_sep=".",
        date_pattern="{month}/{day}/{year}",
        symbol_first=True,
        symbol_space=False,
    ),
}

CURRENCY_SYMBOLS: Dict[str, str] = {
    "TRY": "₺",
    "USD": "$",
    "EUR": "€",
}


class Formatter:
    """Formats report values for one locale and currency."""

    def __init__(self, locale: str = "tr-TR", currency: str = "TRY"):
        """Initialize formatter.

        Raises:
            ValueError: If the locale is not supported or currency is empty
        """
        if locale not in LOCALES:
            raise ValueError(f"Unsupported locale: {locale}")
        if not currency or not currency.strip():
            raise ValueError("currency is required and cannot be empty")
        self.locale = locale
        self.currency = currency.upper()
        self.conventions = LOCALES[locale]

    def format_decimal(self, value: Number, places: int = 2) -> str:
        """Format a number with grouping and a fixed number of decimals."""
        quantum = Decimal(1).scaleb(-places)
        amount = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
        sign = "-" if amount < 0 else ""
        text = f"{abs(amount):,.{places}f}"
        integer, _, fraction = text.partition(".")
        integer = integer.replace(",", self.conventions.thousands_sep)
        if places > 0:
            return f"{sign}{integer}{self.conventions.decimal_sep}{fraction}"
        return f"{sign}{integer}"

    def format_currency(self, value: Number) -> str:
        """Format an amount in the configured currency, e.g. ``₺1.234,56``."""
        number = self.format_decimal(value, 2)
        symbol = CURRENCY_SYMBOLS.get(self.currency)
        if symbol is None:
            return f"{self.currency} {number}"

        sign = ""
        if number.startswith("-"):
            sign, number = "-", number[1:]
        space = " " if self.conventions.symbol_space else ""
        if self.conventions.symbol_first:
            return f"{sign}{symbol}{space}{number}"
        return f"{sign}{number}{space}{symbol}"

    def format_date(self, value: date) -> str:
        """Format a date as a locale short date, e.g. ``17.10.2026``."""
        return self.conventions.date_pattern.format(
            day=value.day, month=value.month, year=value.year
        )
