"""
Report document layout.

Builds a renderer-neutral description of the usage report. The console
view and the rasterizer both draw from the same ReportDocument.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple

from .formatting import Formatter
from .models import DateRange, ReportPayload
from .statistics import UsageStatistics

NOT_SPECIFIED = "Belirtilmemiş"
UNIT = "adet"


@dataclass(frozen=True)
class StatCard:
    """Large summary figure with a caption."""
    value: str
    label: str


@dataclass(frozen=True)
class Table:
    """Tabular section body."""
    headers: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...]


@dataclass(frozen=True)
class Section:
    """Titled report section.

    A section carries any of label/value fields, stat cards, detail groups
    (a subtitle with label/value rows) and a table.
    """
    title: str
    fields: Tuple[Tuple[str, str], ...] = ()
    cards: Tuple[StatCard, ...] = ()
    groups: Tuple[Tuple[str, Tuple[Tuple[str, str], ...]], ...] = ()
    table: Optional[Table] = None


@dataclass(frozen=True)
class Header:
    """Company header block."""
    company_name: str
    address_lines: Tuple[str, ...]
    contact_lines: Tuple[str, ...]
    badge: str
    badge_lines: Tuple[str, ...]


@dataclass(frozen=True)
class ReportDocument:
    """Complete laid-out usage report."""
    title: str
    subtitle: str
    date_range_line: str
    header: Optional[Header] = None
    sections: Tuple[Section, ...] = ()
    footer_lines: Tuple[str, ...] = ()
    empty_message: Optional[str] = None


def build_report_document(
    payload: Optional[ReportPayload],
    statistics: Optional[UsageStatistics],
    date_range: DateRange,
    formatter: Formatter,
    component_id: int,
    generated_on: Optional[date] = None,
) -> ReportDocument:
    """Lay out the usage report for a part.

    Args:
        payload: Loaded report payload, or None when nothing is loaded
        statistics: Statistics for the payload, or None to omit that section
        date_range: Range the report covers
        formatter: Locale formatter for currency and dates
        component_id: Identifier of the part
        generated_on: Report date (defaults to today)

    Returns:
        ReportDocument ready for rendering
    """
    generated_on = generated_on or date.today()
    fmt_range = (
        f"{formatter.format_date(date_range.start_date)} - "
        f"{formatter.format_date(date_range.end_date)}"
    )
    title = "Envanter Kullanım Raporu"
    subtitle = f"Parça #{component_id} - Kullanım İstatistikleri"
    range_line = f"Tarih Aralığı: {fmt_range}"

    if payload is None:
        return ReportDocument(
            title=title,
            subtitle=subtitle,
            date_range_line=range_line,
            empty_message="Envanter raporu bulunamadı.",
        )

    component = payload.component
    header = None
    footer: Tuple[str, ...] = ()
    if component.company is not None:
        company = component.company
        contact = []
        if company.phone:
            contact.append(f"Tel: {company.phone}")
        if company.email:
            contact.append(f"E-posta: {company.email}")
        header = Header(
            company_name=company.name,
            address_lines=("Adres:", company.address or NOT_SPECIFIED),
            contact_lines=tuple(["İletişim:"] + contact),
            badge="ENVANTER RAPORU",
            badge_lines=(
                f"Rapor Tarihi: {formatter.format_date(generated_on)}",
                f"Parça No: #{component_id}",
                f"Parça Adı: {component.name}",
            ),
        )
        footer = (
            f"Bu rapor {company.name} tarafından otomatik olarak oluşturulmuştur.",
            f"Rapor Tarihi: {formatter.format_date(generated_on)} | {range_line}",
        )

    sections: List[Section] = [Section(
        title="Parça Bilgileri",
        fields=(
            ("Parça Adı", component.name),
            ("Parça Numarası", component.part_number or NOT_SPECIFIED),
            ("Mevcut Fiyat", formatter.format_currency(component.price)),
            ("Stok Miktarı", f"{component.stock_count} {UNIT}"),
        ),
    )]

    if statistics is not None:
        sections.append(_statistics_section(statistics, formatter))

    if payload.usage_history:
        sections.append(Section(
            title="Kullanım Geçmişi",
            table=Table(
                headers=("Servis Tarihi", "Araç Plakası", "Miktar", "Birim Fiyat", "Toplam Maliyet"),
                rows=tuple(
                    (
                        formatter.format_date(usage.service_date),
                        usage.vehicle_plate_no,
                        f"{usage.quantity} {UNIT}",
                        formatter.format_currency(usage.unit_price),
                        formatter.format_currency(usage.cost),
                    )
                    for usage in payload.usage_history
                ),
            ),
        ))

    if payload.price_history:
        sections.append(Section(
            title="Fiyat Geçmişi",
            table=Table(
                headers=("Değişim Tarihi", "Eski Fiyat", "Yeni Fiyat", "Değişim Nedeni"),
                rows=tuple(
                    (
                        formatter.format_date(change.change_date),
                        formatter.format_currency(change.old_price),
                        formatter.format_currency(change.new_price),
                        change.reason or NOT_SPECIFIED,
                    )
                    for change in payload.price_history
                ),
            ),
        ))

    return ReportDocument(
        title=title,
        subtitle=subtitle,
        date_range_line=range_line,
        header=header,
        sections=tuple(sections),
        footer_lines=footer,
    )


def _statistics_section(stats: UsageStatistics, formatter: Formatter) -> Section:
    def one(value) -> str:
        return formatter.format_decimal(value, 1)

    return Section(
        title="Kullanım İstatistikleri",
        cards=(
            StatCard(str(stats.total_usage), "Toplam Kullanım"),
            StatCard(one(stats.average_per_month), "Aylık Ortalama"),
            StatCard(one(stats.average_per_week), "Haftalık Ortalama"),
            StatCard(formatter.format_currency(stats.total_cost), "Toplam Maliyet"),
        ),
        groups=(
            ("Miktar İstatistikleri", (
                ("Toplam Kullanılan Miktar", f"{stats.total_quantity} {UNIT}"),
                ("Aylık Ortalama Miktar", f"{one(stats.average_quantity_per_month)} {UNIT}"),
            )),
            ("Maliyet İstatistikleri", (
                ("Toplam Maliyet", formatter.format_currency(stats.total_cost)),
                ("Aylık Ortalama Maliyet", formatter.format_currency(stats.average_cost_per_month)),
            )),
        ),
    )
