"""
CLI interface for inventory usage reports.

Provides command-line access to the report, inventory and dashboard views.
"""

import asyncio
import sys
from datetime import date
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from inventory_report.config.loader import Settings, configure_logging, load_settings
from inventory_report.core.controller import FetchStatus, ReportFetchController
from inventory_report.core.dashboard import (
    DEFAULT_LIMIT,
    FETCH_LIMIT,
    parse_timestamp,
    recent_services,
    upcoming_services,
    vehicle_label,
)
from inventory_report.core.formatting import Formatter
from inventory_report.core.inventory import (
    StockFilter,
    StockStatus,
    filter_components,
    stock_status,
    summarize_inventory,
)
from inventory_report.core.layout import ReportDocument
from inventory_report.core.models import DateRange, parse_date
from inventory_report.export.pdf import DocumentExporter
from inventory_report.export.rasterizer import RasterOptions
from inventory_report.sdk.api_client import FetchError, InventoryApiClient

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

_STATUS_TEXT = {
    StockStatus.OUT: "[red]Stokta Yok[/]",
    StockStatus.LOW: "[yellow]Düşük Stok[/]",
    StockStatus.IN: "[green]Stokta[/]",
}

_DASHBOARD_LABELS = {
    "customers": "Müşteriler",
    "vehicles": "Araçlar",
    "technicians": "Teknisyenler",
    "activeServices": "Aktif Servisler",
    "upcomingServices": "Yaklaşan Servisler",
    "lowStockAlerts": "Düşük Stok Uyarıları",
}


def _load(config: Optional[str], verbose: bool) -> Settings:
    settings = load_settings(config)
    configure_logging("DEBUG" if verbose else settings.log_level)
    return settings


def _make_client(settings: Settings) -> InventoryApiClient:
    return InventoryApiClient(base_url=settings.api.base_url, timeout=settings.api.timeout)


def _make_exporter(settings: Settings) -> DocumentExporter:
    export = settings.export
    return DocumentExporter(
        output_dir=export.output_dir,
        file_prefix=export.file_prefix,
        raster_options=RasterOptions(scale=export.scale, background=export.background),
        page_width_mm=export.page_width_mm,
        page_height_mm=export.page_height_mm,
    )


def _notify(message: str) -> None:
    console.print(f"[red]Error:[/] {message}")


def _parse_option_date(value: Optional[str], name: str) -> Optional[date]:
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError:
        raise typer.BadParameter(f"{name} must be YYYY-MM-DD")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """Inventory usage report CLI."""
    if ctx.invoked_subcommand is None:
        console.print("Inventory Report - Use --help to see available commands")


@app.command()
def report(
    component_id: int = typer.Argument(..., help="Part identifier"),
    start: Optional[str] = typer.Option(None, "--start", "-s", help="Start date (YYYY-MM-DD)"),
    end: Optional[str] = typer.Option(None, "--end", "-e", help="End date (YYYY-MM-DD)"),
    pdf: bool = typer.Option(False, "--pdf", "-p", help="Also export the report as PDF"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Show the usage report of a part, optionally exporting it to PDF."""
    start_date = _parse_option_date(start, "--start")
    end_date = _parse_option_date(end, "--end")
    try:
        settings = _load(config, verbose)
    except Exception as e:
        console.print(f"[red]Error loading config:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    default_range = DateRange.current_month()
    date_range = DateRange(
        start_date=start_date or default_range.start_date,
        end_date=end_date or default_range.end_date,
    )
    sys.exit(asyncio.run(_run_report(settings, component_id, date_range, pdf)))


async def _run_report(settings: Settings, component_id: int, date_range: DateRange, pdf: bool) -> int:
    formatter = Formatter(settings.display.locale, settings.display.currency)
    async with _make_client(settings) as client:
        controller = ReportFetchController(
            client=client,
            exporter=_make_exporter(settings) if pdf else None,
            formatter=formatter,
            policy=settings.range_policy,
            notifier=_notify,
            date_range=date_range,
        )
        state = await controller.fetch(component_id, date_range)
        if state.status != FetchStatus.LOADED:
            return EXIT_CODE_FAIL

        _display_document(controller.document())

        if pdf:
            result = await controller.export()
            if result is None:
                return EXIT_CODE_FAIL
            console.print(f"\n[green]✓[/] PDF saved to {result.path} ({result.page_count} page(s))")
    return EXIT_CODE_PASS


def _display_document(doc: ReportDocument) -> None:
    """Print a laid-out report to the console."""
    if doc.header is not None:
        header = doc.header
        body = "\n".join(header.address_lines + header.contact_lines)
        console.print(Panel(body, title=f"[bold]{header.company_name}[/]", subtitle=header.badge))
        for line in header.badge_lines:
            console.print(f"  {line}")

    console.print(f"\n[bold]{doc.title}[/bold]")
    console.print(doc.subtitle)
    console.print(f"[dim]{doc.date_range_line}[/]")
    console.print("-" * 40)

    if doc.empty_message:
        console.print(f"\n[dim]{doc.empty_message}[/]")

    for section in doc.sections:
        console.print(f"\n[bold]{section.title}[/bold]")
        for label, value in section.fields:
            console.print(f"{label}: {value}")
        for card in section.cards:
            console.print(f"{card.label}: [bold]{card.value}[/]")
        for title, items in section.groups:
            console.print(f"\n[bold]{title}[/bold]")
            for label, value in items:
                console.print(f"  {label}: {value}")
        if section.table is not None:
            table = Table(*section.table.headers)
            for row in section.table.rows:
                table.add_row(*row)
            console.print(table)

    for line in doc.footer_lines:
        console.print(f"[dim]{line}[/]")


@app.command()
def inventory(
    search: Optional[str] = typer.Option(None, "--search", "-q", help="Filter by name or part number"),
    stock: StockFilter = typer.Option(StockFilter.ALL, "--stock", help="Stock filter"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """List inventory parts with stock status and a summary."""
    try:
        settings = _load(config, verbose)
        components = asyncio.run(_fetch_components(settings))
    except FetchError as e:
        console.print(f"[red]Error fetching inventory:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    formatter = Formatter(settings.display.locale, settings.display.currency)
    shown = filter_components(components, search=search, stock_filter=stock)

    if not shown:
        if search or stock != StockFilter.ALL:
            console.print("\n[dim]Arama sonucu bulunamadı[/]")
        else:
            console.print("\n[dim]Henüz stok parçası bulunmuyor[/]")
    else:
        table = Table("ID", "Parça", "Parça No", "Fiyat", "Stok", "Yeniden Sipariş", "Durum", "Toplam Değer")
        for component in shown:
            table.add_row(
                str(component.id) if component.id is not None else "-",
                component.name,
                component.part_number or "-",
                formatter.format_currency(component.price),
                f"{component.stock_count} adet",
                str(component.reorder_level),
                _STATUS_TEXT[stock_status(component)],
                formatter.format_currency(component.price * component.stock_count),
            )
        console.print(table)

    summary = summarize_inventory(components)
    console.print(f"\nToplam Parça: {summary.total_parts}")
    console.print(f"Yeterli Stok: {summary.sufficient_stock}")
    console.print(f"Düşük Stok: {summary.low_stock}")
    console.print(f"Stokta Yok: {summary.out_of_stock}")
    console.print(f"Toplam Stok Değeri: {formatter.format_currency(summary.total_value)}")
    sys.exit(EXIT_CODE_PASS)


async def _fetch_components(settings: Settings):
    async with _make_client(settings) as client:
        return await client.list_components()


@app.command()
def dashboard(
    limit: int = typer.Option(DEFAULT_LIMIT, "--limit", "-n", min=0, help="Number of recent/upcoming services"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Show dashboard statistics with recent and upcoming services."""
    try:
        settings = _load(config, verbose)
        stats, records, planned = asyncio.run(_fetch_dashboard(settings))
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    formatter = Formatter(settings.display.locale, settings.display.currency)
    recent = recent_services(records, limit)
    upcoming = upcoming_services(planned, limit=limit)

    console.print("\n[bold]Dashboard[/bold]")
    console.print("-" * 40)
    if isinstance(stats, dict):
        for key, label in _DASHBOARD_LABELS.items():
            console.print(f"{label}: {stats.get(key, 0)}")

    console.print(f"\nSon servisler: {len(recent)}")
    if recent:
        table = Table("Tarih", "Servis", "Araç")
        for record in recent:
            table.add_row(
                _format_timestamp(formatter, record.get("serviceDate")),
                record.get("description") or record.get("serviceType") or "-",
                vehicle_label(record),
            )
        console.print(table)

    console.print(f"\nYaklaşan servisler: {len(upcoming)}")
    if upcoming:
        table = Table("Tarih", "Araç", "Servis", "Durum", "Müşteri")
        for service in upcoming:
            customer = (service.get("vehicle") or {}).get("customer") or {}
            table.add_row(
                _format_timestamp(formatter, service.get("plannedDate")),
                vehicle_label(service),
                service.get("serviceType") or "-",
                service.get("status") or "-",
                customer.get("name") or "-",
            )
        console.print(table)
    sys.exit(EXIT_CODE_PASS)


def _format_timestamp(formatter: Formatter, value) -> str:
    when = parse_timestamp(value)
    return formatter.format_date(when.date()) if when is not None else "-"


async def _fetch_dashboard(settings: Settings):
    """Fetch the three dashboard lists; a failing endpoint leaves its part empty."""
    async with _make_client(settings) as client:
        results = await asyncio.gather(
            client.get_dashboard_stats(),
            client.get_service_records(FETCH_LIMIT),
            client.get_upcoming_services(FETCH_LIMIT),
            return_exceptions=True,
        )

    defaults = ({}, [], [])
    resolved = []
    for result, default in zip(results, defaults):
        if isinstance(result, FetchError):
            console.print(f"[yellow]Warning:[/] {result}")
            resolved.append(default)
        elif isinstance(result, BaseException):
            raise result
        else:
            resolved.append(result)
    return resolved


if __name__ == "__main__":
    app()
