"""
Report fetch controller.

Owns the request/response cycle for one part's usage report and the
export action, as an explicit state machine.

State flow:
    IDLE -> LOADING -> LOADED | FAILED, re-entering LOADING on every new
    component selection, date-range change or refresh.

Every state change goes through transition(), which maps an immutable
ReportState and an event to the next ReportState.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from .formatting import Formatter
from .layout import ReportDocument, build_report_document
from .models import DateRange, InputRangeError, ReportPayload
from .statistics import RangePolicy, UsageStatistics, compute_statistics, resolve_range
from ..export.pdf import EXPORT_FAILED_MESSAGE, DocumentExporter, ExportError, ExportResult
from ..sdk.api_client import FetchError, InventoryApiClient

logger = logging.getLogger(__name__)

Notifier = Callable[[str], None]

FETCH_FAILED_MESSAGE = "Envanter raporu yüklenirken hata oluştu"
EXPORT_BUSY_MESSAGE = "PDF oluşturma zaten devam ediyor"


class FetchStatus(Enum):
    """Lifecycle of the report data."""
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class ReportState:
    """Immutable snapshot of the report view.

    ``component_id`` and ``date_range`` are what was last requested;
    ``report_component_id`` and ``report_date_range`` describe the payload
    actually held, which survives a failed request for another part.

    ``loading`` and ``exporting`` are independent: finishing one never
    clears the other.
    """
    status: FetchStatus = FetchStatus.IDLE
    component_id: Optional[int] = None
    date_range: Optional[DateRange] = None
    payload: Optional[ReportPayload] = None
    statistics: Optional[UsageStatistics] = None
    error: Optional[str] = None
    report_component_id: Optional[int] = None
    report_date_range: Optional[DateRange] = None
    latest_request: int = 0
    loading: bool = False
    exporting: bool = False
    last_export: Optional[Path] = None

    @property
    def shown_component_id(self) -> Optional[int]:
        """Part the displayed report belongs to."""
        return self.report_component_id if self.payload is not None else self.component_id

    @property
    def shown_date_range(self) -> Optional[DateRange]:
        """Range the displayed report belongs to."""
        return self.report_date_range if self.payload is not None else self.date_range


@dataclass(frozen=True)
class FetchStarted:
    request_id: int
    component_id: int
    date_range: DateRange


@dataclass(frozen=True)
class FetchSucceeded:
    request_id: int
    payload: ReportPayload
    statistics: Optional[UsageStatistics]


@dataclass(frozen=True)
class FetchFailed:
    request_id: int
    error: str


@dataclass(frozen=True)
class ExportStarted:
    pass


@dataclass(frozen=True)
class ExportFinished:
    path: Optional[Path] = None


Event = Union[FetchStarted, FetchSucceeded, FetchFailed, ExportStarted, ExportFinished]


def transition(state: ReportState, event: Event) -> ReportState:
    """Apply one event to a report state.

    Completions for any request other than the most recently started one
    are ignored, so out-of-order responses cannot overwrite newer data.
    A failure keeps the last loaded payload and statistics.
    """
    if isinstance(event, FetchStarted):
        return replace(
            state,
            status=FetchStatus.LOADING,
            component_id=event.component_id,
            date_range=event.date_range,
            latest_request=event.request_id,
            loading=True,
            error=None,
        )

    if isinstance(event, FetchSucceeded):
        if event.request_id != state.latest_request:
            return state
        return replace(
            state,
            status=FetchStatus.LOADED,
            payload=event.payload,
            statistics=event.statistics,
            report_component_id=state.component_id,
            report_date_range=state.date_range,
            loading=False,
            error=None,
        )

    if isinstance(event, FetchFailed):
        if event.request_id != state.latest_request:
            return state
        return replace(state, status=FetchStatus.FAILED, loading=False, error=event.error)

    if isinstance(event, ExportStarted):
        return replace(state, exporting=True)

    if isinstance(event, ExportFinished):
        return replace(
            state,
            exporting=False,
            last_export=event.path if event.path is not None else state.last_export,
        )

    raise ValueError(f"Unknown event: {event!r}")


def log_notifier(message: str) -> None:
    """Default notifier: user-facing messages go to the log."""
    logger.warning(message)


class ReportFetchController:
    """Drives report fetching and export for the report view.

    Errors never escape: fetch and export failures are converted into a
    single notification and reflected in the state.
    """

    def __init__(
        self,
        client: InventoryApiClient,
        exporter: Optional[DocumentExporter] = None,
        formatter: Optional[Formatter] = None,
        policy: RangePolicy = RangePolicy.SWAP,
        notifier: Optional[Notifier] = None,
        date_range: Optional[DateRange] = None,
    ):
        self.client = client
        self.exporter = exporter
        self.formatter = formatter or Formatter()
        self.policy = policy
        self.notifier = notifier if notifier is not None else log_notifier
        self.state = ReportState(date_range=date_range or DateRange.current_month())
        self._request_counter = 0

    def _dispatch(self, event: Event) -> ReportState:
        self.state = transition(self.state, event)
        return self.state

    async def fetch(
        self,
        component_id: Optional[int] = None,
        date_range: Optional[DateRange] = None,
    ) -> ReportState:
        """Fetch the usage report and recompute statistics.

        Without a component identifier (given or previously selected) this
        is a no-op and no request is made.

        Args:
            component_id: Part to report on (defaults to the current one)
            date_range: Range to report on (defaults to the current one)

        Returns:
            State after this request completed
        """
        component_id = component_id if component_id is not None else self.state.component_id
        if component_id is None:
            return self.state
        date_range = date_range or self.state.date_range or DateRange.current_month()

        self._request_counter += 1
        request_id = self._request_counter

        try:
            requested = resolve_range(date_range, self.policy)
        except InputRangeError as exc:
            self._dispatch(FetchStarted(request_id, component_id, date_range))
            self.notifier(str(exc))
            return self._dispatch(FetchFailed(request_id, str(exc)))

        self._dispatch(FetchStarted(request_id, component_id, requested))
        logger.debug("Fetching usage report #%d for component %s", request_id, component_id)

        try:
            payload = await self.client.get_usage_report(component_id, requested)
        except FetchError as exc:
            logger.error("Error fetching inventory report: %s", exc)
            if request_id == self.state.latest_request:
                self.notifier(FETCH_FAILED_MESSAGE)
            return self._dispatch(FetchFailed(request_id, str(exc)))

        if request_id != self.state.latest_request:
            logger.debug("Discarding stale usage report #%d", request_id)
            return self.state

        statistics = compute_statistics(payload, requested, self.policy)
        return self._dispatch(FetchSucceeded(request_id, payload, statistics))

    async def select_component(self, component_id: Optional[int]) -> ReportState:
        return await self.fetch(component_id=component_id)

    async def set_date_range(self, date_range: DateRange) -> ReportState:
        """Change the date range and refetch for the selected part."""
        if self.state.component_id is None:
            self.state = replace(self.state, date_range=date_range)
            return self.state
        return await self.fetch(date_range=date_range)

    async def refresh(self) -> ReportState:
        return await self.fetch()

    def document(self, generated_on: Optional[date] = None) -> ReportDocument:
        """Lay out the currently displayed report."""
        return build_report_document(
            payload=self.state.payload,
            statistics=self.state.statistics,
            date_range=self.state.shown_date_range or DateRange.current_month(),
            formatter=self.formatter,
            component_id=self.state.shown_component_id,
            generated_on=generated_on,
        )

    async def export(self, export_date: Optional[date] = None) -> Optional[ExportResult]:
        """Export the displayed report to PDF.

        A second export while one is running is refused with a notification.
        The file is named after the part the displayed report belongs to.
        The exporting flag is cleared whether the export succeeds or fails.

        Returns:
            ExportResult on success, None when skipped or failed
        """
        if self.exporter is None:
            raise ValueError("No exporter configured")
        component_id = self.state.shown_component_id
        if component_id is None:
            return None
        if self.state.exporting:
            self.notifier(EXPORT_BUSY_MESSAGE)
            return None

        self._dispatch(ExportStarted())
        result = None
        try:
            try:
                document = self.document(generated_on=export_date)
            except Exception as exc:
                raise ExportError(f"{EXPORT_FAILED_MESSAGE}: {exc}") from exc
            result = await self.exporter.export(document, component_id, export_date)
        except ExportError as exc:
            logger.error("PDF export failed: %s", exc)
            self.notifier(str(exc))
        finally:
            self._dispatch(ExportFinished(path=result.path if result else None))
        return result
