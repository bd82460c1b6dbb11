"""Sync controller: fetch scheduling and the force-refresh state machine.

Everything runs on one asyncio loop.  The only suspension points are the
awaited HTTP requests and the fixed delays of the force-refresh loop; timers
are ``loop.call_later`` handles owned by the controller.

States (:class:`~canhealth.state.store.SyncState`):

* ``IDLE``: nothing in flight.
* ``POLLING``: at least one listing/quality fetch in flight.
* ``FORCE_REFRESH_PENDING``: refresh job submitted, waiting for it to
  register on the server.
* ``FORCE_REFRESH_POLLING``: checking the job status on a fixed interval.

Requests are never cancelled when a newer one starts: whichever response
arrives last is applied, unless ``strict_ordering`` is configured.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from canhealth._constants import ALL, CONNECTION_ERROR_MESSAGE, REFRESH_ERROR_MESSAGE
from canhealth.client import CanHealthClient
from canhealth.config import CanHealthConfig
from canhealth.exceptions import ExportError, RefreshSubmissionError, RefreshTimeoutError, TransientFetchError
from canhealth.export import ExportMode, build_export_rows, export_filename, write_workbook
from canhealth.models.filters import FilterState, StatusTab
from canhealth.models.quality import DataQualitySnapshot
from canhealth.models.refresh import RefreshJob, RefreshJobStatus
from canhealth.models.summary import ListingPage
from canhealth.quality import total_pages
from canhealth.query import QueryRoute, RequestParams, compose, compose_export
from canhealth.state.policy import needs_bootstrap_recheck, select_poll_interval
from canhealth.state.store import SyncState, ViewState, ViewStateStore

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SyncController:
    """Keeps a :class:`ViewState` in sync with the CAN health API.

    Usage::

        async with CanHealthClient(config) as client:
            async with SyncController(client, on_change=render) as controller:
                await controller.set_oem("Bajaj")
                task = controller.force_refresh()
    """

    def __init__(
        self,
        client: CanHealthClient,
        *,
        config: CanHealthConfig | None = None,
        filters: FilterState | None = None,
        on_change: Callable[[ViewState], None] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._client = client
        self._config = config or client.config
        self._filters = filters or FilterState()
        self._store = ViewStateStore(
            page_size=self._config.page_size,
            strict_ordering=self._config.strict_ordering,
        )
        self._on_change = on_change
        self._clock = clock

        self._started = False
        self._closed = False
        self._inflight = 0
        self._sequence = 0
        self._generation = 0
        self._poll_handle: asyncio.TimerHandle | None = None
        self._poll_interval: float | None = None
        self._bootstrap_handle: asyncio.TimerHandle | None = None
        self._refresh_phase: SyncState | None = None
        self._refresh_task: asyncio.Task[None] | None = None
        self._background: set[asyncio.Task[None]] = set()
        self._exporting = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> SyncController:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    async def start(self) -> None:
        """Initial fetch, then arm the adaptive poll timer."""
        if self._started:
            return
        self._started = True
        self._closed = False
        await self.sync()
        if self._poll_handle is None:
            self._arm_poll_timer(select_poll_interval(self._store.state.summary, self._config))

    async def stop(self) -> None:
        """Tear down timers and the force-refresh loop.

        In-flight fetches are not aborted; their responses are dropped.
        """
        self._closed = True
        self._started = False
        self._generation += 1
        for handle in (self._poll_handle, self._bootstrap_handle):
            if handle is not None:
                handle.cancel()
        self._poll_handle = None
        self._poll_interval = None
        self._bootstrap_handle = None

        task = self._refresh_task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._refresh_task = None
        self._refresh_phase = None

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def view(self) -> ViewState:
        return self._store.state

    @property
    def filters(self) -> FilterState:
        return self._filters

    @property
    def sync_state(self) -> SyncState:
        if self._refresh_phase is not None:
            return self._refresh_phase
        if self._inflight:
            return SyncState.POLLING
        return SyncState.IDLE

    @property
    def poll_interval(self) -> float | None:
        """Interval of the currently armed poll timer, if any."""
        return self._poll_interval if self._poll_handle is not None else None

    @property
    def bootstrap_pending(self) -> bool:
        return self._bootstrap_handle is not None

    @property
    def exporting(self) -> bool:
        return self._exporting

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    async def sync(self) -> None:
        """Fetch the active view with the current filters (manual "Sync")."""
        await self._fetch_active(self._filters)

    async def retry(self) -> None:
        """Re-issue the last request after an error."""
        await self._fetch_active(self._filters)

    async def set_oem(self, oem: str) -> None:
        await self._apply_filters(self._filters.with_filter(oem=oem))

    async def set_region(self, region: str) -> None:
        """Select a region known to the latest summary (or ``"All"``)."""
        summary = self._store.state.summary
        wanted = region.strip() or ALL
        if wanted != ALL and summary is not None and summary.regions and wanted not in summary.regions:
            raise ValueError(f"unknown region {region!r}; known: {', '.join(summary.regions)}")
        await self._apply_filters(self._filters.with_filter(region=wanted))

    async def set_search(self, text: str) -> None:
        await self._apply_filters(self._filters.with_filter(search=text))

    async def set_status_tab(self, tab: StatusTab | str) -> None:
        await self._apply_filters(self._filters.with_filter(status_tab=StatusTab(tab)))

    async def set_page(self, page: int) -> None:
        """Move to *page*.

        Listing pages outside ``1..pages`` are ignored.  In Data Quality
        mode the page is clamped and served from the snapshot in memory.
        """
        if self._filters.is_quality_mode:
            quality = self._store.state.quality
            pages = max(total_pages(quality, self._config.page_size), 1) if quality is not None else 1
            clamped = min(max(page, 1), pages)
            self._filters = self._filters.with_page(clamped)
            self._store.set_page(clamped)
            self._publish()
            return

        if not 1 <= page <= self._store.state.pages:
            _logger.debug("Ignoring page %d outside 1..%d", page, self._store.state.pages)
            return
        self._filters = self._filters.with_page(page)
        await self._fetch_active(self._filters)

    async def _apply_filters(self, filters: FilterState) -> None:
        # The new state goes out with the request, never a stale one.
        self._filters = filters
        await self._fetch_active(filters)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def _fetch_active(self, filters: FilterState) -> None:
        request = compose(filters, page_size=self._config.page_size)
        if request.route is QueryRoute.QUALITY:
            await self._fetch_quality(request, filters)
        else:
            await self._fetch_listing(request, filters)

    def _dropped(self, generation: int) -> bool:
        # Responses to requests issued before the last stop() are never applied.
        return self._closed or generation != self._generation

    def _begin_fetch(self) -> int:
        self._sequence += 1
        self._inflight += 1
        self._publish()
        return self._sequence

    async def _fetch_listing(self, request: RequestParams, filters: FilterState) -> None:
        generation = self._generation
        sequence = self._begin_fetch()
        listing: ListingPage | None = None
        failure: TransientFetchError | None = None
        try:
            listing = await self._client.get_listing(request)
        except TransientFetchError as exc:
            failure = exc
        finally:
            self._inflight -= 1

        if self._dropped(generation):
            return
        if failure is not None:
            self._record_failure(failure)
        elif listing is not None and self._store.apply_listing(listing, page=filters.page, sequence=sequence):
            self._after_listing_applied()
        self._publish()

    async def _fetch_quality(self, request: RequestParams, filters: FilterState) -> None:
        generation = self._generation
        sequence = self._begin_fetch()
        snapshot: DataQualitySnapshot | None = None
        failure: TransientFetchError | None = None
        try:
            snapshot = await self._client.get_data_quality(request)
        except TransientFetchError as exc:
            failure = exc
        finally:
            self._inflight -= 1

        if self._dropped(generation):
            return
        if failure is not None:
            self._record_failure(failure)
        elif snapshot is not None and self._store.apply_quality(snapshot, page=filters.page, sequence=sequence):
            applied_page = self._store.state.page
            if self._filters == filters and applied_page != filters.page:
                self._filters = filters.with_page(applied_page)
        self._publish()

    def _record_failure(self, exc: TransientFetchError) -> None:
        # Keep items and summary; stale data beats a blank view.
        _logger.warning("Fetch from %s failed: %s", exc.endpoint or "/", exc)
        self._store.set_error(CONNECTION_ERROR_MESSAGE)

    def _after_listing_applied(self) -> None:
        state = self._store.state
        self._arm_poll_timer(select_poll_interval(state.summary, self._config))
        if needs_bootstrap_recheck(state.summary, len(state.items)):
            self._arm_bootstrap_timer()

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _timers_active(self) -> bool:
        return self._started and not self._closed

    def _arm_poll_timer(self, interval: float) -> None:
        if not self._timers_active():
            return
        if self._poll_handle is not None and interval == self._poll_interval:
            return
        if self._poll_handle is not None:
            self._poll_handle.cancel()
        self._poll_interval = interval
        self._poll_handle = asyncio.get_running_loop().call_later(interval, self._on_poll_timer)
        _logger.debug("Poll timer armed every %.1fs", interval)

    def _on_poll_timer(self) -> None:
        interval = self._poll_interval
        self._poll_handle = None
        if not self._timers_active() or interval is None:
            return
        self._poll_handle = asyncio.get_running_loop().call_later(interval, self._on_poll_timer)
        if self._refresh_phase is not None:
            _logger.debug("Skipping scheduled poll during force refresh")
            return
        self._spawn(self.sync())

    def _arm_bootstrap_timer(self) -> None:
        if not self._timers_active() or self._bootstrap_handle is not None:
            return
        delay = self._config.bootstrap_recheck_delay
        self._bootstrap_handle = asyncio.get_running_loop().call_later(delay, self._on_bootstrap_timer)
        _logger.debug("Server initializing; re-checking in %.1fs", delay)

    def _on_bootstrap_timer(self) -> None:
        self._bootstrap_handle = None
        if self._timers_active():
            self._spawn(self.sync())

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task[None]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.warning("Scheduled sync failed", exc_info=exc)

    # ------------------------------------------------------------------
    # Force refresh
    # ------------------------------------------------------------------

    def force_refresh(self) -> asyncio.Task[None] | None:
        """Start a server-side force refresh.

        Returns the task driving it, or ``None`` when a refresh is already
        pending or polling (duplicate submissions are ignored).
        """
        if self._refresh_phase is not None:
            _logger.debug("Force refresh already %s; ignoring", self._refresh_phase.value)
            return None
        self._refresh_phase = SyncState.FORCE_REFRESH_PENDING
        self._store.set_refresh(RefreshJob(status=RefreshJobStatus.RUNNING, submitted_at=self._clock()))
        self._publish()
        task = asyncio.get_running_loop().create_task(self._run_force_refresh())
        self._refresh_task = task
        return task

    async def _run_force_refresh(self) -> None:
        config = self._config
        job = self._store.state.refresh
        try:
            await self._client.trigger_refresh()
            await asyncio.sleep(config.refresh_initial_delay)

            self._refresh_phase = SyncState.FORCE_REFRESH_POLLING
            self._publish()
            for attempt in range(1, config.refresh_max_attempts + 1):
                status = await self._client.get_refresh_status()
                job = job.model_copy(update={"attempts": attempt})
                self._store.set_refresh(job)
                self._publish()
                if not status.refresh_running:
                    break
                if attempt < config.refresh_max_attempts:
                    await asyncio.sleep(config.refresh_poll_interval)
            else:
                raise RefreshTimeoutError(
                    f"Refresh still running after {config.refresh_max_attempts} status checks",
                )

            _logger.info("Force refresh finished after %d status checks", job.attempts)
            # Re-fetch while still in the refresh state so the view shows the new data.
            await self._fetch_active(self._filters)
            job = job.model_copy(update={"status": RefreshJobStatus.COMPLETED, "completed_at": self._clock()})
        except RefreshSubmissionError as exc:
            _logger.warning("Force refresh failed: %s", exc)
            job = job.model_copy(update={"status": RefreshJobStatus.NOT_RUNNING})
            if not self._closed:
                self._store.set_error(REFRESH_ERROR_MESSAGE)
        finally:
            self._refresh_phase = None
            self._refresh_task = None
            if not self._closed:
                self._store.set_refresh(job)
                self._publish()

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    async def export(self, directory: Path | str = ".") -> Path:
        """Write the active dataset to an ``.xlsx`` workbook in *directory*.

        Listing mode fetches every matching vehicle through the export
        endpoint; Data Quality mode exports the snapshot in memory as last
        retrieved.

        Raises
        ------
        ExportError
            If the export fetch or the workbook write fails.  The view
            state is left untouched.
        """
        filters = self._filters
        now = self._clock()
        self._exporting = True
        try:
            if filters.is_quality_mode:
                snapshot = self._store.state.quality
                if snapshot is None:
                    raise ExportError("No data quality snapshot to export yet")
                mode = ExportMode.QUALITY
                rows = build_export_rows(mode, snapshot)
                sheet_title = "Data Quality"
            else:
                try:
                    records = await self._client.get_export(compose_export(filters))
                except TransientFetchError as exc:
                    raise ExportError(f"Export fetch failed: {exc}") from exc
                mode = ExportMode.LISTING
                rows = build_export_rows(mode, records, now=now)
                sheet_title = "Health Report"

            path = Path(directory) / export_filename(mode, filters, today=now.astimezone().date())
            return write_workbook(rows, path, sheet_title=sheet_title)
        finally:
            self._exporting = False

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def _publish(self) -> None:
        self._store.set_sync_state(self.sync_state)
        self._store.set_loading(self._inflight > 0)
        if self._on_change is None:
            return
        try:
            self._on_change(self._store.state)
        except Exception:
            _logger.debug("on_change callback failed", exc_info=True)
