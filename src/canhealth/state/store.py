"""Reconciled view state.

:class:`ViewStateStore` is the only mutable holder of what the dashboard
displays, and only the sync controller writes to it.  Every mutation
replaces the frozen :class:`ViewState` snapshot, so readers never observe a
half-applied response.
"""

from __future__ import annotations

import logging
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from canhealth._constants import PAGE_SIZE
from canhealth.models.quality import DataQualitySnapshot, QualityItem
from canhealth.models.refresh import RefreshJob
from canhealth.models.summary import ListingPage, SummaryStats
from canhealth.models.vehicle import VehicleRecord
from canhealth.quality import page as quality_page
from canhealth.quality import total_pages
from canhealth.state.policy import should_apply_response

_logger = logging.getLogger(__name__)


class SyncState(StrEnum):
    IDLE = "idle"
    POLLING = "polling"
    FORCE_REFRESH_PENDING = "force_refresh_pending"
    FORCE_REFRESH_POLLING = "force_refresh_polling"


class ViewState(BaseModel):
    """What the presentation layer renders."""

    model_config = ConfigDict(frozen=True)

    items: tuple[VehicleRecord, ...] = ()
    summary: SummaryStats | None = None
    total: int = 0
    pages: int = 1
    page: int = 1
    page_size: int = PAGE_SIZE
    quality: DataQualitySnapshot | None = None
    error: str | None = None
    loading: bool = False
    sync_state: SyncState = SyncState.IDLE
    refresh: RefreshJob = Field(default_factory=RefreshJob)

    @property
    def visible_quality_items(self) -> tuple[QualityItem, ...]:
        """Current client-side page of the quality snapshot."""
        if self.quality is None:
            return ()
        return quality_page(self.quality, self.page, self.page_size)


class ViewStateStore:
    """Holder of the current :class:`ViewState`.

    Applying the same response twice yields the same state: items are
    replaced, never accumulated.
    """

    def __init__(self, *, page_size: int = PAGE_SIZE, strict_ordering: bool = False) -> None:
        self._state = ViewState(page_size=page_size)
        self._strict_ordering = strict_ordering
        self._last_applied = 0

    @property
    def state(self) -> ViewState:
        return self._state

    def _accept(self, sequence: int | None) -> bool:
        if sequence is None:
            return True
        if not should_apply_response(
            sequence=sequence,
            last_applied=self._last_applied,
            strict_ordering=self._strict_ordering,
        ):
            _logger.debug("Discarding stale response seq=%d (last applied %d)", sequence, self._last_applied)
            return False
        self._last_applied = max(self._last_applied, sequence)
        return True

    def _update(self, **changes: object) -> ViewState:
        self._state = self._state.model_copy(update=changes)
        return self._state

    def apply_listing(self, listing: ListingPage, *, page: int, sequence: int | None = None) -> bool:
        """Replace items, totals and summary with *listing*.

        Clears the retained error.  Returns ``False`` when the response was
        discarded as stale.
        """
        if not self._accept(sequence):
            return False
        self._update(
            items=tuple(listing.items),
            total=listing.total,
            pages=max(listing.pages, 1),
            page=page,
            summary=listing.summary if listing.summary is not None else self._state.summary,
            error=None,
        )
        return True

    def apply_quality(self, snapshot: DataQualitySnapshot, *, page: int = 1, sequence: int | None = None) -> bool:
        """Replace the quality snapshot and reset client-side paging."""
        if not self._accept(sequence):
            return False
        pages = max(total_pages(snapshot, self._state.page_size), 1)
        self._update(
            quality=snapshot,
            total=len(snapshot.items),
            pages=pages,
            page=min(max(page, 1), pages),
            error=None,
        )
        return True

    def set_page(self, page: int) -> None:
        self._update(page=page)

    def set_error(self, message: str | None) -> None:
        """Record *message*; items and summary are kept."""
        self._update(error=message)

    def set_loading(self, loading: bool) -> None:
        self._update(loading=loading)

    def set_sync_state(self, sync_state: SyncState) -> None:
        self._update(sync_state=sync_state)

    def set_refresh(self, job: RefreshJob) -> None:
        self._update(refresh=job)
