"""Request parameter composition.

Pure mapping from :class:`~canhealth.models.filters.FilterState` to the
query parameters of the listing, export and data quality endpoints.
Composing the same state twice yields equal parameters in the same key
order, which the controller relies on for change detection.
"""

from __future__ import annotations

import dataclasses
from enum import StrEnum

from canhealth._constants import ALL, PAGE_SIZE
from canhealth.models.filters import FilterState


class QueryRoute(StrEnum):
    LISTING = "listing"
    EXPORT = "export"
    QUALITY = "quality"


@dataclasses.dataclass(frozen=True)
class RequestParams:
    """Endpoint route plus its query parameters (all rendered as strings)."""

    route: QueryRoute
    params: dict[str, str]

    def as_query(self) -> dict[str, str]:
        return dict(self.params)


def _filter_params(filters: FilterState) -> dict[str, str]:
    return {
        "oem": filters.oem,
        "status": filters.status_tab.value,
        "search": filters.search,
        "region": filters.region,
    }


def compose(filters: FilterState, *, page_size: int = PAGE_SIZE) -> RequestParams:
    """Compose the request for the active view.

    The Data Quality tab never reaches the listing endpoint as a status;
    it routes to the quality endpoint with only ``oem`` and ``region``.
    """
    if filters.is_quality_mode:
        return RequestParams(
            route=QueryRoute.QUALITY,
            params={"oem": filters.oem, "region": filters.region or ALL},
        )
    params = {"page": str(filters.page), "limit": str(page_size)}
    params.update(_filter_params(filters))
    return RequestParams(route=QueryRoute.LISTING, params=params)


def compose_export(filters: FilterState) -> RequestParams:
    """Compose the unpaginated export request for the listing view.

    Raises
    ------
    ValueError
        In Data Quality mode, whose export is built from the snapshot
        already in memory.
    """
    if filters.is_quality_mode:
        raise ValueError("data quality exports are built from the in-memory snapshot")
    return RequestParams(route=QueryRoute.EXPORT, params=_filter_params(filters))
