"""User query intent: filters, status tab and page.

These models provide a consistent "validate → normalize → execute" flow
for the sync controller's filter setters.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from canhealth._constants import ALL


class StatusTab(StrEnum):
    """Status tabs of the dashboard.

    ``DATA_QUALITY`` is not a telemetry status: it switches the view to the
    data quality window instead of the vehicle listing.
    """

    ALL = "All"
    COMMUNICATING = "Communicating"
    NON_COMMUNICATING = "Non-Communicating"
    NO_API_RESPONSE = "No API Response"
    NO_API_INTEGRATION = "No API Integration"
    DATA_QUALITY = "Data Quality"


class FilterState(BaseModel):
    """The user's current query intent.

    Any change to a non-page field resets ``page`` to 1; use
    :meth:`with_filter` for those and :meth:`with_page` for paging.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
    )

    oem: str = ALL
    region: str = ALL
    search: str = ""
    status_tab: StatusTab = StatusTab.ALL
    page: int = Field(default=1, ge=1)

    @field_validator("oem", "region", mode="before")
    @classmethod
    def _selector_or_all(cls, value: Any) -> str:
        if value is None:
            return ALL
        text = str(value).strip()
        return text or ALL

    @field_validator("search", mode="before")
    @classmethod
    def _search_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @property
    def is_quality_mode(self) -> bool:
        return self.status_tab is StatusTab.DATA_QUALITY

    def with_filter(self, **changes: Any) -> FilterState:
        """Return a copy with *changes* applied.

        The page resets to 1 only when a value actually changes; re-selecting
        the current values returns ``self`` unchanged.

        Raises :class:`ValueError` when asked to change ``page`` (use
        :meth:`with_page`) and :class:`pydantic.ValidationError` on invalid
        values.
        """
        if "page" in changes:
            raise ValueError("use with_page() to change the page")
        merged = self.model_dump()
        merged.update(changes)
        updated = FilterState.model_validate(merged)
        if updated == self:
            return self
        return updated.model_copy(update={"page": 1})

    def with_page(self, page: int) -> FilterState:
        """Return a copy pointing at *page*, other filters unchanged."""
        merged = self.model_dump()
        merged["page"] = page
        return FilterState.model_validate(merged)
