"""Data quality scoring, bucketing and client-side paging."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from canhealth._constants import QUALITY_HIGH_THRESHOLD, QUALITY_MID_THRESHOLD
from canhealth.models.quality import DataQualitySnapshot, QualityBuckets, QualityItem, QualityWindowPayload

_logger = logging.getLogger(__name__)


def _score_pct(observed: int, expected: int, fallback: float) -> float:
    if expected <= 0:
        return min(max(fallback, 0.0), 100.0)
    return min(observed / expected, 1.0) * 100.0


def item_score(observed: int, expected: int, fallback: float = 0.0) -> float:
    """Observed / expected as a percentage, capped at 100, one decimal.

    Falls back to *fallback* (the server's own score) when nothing was
    expected in the window.
    """
    return round(_score_pct(observed, expected, fallback), 1)


def score(response: Mapping[str, Any] | QualityWindowPayload) -> DataQualitySnapshot:
    """Build a :class:`DataQualitySnapshot` from a quality endpoint payload.

    Items that fail validation are dropped; server order is preserved.

    Raises
    ------
    pydantic.ValidationError
        If the envelope itself is not a mapping.
    """
    payload = response if isinstance(response, QualityWindowPayload) else QualityWindowPayload.model_validate(response)

    items: list[QualityItem] = []
    for raw_item in payload.items:
        try:
            parsed = QualityItem.model_validate(raw_item)
        except ValidationError:
            _logger.debug("Dropping malformed quality item: %s", raw_item, exc_info=True)
            continue
        precise = _score_pct(parsed.observed, parsed.expected, parsed.score)
        items.append(parsed.model_copy(update={"score": round(precise, 1), "precise_score": precise}))

    return DataQualitySnapshot(
        window_start=payload.window_start,
        window_end=payload.window_end,
        total=payload.total if payload.total is not None else len(items),
        items=tuple(items),
    )


def rating(value: float) -> str:
    """Bucket label for a single score."""
    if value >= QUALITY_HIGH_THRESHOLD:
        return "High"
    if value >= QUALITY_MID_THRESHOLD:
        return "Mid"
    return "Low"


def bucket(snapshot: DataQualitySnapshot) -> QualityBuckets:
    """Count items per bucket: high >= 80, 40 <= mid < 80, low < 40.

    Buckets use the unrounded score, so a displayed 80.0 may still be Mid.
    """
    counts = {"High": 0, "Mid": 0, "Low": 0}
    for item in snapshot.items:
        counts[rating(item.rating_score)] += 1
    return QualityBuckets(high=counts["High"], mid=counts["Mid"], low=counts["Low"])


def total_pages(snapshot: DataQualitySnapshot, page_size: int) -> int:
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    return math.ceil(len(snapshot.items) / page_size)


def page(snapshot: DataQualitySnapshot, page_number: int, page_size: int) -> tuple[QualityItem, ...]:
    """Return the contiguous slice for 1-based *page_number*.

    The caller clamps *page_number*; pages past the end are empty.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    start = max(page_number - 1, 0) * page_size
    return snapshot.items[start : start + page_size]
