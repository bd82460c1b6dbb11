"""Polling and response-ordering policy.

This module contains no I/O; the controller asks it what to do.
"""

from __future__ import annotations

from canhealth.config import CanHealthConfig
from canhealth.models.summary import SummaryStats


def select_poll_interval(summary: SummaryStats | None, config: CanHealthConfig) -> float:
    """Pick the poll cadence for the latest summary.

    Until the server reports at least one "No API Response" vehicle (or
    before any summary arrived) the fleet is treated as still settling and
    polled on the warm-up interval; afterwards on the steady interval.
    """
    if summary is None or summary.no_api_response_count == 0:
        return config.warmup_poll_interval
    return config.steady_poll_interval


def needs_bootstrap_recheck(summary: SummaryStats | None, item_count: int) -> bool:
    """True while the server is initializing and no vehicles have arrived."""
    return summary is not None and summary.is_initializing and item_count == 0


def should_apply_response(*, sequence: int, last_applied: int, strict_ordering: bool) -> bool:
    """Decide whether a response may overwrite the view.

    By default the last response to arrive wins regardless of issue order.
    With *strict_ordering* responses issued before the last applied one are
    discarded.
    """
    if not strict_ordering:
        return True
    return sequence > last_applied
