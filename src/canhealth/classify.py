"""Status classification of vehicle records.

Maps a raw :class:`~canhealth.models.vehicle.VehicleRecord` to the badge and
inactivity text shown to the user.  The rules form an explicit ordered list;
the first matching rule wins and anything left over is offline, so
classification never fails: missing or malformed fields fall through to the
offline branch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from canhealth._constants import (
    DETAIL_NO_API_INTEGRATION,
    DETAIL_NO_API_RESPONSE,
    STATUS_COMMUNICATING,
)
from canhealth.models.vehicle import VehicleRecord

_logger = logging.getLogger(__name__)

NO_VALUE = "—"
EMPHASIS_DAYS = 7


class BadgeTone(StrEnum):
    NEUTRAL = "neutral"
    WARNING = "warning"
    POSITIVE = "positive"
    NEGATIVE = "negative"


class Classification(BaseModel):
    """Display status of one vehicle."""

    model_config = ConfigDict(frozen=True)

    badge_label: str
    badge_tone: BadgeTone
    inactivity_text: str
    emphasized: bool = False


Rule = tuple[Callable[[VehicleRecord], bool], Callable[[VehicleRecord, datetime], Classification]]


def _no_api_integration(record: VehicleRecord) -> bool:
    return record.detail_status == DETAIL_NO_API_INTEGRATION


def _no_api_response(record: VehicleRecord) -> bool:
    return record.detail_status == DETAIL_NO_API_RESPONSE


def _online(record: VehicleRecord) -> bool:
    return record.status == STATUS_COMMUNICATING and record.days_inactive == 0


def hours_since(timestamp: datetime, now: datetime) -> int:
    """Whole hours elapsed between *timestamp* and *now*, never negative."""
    elapsed = (now - timestamp).total_seconds()
    return max(0, int(elapsed // 3600))


def _no_api_badge(_record: VehicleRecord, _now: datetime) -> Classification:
    return Classification(badge_label="No API", badge_tone=BadgeTone.NEUTRAL, inactivity_text=NO_VALUE)


def _no_response_badge(_record: VehicleRecord, _now: datetime) -> Classification:
    return Classification(badge_label="No API Resp.", badge_tone=BadgeTone.WARNING, inactivity_text=NO_VALUE)


def _online_badge(record: VehicleRecord, now: datetime) -> Classification:
    if record.last_updated is None:
        text = "Today"
    else:
        text = f"{hours_since(record.last_updated, now)} hours ago"
    return Classification(badge_label="Online", badge_tone=BadgeTone.POSITIVE, inactivity_text=text)


def _offline_badge(record: VehicleRecord, _now: datetime) -> Classification:
    days = record.days_inactive
    if days is None:
        return Classification(badge_label="Offline", badge_tone=BadgeTone.NEGATIVE, inactivity_text=NO_VALUE)
    return Classification(
        badge_label="Offline",
        badge_tone=BadgeTone.NEGATIVE,
        inactivity_text=f"{days} days",
        emphasized=days > EMPHASIS_DAYS,
    )


CLASSIFY_RULES: tuple[Rule, ...] = (
    (_no_api_integration, _no_api_badge),
    (_no_api_response, _no_response_badge),
    (_online, _online_badge),
)


def _as_record(record: VehicleRecord | Mapping[str, Any]) -> VehicleRecord | None:
    if isinstance(record, VehicleRecord):
        return record
    if not isinstance(record, Mapping):
        return None
    try:
        return VehicleRecord.model_validate(dict(record))
    except ValidationError:
        _logger.debug("Unparseable vehicle record: %s", record, exc_info=True)
        return None


def classify(record: VehicleRecord | Mapping[str, Any], *, now: datetime | None = None) -> Classification:
    """Classify *record* into a badge and inactivity text.

    Parameters
    ----------
    record
        A parsed record or the raw server mapping.
    now
        Reference time for the "hours ago" text.  Defaults to the wall
        clock at call time; the result is never cached.
    """
    current = now if now is not None else datetime.now(UTC)
    if current.tzinfo is None:
        current = current.replace(tzinfo=UTC)

    parsed = _as_record(record)
    if parsed is None:
        return Classification(badge_label="Offline", badge_tone=BadgeTone.NEGATIVE, inactivity_text=NO_VALUE)

    for predicate, build in CLASSIFY_RULES:
        if predicate(parsed):
            return build(parsed, current)
    return _offline_badge(parsed, current)
