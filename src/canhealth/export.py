"""Spreadsheet export of the active dataset.

The builder turns either the listing export (vehicle records) or the data
quality snapshot held in memory into flat records; :func:`write_workbook`
hands them to openpyxl.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime
from enum import StrEnum
from pathlib import Path
from typing import Any

from openpyxl import Workbook

from canhealth.classify import classify
from canhealth.exceptions import ExportError
from canhealth.models.filters import FilterState
from canhealth.models.quality import DataQualitySnapshot
from canhealth.models.vehicle import VehicleRecord
from canhealth.quality import rating

_logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


class ExportMode(StrEnum):
    LISTING = "listing"
    QUALITY = "quality"


def format_last_seen(value: datetime | None) -> str:
    """Local-time rendering of a last-packet timestamp, or ``N/A``."""
    if value is None:
        return "N/A"
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _listing_rows(records: Iterable[VehicleRecord], now: datetime) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for record in records:
        badge = classify(record, now=now)
        rows.append(
            {
                "Vehicle ID": record.vehicle_id,
                "OEM": record.oem,
                "Region": record.region or "",
                "Status": badge.badge_label,
                "Inactive": badge.inactivity_text,
                "Last Seen": format_last_seen(record.last_updated),
            }
        )
    return rows


def _quality_rows(snapshot: DataQualitySnapshot) -> list[dict[str, Any]]:
    return [
        {
            "Vehicle ID": item.vehicle_id,
            "OEM": item.oem,
            "Region": item.region or "",
            "Packets Received": item.observed,
            "Packets Expected": item.expected,
            "Score (%)": item.score,
            "Rating": rating(item.rating_score),
        }
        for item in snapshot.items
    ]


def build_export_rows(
    mode: ExportMode,
    source: Iterable[VehicleRecord] | DataQualitySnapshot,
    *,
    now: datetime | None = None,
) -> list[dict[str, Any]]:
    """Flatten *source* into spreadsheet records.

    Parameters
    ----------
    mode
        ``LISTING`` expects vehicle records from the export endpoint;
        status and inactivity follow the on-screen classification rules.
        ``QUALITY`` expects the full snapshot exactly as last retrieved.
    now
        Reference time for "hours ago" texts.  Defaults to the wall clock.
    """
    if mode is ExportMode.QUALITY:
        if not isinstance(source, DataQualitySnapshot):
            raise TypeError("quality exports need a DataQualitySnapshot")
        return _quality_rows(source)
    if isinstance(source, DataQualitySnapshot):
        raise TypeError("listing exports need vehicle records")
    return _listing_rows(source, now if now is not None else datetime.now(UTC))


def _slug(value: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("-", value.strip()).strip("-") or "All"


def export_filename(mode: ExportMode, filters: FilterState, *, today: date | None = None) -> str:
    """Deterministic workbook name for the active filters and date."""
    day = (today or date.today()).isoformat()
    if mode is ExportMode.QUALITY:
        parts = ["OEM_Data_Quality", _slug(filters.oem), _slug(filters.region)]
    else:
        parts = ["OEM_Health_Report", _slug(filters.oem), _slug(filters.region), _slug(filters.status_tab.value)]
        if filters.search.strip():
            parts.append(_slug(filters.search))
    parts.append(day)
    return "_".join(parts) + ".xlsx"


def write_workbook(rows: Sequence[dict[str, Any]], path: Path, *, sheet_title: str = "Health Report") -> Path:
    """Write *rows* to an ``.xlsx`` file at *path*.

    The header row comes from the first record's keys; an empty export
    produces a sheet with no rows.

    Raises
    ------
    ExportError
        If the workbook cannot be written.
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_title
    if rows:
        headers = list(rows[0].keys())
        sheet.append(headers)
        for row in rows:
            sheet.append([row.get(header) for header in headers])
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(path)
    except OSError as exc:
        raise ExportError(f"Could not write export to {path}: {exc}") from exc
    _logger.debug("Wrote %d export rows to %s", len(rows), path)
    return path
