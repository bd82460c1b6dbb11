from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from canhealth.models.filters import FilterState, StatusTab
from canhealth.models.refresh import RefreshJob, RefreshJobStatus, RefreshStatus
from canhealth.models.summary import ListingPage, SummaryStats, SyncPhase
from canhealth.models.vehicle import VehicleRecord


def test_vehicle_record_aliases_and_sentinels() -> None:
    record = VehicleRecord.model_validate(
        {
            "vehicle_id": " KA01AB1234 ",
            "oem": "Bajaj",
            "city": "Pune",
            "status": "Non-Communicating",
            "status_detail": "N/A",
            "days_inactive": "--",
            "last_updated": "2026-03-01T10:00:00Z",
            "details": {"lat": 18.5},
            "unknown": 1,
        }
    )

    assert record.vehicle_id == "KA01AB1234"
    assert record.region == "Pune"
    assert record.detail_status is None
    assert record.days_inactive is None
    assert record.last_updated == datetime(2026, 3, 1, 10, 0, tzinfo=UTC)
    assert record.details == {"lat": 18.5}
    assert record.raw["unknown"] == 1


def test_vehicle_record_negative_days_are_unknown() -> None:
    assert VehicleRecord(vehicle_id="V1", days_inactive=-4).days_inactive is None


def test_vehicle_record_epoch_millis_timestamp() -> None:
    record = VehicleRecord.model_validate({"vehicle_id": "V1", "last_updated": 1_772_359_200_000})

    assert record.last_updated == datetime(2026, 3, 1, 10, 0, tzinfo=UTC)


def test_vehicle_record_requires_identifier() -> None:
    with pytest.raises(ValidationError):
        VehicleRecord.model_validate({"vehicle_id": "  ", "oem": "Bajaj"})


def test_summary_regions_sorted_unique_and_phase_defaults_ready() -> None:
    summary = SummaryStats.model_validate(
        {"cities": ["Pune", "Delhi", "Pune", None, "--"], "status": "Syncing", "silent_count": 4}
    )

    assert summary.regions == ("Delhi", "Pune")
    assert summary.status is SyncPhase.READY
    assert summary.non_communicating_count == 4
    assert summary.is_initializing is False


def test_listing_page_parses_nested_summary() -> None:
    page = ListingPage.model_validate(
        {
            "items": [{"vehicle_id": "V1"}, {"vehicle_id": "V2"}],
            "total": 2,
            "pages": 1,
            "summary": {"total_vehicles": 2, "status": "Initializing"},
        }
    )

    assert [item.vehicle_id for item in page.items] == ["V1", "V2"]
    assert page.summary is not None
    assert page.summary.is_initializing is True


def test_filter_change_resets_page() -> None:
    filters = FilterState(oem="Bajaj").with_page(4)

    changed = filters.with_filter(search="KA01")

    assert filters.page == 4
    assert changed.page == 1
    assert changed.oem == "Bajaj"
    assert changed.search == "KA01"


def test_filter_blank_selectors_mean_all() -> None:
    filters = FilterState(oem="  ", region=None)

    assert filters.oem == "All"
    assert filters.region == "All"


def test_filter_rejects_page_changes_through_with_filter() -> None:
    with pytest.raises(ValueError):
        FilterState().with_filter(page=2)


def test_filter_rejects_invalid_values() -> None:
    with pytest.raises(ValidationError):
        FilterState(page=0)
    with pytest.raises(ValidationError):
        FilterState().with_filter(status_tab="Parked")


def test_quality_mode_flag() -> None:
    assert FilterState(status_tab=StatusTab.DATA_QUALITY).is_quality_mode is True
    assert FilterState(status_tab="Communicating").is_quality_mode is False


def test_refresh_status_coerces_strings() -> None:
    assert RefreshStatus.model_validate({"refresh_running": "true"}).refresh_running is True
    assert RefreshStatus.model_validate({"refresh_running": "false"}).refresh_running is False
    assert RefreshStatus.model_validate({}).refresh_running is False


def test_refresh_job_defaults_not_running() -> None:
    job = RefreshJob()

    assert job.status is RefreshJobStatus.NOT_RUNNING
    assert job.is_running is False
    assert job.attempts == 0


def test_reselecting_current_filter_keeps_page() -> None:
    filters = FilterState(oem="Bajaj", status_tab=StatusTab.COMMUNICATING).with_page(3)

    same = filters.with_filter(oem="Bajaj", status_tab="Communicating")

    assert same.page == 3
    assert same == filters


def test_listing_page_drops_only_malformed_records() -> None:
    page = ListingPage.model_validate(
        {
            "items": [{"vehicle_id": "BA0001", "oem": "Bajaj"}, {"vehicle_id": "", "oem": "Bajaj"}, "junk"],
            "total": 2,
            "pages": 1,
        }
    )

    assert [item.vehicle_id for item in page.items] == ["BA0001"]
    assert page.total == 2


def test_listing_page_rejects_non_list_items() -> None:
    with pytest.raises(ValidationError):
        ListingPage.model_validate({"items": {"vehicle_id": "BA0001"}})
