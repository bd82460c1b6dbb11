from __future__ import annotations

from datetime import UTC, datetime, timedelta

from canhealth.classify import NO_VALUE, BadgeTone, classify, hours_since
from canhealth.models.vehicle import VehicleRecord


def _now() -> datetime:
    return datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def test_no_api_integration_wins_over_online_fields() -> None:
    record = VehicleRecord(
        vehicle_id="KA01AB1234",
        status="Communicating",
        detail_status="No API Integration",
        days_inactive=0,
    )

    result = classify(record, now=_now())

    assert result.badge_label == "No API"
    assert result.badge_tone is BadgeTone.NEUTRAL
    assert result.inactivity_text == NO_VALUE


def test_no_api_response_ignores_days_inactive() -> None:
    result = classify(
        {"vehicle_id": "V1", "status": "Non-Communicating", "detail_status": "No API Response", "days_inactive": 40},
        now=_now(),
    )

    assert result.badge_label == "No API Resp."
    assert result.badge_tone is BadgeTone.WARNING
    assert result.inactivity_text == NO_VALUE
    assert result.emphasized is False


def test_online_vehicle_reports_hours_since_last_packet() -> None:
    record = VehicleRecord(
        vehicle_id="V1",
        status="Communicating",
        days_inactive=0,
        last_updated=_now() - timedelta(hours=3, minutes=59),
    )

    result = classify(record, now=_now())

    assert result.badge_label == "Online"
    assert result.badge_tone is BadgeTone.POSITIVE
    assert result.inactivity_text == "3 hours ago"


def test_online_vehicle_without_timestamp_reads_today() -> None:
    result = classify({"vehicle_id": "V1", "status": "Communicating", "days_inactive": 0}, now=_now())

    assert result.inactivity_text == "Today"


def test_future_timestamp_is_zero_hours_ago() -> None:
    record = VehicleRecord(
        vehicle_id="V1",
        status="Communicating",
        days_inactive=0,
        last_updated=_now() + timedelta(hours=2),
    )

    assert classify(record, now=_now()).inactivity_text == "0 hours ago"


def test_offline_emphasis_only_above_seven_days() -> None:
    week = classify({"vehicle_id": "V1", "status": "Non-Communicating", "days_inactive": 7}, now=_now())
    older = classify({"vehicle_id": "V2", "status": "Non-Communicating", "days_inactive": 12}, now=_now())

    assert week.badge_label == "Offline"
    assert week.badge_tone is BadgeTone.NEGATIVE
    assert week.inactivity_text == "7 days"
    assert week.emphasized is False
    assert older.inactivity_text == "12 days"
    assert older.emphasized is True


def test_communicating_with_inactive_days_is_offline() -> None:
    result = classify({"vehicle_id": "V1", "status": "Communicating", "days_inactive": 2}, now=_now())

    assert result.badge_label == "Offline"
    assert result.inactivity_text == "2 days"


def test_missing_days_falls_back_to_placeholder() -> None:
    result = classify({"vehicle_id": "V1", "status": "Communicating", "days_inactive": "--"}, now=_now())

    assert result.badge_label == "Offline"
    assert result.inactivity_text == NO_VALUE


def test_unparseable_record_never_raises() -> None:
    result = classify({"status": "Communicating"}, now=_now())

    assert result.badge_label == "Offline"
    assert result.inactivity_text == NO_VALUE


def test_hours_since_floors_partial_hours() -> None:
    assert hours_since(_now() - timedelta(minutes=59), _now()) == 0
    assert hours_since(_now() - timedelta(hours=25), _now()) == 25


def test_nine_idle_days_are_offline_and_emphasized() -> None:
    result = classify({"vehicle_id": "V1", "status": "Non-Communicating", "days_inactive": 9}, now=_now())

    assert (result.badge_label, result.inactivity_text, result.emphasized) == ("Offline", "9 days", True)
