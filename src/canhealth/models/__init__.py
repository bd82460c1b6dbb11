"""Data models for CAN health API payloads and client state."""

from canhealth.models._base import ApiTimestamp, CanHealthBaseModel
from canhealth.models.filters import FilterState, StatusTab
from canhealth.models.quality import DataQualitySnapshot, QualityBuckets, QualityItem, QualityWindowPayload
from canhealth.models.refresh import RefreshJob, RefreshJobStatus, RefreshStatus
from canhealth.models.summary import ListingPage, SummaryStats, SyncPhase
from canhealth.models.vehicle import VehicleRecord

__all__ = [
    "ApiTimestamp",
    "CanHealthBaseModel",
    "DataQualitySnapshot",
    "FilterState",
    "ListingPage",
    "QualityBuckets",
    "QualityItem",
    "QualityWindowPayload",
    "RefreshJob",
    "RefreshJobStatus",
    "RefreshStatus",
    "StatusTab",
    "SummaryStats",
    "SyncPhase",
    "VehicleRecord",
]
