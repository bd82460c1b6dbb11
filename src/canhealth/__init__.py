"""canhealth - Async sync and classification engine for the OEM CAN health dashboard."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("canhealth")
except PackageNotFoundError:
    __version__ = "0+local"
from canhealth.classify import BadgeTone, Classification, classify
from canhealth.client import CanHealthClient
from canhealth.config import CanHealthConfig
from canhealth.controller import SyncController
from canhealth.exceptions import (
    CanHealthConfigError,
    CanHealthError,
    CanHealthTransportError,
    ExportError,
    RefreshSubmissionError,
    RefreshTimeoutError,
    TransientFetchError,
)
from canhealth.export import ExportMode, build_export_rows, export_filename, write_workbook
from canhealth.models import (
    DataQualitySnapshot,
    FilterState,
    ListingPage,
    QualityBuckets,
    QualityItem,
    RefreshJob,
    RefreshJobStatus,
    RefreshStatus,
    StatusTab,
    SummaryStats,
    SyncPhase,
    VehicleRecord,
)
from canhealth.query import QueryRoute, RequestParams, compose, compose_export
from canhealth.state.store import SyncState, ViewState

__all__ = [
    "__version__",
    "BadgeTone",
    "CanHealthClient",
    "CanHealthConfig",
    "CanHealthConfigError",
    "CanHealthError",
    "CanHealthTransportError",
    "Classification",
    "DataQualitySnapshot",
    "ExportError",
    "ExportMode",
    "FilterState",
    "ListingPage",
    "QualityBuckets",
    "QualityItem",
    "QueryRoute",
    "RefreshJob",
    "RefreshJobStatus",
    "RefreshStatus",
    "RefreshSubmissionError",
    "RefreshTimeoutError",
    "RequestParams",
    "StatusTab",
    "SummaryStats",
    "SyncController",
    "SyncPhase",
    "SyncState",
    "TransientFetchError",
    "VehicleRecord",
    "ViewState",
    "build_export_rows",
    "classify",
    "compose",
    "compose_export",
    "export_filename",
    "write_workbook",
]
