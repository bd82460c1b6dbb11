"""High-level async client for the CAN health API."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from canhealth._api import listing as _listing_api
from canhealth._api import quality as _quality_api
from canhealth._api import refresh as _refresh_api
from canhealth._transport import HttpTransport, Transport
from canhealth.config import CanHealthConfig
from canhealth.exceptions import CanHealthError
from canhealth.models.quality import DataQualitySnapshot
from canhealth.models.refresh import RefreshStatus
from canhealth.models.summary import ListingPage
from canhealth.models.vehicle import VehicleRecord
from canhealth.query import QueryRoute, RequestParams

_logger = logging.getLogger(__name__)


class CanHealthClient:
    """Async client for the CAN health API.

    Usage::

        async with CanHealthClient(config) as client:
            page = await client.get_listing(compose(FilterState()))
    """

    def __init__(
        self,
        config: CanHealthConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config or CanHealthConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: HttpTransport | None = None

    @property
    def config(self) -> CanHealthConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> CanHealthClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        _logger.debug("CAN health client ready for %s", self._config.api_root)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise CanHealthError("Client not initialized. Use 'async with CanHealthClient(...) as client:'")
        return self._transport

    @staticmethod
    def _check_route(request: RequestParams, expected: QueryRoute) -> None:
        if request.route is not expected:
            raise ValueError(f"expected a {expected.value} request, got {request.route.value}")

    # ------------------------------------------------------------------
    # Read endpoints
    # ------------------------------------------------------------------

    async def get_listing(self, request: RequestParams) -> ListingPage:
        """Fetch one page of the vehicle listing with its fleet summary."""
        self._check_route(request, QueryRoute.LISTING)
        return await _listing_api.fetch_listing(self._require_transport(), request.params)

    async def get_export(self, request: RequestParams) -> list[VehicleRecord]:
        """Fetch every vehicle matching the filters (no pagination)."""
        self._check_route(request, QueryRoute.EXPORT)
        return await _listing_api.fetch_export(self._require_transport(), request.params)

    async def get_data_quality(self, request: RequestParams) -> DataQualitySnapshot:
        """Fetch and score the data quality window."""
        self._check_route(request, QueryRoute.QUALITY)
        return await _quality_api.fetch_data_quality(self._require_transport(), request.params)

    # ------------------------------------------------------------------
    # Force refresh
    # ------------------------------------------------------------------

    async def trigger_refresh(self) -> None:
        """Start the server-side re-synchronisation job."""
        await _refresh_api.submit_refresh(self._require_transport())

    async def get_refresh_status(self) -> RefreshStatus:
        return await _refresh_api.fetch_refresh_status(self._require_transport())
