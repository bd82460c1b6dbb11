"""Vehicle listing and export endpoints.

Endpoints:
  - ``GET <prefix>`` (paginated listing + fleet summary)
  - ``GET <prefix>/export`` (unpaginated listing, same filters)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from pydantic import ValidationError

from canhealth._api._common import expect_mapping, get_for_fetch
from canhealth._constants import EXPORT_ENDPOINT, LISTING_ENDPOINT
from canhealth._transport import Transport
from canhealth.exceptions import TransientFetchError
from canhealth.models.summary import ListingPage
from canhealth.models.vehicle import VehicleRecord, parse_records

_logger = logging.getLogger(__name__)


async def fetch_listing(transport: Transport, params: Mapping[str, str]) -> ListingPage:
    """Fetch one listing page.

    Raises
    ------
    TransientFetchError
        On any transport failure or malformed envelope.  Malformed records
        inside ``items`` are dropped instead.
    """
    payload = expect_mapping(LISTING_ENDPOINT, await get_for_fetch(transport, LISTING_ENDPOINT, params))
    try:
        page = ListingPage.model_validate(payload)
    except ValidationError as exc:
        raise TransientFetchError(f"Malformed listing payload: {exc}", endpoint=LISTING_ENDPOINT) from exc

    _logger.debug(
        "Listing page=%s items=%d total=%d pages=%d",
        params.get("page"),
        len(page.items),
        page.total,
        page.pages,
    )
    return page


async def fetch_export(transport: Transport, params: Mapping[str, str]) -> list[VehicleRecord]:
    """Fetch every vehicle matching the filters, without pagination.

    The server answers with a bare list; an ``{"items": [...]}`` envelope is
    accepted as well.  Records that do not parse are dropped.
    """
    payload = await get_for_fetch(transport, EXPORT_ENDPOINT, params)
    if isinstance(payload, dict):
        payload = payload.get("items")
    if not isinstance(payload, list):
        raise TransientFetchError("Export payload is not a list", endpoint=EXPORT_ENDPOINT)

    records = parse_records(payload)
    _logger.debug("Export returned %d of %d records", len(records), len(payload))
    return records
