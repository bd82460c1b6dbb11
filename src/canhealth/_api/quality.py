"""Data quality endpoint.

Endpoint:
  - ``GET <prefix>/data-quality`` (``oem``, ``region``; not paginated)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from pydantic import ValidationError

from canhealth._api._common import expect_mapping, get_for_fetch
from canhealth._constants import QUALITY_ENDPOINT
from canhealth._transport import Transport
from canhealth.exceptions import TransientFetchError
from canhealth.models.quality import DataQualitySnapshot
from canhealth.quality import score

_logger = logging.getLogger(__name__)


async def fetch_data_quality(transport: Transport, params: Mapping[str, str]) -> DataQualitySnapshot:
    """Fetch the quality window and score it."""
    payload = expect_mapping(QUALITY_ENDPOINT, await get_for_fetch(transport, QUALITY_ENDPOINT, params))
    try:
        snapshot = score(payload)
    except ValidationError as exc:
        raise TransientFetchError(f"Malformed data quality payload: {exc}", endpoint=QUALITY_ENDPOINT) from exc

    _logger.debug(
        "Data quality oem=%s region=%s items=%d",
        params.get("oem"),
        params.get("region"),
        len(snapshot.items),
    )
    return snapshot
