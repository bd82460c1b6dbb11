"""Force-refresh endpoints.

Endpoints:
  - ``POST <prefix>/refresh`` (starts the server-side job, returns at once)
  - ``GET <prefix>/refresh/status`` (``{"refresh_running": bool}``)
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from canhealth._constants import REFRESH_ENDPOINT, REFRESH_STATUS_ENDPOINT
from canhealth._transport import Transport
from canhealth.exceptions import CanHealthTransportError, RefreshSubmissionError
from canhealth.models.refresh import RefreshStatus

_logger = logging.getLogger(__name__)


async def submit_refresh(transport: Transport) -> None:
    """Ask the server to re-synchronise with every upstream OEM API."""
    try:
        await transport.post_json(REFRESH_ENDPOINT)
    except CanHealthTransportError as exc:
        raise RefreshSubmissionError(f"Force refresh submission failed: {exc}", endpoint=REFRESH_ENDPOINT) from exc
    _logger.debug("Force refresh submitted")


async def fetch_refresh_status(transport: Transport) -> RefreshStatus:
    """Check whether the server-side refresh job is still running."""
    try:
        payload = await transport.get_json(REFRESH_STATUS_ENDPOINT)
    except CanHealthTransportError as exc:
        raise RefreshSubmissionError(
            f"Force refresh status check failed: {exc}",
            endpoint=REFRESH_STATUS_ENDPOINT,
        ) from exc

    if not isinstance(payload, dict):
        raise RefreshSubmissionError("Refresh status payload is not an object", endpoint=REFRESH_STATUS_ENDPOINT)
    try:
        return RefreshStatus.model_validate(payload)
    except ValidationError as exc:
        raise RefreshSubmissionError(
            f"Malformed refresh status payload: {exc}",
            endpoint=REFRESH_STATUS_ENDPOINT,
        ) from exc
