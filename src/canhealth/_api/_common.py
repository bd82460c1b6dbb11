"""Shared helpers for CAN health endpoint modules.

Endpoint modules speak :class:`~canhealth._transport.Transport` and raise the
domain errors of :mod:`canhealth.exceptions`; this module maps transport and
payload-shape failures onto those errors.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from canhealth._transport import Transport
from canhealth.exceptions import CanHealthTransportError, TransientFetchError


def expect_mapping(endpoint: str, payload: Any) -> dict[str, Any]:
    """Return *payload* if it is a JSON object, else raise ``TransientFetchError``."""
    if not isinstance(payload, dict):
        raise TransientFetchError(
            f"{endpoint or '/'} returned {type(payload).__name__}, expected an object",
            endpoint=endpoint,
        )
    return payload


async def get_for_fetch(transport: Transport, endpoint: str, params: Mapping[str, str]) -> Any:
    """GET *endpoint*, translating transport failures into ``TransientFetchError``."""
    try:
        return await transport.get_json(endpoint, params)
    except CanHealthTransportError as exc:
        raise TransientFetchError(str(exc), endpoint=endpoint) from exc
