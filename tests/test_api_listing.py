from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from canhealth._api.listing import fetch_export, fetch_listing
from canhealth.exceptions import TransientFetchError


class _FakeTransport:
    def __init__(self, payload: Any) -> None:
        self._payload = payload

    async def get_json(self, _endpoint: str, _params: Mapping[str, str] | None = None) -> Any:
        return self._payload

    async def post_json(self, _endpoint: str) -> Any:
        return None


@pytest.mark.asyncio
async def test_fetch_listing_keeps_valid_records_next_to_a_bad_one() -> None:
    transport = _FakeTransport(
        {
            "items": [
                {"vehicle_id": "BA0001", "oem": "Bajaj", "status": "Communicating", "days_inactive": 0},
                {"vehicle_id": "", "oem": "Bajaj"},
            ],
            "total": 2,
            "pages": 1,
            "summary": {"total_vehicles": 2},
        }
    )

    page = await fetch_listing(transport, {"page": "1"})

    assert [item.vehicle_id for item in page.items] == ["BA0001"]
    assert page.summary is not None
    assert page.summary.total_vehicles == 2


@pytest.mark.asyncio
async def test_fetch_listing_rejects_malformed_envelope() -> None:
    with pytest.raises(TransientFetchError, match="Malformed listing payload"):
        await fetch_listing(_FakeTransport({"items": "nope"}), {"page": "1"})


@pytest.mark.asyncio
async def test_fetch_export_drops_bad_records() -> None:
    transport = _FakeTransport({"items": [{"vehicle_id": "EI0001"}, {"oem": "Eicher"}, {"vehicle_id": "EI0002"}]})

    records = await fetch_export(transport, {"oem": "Eicher"})

    assert [record.vehicle_id for record in records] == ["EI0001", "EI0002"]


@pytest.mark.asyncio
async def test_fetch_export_rejects_non_list_payload() -> None:
    with pytest.raises(TransientFetchError):
        await fetch_export(_FakeTransport({"message": "busy"}), {})
