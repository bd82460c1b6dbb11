from __future__ import annotations

import pytest

from canhealth.models.filters import FilterState, StatusTab
from canhealth.query import QueryRoute, compose, compose_export


def test_compose_default_listing_params() -> None:
    request = compose(FilterState())

    assert request.route is QueryRoute.LISTING
    assert request.params == {
        "page": "1",
        "limit": "50",
        "oem": "All",
        "status": "All",
        "search": "",
        "region": "All",
    }


def test_compose_is_deterministic() -> None:
    filters = FilterState(oem="Bajaj", region="Pune", search="KA01", status_tab=StatusTab.NO_API_RESPONSE, page=3)

    first = compose(filters, page_size=25)
    second = compose(filters, page_size=25)

    assert first == second
    assert list(first.params) == list(second.params)
    assert first.params["page"] == "3"
    assert first.params["limit"] == "25"
    assert first.params["status"] == "No API Response"


def test_data_quality_tab_routes_to_quality_endpoint() -> None:
    request = compose(FilterState(oem="Euler", region="Delhi", search="ignored", status_tab=StatusTab.DATA_QUALITY))

    assert request.route is QueryRoute.QUALITY
    assert request.as_query() == {"oem": "Euler", "region": "Delhi"}


def test_compose_export_has_no_pagination() -> None:
    request = compose_export(FilterState(oem="Switch", page=4))

    assert request.route is QueryRoute.EXPORT
    assert "page" not in request.params
    assert "limit" not in request.params
    assert request.params["oem"] == "Switch"


def test_compose_export_rejects_quality_mode() -> None:
    with pytest.raises(ValueError):
        compose_export(FilterState(status_tab=StatusTab.DATA_QUALITY))


def test_changing_only_page_leaves_other_params_unchanged() -> None:
    filters = FilterState(oem="Mahindra", search="MH12")

    first = compose(filters).params
    third = compose(filters.with_page(3)).params

    assert third.pop("page") == "3"
    first.pop("page")
    assert third == first
