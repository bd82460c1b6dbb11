from __future__ import annotations

from canhealth.config import CanHealthConfig
from canhealth.models.summary import SummaryStats
from canhealth.state.policy import needs_bootstrap_recheck, select_poll_interval, should_apply_response


def test_poll_interval_warmup_until_no_api_response_vehicles_appear() -> None:
    config = CanHealthConfig(warmup_poll_interval=60.0, steady_poll_interval=1800.0)

    assert select_poll_interval(None, config) == 60.0
    assert select_poll_interval(SummaryStats(no_api_response_count=0), config) == 60.0
    assert select_poll_interval(SummaryStats(no_api_response_count=3), config) == 1800.0


def test_bootstrap_recheck_only_while_initializing_and_empty() -> None:
    initializing = SummaryStats(status="Initializing")

    assert needs_bootstrap_recheck(initializing, 0) is True
    assert needs_bootstrap_recheck(initializing, 5) is False
    assert needs_bootstrap_recheck(SummaryStats(status="Ready"), 0) is False
    assert needs_bootstrap_recheck(None, 0) is False


def test_response_ordering() -> None:
    assert should_apply_response(sequence=1, last_applied=5, strict_ordering=False) is True
    assert should_apply_response(sequence=1, last_applied=5, strict_ordering=True) is False
    assert should_apply_response(sequence=6, last_applied=5, strict_ordering=True) is True
