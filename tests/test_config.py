from __future__ import annotations

import pytest

from canhealth.config import CanHealthConfig
from canhealth.exceptions import CanHealthConfigError


def test_defaults() -> None:
    config = CanHealthConfig()

    assert config.api_root == "http://127.0.0.1:8008/oem/can-health"
    assert config.page_size == 50
    assert config.steady_poll_interval == 1800.0
    assert config.strict_ordering is False


def test_api_root_strips_trailing_slashes() -> None:
    config = CanHealthConfig(base_url="https://fleet.example.com/", api_prefix="/oem/can-health/")

    assert config.api_root == "https://fleet.example.com/oem/can-health"


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CANHEALTH_BASE_URL", "http://fleet.internal:9000")
    monkeypatch.setenv("CANHEALTH_PAGE_SIZE", "25")
    monkeypatch.setenv("CANHEALTH_STEADY_POLL_INTERVAL", "600")
    monkeypatch.setenv("CANHEALTH_STRICT_ORDERING", "yes")

    config = CanHealthConfig.from_env()

    assert config.base_url == "http://fleet.internal:9000"
    assert config.page_size == 25
    assert config.steady_poll_interval == 600.0
    assert config.strict_ordering is True


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CANHEALTH_PAGE_SIZE", "25")
    monkeypatch.setenv("CANHEALTH_STRICT_ORDERING", "1")

    config = CanHealthConfig.from_env(page_size=10, strict_ordering=False)

    assert config.page_size == 10
    assert config.strict_ordering is False


def test_from_env_rejects_non_numeric(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CANHEALTH_REFRESH_MAX_ATTEMPTS", "many")

    with pytest.raises(CanHealthConfigError, match="CANHEALTH_REFRESH_MAX_ATTEMPTS"):
        CanHealthConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"base_url": " "},
        {"page_size": 0},
        {"refresh_max_attempts": 0},
        {"warmup_poll_interval": -1.0},
    ],
)
def test_invalid_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(CanHealthConfigError):
        CanHealthConfig(**kwargs)
