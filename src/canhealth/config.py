"""Client configuration for canhealth."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from canhealth._constants import API_PREFIX, BASE_URL, PAGE_SIZE
from canhealth.exceptions import CanHealthConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, raw: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(raw)
    except ValueError as exc:
        raise CanHealthConfigError(f"{env_key} must be a number, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class CanHealthConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Scheme and host of the CAN health API server.  Injected explicitly;
        the library never guesses it from the environment it runs in.
    api_prefix : str
        Path prefix of the CAN health endpoints.
    page_size : int
        Fixed page size used for the listing and for client-side paging of
        the data quality snapshot.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    warmup_poll_interval : float
        Poll cadence while the backend is still settling (no summary yet,
        or no vehicle reported as "No API Response").
    steady_poll_interval : float
        Poll cadence once data has stabilised.  Defaults to 30 minutes.
    bootstrap_recheck_delay : float
        Delay of the one-shot re-check armed while the server reports
        ``Initializing`` and no vehicles have arrived yet.
    refresh_initial_delay : float
        Delay between submitting a force refresh and the first status check.
    refresh_poll_interval : float
        Seconds between force-refresh status checks.
    refresh_max_attempts : int
        Maximum number of status checks before the force refresh is
        abandoned with :class:`~canhealth.exceptions.RefreshTimeoutError`.
    strict_ordering : bool
        Discard responses older than the last applied one instead of the
        default "last response wins" behaviour.
    """

    base_url: str = BASE_URL
    api_prefix: str = API_PREFIX
    page_size: int = PAGE_SIZE
    request_timeout: float = 30.0
    warmup_poll_interval: float = 60.0
    steady_poll_interval: float = 30 * 60.0
    bootstrap_recheck_delay: float = 5.0
    refresh_initial_delay: float = 3.0
    refresh_poll_interval: float = 5.0
    refresh_max_attempts: int = 120
    strict_ordering: bool = False

    def __post_init__(self) -> None:
        if not self.base_url.strip():
            raise CanHealthConfigError("base_url must be non-empty")
        if self.page_size < 1:
            raise CanHealthConfigError(f"page_size must be >= 1, got {self.page_size}")
        if self.refresh_max_attempts < 1:
            raise CanHealthConfigError(f"refresh_max_attempts must be >= 1, got {self.refresh_max_attempts}")
        for name in (
            "request_timeout",
            "warmup_poll_interval",
            "steady_poll_interval",
            "bootstrap_recheck_delay",
            "refresh_initial_delay",
            "refresh_poll_interval",
        ):
            if getattr(self, name) < 0:
                raise CanHealthConfigError(f"{name} must not be negative")

    @property
    def api_root(self) -> str:
        """Base URL joined with the API prefix, without a trailing slash."""
        return f"{self.base_url.rstrip('/')}{self.api_prefix}".rstrip("/")

    @classmethod
    def from_env(cls, **overrides: Any) -> CanHealthConfig:
        """Create configuration from environment variables.

        Reads ``CANHEALTH_BASE_URL``, ``CANHEALTH_API_PREFIX`` and the
        numeric ``CANHEALTH_*`` tuning variables.  Explicit keyword
        arguments override environment values.

        Raises
        ------
        CanHealthConfigError
            If a numeric variable cannot be parsed or a value is invalid.
        """
        env = os.environ

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in {
            "CANHEALTH_BASE_URL": "base_url",
            "CANHEALTH_API_PREFIX": "api_prefix",
        }.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMERIC_MAP: dict[str, tuple[str, type[int] | type[float]]] = {
            "CANHEALTH_PAGE_SIZE": ("page_size", int),
            "CANHEALTH_REQUEST_TIMEOUT": ("request_timeout", float),
            "CANHEALTH_WARMUP_POLL_INTERVAL": ("warmup_poll_interval", float),
            "CANHEALTH_STEADY_POLL_INTERVAL": ("steady_poll_interval", float),
            "CANHEALTH_BOOTSTRAP_RECHECK_DELAY": ("bootstrap_recheck_delay", float),
            "CANHEALTH_REFRESH_INITIAL_DELAY": ("refresh_initial_delay", float),
            "CANHEALTH_REFRESH_POLL_INTERVAL": ("refresh_poll_interval", float),
            "CANHEALTH_REFRESH_MAX_ATTEMPTS": ("refresh_max_attempts", int),
        }
        for env_key, (field_name, cast) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, cast)

        if "strict_ordering" not in overrides:
            config_kwargs["strict_ordering"] = _env_bool(env.get("CANHEALTH_STRICT_ORDERING"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
