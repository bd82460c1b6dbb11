"""Base model for CAN health API payloads.

Every response model inherits from :class:`CanHealthBaseModel` which
provides:

* A ``model_validator(mode="before")`` that strips sentinel values
  (``""``, ``"--"``, ``"N/A"``, NaN) so the field default is used.
* Key aliases declared per model through ``_KEY_ALIASES``, for payloads
  that spell the same field differently between server versions.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from canhealth.normalize import is_sentinel, parse_timestamp

ApiTimestamp = Annotated[datetime | None, BeforeValidator(parse_timestamp)]
"""Annotated type that coerces ISO strings and epoch values to UTC datetimes."""


class CanHealthBaseModel(BaseModel):
    """Base for CAN health API response models."""

    _KEY_ALIASES: ClassVar[dict[str, str]] = {}
    """``{"server_key": "field_name"}`` pairs applied before validation."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict, repr=False)
    """Original API payload."""

    @staticmethod
    def _clean_dict(values: dict[str, Any], aliases: dict[str, str] | None = None) -> dict[str, Any]:
        """Strip sentinel values and apply key aliases on *values*."""
        working = dict(values)
        if aliases:
            for old_key, new_key in aliases.items():
                if old_key in working and new_key not in working:
                    working[new_key] = working.pop(old_key)

        return {key: value for key, value in working.items() if not is_sentinel(value)}

    @model_validator(mode="before")
    @classmethod
    def _clean_api_values(cls, values: Any) -> Any:
        """Strip sentinel values, apply key aliases, and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        original = dict(values)

        aliases: dict[str, str] = getattr(cls, "_KEY_ALIASES", {})
        cleaned = CanHealthBaseModel._clean_dict(original, aliases)

        # Keep an explicit raw= from keyword construction.
        if "raw" not in values:
            cleaned["raw"] = original
        return cleaned
