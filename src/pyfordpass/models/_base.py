"""Base model and enum for FordPass API responses.

Every FordPass response model inherits from :class:`FordPassBaseModel`
which provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that drops ``None`` and empty
  string values so the field default is used.
* A ``raw`` dict that captures the original payload.

State enums inherit from :class:`FordPassEnum` which requires an
``UNKNOWN`` member and resolves unmapped values to it instead of
raising ``ValueError``.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class FordPassEnum(enum.StrEnum):
    """Base for FordPass state enums.

    Every subclass **must** define ``UNKNOWN``.  Lookups are
    case-insensitive; values without a mapped member resolve to
    ``UNKNOWN``.
    """

    @classmethod
    def _missing_(cls, value: object) -> FordPassEnum:
        if isinstance(value, str):
            normalized = value.strip().upper()
            for member in cls:
                if member.value == normalized:
                    return member
        unknown: FordPassEnum = cls["UNKNOWN"]
        return unknown


class FordPassBaseModel(BaseModel):
    """Base for FordPass API response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original API response dict."""

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Drop empty values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            cleaned[key] = value
        # Keep an explicit raw= from keyword construction.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
