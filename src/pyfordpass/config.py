"""Bridge configuration for pyfordpass."""

from __future__ import annotations

import dataclasses
import logging
import math
import os
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from pyfordpass._constants import (
    API_URL,
    APPLICATION_ID,
    AUTH_URL,
    CLIENT_ID,
    COMMAND_POLL_ATTEMPTS,
    COMMAND_POLL_INTERVAL,
    POLL_INTERVAL,
    REQUEST_TIMEOUT,
    SESSION_REFRESH_INTERVAL,
)
from pyfordpass.exceptions import FordPassConfigError

_logger = logging.getLogger(__name__)

_CREDENTIAL_KEYS: tuple[str, ...] = ("username", "password")
_POSITIVE_FIELDS: tuple[str, ...] = ("request_timeout", "session_refresh_interval", "poll_interval")


class VehicleConfigEntry(BaseModel):
    """One declared vehicle.

    The VIN is stripped and upper-cased so that entries differing only
    in letter case describe the same vehicle.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    name: str
    vin: str

    @field_validator("vin", mode="before")
    @classmethod
    def _normalize_vin(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("vin must be a string")
        vin = value.strip().upper()
        if not vin or not vin.isalnum():
            raise ValueError(f"vin {value!r} is not alphanumeric")
        return vin

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        if value is None:
            raise ValueError("name is required")
        name = str(value).strip()
        if not name:
            raise ValueError("name must be non-empty")
        return name


def parse_vehicles(entries: Iterable[Any]) -> tuple[VehicleConfigEntry, ...]:
    """Validate declared vehicles, skipping malformed entries.

    Each malformed entry is logged once; it does not prevent the other
    entries from being used.
    """
    parsed: list[VehicleConfigEntry] = []
    for index, raw in enumerate(entries):
        try:
            parsed.append(VehicleConfigEntry.model_validate(raw))
        except ValidationError as exc:
            errors = "; ".join(err["msg"] for err in exc.errors())
            _logger.error("Ignoring vehicle #%d in configuration: %s", index, errors)
    return tuple(parsed)


def _parse_vehicle_spec(spec: str) -> list[dict[str, str]]:
    """Parse ``name:vin,name:vin`` (a bare VIN doubles as its name)."""
    result: list[dict[str, str]] = []
    for item in spec.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, vin = item.rpartition(":")
        if not sep:
            name = vin
        result.append({"name": name, "vin": vin})
    return result


def _require_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        raise FordPassConfigError(f"{name} must be a number, got {value!r}")
    return value


@dataclasses.dataclass(frozen=True)
class FordPassConfig:
    """Bridge configuration.

    Parameters
    ----------
    username : str
        FordPass account user name (email).
    password : str
        FordPass account password.
    vehicles : tuple of VehicleConfigEntry
        Vehicles to expose as accessories.
    auth_url : str
        Token endpoint used for password logins.
    api_url : str
        Vehicle API base URL.
    client_id : str
        OAuth client id sent with password logins.
    application_id : str
        ``Application-Id`` header sent with vehicle API calls.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    session_refresh_interval : float
        Seconds between scheduled re-authentications.  Defaults to
        118 minutes, under the two hour upstream token lifetime.
    poll_interval : float
        Seconds between vehicle status update passes.
    command_poll_attempts : int
        Maximum acknowledgement polls per remote command.
    command_poll_interval : float
        Seconds between acknowledgement polls.
    """

    username: str
    password: str
    vehicles: tuple[VehicleConfigEntry, ...] = ()
    auth_url: str = AUTH_URL
    api_url: str = API_URL
    client_id: str = CLIENT_ID
    application_id: str = APPLICATION_ID
    request_timeout: float = REQUEST_TIMEOUT
    session_refresh_interval: float = SESSION_REFRESH_INTERVAL
    poll_interval: float = POLL_INTERVAL
    command_poll_attempts: int = COMMAND_POLL_ATTEMPTS
    command_poll_interval: float = COMMAND_POLL_INTERVAL

    def __post_init__(self) -> None:
        for name in _POSITIVE_FIELDS:
            value = _require_number(name, getattr(self, name))
            if value <= 0:
                raise FordPassConfigError(f"{name} must be greater than zero, got {value!r}")
        interval = _require_number("command_poll_interval", self.command_poll_interval)
        if interval < 0:
            raise FordPassConfigError(f"command_poll_interval must not be negative, got {interval!r}")
        attempts = self.command_poll_attempts
        if isinstance(attempts, bool) or not isinstance(attempts, int) or attempts < 1:
            raise FordPassConfigError(f"command_poll_attempts must be a positive integer, got {attempts!r}")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> FordPassConfig:
        """Create configuration from a platform config mapping.

        The mapping uses the same keys as the host's ``config.json``
        platform block.  ``username``, ``password`` and ``vehicles``
        are required; anything else falls back to the defaults.  An
        empty ``vehicles`` list is valid and means no accessories.

        Raises
        ------
        FordPassConfigError
            When a credential is missing or empty, ``vehicles`` is
            absent, or a tuning value is out of range.
        """
        missing = [key for key in _CREDENTIAL_KEYS if not mapping.get(key)]
        if mapping.get("vehicles") is None:
            missing.append("vehicles")
        if missing:
            raise FordPassConfigError(f"Missing required configuration: {', '.join(missing)}")

        vehicles_raw = mapping["vehicles"]
        if isinstance(vehicles_raw, (str, bytes)) or not isinstance(vehicles_raw, Iterable):
            raise FordPassConfigError("vehicles must be a list of {name, vin} entries")

        kwargs: dict[str, Any] = {
            "username": str(mapping["username"]),
            "password": str(mapping["password"]),
            "vehicles": parse_vehicles(vehicles_raw),
        }
        for field in dataclasses.fields(cls):
            if field.name in kwargs or field.name not in mapping:
                continue
            kwargs[field.name] = mapping[field.name]
        try:
            return cls(**kwargs)
        except TypeError as exc:
            raise FordPassConfigError(str(exc)) from exc

    @classmethod
    def from_env(cls, **overrides: Any) -> FordPassConfig:
        """Create configuration from environment variables.

        Reads ``FORDPASS_USERNAME``, ``FORDPASS_PASSWORD`` and
        ``FORDPASS_VEHICLES`` (``name:vin,name:vin``) plus optional
        ``FORDPASS_*`` tuning variables.  Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        FordPassConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "FORDPASS_USERNAME": "username",
            "FORDPASS_PASSWORD": "password",
            "FORDPASS_AUTH_URL": "auth_url",
            "FORDPASS_API_URL": "api_url",
            "FORDPASS_CLIENT_ID": "client_id",
            "FORDPASS_APPLICATION_ID": "application_id",
        }
        _ENV_FLOAT_MAP = {
            "FORDPASS_REQUEST_TIMEOUT": "request_timeout",
            "FORDPASS_SESSION_REFRESH_INTERVAL": "session_refresh_interval",
            "FORDPASS_POLL_INTERVAL": "poll_interval",
            "FORDPASS_COMMAND_POLL_INTERVAL": "command_poll_interval",
        }

        mapping: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                mapping[field_name] = val

        try:
            for env_key, field_name in _ENV_FLOAT_MAP.items():
                val = env.get(env_key)
                if val is not None:
                    mapping[field_name] = float(val)
            attempts_env = env.get("FORDPASS_COMMAND_POLL_ATTEMPTS")
            if attempts_env is not None:
                mapping["command_poll_attempts"] = int(attempts_env)
        except ValueError as exc:
            raise FordPassConfigError(f"Invalid numeric environment value: {exc}") from exc

        vehicles_env = env.get("FORDPASS_VEHICLES")
        if vehicles_env is not None:
            mapping["vehicles"] = _parse_vehicle_spec(vehicles_env)

        mapping.update(overrides)
        return cls.from_mapping(mapping)
