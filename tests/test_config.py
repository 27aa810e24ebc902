from __future__ import annotations

import logging

import pytest

from pyfordpass._constants import POLL_INTERVAL, SESSION_REFRESH_INTERVAL
from pyfordpass.config import FordPassConfig, VehicleConfigEntry, parse_vehicles
from pyfordpass.exceptions import FordPassConfigError


def _mapping(**overrides: object) -> dict[str, object]:
    mapping: dict[str, object] = {
        "platform": "FordPass",
        "username": "user@example.com",
        "password": "secret",
        "vehicles": [{"name": "Truck", "vin": "1ftfw1e50mfa00001"}],
    }
    mapping.update(overrides)
    return mapping


def test_from_mapping_uses_defaults() -> None:
    config = FordPassConfig.from_mapping(_mapping())

    assert config.username == "user@example.com"
    assert config.vehicles == (VehicleConfigEntry(name="Truck", vin="1FTFW1E50MFA00001"),)
    assert config.session_refresh_interval == SESSION_REFRESH_INTERVAL == 118 * 60
    assert config.poll_interval == POLL_INTERVAL == 60.0


def test_from_mapping_accepts_tuning_keys() -> None:
    config = FordPassConfig.from_mapping(_mapping(poll_interval=30.0, command_poll_attempts=4))
    assert config.poll_interval == 30.0
    assert config.command_poll_attempts == 4


@pytest.mark.parametrize("missing", ["username", "password", "vehicles"])
def test_from_mapping_requires_credentials_and_vehicles(missing: str) -> None:
    mapping = _mapping()
    del mapping[missing]
    with pytest.raises(FordPassConfigError, match=missing):
        FordPassConfig.from_mapping(mapping)


def test_from_mapping_accepts_empty_vehicle_list() -> None:
    config = FordPassConfig.from_mapping(_mapping(vehicles=[]))
    assert config.vehicles == ()


@pytest.mark.parametrize("vehicles", [None, ""])
def test_from_mapping_rejects_absent_vehicles(vehicles: object) -> None:
    with pytest.raises(FordPassConfigError):
        FordPassConfig.from_mapping(_mapping(vehicles=vehicles))


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("poll_interval", 0),
        ("poll_interval", -5),
        ("poll_interval", "30"),
        ("poll_interval", float("nan")),
        ("session_refresh_interval", 0.0),
        ("request_timeout", None),
        ("request_timeout", True),
        ("command_poll_interval", -1.0),
        ("command_poll_attempts", 0),
        ("command_poll_attempts", 2.5),
        ("command_poll_attempts", "3"),
    ],
)
def test_from_mapping_rejects_invalid_tuning_values(key: str, value: object) -> None:
    with pytest.raises(FordPassConfigError, match=key):
        FordPassConfig.from_mapping(_mapping(**{key: value}))


def test_zero_command_poll_interval_is_allowed() -> None:
    config = FordPassConfig.from_mapping(_mapping(command_poll_interval=0, poll_interval=5))
    assert config.command_poll_interval == 0
    assert config.poll_interval == 5


def test_direct_construction_is_validated() -> None:
    with pytest.raises(FordPassConfigError, match="poll_interval"):
        FordPassConfig(username="u", password="p", poll_interval=-1.0)


def test_from_mapping_rejects_non_list_vehicles() -> None:
    with pytest.raises(FordPassConfigError):
        FordPassConfig.from_mapping(_mapping(vehicles="1FTFW1E50MFA00001"))


def test_malformed_vehicle_entries_are_skipped(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger="pyfordpass.config")

    vehicles = parse_vehicles(
        [
            {"name": "Truck", "vin": "1FTFW1E50MFA00001"},
            {"name": "No VIN"},
            {"name": "Bad VIN", "vin": "1FT-FW1"},
            {"name": "", "vin": "1FMCU9GD5KUA00002"},
            {"name": "SUV", "vin": " 1fmcu9gd5kua00002 "},
        ]
    )

    assert [v.name for v in vehicles] == ["Truck", "SUV"]
    assert vehicles[1].vin == "1FMCU9GD5KUA00002"
    assert len([r for r in caplog.records if r.levelno == logging.ERROR]) == 3


def test_vehicle_entry_normalizes_vin_case() -> None:
    assert VehicleConfigEntry(name="Truck", vin="abc123").vin == "ABC123"


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FORDPASS_USERNAME", "env@example.com")
    monkeypatch.setenv("FORDPASS_PASSWORD", "env-secret")
    monkeypatch.setenv("FORDPASS_VEHICLES", "Truck:1ftfw1e50mfa00001, 1FMCU9GD5KUA00002")
    monkeypatch.setenv("FORDPASS_POLL_INTERVAL", "30")

    config = FordPassConfig.from_env()

    assert config.username == "env@example.com"
    assert config.password == "env-secret"
    assert [(v.name, v.vin) for v in config.vehicles] == [
        ("Truck", "1FTFW1E50MFA00001"),
        ("1FMCU9GD5KUA00002", "1FMCU9GD5KUA00002"),
    ]
    assert config.poll_interval == 30.0


def test_from_env_overrides_take_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FORDPASS_USERNAME", "env@example.com")
    monkeypatch.setenv("FORDPASS_PASSWORD", "env-secret")
    monkeypatch.setenv("FORDPASS_VEHICLES", "Truck:1FTFW1E50MFA00001")

    config = FordPassConfig.from_env(password="override")
    assert config.password == "override"


def test_from_env_rejects_invalid_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FORDPASS_USERNAME", "env@example.com")
    monkeypatch.setenv("FORDPASS_PASSWORD", "env-secret")
    monkeypatch.setenv("FORDPASS_VEHICLES", "Truck:1FTFW1E50MFA00001")
    monkeypatch.setenv("FORDPASS_COMMAND_POLL_ATTEMPTS", "many")

    with pytest.raises(FordPassConfigError):
        FordPassConfig.from_env()


def test_from_env_without_credentials_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("FORDPASS_USERNAME", "FORDPASS_PASSWORD", "FORDPASS_VEHICLES"):
        monkeypatch.delenv(name, raising=False)

    with pytest.raises(FordPassConfigError):
        FordPassConfig.from_env()
