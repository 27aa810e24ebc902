from __future__ import annotations

from pyfordpass._redact import redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "status": 200,
        "access_token": "TOKEN",
        "refresh_token": "REFRESH",
        "password": "pw",
        "headers": {"auth-token": "TOKEN", "Application-Id": "APP"},
        "vehiclestatus": {"lockStatus": {"value": "LOCKED"}},
    }

    redacted = redact_for_log(payload)
    assert redacted["access_token"] == "<redacted>"
    assert redacted["refresh_token"] == "<redacted>"
    assert redacted["password"] == "<redacted>"
    assert redacted["headers"]["auth-token"] == "<redacted>"
    assert redacted["headers"]["Application-Id"] == "APP"
    assert redacted["vehiclestatus"] == {"lockStatus": {"value": "LOCKED"}}
    assert payload["password"] == "pw"


def test_redact_for_log_matches_keys_case_insensitively() -> None:
    redacted = redact_for_log({"Username": "user@example.com", "Authorization": "Bearer x"})
    assert redacted == {"Username": "<redacted>", "Authorization": "<redacted>"}


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_handles_sequences_and_bytes() -> None:
    redacted = redact_for_log([{"token": "t"}, b"\x00\x01"])
    assert redacted == [{"token": "<redacted>"}, "<bytes:2b>"]
