from __future__ import annotations

from pylazarillo._redact import mask_phone, redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "address": "Plaza Urquiza, San Miguel de Tucumán",
        "key": "maps-secret",
        "Authorization": "Basic abc",
        "nested": {"auth_token": "tok", "status": "OK"},
    }

    redacted = redact_for_log(payload)
    assert redacted["address"] == "Plaza Urquiza, San Miguel de Tucumán"
    assert redacted["key"] == "<redacted>"
    assert redacted["Authorization"] == "<redacted>"
    assert redacted["nested"] == {"auth_token": "<redacted>", "status": "OK"}


def test_redact_for_log_masks_phone_numbers() -> None:
    redacted = redact_for_log({"To": "+5493811234567", "From": "+15550001111", "Body": "ayuda"})

    assert redacted["To"] == "**********567"
    assert redacted["From"] == "********111"
    assert redacted["Body"] == "ayuda"


def test_mask_phone_short_values() -> None:
    assert mask_phone("12") == "**"
    assert mask_phone("+54 381 555-1234", visible=4) == "********1234"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]
