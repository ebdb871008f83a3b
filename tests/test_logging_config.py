from core.logging_config import MASK, redact_sensitive


def test_sensitive_fields_are_masked():
    event = {"event": "record_merged", "token": "BUYER-1", "payme_signature": "SIG==", "payment_id": "pay_1"}
    out = redact_sensitive(None, "info", event)
    assert out["token"] == MASK
    assert out["payme_signature"] == MASK
    assert out["payment_id"] == "pay_1"


def test_absent_values_stay_absent():
    out = redact_sensitive(None, "info", {"event": "x", "token": None})
    assert out["token"] is None
