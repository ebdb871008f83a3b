import uuid

import pytest

from application.services.reference_ids import ReferenceIdService, choose_correlation_id
from core.settings import ReferenceIdSettings
from domain.common.exceptions import InvalidDataFormatException


@pytest.fixture
def ids():
    return ReferenceIdService(settings=ReferenceIdSettings(), merchant_ids_send_payment_id={"merchant_1"})


def test_overlong_id_is_rejected(ids):
    with pytest.raises(InvalidDataFormatException) as exc_info:
        ids.get_or_generate("a" * 65, field="payment_id")
    assert exc_info.value.field_name == "payment_id"
    assert exc_info.value.expected_format == "length should be less than 64 characters"


def test_valid_id_is_returned_unchanged(ids):
    assert ids.get_or_generate("a" * 64) == "a" * 64
    assert ids.get_or_generate("order-42", prefix="pay_") == "order-42"


def test_generated_id_length(ids):
    generated = ids.get_or_generate(None, prefix="ref_", fixed_length=20)
    assert generated.startswith("ref_")
    assert len(generated) == len("ref_") + 20
    assert ids.validate_id(generated, "refund_id") == generated


def test_generated_ids_use_default_length_and_alphabet(ids):
    generated = ids.generate_id("pay_")
    suffix = generated[len("pay_"):]
    assert len(suffix) == 20
    assert set(suffix) <= set(ids.settings.alphabet)


def test_uuid_validation(ids):
    value = str(uuid.uuid4())
    assert ids.get_or_generate(value, require_uuid=True) == value
    with pytest.raises(InvalidDataFormatException, match="valid UUID"):
        ids.get_or_generate("not-a-uuid", require_uuid=True)


def test_uuid_generation(ids):
    generated = ids.get_or_generate(None, require_uuid=True)
    assert uuid.UUID(generated).version == 4


def test_choose_correlation_id():
    assert choose_correlation_id(True, "pay_1", "pay_1_1") == "pay_1"
    assert choose_correlation_id(False, "pay_1", "pay_1_1") == "pay_1_1"


def test_connector_request_reference_per_merchant(ids):
    assert ids.connector_request_reference_id("merchant_1", "pay_1", "pay_1_1") == "pay_1"
    assert ids.connector_request_reference_id("merchant_2", "pay_1", "pay_1_1") == "pay_1_1"


def test_settings_refuse_ids_that_cannot_validate():
    with pytest.raises(ValueError):
        ReferenceIdSettings(max_length=10, id_length=20)


def test_prefixed_id_helpers(ids):
    payment_id = ids.get_or_generate_payment_id()
    refund_id = ids.get_or_generate_refund_id()
    dispute_id = ids.generate_dispute_id()
    assert payment_id.startswith("pay_") and len(payment_id) == len("pay_") + 20
    assert refund_id.startswith("ref_") and len(refund_id) == len("ref_") + 20
    assert dispute_id.startswith("dp_") and len(dispute_id) == len("dp_") + 20


def test_prefixed_id_helpers_validate_supplied_ids(ids):
    assert ids.get_or_generate_refund_id("merchant-refund-1") == "merchant-refund-1"
    with pytest.raises(InvalidDataFormatException) as exc_info:
        ids.get_or_generate_refund_id("r" * 65)
    assert exc_info.value.field_name == "refund_id"


def test_prefixes_come_from_settings():
    custom = ReferenceIdService(settings=ReferenceIdSettings(refund_prefix="rf-", id_length=8))
    generated = custom.get_or_generate_refund_id()
    assert generated.startswith("rf-")
    assert len(generated) == 11


def test_dispute_flow_correlation(ids):
    correlation = ids.dispute_flow_correlation()
    assert correlation.payment_id == "irrelevant_payment_id_in_dispute_flow"
    assert correlation.attempt_id == "irrelevant_attempt_id_in_dispute_flow"
    assert correlation.connector_request_reference_id == (
        "irrelevant_connector_request_reference_id_in_dispute_flow"
    )


def test_invalid_data_format_to_dict(ids):
    with pytest.raises(InvalidDataFormatException) as exc_info:
        ids.validate_id("x" * 65, "payment_id")
    body = exc_info.value.to_dict()
    assert body["code"] == 10004
    assert body["error_type"] == "InvalidDataFormat"
    assert body["field"] == "payment_id"
    assert body["details"]["expected_format"] == "length should be less than 64 characters"
