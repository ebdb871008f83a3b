import pytest

from domain.payment.exceptions import (
    ConnectorNotImplemented,
    FailedToObtainAuthType,
    MissingCorrelationId,
)
from infrastructure.external.payments.payme.flows import (
    BodyKey,
    HeaderKey,
    PaymeAuthType,
    PaymentMethod,
    SalePaymentMethod,
    SaleType,
    require_refund_id,
    require_related_transaction_id,
)
from shared.codes.payment_codes import PaymentCode


def test_body_key_auth():
    auth = PaymeAuthType.from_auth(BodyKey(api_key="seller", key1="client"))
    assert auth.seller_payme_id.get_secret_value() == "seller"
    assert auth.payme_client_key.get_secret_value() == "client"


def test_other_auth_types_are_refused():
    with pytest.raises(FailedToObtainAuthType) as exc_info:
        PaymeAuthType.from_auth(HeaderKey(api_key="k"))
    assert exc_info.value.details["auth_type"] == "header_key"


@pytest.mark.parametrize(
    "setup_mandate, auto_capture, expected",
    [
        (True, True, SaleType.TOKEN),
        (True, False, SaleType.TOKEN),
        (False, True, SaleType.SALE),
        (False, False, SaleType.AUTHORIZE),
    ],
)
def test_sale_type_for_flow(setup_mandate, auto_capture, expected):
    assert SaleType.for_flow(setup_mandate=setup_mandate, auto_capture=auto_capture) is expected


def test_only_cards_are_supported():
    assert SalePaymentMethod.for_method(PaymentMethod.CARD) is SalePaymentMethod.CREDIT_CARD
    with pytest.raises(ConnectorNotImplemented) as exc_info:
        SalePaymentMethod.for_method(PaymentMethod.WALLET)
    assert exc_info.value.message == "Payment methods is not implemented"


def test_missing_refund_id():
    assert require_refund_id("TRX-1") == "TRX-1"
    with pytest.raises(MissingCorrelationId) as exc_info:
        require_refund_id(None)
    assert exc_info.value.code == PaymentCode.MISSING_CONNECTOR_REFUND_ID
    assert exc_info.value.field == "connector_refund_id"


def test_missing_related_transaction_id():
    assert require_related_transaction_id("SALE-1") == "SALE-1"
    with pytest.raises(MissingCorrelationId) as exc_info:
        require_related_transaction_id("")
    assert exc_info.value.code == PaymentCode.MISSING_RELATED_TRANSACTION_ID
    assert exc_info.value.field == "payme_sale_id"
