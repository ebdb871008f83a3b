"""
Pre-call checks for PayMe flows.

These run before any gateway call: credential shape, which sale type a flow
maps to, supported payment methods, and correlation ids the request needs.
"""
from __future__ import annotations

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, SecretStr

from domain.payment.exceptions import (
    ConnectorNotImplemented,
    FailedToObtainAuthType,
    MissingCorrelationId,
)


CONNECTOR = "payme"


class HeaderKey(BaseModel):
    auth_type: Literal["header_key"] = "header_key"
    api_key: SecretStr


class BodyKey(BaseModel):
    auth_type: Literal["body_key"] = "body_key"
    api_key: SecretStr
    key1: SecretStr


class SignatureKey(BaseModel):
    auth_type: Literal["signature_key"] = "signature_key"
    api_key: SecretStr
    key1: SecretStr
    api_secret: SecretStr


ConnectorAuthType = Union[HeaderKey, BodyKey, SignatureKey]


class PaymeAuthType(BaseModel):
    seller_payme_id: SecretStr
    payme_client_key: SecretStr

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_auth(cls, auth: ConnectorAuthType) -> "PaymeAuthType":
        if isinstance(auth, BodyKey):
            return cls(seller_payme_id=auth.api_key, payme_client_key=auth.key1)
        raise FailedToObtainAuthType(connector=CONNECTOR, auth_type=getattr(auth, "auth_type", type(auth).__name__))


class SaleType(str, Enum):
    SALE = "sale"
    AUTHORIZE = "authorize"
    TOKEN = "token"

    @classmethod
    def for_flow(cls, *, setup_mandate: bool, auto_capture: bool) -> "SaleType":
        # First mandate payment tokenizes the card.
        if setup_mandate:
            return cls.TOKEN
        return cls.SALE if auto_capture else cls.AUTHORIZE


class PaymentMethod(str, Enum):
    CARD = "card"
    CARD_REDIRECT = "card_redirect"
    WALLET = "wallet"
    PAY_LATER = "pay_later"
    BANK_REDIRECT = "bank_redirect"
    BANK_DEBIT = "bank_debit"
    BANK_TRANSFER = "bank_transfer"
    CRYPTO = "crypto"
    MANDATE_PAYMENT = "mandate_payment"
    REWARD = "reward"
    GIFT_CARD = "gift_card"
    UPI = "upi"
    VOUCHER = "voucher"


class SalePaymentMethod(str, Enum):
    CREDIT_CARD = "credit-card"

    @classmethod
    def for_method(cls, method: PaymentMethod) -> "SalePaymentMethod":
        if PaymentMethod(method) is PaymentMethod.CARD:
            return cls.CREDIT_CARD
        raise ConnectorNotImplemented("Payment methods", connector=CONNECTOR)


def require_refund_id(connector_refund_id: Optional[str]) -> str:
    if not connector_refund_id:
        raise MissingCorrelationId.refund_id(connector=CONNECTOR)
    return connector_refund_id


def require_related_transaction_id(related_transaction_id: Optional[str], id_name: str = "payme_sale_id") -> str:
    if not related_transaction_id:
        raise MissingCorrelationId.related_transaction_id(id_name, connector=CONNECTOR)
    return related_transaction_id
