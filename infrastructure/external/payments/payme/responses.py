"""
PayMe wire shapes (Pydantic v2).

Each model is one candidate shape an inbound payload may take. Unknown fields
are ignored, so shapes are told apart purely by which required fields are
present; see `resolver.py` for the ordering and disjointness rules.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, SecretStr

from domain.dispute.entity import DisputeStage, DisputeStatus


class SaleStatus(str, Enum):
    INITIAL = "initial"
    COMPLETED = "completed"
    REFUNDED = "refunded"
    PARTIAL_REFUND = "partial-refund"
    AUTHORIZED = "authorized"
    VOIDED = "voided"
    PARTIAL_VOID = "partial-void"
    FAILED = "failed"
    CHARGEBACK = "chargeback"


class NotifyType(str, Enum):
    SALE_COMPLETE = "sale-complete"
    SALE_AUTHORIZED = "sale-authorized"
    REFUND = "refund"
    SALE_FAILURE = "sale-failure"
    SALE_CHARGEBACK = "sale-chargeback"
    SALE_CHARGEBACK_REFUND = "sale-chargeback-refund"


class PaymeModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class PaySaleResponse(PaymeModel):
    """Pay-sale result; also the shape webhook pushes are projected into."""

    sale_status: SaleStatus
    payme_sale_id: str
    payme_transaction_id: str
    buyer_key: Optional[SecretStr] = None


class SaleQuery(PaymeModel):
    sale_status: SaleStatus
    sale_payme_id: str


class SaleQueryResponse(PaymeModel):
    """get-sales reply. One sale id is queried, so one item is expected."""

    items: list[SaleQuery]


class GenerateSaleResponse(PaymeModel):
    payme_sale_id: str


class RefundResponse(PaymeModel):
    sale_status: SaleStatus
    payme_transaction_id: str


class TransactionQuery(PaymeModel):
    sale_status: SaleStatus
    payme_transaction_id: str


class QueryTransactionResponse(PaymeModel):
    items: list[TransactionQuery]


class WebhookEventDataResource(PaymeModel):
    sale_status: SaleStatus
    payme_signature: SecretStr
    buyer_key: Optional[SecretStr] = None
    notify_type: NotifyType
    payme_sale_id: str
    payme_transaction_id: str

    def to_pay_sale_response(self) -> PaySaleResponse:
        return PaySaleResponse(
            sale_status=self.sale_status,
            payme_sale_id=self.payme_sale_id,
            payme_transaction_id=self.payme_transaction_id,
            buyer_key=self.buyer_key,
        )

    def to_query_transaction_response(self) -> QueryTransactionResponse:
        item = TransactionQuery(
            sale_status=self.sale_status,
            payme_transaction_id=self.payme_transaction_id,
        )
        return QueryTransactionResponse(items=[item])


class WebhookEventDataResourceEvent(PaymeModel):
    notify_type: NotifyType


class WebhookEventDataResourceSignature(PaymeModel):
    payme_signature: SecretStr


class DisputeNotification(PaymeModel):
    dispute_stage: DisputeStage
    dispute_status: DisputeStatus
    connector_dispute_id: str
    connector_status: Optional[str] = None


class PaymeErrorResponse(PaymeModel):
    status_code: int
    code: str
    message: str
    reason: Optional[str] = None
