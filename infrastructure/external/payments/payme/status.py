"""
PayMe sale status -> canonical status mapping.

The attempt mapping is total: the module refuses to import if any SaleStatus
has no attempt status, so a new gateway status cannot slip through unmapped.
The refund mapping is partial and raises for non-terminal refund states.
"""
from __future__ import annotations

from enum import Enum

from domain.payment.entity import AttemptStatus, IncomingWebhookEvent, RefundStatus
from domain.payment.exceptions import ResponseHandlingFailed
from infrastructure.external.payments.payme.responses import NotifyType, SaleStatus
from shared.codes.payment_codes import (
    PAYME_NOTIFY_TYPE_TO_EVENT,
    PAYME_SALE_STATUS_TO_ATTEMPT,
    PAYME_SALE_STATUS_TO_REFUND,
)


CONNECTOR = "payme"


def _build_total(table: dict[str, str], source: type[Enum], target: type[Enum]) -> dict:
    missing = sorted(m.value for m in source if m.value not in table)
    if missing:
        raise RuntimeError(f"{source.__name__} values without a {target.__name__} mapping: {missing}")
    return {source(k): target(v) for k, v in table.items()}


_ATTEMPT_STATUS: dict[SaleStatus, AttemptStatus] = _build_total(
    PAYME_SALE_STATUS_TO_ATTEMPT, SaleStatus, AttemptStatus
)
_WEBHOOK_EVENT: dict[NotifyType, IncomingWebhookEvent] = _build_total(
    PAYME_NOTIFY_TYPE_TO_EVENT, NotifyType, IncomingWebhookEvent
)
_REFUND_STATUS: dict[SaleStatus, RefundStatus] = {
    SaleStatus(k): RefundStatus(v) for k, v in PAYME_SALE_STATUS_TO_REFUND.items()
}


def to_attempt_status(raw: SaleStatus) -> AttemptStatus:
    return _ATTEMPT_STATUS[SaleStatus(raw)]


def to_refund_status(raw: SaleStatus) -> RefundStatus:
    raw = SaleStatus(raw)
    try:
        return _REFUND_STATUS[raw]
    except KeyError:
        raise ResponseHandlingFailed(
            f"Sale status {raw.value!r} is not a refund outcome",
            connector=CONNECTOR,
            details={"sale_status": raw.value},
        ) from None


def to_webhook_event(notify_type: NotifyType) -> IncomingWebhookEvent:
    return _WEBHOOK_EVENT[NotifyType(notify_type)]


def _sale_status(raw_status: str) -> SaleStatus:
    try:
        return SaleStatus(raw_status)
    except ValueError:
        raise ResponseHandlingFailed(
            f"Unknown sale status {raw_status!r}",
            connector=CONNECTOR,
            details={"sale_status": raw_status},
        ) from None


class PaymeStatusMapper:
    """StatusMapper over the raw strings carried in a RawEnvelope."""

    connector: str = CONNECTOR

    def to_attempt_status(self, raw_status: str) -> AttemptStatus:
        return to_attempt_status(_sale_status(raw_status))

    def to_refund_status(self, raw_status: str) -> RefundStatus:
        return to_refund_status(_sale_status(raw_status))
