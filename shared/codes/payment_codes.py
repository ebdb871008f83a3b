"""
Payment specific codes and gateway status vocabularies.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # Connector errors (6xxxx)
    RESPONSE_HANDLING_FAILED = 60010
    NOT_IMPLEMENTED = 60011
    MISSING_CONNECTOR_REFUND_ID = 60012
    MISSING_RELATED_TRANSACTION_ID = 60013
    FAILED_TO_OBTAIN_AUTH_TYPE = 60014

    # Webhook flow errors (61xxx)
    DISPUTE_WEBHOOK_VALIDATION_FAILED = 61001


# Gateway sale_status -> internal attempt status. Every PayMe sale status must
# have an entry; infrastructure.external.payments.payme.status checks this at import.
PAYME_SALE_STATUS_TO_ATTEMPT = {
    "initial": "authorizing",
    "completed": "charged",
    "refunded": "auto_refunded",
    "partial-refund": "auto_refunded",
    "authorized": "authorized",
    "voided": "voided",
    "partial-void": "voided",
    "failed": "failure",
    # Chargebacks share the refund bucket.
    "chargeback": "auto_refunded",
}

# Partial: sale statuses absent here are not terminal refund states.
PAYME_SALE_STATUS_TO_REFUND = {
    "refunded": "success",
    "partial-refund": "success",
    "failed": "failure",
}

PAYME_NOTIFY_TYPE_TO_EVENT = {
    "sale-complete": "payment_intent_success",
    "refund": "refund_success",
    "sale-failure": "payment_intent_failure",
    "sale-authorized": "event_not_supported",
    "sale-chargeback": "event_not_supported",
    "sale-chargeback-refund": "event_not_supported",
}
