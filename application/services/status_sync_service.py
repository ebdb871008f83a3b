"""
Application service applying inbound gateway payloads to canonical records.

Depends only on the ResponseResolver port and the record builder. Concrete
connector resolvers/mappers are injected from the composition root (see
`infrastructure.external.payments.get_status_sync_service`).

Every method returns a SyncOutcome: on failure the previous record comes
back unchanged together with the error, so callers branch on `outcome.ok`
rather than catching exceptions.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from structlog.contextvars import bound_contextvars

from application.dtos.payments import RawEnvelope
from application.ports.response_resolver import Payload, ResponseResolver
from application.services.record_builder import CanonicalRecordBuilder
from core.logging_config import get_logger
from domain.common.exceptions import BusinessException
from domain.payment.entity import CanonicalRecord, EntityKind, IncomingWebhookEvent
from domain.payment.exceptions import DisputeWebhookValidationFailed


logger = get_logger(__name__)


@dataclass(frozen=True)
class SyncOutcome:
    record: CanonicalRecord
    error: Optional[BusinessException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def acknowledged(self) -> bool:
        """Whether the inbound event should be acked to the gateway.

        Rejected dispute transitions are acked and discarded: a retry would be
        rejected the same way.
        """
        return self.ok or isinstance(self.error, DisputeWebhookValidationFailed)


class StatusSyncService:
    def __init__(self, resolver: ResponseResolver, builder: CanonicalRecordBuilder) -> None:
        self.resolver = resolver
        self.builder = builder

    def sync_payment(self, previous: CanonicalRecord, payload: Payload) -> SyncOutcome:
        """Apply a payment sync reply (pay-sale result or sale query)."""
        return self._apply(previous, "payment_sync", lambda: self.resolver.resolve(payload, EntityKind.ATTEMPT))

    def sync_refund(self, previous: CanonicalRecord, payload: Payload) -> SyncOutcome:
        return self._apply(previous, "refund_sync", lambda: self.resolver.resolve(payload, EntityKind.REFUND))

    def sync_init(self, previous: CanonicalRecord, payload: Payload) -> SyncOutcome:
        return self._apply(previous, "payment_init", lambda: self.resolver.resolve_init(payload))

    def handle_webhook(self, previous: CanonicalRecord, payload: Payload) -> SyncOutcome:
        """Apply a webhook push. The entity kind comes from the stored record.

        Attempt and refund pushes are classified by notify type first; event
        types the connector does not support are acknowledged and leave the
        record as it was. Retries and duplicates go through exactly the same
        path; for disputes the transition check is what makes redelivery
        harmless.
        """
        if previous.kind is not EntityKind.DISPUTE:
            with bound_contextvars(payment_id=previous.payment_id, connector=previous.connector):
                try:
                    event = self.resolver.classify_webhook(payload)
                except BusinessException as exc:
                    return self._failed(previous, "webhook", exc)
                if event is IncomingWebhookEvent.EVENT_NOT_SUPPORTED:
                    logger.info("webhook_event_not_supported", kind=previous.kind.value)
                    return SyncOutcome(record=previous)
        return self._apply(previous, "webhook", lambda: self.resolver.resolve_webhook(payload, previous.kind))

    def handle_dispute(self, previous: CanonicalRecord, payload: Payload) -> SyncOutcome:
        return self._apply(previous, "dispute_webhook", lambda: self.resolver.resolve(payload, EntityKind.DISPUTE))

    def record_gateway_error(self, previous: CanonicalRecord, payload: Payload) -> SyncOutcome:
        with bound_contextvars(payment_id=previous.payment_id, connector=previous.connector):
            try:
                error = self.resolver.resolve_error(payload)
            except BusinessException as exc:
                return self._failed(previous, "gateway_error", exc)
            return SyncOutcome(record=self.builder.merge_error(previous, error))

    def _apply(self, previous: CanonicalRecord, flow: str, resolve: Callable[[], RawEnvelope]) -> SyncOutcome:
        with bound_contextvars(payment_id=previous.payment_id, connector=previous.connector):
            try:
                envelope = resolve()
                record = self.builder.merge(previous, envelope)
            except BusinessException as exc:
                return self._failed(previous, flow, exc)
            logger.info("status_sync_applied", flow=flow, kind=previous.kind.value, path=envelope.path.value)
            return SyncOutcome(record=record)

    @staticmethod
    def _failed(previous: CanonicalRecord, flow: str, exc: BusinessException) -> SyncOutcome:
        logger.warning(
            "status_sync_failed",
            flow=flow,
            kind=previous.kind.value,
            **exc.to_dict(),
        )
        return SyncOutcome(record=previous, error=exc)
