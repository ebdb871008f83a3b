"""
Canonical record builder.

Merges one resolved RawEnvelope into the previous CanonicalRecord. Only
fields present in the envelope are overridden; everything else is carried
forward. The caller must serialize merges per record (one writer per
payment id); different records can be merged in parallel.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import TypeAdapter
from pydantic_core import PydanticSerializationError

from application.dtos.payments import RawEnvelope
from application.ports.metrics import MetricsSink
from application.ports.status_mapper import StatusMapper
from core.logging_config import get_logger
from domain.dispute.entity import DisputeStage, DisputeStatus
from domain.dispute.transitions import validate_dispute_transition
from domain.payment.entity import (
    CanonicalRecord,
    CanonicalStatus,
    DeliveryPath,
    EntityKind,
    ErrorPayload,
    MandateReference,
    RecordPatch,
    SuccessPayload,
)
from domain.payment.exceptions import DisputeWebhookValidationFailed, ResponseHandlingFailed


logger = get_logger(__name__)

_METADATA = TypeAdapter(dict[str, str])


class CanonicalRecordBuilder:
    def __init__(self, status_mapper: StatusMapper, metrics: MetricsSink) -> None:
        self.status_mapper = status_mapper
        self.metrics = metrics

    def merge(self, previous: CanonicalRecord, envelope: RawEnvelope) -> CanonicalRecord:
        """Return the record after applying `envelope`.

        Raises (and leaves `previous` as is) when the envelope belongs to a
        different entity kind, the raw status cannot be mapped, metadata
        cannot be serialized, or a dispute transition is not allowed.
        """
        if envelope.kind is not previous.kind:
            raise ResponseHandlingFailed(
                "Envelope kind does not match record",
                connector=previous.connector,
                details={"record_kind": previous.kind.value, "envelope_kind": envelope.kind.value},
            )
        if envelope.kind is EntityKind.DISPUTE:
            return self._merge_dispute(previous, envelope)

        patch = RecordPatch(
            status=self._canonical_status(envelope),
            resource_id=envelope.resource_id,
            related_transaction_id=envelope.related_transaction_id,
            mandate_reference=self._mandate_reference(previous, envelope),
            connector_metadata=self._connector_metadata(previous, envelope),
            result=SuccessPayload(
                resource_id=envelope.resource_id,
                delivery_path=envelope.path,
                connector_status=envelope.raw_status,
            ),
        )
        record = patch.apply(previous)
        logger.info(
            "record_merged",
            connector=previous.connector,
            payment_id=previous.payment_id,
            kind=previous.kind.value,
            path=envelope.path.value,
            prev_status=_value(previous.status),
            status=_value(record.status),
        )
        return record

    def merge_error(self, previous: CanonicalRecord, error: ErrorPayload) -> CanonicalRecord:
        """Attach a gateway error; status and identifiers are left untouched."""
        logger.info(
            "record_error_attached",
            connector=previous.connector,
            payment_id=previous.payment_id,
            code=error.code,
        )
        return RecordPatch(result=error).apply(previous)

    def _canonical_status(self, envelope: RawEnvelope) -> CanonicalStatus:
        if envelope.kind is EntityKind.REFUND:
            return self.status_mapper.to_refund_status(envelope.raw_status)
        return self.status_mapper.to_attempt_status(envelope.raw_status)

    def _mandate_reference(self, previous: CanonicalRecord, envelope: RawEnvelope) -> Optional[MandateReference]:
        # Tokens are only propagated from webhook pushes. Other paths keep
        # whatever the record already holds.
        if envelope.path is not DeliveryPath.WEBHOOK_PUSH:
            if envelope.path is DeliveryPath.LIST_QUERY and previous.mandate_reference is not None:
                logger.debug("mandate_reference_retained", connector=previous.connector, payment_id=previous.payment_id)
            return None
        if envelope.token is None:
            return None
        return MandateReference(connector_mandate_id=envelope.token, payment_method_id=None)

    def _connector_metadata(self, previous: CanonicalRecord, envelope: RawEnvelope) -> Optional[dict[str, Any]]:
        if envelope.secondary_id is None:
            return None
        try:
            return _METADATA.dump_python({envelope.secondary_id_field: envelope.secondary_id}, mode="json")
        except PydanticSerializationError as exc:
            raise ResponseHandlingFailed(
                "Failed to serialize connector metadata",
                connector=previous.connector,
                details={"field": envelope.secondary_id_field},
            ) from exc

    def _merge_dispute(self, previous: CanonicalRecord, envelope: RawEnvelope) -> CanonicalRecord:
        prev_stage = previous.dispute_stage or DisputeStage.PRE_DISPUTE
        prev_status = previous.dispute_status or DisputeStatus.OPENED
        try:
            validate_dispute_transition(
                prev_stage,
                prev_status,
                envelope.dispute_stage,
                envelope.dispute_status,
                metrics=self.metrics,
                connector=previous.connector,
            )
        except DisputeWebhookValidationFailed:
            logger.warning(
                "dispute_transition_rejected",
                connector=previous.connector,
                payment_id=previous.payment_id,
                prev_stage=prev_stage.value,
                prev_status=prev_status.value,
                stage=envelope.dispute_stage.value,
                status=envelope.dispute_status.value,
            )
            raise

        patch = RecordPatch(
            dispute_stage=envelope.dispute_stage,
            dispute_status=envelope.dispute_status,
            resource_id=envelope.resource_id,
            result=SuccessPayload(
                resource_id=envelope.resource_id,
                delivery_path=envelope.path,
                connector_status=envelope.raw_status,
            ),
        )
        record = patch.apply(previous)
        logger.info(
            "dispute_merged",
            connector=previous.connector,
            payment_id=previous.payment_id,
            stage=record.dispute_stage.value,
            status=record.dispute_status.value,
        )
        return record


def _value(status: Optional[CanonicalStatus]) -> Optional[str]:
    return status.value if status is not None else None
