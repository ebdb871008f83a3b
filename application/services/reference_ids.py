"""
Reference/correlation id handling.

Caller supplied ids are validated; missing ids are generated. Generation never
fails and always yields an id that would itself pass validation.
"""
from __future__ import annotations

import secrets
import uuid
from dataclasses import dataclass
from typing import Optional

from core.logging_config import get_logger
from core.settings import ReferenceIdSettings, normalization_settings
from domain.common.exceptions import InvalidDataFormatException


logger = get_logger(__name__)

IRRELEVANT_CONNECTOR_REQUEST_REFERENCE_ID_IN_DISPUTE_FLOW = "irrelevant_connector_request_reference_id_in_dispute_flow"
IRRELEVANT_PAYMENT_ID_IN_DISPUTE_FLOW = "irrelevant_payment_id_in_dispute_flow"
IRRELEVANT_ATTEMPT_ID_IN_DISPUTE_FLOW = "irrelevant_attempt_id_in_dispute_flow"


@dataclass(frozen=True)
class DisputeCorrelation:
    """Correlation values used by dispute flows, which are not tied to one attempt."""

    payment_id: str = IRRELEVANT_PAYMENT_ID_IN_DISPUTE_FLOW
    attempt_id: str = IRRELEVANT_ATTEMPT_ID_IN_DISPUTE_FLOW
    connector_request_reference_id: str = IRRELEVANT_CONNECTOR_REQUEST_REFERENCE_ID_IN_DISPUTE_FLOW


def choose_correlation_id(use_payment_id: bool, payment_id: str, attempt_id: str) -> str:
    return payment_id if use_payment_id else attempt_id


class ReferenceIdService:
    def __init__(
        self,
        settings: Optional[ReferenceIdSettings] = None,
        merchant_ids_send_payment_id: Optional[set[str]] = None,
    ) -> None:
        self.settings = settings or normalization_settings.reference_ids
        if merchant_ids_send_payment_id is None:
            merchant_ids_send_payment_id = (
                normalization_settings.connector_request_reference.merchant_ids_send_payment_id
            )
        self.merchant_ids_send_payment_id = frozenset(merchant_ids_send_payment_id)

    @property
    def max_length(self) -> int:
        return self.settings.max_length

    def _length_error(self, field: str) -> InvalidDataFormatException:
        return InvalidDataFormatException(
            field, f"length should be less than {self.max_length} characters"
        )

    def validate_id(self, value: str, field: str) -> str:
        if len(value) > self.max_length:
            logger.info("reference_id_rejected", field=field, reason="length", length=len(value))
            raise self._length_error(field)
        return value

    def validate_uuid(self, value: str, field: str) -> str:
        error = InvalidDataFormatException(
            field, f"valid UUID of length less than {self.max_length} characters"
        )
        try:
            uuid.UUID(value)
        except ValueError:
            logger.info("reference_id_rejected", field=field, reason="uuid", length=len(value))
            raise error from None
        if len(value) > self.max_length:
            logger.info("reference_id_rejected", field=field, reason="length", length=len(value))
            raise error
        return value

    def generate_id(self, prefix: str, length: Optional[int] = None) -> str:
        length = self.settings.id_length if length is None else length
        alphabet = self.settings.alphabet
        suffix = "".join(secrets.choice(alphabet) for _ in range(length))
        return f"{prefix}{suffix}"

    def get_or_generate(
        self,
        existing: Optional[str],
        prefix: str = "",
        fixed_length: Optional[int] = None,
        require_uuid: bool = False,
        field: str = "id",
    ) -> str:
        """Validate `existing` when given, otherwise generate a fresh id.

        Generated ids are `prefix + suffix` with a suffix of exactly
        `fixed_length` characters (settings default), or a UUID4 string when
        `require_uuid` is set.
        """
        if existing is not None:
            if require_uuid:
                return self.validate_uuid(existing, field)
            return self.validate_id(existing, field)
        if require_uuid:
            return str(uuid.uuid4())
        generated = self.generate_id(prefix, fixed_length)
        logger.debug("reference_id_generated", field=field, prefix=prefix)
        return generated

    def get_or_generate_payment_id(self, existing: Optional[str] = None) -> str:
        return self.get_or_generate(existing, prefix=self.settings.payment_prefix, field="payment_id")

    def get_or_generate_refund_id(self, existing: Optional[str] = None) -> str:
        return self.get_or_generate(existing, prefix=self.settings.refund_prefix, field="refund_id")

    def generate_dispute_id(self) -> str:
        return self.generate_id(self.settings.dispute_prefix)

    def send_payment_id_for(self, merchant_id: str) -> bool:
        return merchant_id in self.merchant_ids_send_payment_id

    def connector_request_reference_id(self, merchant_id: str, payment_id: str, attempt_id: str) -> str:
        """Id sent to the gateway: payment id for opted-in merchants, else attempt id."""
        return choose_correlation_id(self.send_payment_id_for(merchant_id), payment_id, attempt_id)

    def dispute_flow_correlation(self) -> DisputeCorrelation:
        return DisputeCorrelation()
