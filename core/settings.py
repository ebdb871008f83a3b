"""
Status-normalization settings using pydantic-settings v2 with nested env keys.

Example: REFERENCE_IDS__MAX_LENGTH=64,
CONNECTOR_REQUEST_REFERENCE__MERCHANT_IDS_SEND_PAYMENT_ID='["merchant_1"]'.
"""
from __future__ import annotations

import string

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, model_validator


class ReferenceIdSettings(BaseModel):
    max_length: int = 64
    id_length: int = 20
    alphabet: str = string.ascii_letters + string.digits
    payment_prefix: str = "pay_"
    refund_prefix: str = "ref_"
    dispute_prefix: str = "dp_"

    @model_validator(mode="after")
    def _check_generated_fits(self):
        # Generated ids must themselves pass validation.
        longest_prefix = max(len(self.payment_prefix), len(self.refund_prefix), len(self.dispute_prefix))
        if longest_prefix + self.id_length > self.max_length:
            raise ValueError("prefix + id_length exceeds max_length")
        if not self.alphabet:
            raise ValueError("alphabet must not be empty")
        return self


class ConnectorRequestReferenceSettings(BaseModel):
    # Merchants for which the payment id (not the attempt id) is sent to the gateway.
    merchant_ids_send_payment_id: set[str] = Field(default_factory=set)


class MetricsSettings(BaseModel):
    namespace: str = "payments"


class NormalizationSettings(BaseSettings):
    reference_ids: ReferenceIdSettings = Field(default_factory=ReferenceIdSettings)
    connector_request_reference: ConnectorRequestReferenceSettings = Field(
        default_factory=ConnectorRequestReferenceSettings
    )
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )


normalization_settings = NormalizationSettings()
