"""
连接器与 Webhook 异常，映射为统一的 BusinessException 变体。

这些异常均非瞬时 IO 引起，本层不做重试。
"""
from __future__ import annotations

from typing import Optional
from domain.common.exceptions import BusinessException
from shared.codes.payment_codes import PaymentCode


class ConnectorError(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        code: int,
        error_type: str,
        connector: str | None = None,
        field: str | None = None,
        details: Optional[dict] = None,
    ):
        full_details = {"connector": connector}
        if details:
            full_details.update(details)
        super().__init__(
            code=code,
            message=message,
            error_type=error_type,
            details=full_details,
            field=field,
        )
        self.connector = connector


class ResponseHandlingFailed(ConnectorError):
    def __init__(self, message: str = "Failed to handle connector response", *, connector: str | None = None, details: Optional[dict] = None):
        super().__init__(
            message,
            code=PaymentCode.RESPONSE_HANDLING_FAILED,
            error_type="ResponseHandlingFailed",
            connector=connector,
            details=details,
        )


class ConnectorNotImplemented(ConnectorError):
    def __init__(self, feature: str, *, connector: str | None = None):
        super().__init__(
            f"{feature} is not implemented",
            code=PaymentCode.NOT_IMPLEMENTED,
            error_type="NotImplemented",
            connector=connector,
            details={"feature": feature},
        )
        self.feature = feature


class MissingCorrelationId(ConnectorError):
    """A correlation field required to build the gateway request is absent."""

    def __init__(self, field: str, *, code: int, connector: str | None = None):
        super().__init__(
            f"Missing correlation id: {field}",
            code=code,
            error_type="MissingCorrelationId",
            connector=connector,
            field=field,
        )

    @classmethod
    def refund_id(cls, connector: str | None = None) -> "MissingCorrelationId":
        return cls("connector_refund_id", code=PaymentCode.MISSING_CONNECTOR_REFUND_ID, connector=connector)

    @classmethod
    def related_transaction_id(cls, id_name: str, connector: str | None = None) -> "MissingCorrelationId":
        return cls(id_name, code=PaymentCode.MISSING_RELATED_TRANSACTION_ID, connector=connector)


class FailedToObtainAuthType(ConnectorError):
    def __init__(self, *, connector: str | None = None, auth_type: str | None = None):
        super().__init__(
            "Failed to obtain authentication type",
            code=PaymentCode.FAILED_TO_OBTAIN_AUTH_TYPE,
            error_type="FailedToObtainAuthType",
            connector=connector,
            details={"auth_type": auth_type},
        )


class DisputeWebhookValidationFailed(BusinessException):
    """Rejected dispute transition; the stored dispute state stays as it was."""

    def __init__(self, *, connector: str | None = None, details: Optional[dict] = None):
        full_details = {"connector": connector}
        if details:
            full_details.update(details)
        super().__init__(
            code=PaymentCode.DISPUTE_WEBHOOK_VALIDATION_FAILED,
            message="Dispute webhook validation failed",
            error_type="DisputeWebhookValidationFailed",
            details=full_details,
            message_key="webhooks.dispute.validation_failed",
        )
