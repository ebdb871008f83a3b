"""
支付领域实体 - 各连接器共用的规范化记录

`CanonicalRecord` 描述一次尝试、退款或争议的完整生命周期。记录由调用方的
持久化层持有；本包只通过 `RecordPatch` 派生其新版本。
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Optional, Union

from domain.dispute.entity import DisputeStage, DisputeStatus


class EntityKind(str, Enum):
    ATTEMPT = "attempt"
    REFUND = "refund"
    DISPUTE = "dispute"


class DeliveryPath(str, Enum):
    """入站状态的送达路径"""
    WEBHOOK_PUSH = "webhook_push"
    LIST_QUERY = "list_query"
    DIRECT_REPLY = "direct_reply"


class AttemptStatus(str, Enum):
    """规范化支付尝试状态枚举"""
    STARTED = "started"
    AUTHENTICATION_FAILED = "authentication_failed"
    AUTHORIZING = "authorizing"
    AUTHORIZED = "authorized"
    AUTHORIZATION_FAILED = "authorization_failed"
    CHARGED = "charged"
    AUTO_REFUNDED = "auto_refunded"
    VOIDED = "voided"
    VOID_FAILED = "void_failed"
    PENDING = "pending"
    FAILURE = "failure"


class RefundStatus(str, Enum):
    """规范化退款状态枚举（PENDING 仅表示尚未解析）"""
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


class IncomingWebhookEvent(str, Enum):
    """Webhook 推送的规范化事件分类"""
    PAYMENT_INTENT_SUCCESS = "payment_intent_success"
    PAYMENT_INTENT_FAILURE = "payment_intent_failure"
    REFUND_SUCCESS = "refund_success"
    EVENT_NOT_SUPPORTED = "event_not_supported"


@dataclass(frozen=True)
class MandateReference:
    """网关返回的已保存凭证句柄"""
    connector_mandate_id: Optional[str] = None
    payment_method_id: Optional[str] = None


@dataclass(frozen=True)
class SuccessPayload:
    resource_id: Optional[str]
    delivery_path: DeliveryPath
    connector_status: Optional[str] = None


@dataclass(frozen=True)
class ErrorPayload:
    code: int
    message: str
    reason: Optional[str] = None


ResultPayload = Union[SuccessPayload, ErrorPayload]
CanonicalStatus = Union[AttemptStatus, RefundStatus]


@dataclass(frozen=True)
class CanonicalRecord:
    """
    单条尝试/退款/争议记录

    规则：
    1. 身份字段（merchant/payment/attempt/connector/kind）不可变更
    2. 更新一律经由 RecordPatch：有值则覆盖，否则保留原值
    3. 争议阶段/状态只能前进（见 domain.dispute.transitions）
    """

    merchant_id: str
    payment_id: str
    attempt_id: str
    connector: str
    kind: EntityKind
    status: Optional[CanonicalStatus] = None
    resource_id: Optional[str] = None
    mandate_reference: Optional[MandateReference] = None
    connector_metadata: Optional[dict[str, Any]] = None
    related_transaction_id: Optional[str] = None
    refund_id: Optional[str] = None
    dispute_stage: Optional[DisputeStage] = None
    dispute_status: Optional[DisputeStatus] = None
    result: Optional[ResultPayload] = None

    @classmethod
    def initial(
        cls,
        *,
        merchant_id: str,
        payment_id: str,
        attempt_id: str,
        connector: str,
        kind: EntityKind,
        refund_id: Optional[str] = None,
    ) -> "CanonicalRecord":
        """流程发起时（调用网关之前）的初始记录"""
        status: Optional[CanonicalStatus] = None
        stage = None
        dispute_status = None
        if kind is EntityKind.ATTEMPT:
            status = AttemptStatus.STARTED
        elif kind is EntityKind.REFUND:
            status = RefundStatus.PENDING
        else:
            stage = DisputeStage.PRE_DISPUTE
            dispute_status = DisputeStatus.OPENED
        return cls(
            merchant_id=merchant_id,
            payment_id=payment_id,
            attempt_id=attempt_id,
            connector=connector,
            kind=kind,
            status=status,
            refund_id=refund_id,
            dispute_stage=stage,
            dispute_status=dispute_status,
        )


@dataclass(frozen=True)
class RecordPatch:
    """CanonicalRecord 的覆盖字段；None 表示保留原值"""

    status: Optional[CanonicalStatus] = None
    resource_id: Optional[str] = None
    mandate_reference: Optional[MandateReference] = None
    connector_metadata: Optional[dict[str, Any]] = None
    related_transaction_id: Optional[str] = None
    refund_id: Optional[str] = None
    dispute_stage: Optional[DisputeStage] = None
    dispute_status: Optional[DisputeStatus] = None
    result: Optional[ResultPayload] = None

    def changes(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}

    def apply(self, previous: CanonicalRecord) -> CanonicalRecord:
        return replace(previous, **self.changes())
