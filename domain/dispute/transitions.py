"""
争议生命周期状态迁移

Webhook 可能延迟、重复或被重试投递，因此每次投递在应用前都要与之前的
(stage, status) 比对。

阶段线性推进：PreDispute -> Dispute -> PreArbitration。
状态推进：Opened -> (Expired | Accepted | Cancelled | Challenged -> (Won | Lost))。
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Generic, Mapping, Optional, TypeVar

from domain.payment.exceptions import DisputeWebhookValidationFailed
from domain.dispute.entity import DisputeStage, DisputeStatus

if TYPE_CHECKING:
    from application.ports.metrics import MetricsSink


S = TypeVar("S")


class TransitionValidator(Generic[S]):
    """单一维度上的单调状态机。

    `allowed` 将每个状态映射到其可迁移的目标集合；`None` 表示接受任意目标。
    未出现在映射中的状态不接受任何迁移。
    """

    def __init__(self, allowed: Mapping[S, Optional[frozenset[S]]]) -> None:
        self._allowed = dict(allowed)

    def is_allowed(self, current: S, new: S) -> bool:
        if current not in self._allowed:
            return False
        targets = self._allowed[current]
        return targets is None or new in targets


DISPUTE_STAGE_TRANSITIONS: TransitionValidator[DisputeStage] = TransitionValidator(
    {
        DisputeStage.PRE_DISPUTE: None,
        DisputeStage.DISPUTE: frozenset({DisputeStage.DISPUTE, DisputeStage.PRE_ARBITRATION}),
        DisputeStage.PRE_ARBITRATION: frozenset({DisputeStage.PRE_ARBITRATION}),
    }
)

DISPUTE_STATUS_TRANSITIONS: TransitionValidator[DisputeStatus] = TransitionValidator(
    {
        DisputeStatus.OPENED: None,
        DisputeStatus.EXPIRED: frozenset({DisputeStatus.EXPIRED}),
        DisputeStatus.ACCEPTED: frozenset({DisputeStatus.ACCEPTED}),
        DisputeStatus.CANCELLED: frozenset({DisputeStatus.CANCELLED}),
        DisputeStatus.CHALLENGED: frozenset(
            {DisputeStatus.CHALLENGED, DisputeStatus.WON, DisputeStatus.LOST}
        ),
        DisputeStatus.WON: frozenset({DisputeStatus.WON}),
        DisputeStatus.LOST: frozenset({DisputeStatus.LOST}),
    }
)


def is_valid_dispute_transition(
    prev_stage: DisputeStage,
    prev_status: DisputeStatus,
    stage: DisputeStage,
    status: DisputeStatus,
) -> bool:
    if not DISPUTE_STAGE_TRANSITIONS.is_allowed(prev_stage, stage):
        return False
    # 阶段推进时不再校验状态维度
    if stage != prev_stage:
        return True
    return DISPUTE_STATUS_TRANSITIONS.is_allowed(prev_status, status)


def validate_dispute_transition(
    prev_stage: DisputeStage,
    prev_status: DisputeStatus,
    stage: DisputeStage,
    status: DisputeStatus,
    *,
    metrics: MetricsSink,
    connector: str,
) -> None:
    """迁移不被允许时计数并抛出 DisputeWebhookValidationFailed"""

    if is_valid_dispute_transition(prev_stage, prev_status, stage, status):
        return
    metrics.incr_dispute_validation_failure(connector)
    raise DisputeWebhookValidationFailed(
        connector=connector,
        details={
            "prev_stage": prev_stage.value,
            "prev_status": prev_status.value,
            "stage": stage.value,
            "status": status.value,
        },
    )
