"""Unit tests for dispute lifecycle guardrails."""

import pytest

from domain.dispute.entity import DisputeStage, DisputeStatus
from domain.dispute.transitions import (
    TransitionValidator,
    is_valid_dispute_transition,
    validate_dispute_transition,
)
from domain.payment.exceptions import DisputeWebhookValidationFailed


Stage = DisputeStage
Status = DisputeStatus


@pytest.mark.parametrize(
    "prev, new, expected",
    [
        ((Stage.PRE_DISPUTE, Status.OPENED), (Stage.PRE_DISPUTE, Status.ACCEPTED), True),
        ((Stage.DISPUTE, Status.CHALLENGED), (Stage.DISPUTE, Status.WON), True),
        ((Stage.DISPUTE, Status.CHALLENGED), (Stage.DISPUTE, Status.LOST), True),
        ((Stage.DISPUTE, Status.CHALLENGED), (Stage.DISPUTE, Status.EXPIRED), False),
        ((Stage.DISPUTE, Status.EXPIRED), (Stage.DISPUTE, Status.EXPIRED), True),
        ((Stage.DISPUTE, Status.WON), (Stage.DISPUTE, Status.LOST), False),
        ((Stage.DISPUTE, Status.ACCEPTED), (Stage.DISPUTE, Status.CHALLENGED), False),
        ((Stage.PRE_DISPUTE, Status.ACCEPTED), (Stage.DISPUTE, Status.OPENED), True),
        ((Stage.DISPUTE, Status.LOST), (Stage.PRE_ARBITRATION, Status.OPENED), True),
        ((Stage.PRE_ARBITRATION, Status.OPENED), (Stage.DISPUTE, Status.OPENED), False),
        ((Stage.PRE_ARBITRATION, Status.CHALLENGED), (Stage.PRE_ARBITRATION, Status.WON), True),
    ],
)
def test_dispute_transitions(prev, new, expected):
    assert is_valid_dispute_transition(*prev, *new) is expected


@pytest.mark.parametrize("prev_status", list(DisputeStatus))
@pytest.mark.parametrize("status", list(DisputeStatus))
def test_dispute_never_returns_to_pre_dispute(prev_status, status):
    assert not is_valid_dispute_transition(Stage.DISPUTE, prev_status, Stage.PRE_DISPUTE, status)


@pytest.mark.parametrize("status", list(DisputeStatus))
def test_terminal_statuses_only_loop(status):
    terminal = {Status.EXPIRED, Status.ACCEPTED, Status.CANCELLED, Status.WON, Status.LOST}
    for prev in terminal:
        assert is_valid_dispute_transition(Stage.DISPUTE, prev, Stage.DISPUTE, status) is (status == prev)


def test_validator_with_unknown_state_accepts_nothing():
    validator = TransitionValidator({"a": frozenset({"b"})})
    assert validator.is_allowed("a", "b")
    assert not validator.is_allowed("a", "c")
    assert not validator.is_allowed("z", "a")


def test_rejected_transition_is_counted(metrics, dispute_failures):
    with pytest.raises(DisputeWebhookValidationFailed) as exc_info:
        validate_dispute_transition(
            Stage.DISPUTE, Status.CHALLENGED, Stage.DISPUTE, Status.EXPIRED, metrics=metrics, connector="payme"
        )
    assert exc_info.value.details["prev_status"] == "dispute_challenged"
    assert exc_info.value.details["status"] == "dispute_expired"
    assert dispute_failures() == 1.0


def test_accepted_transition_is_not_counted(metrics, dispute_failures):
    validate_dispute_transition(
        Stage.DISPUTE, Status.CHALLENGED, Stage.DISPUTE, Status.WON, metrics=metrics, connector="payme"
    )
    assert dispute_failures() == 0.0


def test_counter_is_per_sink(registry, metrics, dispute_failures):
    from prometheus_client import CollectorRegistry
    from infrastructure.metrics.prometheus import PrometheusMetricsSink

    other_registry = CollectorRegistry()
    other = PrometheusMetricsSink(namespace="payments", registry=other_registry)
    other.incr_dispute_validation_failure("payme")
    assert dispute_failures() == 0.0
    assert other_registry.get_sample_value(
        "payments_incoming_dispute_webhook_validation_failure_total", {"connector": "payme"}
    ) == 1.0
