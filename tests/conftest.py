"""Pytest bootstrap configuration.

Pin settings-relevant environment variables before test collection and
module imports that read application settings.
"""
import os

os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from prometheus_client import CollectorRegistry

from application.services.record_builder import CanonicalRecordBuilder
from application.services.status_sync_service import StatusSyncService
from domain.payment.entity import CanonicalRecord, EntityKind
from infrastructure.external.payments.payme.resolver import PaymeResponseResolver
from infrastructure.external.payments.payme.status import PaymeStatusMapper
from infrastructure.metrics.prometheus import PrometheusMetricsSink


DISPUTE_FAILURE_SAMPLE = "payments_incoming_dispute_webhook_validation_failure_total"


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def metrics(registry):
    return PrometheusMetricsSink(namespace="payments", registry=registry)


@pytest.fixture
def dispute_failures(registry):
    def _count(connector: str = "payme") -> float:
        return registry.get_sample_value(DISPUTE_FAILURE_SAMPLE, {"connector": connector}) or 0.0
    return _count


@pytest.fixture
def resolver():
    return PaymeResponseResolver()


@pytest.fixture
def builder(metrics):
    return CanonicalRecordBuilder(PaymeStatusMapper(), metrics)


@pytest.fixture
def service(resolver, builder):
    return StatusSyncService(resolver=resolver, builder=builder)


def _record(kind: EntityKind, **kwargs) -> CanonicalRecord:
    return CanonicalRecord.initial(
        merchant_id="merchant_1",
        payment_id="pay_1",
        attempt_id="pay_1_1",
        connector="payme",
        kind=kind,
        **kwargs,
    )


@pytest.fixture
def attempt_record():
    return _record(EntityKind.ATTEMPT)


@pytest.fixture
def refund_record():
    return _record(EntityKind.REFUND, refund_id="ref_1")


@pytest.fixture
def dispute_record():
    return _record(EntityKind.DISPUTE)
