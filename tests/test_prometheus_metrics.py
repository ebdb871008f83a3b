from prometheus_client import CollectorRegistry

from infrastructure.metrics.prometheus import PrometheusMetricsSink


SAMPLE = "payments_incoming_dispute_webhook_validation_failure_total"


def test_sinks_on_one_registry_share_the_counter():
    registry = CollectorRegistry()
    first = PrometheusMetricsSink(namespace="payments", registry=registry)
    second = PrometheusMetricsSink(namespace="payments", registry=registry)
    first.incr_dispute_validation_failure("payme")
    second.incr_dispute_validation_failure("payme")
    assert registry.get_sample_value(SAMPLE, {"connector": "payme"}) == 2.0


def test_default_registry_can_be_wired_twice():
    first = PrometheusMetricsSink(namespace="default_wiring")
    second = PrometheusMetricsSink(namespace="default_wiring")
    assert first.dispute_validation_failures is second.dispute_validation_failures


def test_counts_are_per_connector():
    registry = CollectorRegistry()
    sink = PrometheusMetricsSink(namespace="payments", registry=registry)
    sink.incr_dispute_validation_failure("payme")
    assert registry.get_sample_value(SAMPLE, {"connector": "other"}) is None
