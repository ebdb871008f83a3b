"""
Prometheus adapter for the MetricsSink port.

Counters are created once per (registry, name); further sinks on the same
registry share them, so the composition root may be wired more than once per
process.
"""
from __future__ import annotations

import threading
import weakref
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, REGISTRY

from core.settings import normalization_settings


_lock = threading.Lock()
_counters: "weakref.WeakKeyDictionary[CollectorRegistry, dict[str, Counter]]" = weakref.WeakKeyDictionary()


def _counter(registry: CollectorRegistry, name: str, documentation: str, labelnames: list[str]) -> Counter:
    with _lock:
        per_registry = _counters.setdefault(registry, {})
        counter = per_registry.get(name)
        if counter is None:
            counter = Counter(name, documentation, labelnames, registry=registry)
            per_registry[name] = counter
        return counter


class PrometheusMetricsSink:
    """MetricsSink backed by prometheus_client counters.

    Pass a dedicated CollectorRegistry to keep instances isolated (tests);
    the default registry is used otherwise.
    """

    def __init__(
        self,
        namespace: Optional[str] = None,
        registry: Optional[CollectorRegistry] = None,
    ) -> None:
        namespace = namespace or normalization_settings.metrics.namespace
        self.registry = registry if registry is not None else REGISTRY
        self.dispute_validation_failures = _counter(
            self.registry,
            f"{namespace}_incoming_dispute_webhook_validation_failure",
            "Dispute webhook deliveries rejected by transition validation",
            ["connector"],
        )

    def incr_dispute_validation_failure(self, connector: str) -> None:
        self.dispute_validation_failures.labels(connector=connector).inc()
