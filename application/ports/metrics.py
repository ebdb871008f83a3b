"""
Metrics port (application/ports) for counters emitted by status handling.

The sink is injected wherever a counter is touched so tests can assert on an
isolated instance; infrastructure provides the Prometheus adapter.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsSink(Protocol):
    """Counter sink. Implementations must tolerate concurrent increments."""

    def incr_dispute_validation_failure(self, connector: str) -> None: ...
