"""
Status mapper port: connector vocabulary -> canonical status.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from domain.payment.entity import AttemptStatus, RefundStatus


@runtime_checkable
class StatusMapper(Protocol):
    connector: str

    def to_attempt_status(self, raw_status: str) -> AttemptStatus: ...

    def to_refund_status(self, raw_status: str) -> RefundStatus: ...
