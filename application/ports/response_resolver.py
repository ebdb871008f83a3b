"""
Response resolver port (application/ports) exposing a replaceable protocol.

Application depends on this Protocol; each connector in infrastructure
provides an implementation.
"""
from __future__ import annotations

from typing import Any, Mapping, Protocol, Union, runtime_checkable

from application.dtos.payments import RawEnvelope
from domain.payment.entity import EntityKind, ErrorPayload, IncomingWebhookEvent


Payload = Union[Mapping[str, Any], str, bytes]


@runtime_checkable
class ResponseResolver(Protocol):
    """Turns connector payloads into RawEnvelopes.

    Implementations are pure: no IO, no state between calls.
    """

    connector: str

    def resolve(self, payload: Payload, kind: EntityKind) -> RawEnvelope: ...

    def resolve_init(self, payload: Payload) -> RawEnvelope: ...

    def resolve_webhook(self, payload: Payload, kind: EntityKind) -> RawEnvelope: ...

    def classify_webhook(self, payload: Payload) -> IncomingWebhookEvent: ...

    def resolve_error(self, payload: Payload) -> ErrorPayload: ...
