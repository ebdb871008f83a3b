"""
PayMe response resolver.

Turns an inbound payload (sync reply, list query reply or webhook push) into a
RawEnvelope. For each entity kind there is a fixed ordered list of candidate
shapes; the first one that validates wins. Shapes inside one list must be
structurally disjoint, which is checked when this module is imported.

Known overlap kept out of any single list:
- a webhook body also validates as PaySaleResponse (webhooks are resolved
  through `resolve_webhook`, never through `resolve`);
- PaySaleResponse also validates as GenerateSaleResponse (init replies are
  resolved through `resolve_init`);
- PaySaleResponse also validates as RefundResponse (candidate lists are per
  entity kind, and the kind always comes from the caller).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Union

from pydantic import ValidationError

from application.dtos.payments import RawEnvelope
from core.logging_config import get_logger
from domain.payment.entity import DeliveryPath, EntityKind, ErrorPayload, IncomingWebhookEvent
from domain.payment.exceptions import ResponseHandlingFailed
from infrastructure.external.payments.payme.responses import (
    DisputeNotification,
    GenerateSaleResponse,
    NotifyType,
    PaySaleResponse,
    PaymeErrorResponse,
    PaymeModel,
    QueryTransactionResponse,
    RefundResponse,
    SaleQueryResponse,
    SaleStatus,
    WebhookEventDataResource,
    WebhookEventDataResourceEvent,
    WebhookEventDataResourceSignature,
)
from infrastructure.external.payments.payme.status import to_webhook_event


logger = get_logger(__name__)

CONNECTOR = "payme"

Payload = Union[Mapping[str, Any], str, bytes]


@dataclass(frozen=True)
class CandidateShape:
    model: type[PaymeModel]
    path: DeliveryPath
    project: Callable[[Any, DeliveryPath], RawEnvelope]

    @property
    def name(self) -> str:
        return self.model.__name__


def _first(items: list, shape: str):
    # One id is queried, so only the first element is meaningful.
    if not items:
        raise ResponseHandlingFailed(
            f"{shape} returned no items",
            connector=CONNECTOR,
            details={"shape": shape},
        )
    return items[0]


def _from_pay_sale(resp: PaySaleResponse, path: DeliveryPath) -> RawEnvelope:
    return RawEnvelope(
        kind=EntityKind.ATTEMPT,
        path=path,
        raw_status=resp.sale_status.value,
        resource_id=resp.payme_sale_id,
        secondary_id=resp.payme_transaction_id,
        secondary_id_field="payme_transaction_id",
        token=resp.buyer_key.get_secret_value() if resp.buyer_key is not None else None,
    )


def _from_sale_query(resp: SaleQueryResponse, path: DeliveryPath) -> RawEnvelope:
    item = _first(resp.items, "SaleQueryResponse")
    return RawEnvelope(
        kind=EntityKind.ATTEMPT,
        path=path,
        raw_status=item.sale_status.value,
        resource_id=item.sale_payme_id,
    )


def _from_generate_sale(resp: GenerateSaleResponse, path: DeliveryPath) -> RawEnvelope:
    return RawEnvelope(
        kind=EntityKind.ATTEMPT,
        path=path,
        raw_status=SaleStatus.INITIAL.value,
        resource_id=resp.payme_sale_id,
        related_transaction_id=resp.payme_sale_id,
    )


def _from_refund(resp: RefundResponse, path: DeliveryPath) -> RawEnvelope:
    return RawEnvelope(
        kind=EntityKind.REFUND,
        path=path,
        raw_status=resp.sale_status.value,
        resource_id=resp.payme_transaction_id,
    )


def _from_transaction_query(resp: QueryTransactionResponse, path: DeliveryPath) -> RawEnvelope:
    item = _first(resp.items, "QueryTransactionResponse")
    return RawEnvelope(
        kind=EntityKind.REFUND,
        path=path,
        raw_status=item.sale_status.value,
        resource_id=item.payme_transaction_id,
    )


def _from_dispute(resp: DisputeNotification, path: DeliveryPath) -> RawEnvelope:
    return RawEnvelope(
        kind=EntityKind.DISPUTE,
        path=path,
        raw_status=resp.connector_status,
        resource_id=resp.connector_dispute_id,
        dispute_stage=resp.dispute_stage,
        dispute_status=resp.dispute_status,
    )


PAY_SALE = CandidateShape(PaySaleResponse, DeliveryPath.WEBHOOK_PUSH, _from_pay_sale)
SALE_QUERY = CandidateShape(SaleQueryResponse, DeliveryPath.LIST_QUERY, _from_sale_query)
GENERATE_SALE = CandidateShape(GenerateSaleResponse, DeliveryPath.DIRECT_REPLY, _from_generate_sale)
REFUND = CandidateShape(RefundResponse, DeliveryPath.DIRECT_REPLY, _from_refund)
TRANSACTION_QUERY = CandidateShape(QueryTransactionResponse, DeliveryPath.LIST_QUERY, _from_transaction_query)
DISPUTE = CandidateShape(DisputeNotification, DeliveryPath.WEBHOOK_PUSH, _from_dispute)

# Most structurally specific first.
CANDIDATES: dict[EntityKind, tuple[CandidateShape, ...]] = {
    EntityKind.ATTEMPT: (PAY_SALE, SALE_QUERY),
    EntityKind.REFUND: (REFUND, TRANSACTION_QUERY),
    EntityKind.DISPUTE: (DISPUTE,),
}

ALL_SHAPES: tuple[type[PaymeModel], ...] = (
    WebhookEventDataResource,
    PaySaleResponse,
    SaleQueryResponse,
    GenerateSaleResponse,
    RefundResponse,
    QueryTransactionResponse,
    DisputeNotification,
)


def _required(model: type[PaymeModel]) -> frozenset[str]:
    return frozenset(name for name, f in model.model_fields.items() if f.is_required())


def _can_overlap(a: type[PaymeModel], b: type[PaymeModel]) -> bool:
    """True when some payload of shape `b` also satisfies every required field of `a`."""
    return _required(a) <= frozenset(b.model_fields)


def check_disjoint(candidates: tuple[CandidateShape, ...]) -> None:
    for i, a in enumerate(candidates):
        for b in candidates[i + 1:]:
            if _can_overlap(a.model, b.model) or _can_overlap(b.model, a.model):
                raise RuntimeError(f"candidate shapes {a.name} and {b.name} are not disjoint")


for _candidates in CANDIDATES.values():
    check_disjoint(_candidates)


def _validate(model: type[PaymeModel], payload: Payload) -> PaymeModel:
    if isinstance(payload, (str, bytes)):
        return model.model_validate_json(payload)
    return model.model_validate(payload)


def candidate_matches(payload: Payload) -> list[str]:
    """Names of every known shape the payload validates as (ambiguity probe)."""
    matches = []
    for model in ALL_SHAPES:
        try:
            _validate(model, payload)
        except ValidationError:
            continue
        matches.append(model.__name__)
    return matches


class PaymeResponseResolver:
    connector: str = CONNECTOR

    def resolve(self, payload: Payload, kind: EntityKind) -> RawEnvelope:
        """Resolve a sync reply for `kind` by trying its candidate shapes in order."""

        kind = EntityKind(kind)
        candidates = CANDIDATES[kind]
        for candidate in candidates:
            try:
                parsed = _validate(candidate.model, payload)
            except ValidationError:
                continue
            logger.debug("response_candidate_matched", connector=self.connector, kind=kind.value, shape=candidate.name)
            return candidate.project(parsed, candidate.path)
        logger.warning(
            "response_no_candidate_matched",
            connector=self.connector,
            kind=kind.value,
            tried=[c.name for c in candidates],
        )
        raise ResponseHandlingFailed(
            "No known response shape matched",
            connector=self.connector,
            details={"kind": kind.value, "tried": [c.name for c in candidates]},
        )

    def resolve_init(self, payload: Payload) -> RawEnvelope:
        try:
            parsed = _validate(GENERATE_SALE.model, payload)
        except ValidationError as exc:
            raise ResponseHandlingFailed(
                "Invalid generate-sale response",
                connector=self.connector,
                details={"errors": exc.error_count()},
            ) from exc
        return GENERATE_SALE.project(parsed, GENERATE_SALE.path)

    def parse_webhook(self, payload: Payload) -> WebhookEventDataResource:
        try:
            return _validate(WebhookEventDataResource, payload)
        except ValidationError as exc:
            raise ResponseHandlingFailed(
                "Invalid webhook body",
                connector=self.connector,
                details={"errors": exc.error_count()},
            ) from exc

    def resolve_webhook(self, payload: Payload, kind: EntityKind) -> RawEnvelope:
        """Project a webhook push into the shape the matching sync flow uses.

        attempt -> PaySaleResponse, refund -> QueryTransactionResponse (one item),
        dispute -> DisputeNotification.
        """
        kind = EntityKind(kind)
        if kind is EntityKind.DISPUTE:
            return self.resolve(payload, kind)
        resource = self.parse_webhook(payload)
        if kind is EntityKind.ATTEMPT:
            return _from_pay_sale(resource.to_pay_sale_response(), DeliveryPath.WEBHOOK_PUSH)
        return _from_transaction_query(resource.to_query_transaction_response(), DeliveryPath.WEBHOOK_PUSH)

    def notify_type_of(self, payload: Payload) -> NotifyType:
        try:
            return _validate(WebhookEventDataResourceEvent, payload).notify_type
        except ValidationError as exc:
            raise ResponseHandlingFailed("Webhook body has no notify_type", connector=self.connector) from exc

    def classify_webhook(self, payload: Payload) -> IncomingWebhookEvent:
        return to_webhook_event(self.notify_type_of(payload))

    def signature_of(self, payload: Payload) -> str:
        try:
            return _validate(WebhookEventDataResourceSignature, payload).payme_signature.get_secret_value()
        except ValidationError as exc:
            raise ResponseHandlingFailed("Webhook body has no payme_signature", connector=self.connector) from exc

    def resolve_error(self, payload: Payload) -> ErrorPayload:
        try:
            parsed = _validate(PaymeErrorResponse, payload)
        except ValidationError as exc:
            raise ResponseHandlingFailed("Invalid error response", connector=self.connector) from exc
        return ErrorPayload(code=parsed.status_code, message=parsed.message, reason=parsed.reason or parsed.code)
