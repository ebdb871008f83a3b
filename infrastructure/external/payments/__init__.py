"""
Factories wiring connector resolvers and status mappers into the sync service.
"""
from __future__ import annotations

from application.ports.metrics import MetricsSink
from application.ports.response_resolver import ResponseResolver
from application.ports.status_mapper import StatusMapper
from application.services.record_builder import CanonicalRecordBuilder
from application.services.status_sync_service import StatusSyncService


def get_response_resolver(connector: str) -> ResponseResolver:
    name = connector.lower()
    if name == "payme":
        from .payme.resolver import PaymeResponseResolver
        return PaymeResponseResolver()
    raise ValueError(f"Unsupported connector: {name}")


def get_status_mapper(connector: str) -> StatusMapper:
    name = connector.lower()
    if name == "payme":
        from .payme.status import PaymeStatusMapper
        return PaymeStatusMapper()
    raise ValueError(f"Unsupported connector: {name}")


def get_status_sync_service(connector: str, metrics: MetricsSink) -> StatusSyncService:
    return StatusSyncService(
        resolver=get_response_resolver(connector),
        builder=CanonicalRecordBuilder(get_status_mapper(connector), metrics),
    )
