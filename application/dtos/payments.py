"""
Payment DTOs (Pydantic v2) exchanged between the response resolver and the
canonical record builder.
"""
from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, ConfigDict, model_validator

from domain.dispute.entity import DisputeStage, DisputeStatus
from domain.payment.entity import DeliveryPath, EntityKind


class RawEnvelope(BaseModel):
    """Gateway response reduced to the fields status handling cares about.

    `raw_status` is the gateway's own vocabulary (e.g. a PayMe sale status);
    mapping to canonical status happens in the builder.
    """

    kind: EntityKind
    path: DeliveryPath
    raw_status: Optional[str] = None
    resource_id: Optional[str] = None
    secondary_id: Optional[str] = None
    secondary_id_field: str = "transaction_id"  # gateway field name, used as the metadata key
    token: Optional[str] = None  # mandate / buyer key
    related_transaction_id: Optional[str] = None
    dispute_stage: Optional[DisputeStage] = None
    dispute_status: Optional[DisputeStatus] = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_kind_fields(self):
        if self.kind is EntityKind.DISPUTE:
            if self.dispute_stage is None or self.dispute_status is None:
                raise ValueError("dispute envelope requires dispute_stage and dispute_status")
        elif self.raw_status is None:
            raise ValueError(f"{self.kind.value} envelope requires raw_status")
        return self
