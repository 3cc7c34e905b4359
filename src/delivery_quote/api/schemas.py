"""
Pydantic request models for the delivery quote API.
"""
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..engine.models import DEFAULT_STOP_SIZE, DEFAULT_STOP_WEIGHT, Draft, Stop, TaskType


class PartialUpdate(BaseModel):
    """
    Base for PATCH bodies: omitted fields are left alone, and an explicit
    null is only accepted for the fields listed in NULLABLE.
    """
    model_config = ConfigDict(extra="forbid")

    NULLABLE: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_nulls(self):
        nulls = sorted(
            name for name in self.model_fields_set
            if getattr(self, name) is None and name not in self.NULLABLE
        )
        if nulls:
            raise ValueError(f"Field(s) cannot be null: {', '.join(nulls)}")
        return self


class StopIn(BaseModel):
    """A full stop record, used when pricing an ad-hoc draft."""
    model_config = ConfigDict(extra="forbid")

    address: str = ""
    contact_name: str = ""
    contact_phone: str = ""
    note: str = ""
    description: str = ""
    product_name: str = ""
    item_photo: Optional[str] = None
    weight: str = DEFAULT_STOP_WEIGHT
    size: str = DEFAULT_STOP_SIZE
    item_count: int = Field(1, ge=1)
    insurance: bool = False
    item_value: Optional[str] = None


class StopUpdate(PartialUpdate):
    """Partial stop fields; only the ones sent are merged."""
    NULLABLE: ClassVar[frozenset[str]] = frozenset({"item_photo", "item_value"})

    address: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    note: Optional[str] = None
    description: Optional[str] = None
    product_name: Optional[str] = None
    item_photo: Optional[str] = None
    weight: Optional[str] = None
    size: Optional[str] = None
    item_count: Optional[int] = Field(None, ge=1)
    insurance: Optional[bool] = None
    item_value: Optional[str] = None


class DraftUpdate(PartialUpdate):
    """Partial draft fields for PATCH /sessions/{id}/draft. A null task_type clears the selection."""
    NULLABLE: ClassVar[frozenset[str]] = frozenset({"task_type", "item_photo"})

    task_type: Optional[TaskType] = None
    pickup: Optional[str] = None
    dropoff: Optional[str] = None
    pickup_contact: Optional[str] = None
    dropoff_contact_name: Optional[str] = None
    dropoff_contact_phone: Optional[str] = None
    product_name: Optional[str] = None
    description: Optional[str] = None
    item_photo: Optional[str] = None
    weight: Optional[str] = None
    size: Optional[str] = None
    insurance: Optional[bool] = None
    item_value: Optional[str] = None
    time_preference: Optional[str] = None
    scheduled_date: Optional[str] = None
    payment_method: Optional[str] = None
    service_type: Optional[str] = None


class DraftIn(BaseModel):
    """A complete draft body for POST /quote."""
    model_config = ConfigDict(extra="forbid")

    task_type: Optional[TaskType] = None
    pickup: str = ""
    dropoff: str = ""
    pickup_contact: str = ""
    dropoff_contact_name: str = ""
    dropoff_contact_phone: str = ""
    stops: list[StopIn] = []
    product_name: str = ""
    description: str = ""
    item_photo: Optional[str] = None
    weight: str = "0-1"
    size: str = "small"
    insurance: bool = False
    item_value: str = ""
    time_preference: str = "now"
    scheduled_date: str = ""
    payment_method: str = "cash"
    service_type: str = "regular"

    def to_draft(self) -> Draft:
        fields = self.model_dump(exclude={"stops"})
        return Draft(stops=tuple(Stop(**stop.model_dump()) for stop in self.stops), **fields)


class SessionCreate(BaseModel):
    task_type: Optional[TaskType] = None
