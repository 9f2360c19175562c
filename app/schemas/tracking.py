# app/schemas/tracking.py
import uuid
from datetime import datetime

from pydantic import ConfigDict

from app.schemas.base import CamelModel
from app.schemas.order import AddressType, OrderStatus


class DeliveryAddress(CamelModel):
    type: AddressType = "home"
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None


class DeliveryPerson(CamelModel):
    name: str
    phone: str | None = None
    vehicle_number: str | None = None


class StatusHistoryEntry(CamelModel):
    status: OrderStatus
    timestamp: datetime
    location: str | None = None
    notes: str | None = None
    updated_by: uuid.UUID | None = None


class TrackingRead(CamelModel):
    """
    Full tracking record, as returned by GET /orders/{id}/tracking.
    """

    id: uuid.UUID
    order_id: uuid.UUID
    user: uuid.UUID
    tracking_number: str
    current_status: OrderStatus
    status_history: list[StatusHistoryEntry]
    estimated_delivery_time: datetime | None
    actual_delivery_time: datetime | None
    delivery_address: DeliveryAddress
    delivery_person: DeliveryPerson | None = None
    special_instructions: str | None = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class TrackingInfo(CamelModel):
    """
    Read-only projection used by the public tracking lookup.
    """

    tracking_number: str
    current_status: OrderStatus
    last_update: datetime
    estimated_delivery: datetime | None
    status_history: list[StatusHistoryEntry]


class TrackingStatusUpdate(CamelModel):
    """
    Admin payload to move an order to a new status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
    notes: str | None = None
    location: str | None = None
    delivery_person: DeliveryPerson | None = None


class TrackingUpdated(CamelModel):
    message: str
    tracking: TrackingInfo


class ReconcileResult(CamelModel):
    reconciled: int
    tracking_numbers: list[str]
