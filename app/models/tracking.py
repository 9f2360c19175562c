# app/models/tracking.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class OrderTracking(SQLModel, table=True):
    """
    Authoritative delivery lifecycle of one order.

    - one row per order (order_id is unique)
    - tracking_number is assigned at creation and never regenerated
    - actual_delivery_time is written once, on the first move to Delivered
    """

    __tablename__ = "order_tracking"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        unique=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    tracking_number: str = Field(
        unique=True,
        index=True,
    )

    current_status: str = Field(default="Pending")

    estimated_delivery_time: datetime | None = None
    actual_delivery_time: datetime | None = None

    # copied from the order's shipping address at creation
    delivery_address_type: str = Field(default="home")
    delivery_street: str | None = None
    delivery_city: str | None = None
    delivery_state: str | None = None
    delivery_zip_code: str | None = None

    delivery_person_name: str | None = None
    delivery_person_phone: str | None = None
    delivery_person_vehicle_number: str | None = None

    special_instructions: str | None = None
    is_active: bool = Field(default=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class TrackingEvent(SQLModel, table=True):
    """
    One entry of a tracking record's status history.

    Rows are only ever inserted. History order is insertion order,
    i.e. the autoincrement id.
    """

    __tablename__ = "tracking_events"

    id: int | None = Field(default=None, primary_key=True)

    tracking_id: uuid.UUID = Field(
        foreign_key="order_tracking.id",
        index=True,
    )

    status: str
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    location: str | None = None
    notes: str | None = None
    updated_by: uuid.UUID | None = None
