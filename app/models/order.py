# app/models/order.py
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order. Created once at checkout and never deleted.

    `status` mirrors OrderTracking.current_status for quick reads;
    the tracking record is the authoritative copy.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    # Amount agreed by the client at submission time
    total_amount: float = Field(
        description="Final amount for this order (fees and tax included)",
    )

    # home | office | work
    address_type: str = Field(default="home")
    street: str
    city: str
    state: str
    zip_code: str

    # Pending | Confirmed | Preparing | Out for Delivery | Delivered | Cancelled
    status: str = Field(
        default="Pending",
        index=True,
        description="Mirror of the tracking status",
    )

    # card | upi | cod
    payment_method: str
    # Pending | Completed | Failed | Refunded
    payment_status: str = Field(default="Pending")
    transaction_id: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class OrderItem(SQLModel, table=True):
    """
    Line item snapshot inside an order.

    `price` is the product's base price at submission; selected
    customization surcharges are kept in `customizations` and are not
    folded into it.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    # Catalog lives in an external service, so this is an opaque reference
    product_id: str = Field(index=True)

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    price: float

    customizations: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
