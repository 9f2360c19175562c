# app/schemas/order.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, Field, field_validator

from app.schemas.base import CamelModel
from app.schemas.cart import Customization

AddressType = Literal["home", "office", "work"]
PaymentMethod = Literal["card", "upi", "cod"]
PaymentStatus = Literal["Pending", "Completed", "Failed", "Refunded"]
OrderStatus = Literal[
    "Pending",
    "Confirmed",
    "Preparing",
    "Out for Delivery",
    "Delivered",
    "Cancelled",
]


class ShippingAddress(CamelModel):
    type: AddressType = "home"
    street: str
    city: str
    state: str
    zip_code: str

    @field_validator("street", "city", "state", "zip_code")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class PaymentDetails(CamelModel):
    """
    Payment is mocked: the status is recorded, nothing is charged.
    """

    payment_method: PaymentMethod
    payment_status: PaymentStatus = "Pending"
    transaction_id: str | None = None


class OrderItemCreate(CamelModel):
    product: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)
    customizations: list[Customization] = Field(default_factory=list)


class OrderCreate(CamelModel):
    """
    Payload for POST /orders.

    Client provides:
      - items snapshot (price = product base price)
      - totalAmount agreed at checkout
      - shippingAddress
      - paymentDetails

    Backend derives:
      - user from token
      - status = 'Pending'
      - tracking record
    """

    model_config = ConfigDict(extra="forbid")

    items: list[OrderItemCreate] = Field(min_length=1)
    total_amount: float = Field(ge=0)
    shipping_address: ShippingAddress
    payment_details: PaymentDetails


class OrderItemRead(CamelModel):
    product: str
    quantity: int
    price: float
    customizations: list[Customization]


class OrderRead(CamelModel):
    """
    Full order view including items.
    """

    id: uuid.UUID
    user: uuid.UUID
    items: list[OrderItemRead]
    total_amount: float
    shipping_address: ShippingAddress
    status: OrderStatus
    payment_details: PaymentDetails
    created_at: datetime
    updated_at: datetime


class OrderCreated(OrderRead):
    """
    Response of a successful checkout: the order plus its tracking number.
    """

    tracking_number: str
