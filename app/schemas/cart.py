# app/schemas/cart.py
from datetime import datetime, timezone

from pydantic import Field

from app.schemas.base import CamelModel


class ProductSnapshot(CamelModel):
    """
    Copy of the product taken when it was added to the cart.
    Pricing trusts this snapshot; the catalog is not consulted again.
    """

    id: str
    name: str
    base_price: float = Field(ge=0)
    discount: float = Field(default=0, ge=0, le=100)
    image: str | None = None
    category: str | None = None


class SelectedValue(CamelModel):
    name: str
    price: float = 0.0


class Customization(CamelModel):
    """
    Selected values for one customization group.
    """

    option_name: str
    selected_values: list[SelectedValue] = Field(default_factory=list)


class CartLineItem(CamelModel):
    """
    One cart line.

    `id` is the identity key (product id + canonical customizations);
    two additions with the same key merge into one line.
    """

    id: str
    product: ProductSnapshot
    quantity: int = Field(ge=1)
    customizations: list[Customization] = Field(default_factory=list)
    special_instructions: str = ""
    added_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class CartTotals(CamelModel):
    """
    Derived cart totals; never stored.
    """

    subtotal: float
    delivery_fee: float
    tax: float
    total: float
    item_count: int
