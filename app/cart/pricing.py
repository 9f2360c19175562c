# app/cart/pricing.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from app.schemas.cart import CartLineItem, CartTotals, Customization

# Flat delivery fee charged below the free-delivery threshold
DELIVERY_FEE = 50.0
FREE_DELIVERY_THRESHOLD = 500.0

# Fixed tax rate (5%)
TAX_RATE = 0.05

_CENTS = Decimal("0.01")


def round_money(value: float) -> float:
    """
    Round half-up to 2 decimal places.
    """
    return float(Decimal(repr(value)).quantize(_CENTS, rounding=ROUND_HALF_UP))


def customization_surcharge(customizations: Iterable[Customization]) -> float:
    """
    Sum of the prices of every selected value across every group.
    Prices come from the add-time snapshot and are not re-validated.
    """
    return sum(
        value.price
        for group in customizations
        for value in group.selected_values
    )


def unit_price(item: CartLineItem) -> float:
    """
    (base price + surcharge), reduced by the product discount when > 0.
    """
    price = item.product.base_price + customization_surcharge(item.customizations)
    if item.product.discount > 0:
        price = price * (1 - item.product.discount / 100)
    return price


def line_total(item: CartLineItem) -> float:
    return unit_price(item) * item.quantity


def cart_totals(items: Iterable[CartLineItem]) -> CartTotals:
    """
    Aggregate cart totals.

      subtotal     = sum of line totals
      delivery_fee = 50 below a 500 subtotal, else 0
      tax          = 5% of subtotal
      total        = round(subtotal) + delivery_fee + round(tax)

    subtotal and tax are rounded independently before being summed.
    """
    items = list(items)
    raw_subtotal = sum(line_total(it) for it in items)

    delivery_fee = DELIVERY_FEE if raw_subtotal < FREE_DELIVERY_THRESHOLD else 0.0
    subtotal = round_money(raw_subtotal)
    tax = round_money(raw_subtotal * TAX_RATE)

    return CartTotals(
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        tax=tax,
        total=round_money(subtotal + delivery_fee + tax),
        item_count=sum(it.quantity for it in items),
    )
