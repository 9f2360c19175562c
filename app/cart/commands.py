# app/cart/commands.py
"""
Cart state transitions.

The cart is a tuple of CartLineItem. Every mutation is expressed as a
command and applied by `apply(state, command)`, which never mutates its
input and performs no I/O. The store persists after each transition.

Line identity:
    "<product id>_<canonical customizations JSON>"
Customization groups are sorted by option name and the values inside a
group by name, so the same selection made in a different order yields
the same key.
"""
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence, Union

from app.schemas.cart import CartLineItem, Customization, ProductSnapshot

CartState = tuple[CartLineItem, ...]


def canonical_customizations(customizations: Sequence[Customization]) -> str:
    groups = sorted(
        (
            {
                "optionName": group.option_name,
                "selectedValues": sorted(
                    ({"name": v.name, "price": v.price} for v in group.selected_values),
                    key=lambda v: (v["name"], v["price"]),
                ),
            }
            for group in customizations
        ),
        key=lambda g: (g["optionName"], json.dumps(g["selectedValues"], sort_keys=True)),
    )
    return json.dumps(groups, sort_keys=True, separators=(",", ":"))


def identity_key(product_id: str, customizations: Sequence[Customization]) -> str:
    return f"{product_id}_{canonical_customizations(customizations)}"


# ---- commands ----


@dataclass(frozen=True)
class LoadCart:
    items: Sequence[CartLineItem]


@dataclass(frozen=True)
class AddItem:
    product: ProductSnapshot
    quantity: int = 1
    customizations: Sequence[Customization] = field(default_factory=tuple)
    special_instructions: str = ""


@dataclass(frozen=True)
class UpdateItem:
    """
    quantity <= 0 removes the line. customizations / special_instructions
    are only applied when not None.
    """

    line_id: str
    quantity: int
    customizations: Sequence[Customization] | None = None
    special_instructions: str | None = None


@dataclass(frozen=True)
class RemoveItem:
    line_id: str


@dataclass(frozen=True)
class ClearCart:
    pass


@dataclass(frozen=True)
class Recustomize:
    line_id: str
    customizations: Sequence[Customization]


CartCommand = Union[LoadCart, AddItem, UpdateItem, RemoveItem, ClearCart, Recustomize]


# ---- transitions ----


def _index_of(state: CartState, line_id: str) -> int | None:
    for i, item in enumerate(state):
        if item.id == line_id:
            return i
    return None


def _add(state: CartState, cmd: AddItem) -> CartState:
    if cmd.quantity < 1:
        return state

    key = identity_key(cmd.product.id, cmd.customizations)
    idx = _index_of(state, key)

    if idx is not None:
        existing = state[idx]
        merged = existing.model_copy(update={"quantity": existing.quantity + cmd.quantity})
        return state[:idx] + (merged,) + state[idx + 1:]

    item = CartLineItem(
        id=key,
        product=cmd.product,
        quantity=cmd.quantity,
        customizations=list(cmd.customizations),
        special_instructions=cmd.special_instructions or "",
        added_at=datetime.now(timezone.utc),
    )
    return state + (item,)


def _remove(state: CartState, line_id: str) -> CartState:
    return tuple(item for item in state if item.id != line_id)


def _recustomize(
    state: CartState,
    line_id: str,
    customizations: Sequence[Customization],
) -> CartState:
    idx = _index_of(state, line_id)
    if idx is None:
        return state

    item = state[idx]
    new_key = identity_key(item.product.id, customizations)
    target = _index_of(state, new_key)

    if target is not None and target != idx:
        # Fold this line into the one that already has the new identity.
        other = state[target]
        merged = other.model_copy(update={"quantity": other.quantity + item.quantity})
        rebuilt = list(state)
        rebuilt[target] = merged
        del rebuilt[idx]
        return tuple(rebuilt)

    rewritten = item.model_copy(
        update={"id": new_key, "customizations": list(customizations)}
    )
    return state[:idx] + (rewritten,) + state[idx + 1:]


def _update(state: CartState, cmd: UpdateItem) -> CartState:
    if cmd.quantity <= 0:
        return _remove(state, cmd.line_id)

    idx = _index_of(state, cmd.line_id)
    if idx is None:
        return state

    changes: dict = {"quantity": cmd.quantity}
    if cmd.special_instructions is not None:
        changes["special_instructions"] = cmd.special_instructions
    updated = state[idx].model_copy(update=changes)
    state = state[:idx] + (updated,) + state[idx + 1:]

    if cmd.customizations is not None:
        state = _recustomize(state, cmd.line_id, cmd.customizations)
    return state


def apply(state: CartState, command: CartCommand) -> CartState:
    """
    Return the cart state after `command`. Unknown line ids are no-ops.
    """
    if isinstance(command, LoadCart):
        return tuple(command.items)
    if isinstance(command, AddItem):
        return _add(state, command)
    if isinstance(command, UpdateItem):
        return _update(state, command)
    if isinstance(command, RemoveItem):
        return _remove(state, command.line_id)
    if isinstance(command, ClearCart):
        return ()
    if isinstance(command, Recustomize):
        return _recustomize(state, command.line_id, command.customizations)
    raise TypeError(f"Unknown cart command: {command!r}")
