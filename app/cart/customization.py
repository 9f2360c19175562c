# app/cart/customization.py
from typing import Mapping, Sequence

from app.schemas.cart import Customization, ProductSnapshot, SelectedValue
from app.schemas.catalog import CatalogProduct

# group name -> choice name (single) or list of choice names (multiple)
Selections = Mapping[str, str | Sequence[str]]


class CustomizationError(ValueError):
    """
    Raised when a selection does not fit the product's customization groups.
    """


def snapshot_product(product: CatalogProduct) -> ProductSnapshot:
    return ProductSnapshot(
        id=product.id,
        name=product.name,
        base_price=product.base_price,
        discount=product.discount,
        image=product.image,
        category=product.category,
    )


def default_selections(product: CatalogProduct) -> dict[str, str | list[str]]:
    """
    Starting selection for a product: the default choice of each single
    group (or its first choice), and every default choice of each
    multiple group.
    """
    selections: dict[str, str | list[str]] = {}
    for group in product.customization_options:
        if not group.options:
            continue
        if group.type == "single":
            default = next((c for c in group.options if c.is_default), group.options[0])
            selections[group.name] = default.name
        else:
            selections[group.name] = [c.name for c in group.options if c.is_default]
    return selections


def resolve_customizations(
    product: CatalogProduct,
    selections: Selections,
) -> list[Customization]:
    """
    Turn group -> choice-name selections into priced customizations,
    in the product's group order.

    Raises CustomizationError for unknown groups or choices, more than one
    choice in a single group, or a required group left empty.
    """
    for name in selections:
        if product.find_group(name) is None:
            raise CustomizationError(f"Unknown customization group: {name}")

    resolved: list[Customization] = []
    for group in product.customization_options:
        raw = selections.get(group.name)
        names = [raw] if isinstance(raw, str) else list(raw or [])

        if group.type == "single" and len(names) > 1:
            raise CustomizationError(f"{group.name}: choose only one option")
        if group.required and not names:
            raise CustomizationError(f"{group.name} is required")
        if not names:
            continue

        values: list[SelectedValue] = []
        for choice_name in names:
            choice = group.find_choice(choice_name)
            if choice is None:
                raise CustomizationError(f"{group.name}: unknown option {choice_name}")
            values.append(SelectedValue(name=choice.name, price=choice.price))

        resolved.append(Customization(option_name=group.name, selected_values=values))
    return resolved


def customization_summary(customizations: Sequence[Customization]) -> str:
    """
    "Size: Large | Toppings: Cheese, Olives" or "No customizations".
    """
    if not customizations:
        return "No customizations"
    return " | ".join(
        f"{c.option_name}: {', '.join(v.name for v in c.selected_values)}"
        for c in customizations
    )
