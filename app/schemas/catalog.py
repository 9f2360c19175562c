# app/schemas/catalog.py
from typing import Literal

from pydantic import Field

from app.schemas.base import CamelModel

ProductCategory = Literal["Pizza", "Burgers", "Fries", "Beverages", "Combos", "Desserts"]
GroupType = Literal["single", "multiple"]


class CustomizationChoice(CamelModel):
    """
    One selectable value inside a customization group, with its surcharge.
    """

    name: str
    price: float = 0.0
    is_default: bool = False


class CustomizationGroup(CamelModel):
    """
    Named set of paid options attached to a product.

    - type="single"   : exactly one choice (radio)
    - type="multiple" : any number of choices (checkboxes)
    """

    name: str
    type: GroupType
    required: bool = False
    options: list[CustomizationChoice] = Field(default_factory=list)

    def find_choice(self, name: str) -> CustomizationChoice | None:
        for choice in self.options:
            if choice.name == name:
                return choice
        return None


class CatalogProduct(CamelModel):
    """
    Product definition as served by the catalog service. Read-only input.
    """

    id: str
    name: str
    description: str = ""
    category: ProductCategory
    base_price: float = Field(ge=0)
    discount: float = Field(default=0, ge=0, le=100)
    image: str | None = None
    is_available: bool = True
    customization_options: list[CustomizationGroup] = Field(default_factory=list)

    def find_group(self, name: str) -> CustomizationGroup | None:
        for group in self.customization_options:
            if group.name == name:
                return group
        return None
