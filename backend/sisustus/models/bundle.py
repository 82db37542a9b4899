"""Pydantic v2 models for the bundle builder: answers, items, bundles."""

from typing import Literal

from pydantic import BaseModel

from sisustus.models.product import ProductCard, parse_price

BundleRole = Literal["ankur", "lisatoode", "aksessuaar"]


class ElementPreference(BaseModel):
    """Style / material wish for a single selected element."""

    element: str
    style: str | None = None
    material: str | None = None


class BundleAnswers(BaseModel):
    """Answers collected by the bundle builder questionnaire."""

    room: str | None = None
    anchor_product: str | None = None
    budget_range: str | None = None
    budget_custom: float | None = None
    selected_elements: list[str] = []
    element_preferences: list[ElementPreference] = []
    style: str | None = None
    color_tone: str | None = None
    material_preference: str | None = None
    has_children: bool = False
    has_pets: bool = False
    dimensions_known: bool = False
    width_cm: float | None = None
    length_cm: float | None = None


class BundleItem(ProductCard):
    """A product placed in a bundle slot."""

    role_in_bundle: BundleRole
    why_chosen: str = ""
    element_key: str | None = None
    alternatives: list[ProductCard] = []


def item_from_card(
    card: ProductCard,
    role: BundleRole,
    why_chosen: str = "",
    element_key: str | None = None,
) -> BundleItem:
    """Place *card* into a bundle slot."""
    fields = card.model_dump(include=set(ProductCard.model_fields))
    return BundleItem(
        **fields,
        description=card.description,
        role_in_bundle=role,
        why_chosen=why_chosen,
        element_key=element_key,
    )


class Bundle(BaseModel):
    title: str
    style_summary: str = ""
    total_price: float = 0.0
    items: list[BundleItem] = []
    key_reasons: list[str] = []
    tradeoffs: list[str] = []

    def recompute_total(self) -> float:
        """Set ``total_price`` to the sum of the displayed item prices."""
        self.total_price = round(sum(parse_price(item.price) for item in self.items), 2)
        return self.total_price

    def signature(self) -> str:
        """Sorted, joined item ids; equal signatures mean the same product set."""
        return "|".join(sorted(item.id for item in self.items))

    def remove_item(self, item_id: str) -> BundleItem | None:
        """Remove the item with *item_id* and re-derive the total."""
        for index, item in enumerate(self.items):
            if item.id == item_id:
                removed = self.items.pop(index)
                self.recompute_total()
                return removed
        return None

    def replace_item(self, item_id: str, replacement: ProductCard) -> BundleItem | None:
        """Swap the item with *item_id* for *replacement*, keeping its slot.

        Returns the new item, or None if *item_id* is not in the bundle or the
        replacement is already used by another item.
        """
        if any(item.id == replacement.id for item in self.items if item.id != item_id):
            return None
        for index, item in enumerate(self.items):
            if item.id != item_id:
                continue
            swapped = item_from_card(replacement, item.role_in_bundle, item.why_chosen, item.element_key)
            self.items[index] = swapped
            self.recompute_total()
            return swapped
        return None


class BundleResponse(BaseModel):
    bundles: list[Bundle]
    message: str


class AlternativesRequest(BaseModel):
    """Request alternatives for one item of an already generated bundle."""

    answers: BundleAnswers
    bundle: Bundle
    item_id: str
