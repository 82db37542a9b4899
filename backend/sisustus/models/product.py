"""Pydantic v2 models for catalog products, product cards and categories."""

import re

from pydantic import BaseModel, Field


def format_price(amount: float, symbol: str = "€") -> str:
    """Format a major-unit amount the way cards display it, e.g. ``129.00€``."""
    return f"{amount:.2f}{symbol}"


def parse_price(display_price: str | None) -> float:
    """Parse a displayed price string back into a number.

    Everything except digits and the decimal point is stripped, so the value
    summed for a bundle is exactly the value the user sees.
    """
    cleaned = re.sub(r"[^0-9.]", "", display_price or "")
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


class Category(BaseModel):
    """A node of the store's product category tree."""

    model_config = {"from_attributes": True}

    id: int
    name: str
    slug: str
    parent: int = 0
    count: int = 0


class ProductCard(BaseModel):
    """Product card returned to the storefront widget."""

    model_config = {"from_attributes": True}

    id: str
    title: str
    handle: str = ""
    image: str = ""
    price: str = ""
    compare_at_price: str | None = None
    reason: str = ""
    variant_id: str = ""
    permalink: str | None = None
    category_names: list[str] = []
    category_slugs: list[str] = []

    # Used for matching only, never sent to the client.
    description: str = Field(default="", exclude=True)


class ProductCandidate(BaseModel):
    """Read-only snapshot of a catalog product with numeric prices."""

    model_config = {"from_attributes": True, "frozen": True}

    id: str
    title: str
    handle: str = ""
    price: float = 0.0
    compare_at_price: float = 0.0
    image: str = ""
    permalink: str = ""
    category_names: list[str] = []
    category_slugs: list[str] = []
    description: str = ""

    def to_card(self, symbol: str = "€") -> ProductCard:
        """Convert to a display card; compare-at price only when it is higher."""
        return ProductCard(
            id=self.id,
            title=self.title,
            handle=self.handle,
            image=self.image,
            price=format_price(self.price, symbol),
            compare_at_price=(
                format_price(self.compare_at_price, symbol)
                if self.compare_at_price > self.price
                else None
            ),
            variant_id=self.id,
            permalink=self.permalink,
            category_names=list(self.category_names),
            category_slugs=list(self.category_slugs),
            description=self.description,
        )
