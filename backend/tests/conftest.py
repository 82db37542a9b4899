"""Shared fixtures: product factories, an in-memory catalog and a scripted AI assist."""

import pytest

from sisustus.models.product import Category, ProductCandidate, ProductCard
from sisustus.services.text import normalize_text


def make_candidate(
    id: str,
    title: str,
    price: float = 100.0,
    slugs: list[str] | None = None,
    names: list[str] | None = None,
    description: str = "",
    handle: str | None = None,
) -> ProductCandidate:
    return ProductCandidate(
        id=id,
        title=title,
        handle=handle if handle is not None else normalize_text(title).replace(" ", "-"),
        price=price,
        category_names=names or [],
        category_slugs=slugs or [],
        description=description,
    )


def make_card(id: str, title: str, price: float = 100.0, **kwargs) -> ProductCard:
    return make_candidate(id, title, price, **kwargs).to_card()


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeCatalog:
    """In-memory stand-in for CatalogClient.

    ``search_cards`` returns products whose title, handle or category names
    contain any token of the query; ``calls`` records every search.
    """

    def __init__(self, products: list[ProductCandidate] | None = None, categories: list[Category] | None = None):
        self.products = products or []
        self.categories = categories or []
        self.calls: list[str] = []

    def search_cards(self, query: str, limit: int = 4, budget_max: float | None = None) -> list[ProductCard]:
        self.calls.append(query)
        tokens = [token for token in normalize_text(query).split(" ") if len(token) > 2]
        cards = []
        for product in self.products:
            text = normalize_text(" ".join([product.title, product.handle, *product.category_names]))
            if not any(token in text for token in tokens):
                continue
            card = product.to_card()
            if budget_max and product.price > budget_max:
                continue
            cards.append(card)
        return cards[:limit]

    def fetch_catalog(self) -> list[ProductCandidate]:
        return list(self.products)

    def fetch_all_categories(self, max_pages: int = 25) -> list[Category]:
        return list(self.categories)

    def get_product(self, handle_or_id: str) -> ProductCard | None:
        for product in self.products:
            if handle_or_id in (product.id, product.handle):
                return product.to_card()
        return None


class ScriptedAssist:
    """AIAssist returning canned answers; unset capabilities return None."""

    def __init__(self, **responses):
        self.responses = responses
        self.calls: list[str] = []

    def _answer(self, name: str):
        self.calls.append(name)
        return self.responses.get(name)

    def plan_search_queries(self, user_message, fallback_queries):
        return self._answer("plan_search_queries")

    def pick_products(self, user_message, catalog_summary, limit):
        return self._answer("pick_products")

    def generate_bundles(self, catalog, answers):
        return self._answer("generate_bundles")

    def classify_intent(self, user_message, history):
        return self._answer("classify_intent")

    def short_reply(self, user_text, context_summary):
        return self._answer("short_reply")

    def general_reply(self, user_text):
        return self._answer("general_reply")

    def product_set_summary(self, user_message, products):
        return self._answer("product_set_summary")

    def bundle_summary(self, answers, bundles):
        return self._answer("bundle_summary")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def bedroom_catalog() -> list[ProductCandidate]:
    return [
        make_candidate("1", "Diivanvoodi Luna", 650, slugs=["diivanid"], names=["Diivanid"]),
        make_candidate("2", "Voodi Nora 160x200", 890, slugs=["voodid"], names=["Voodid"]),
        make_candidate("3", "Öökapp Alva 45x40 cm", 120, slugs=["ookapid"], names=["Öökapid"]),
        make_candidate("4", "Öökapp Siri", 95, slugs=["ookapid"], names=["Öökapid"]),
        make_candidate("5", "Kummut Mira", 340, slugs=["kummutid"], names=["Kummutid"]),
        make_candidate("6", "Laevalgusti Orb", 150, slugs=["valgustid"], names=["Valgustid"]),
        make_candidate("7", "Vaip Linna 160x230", 210, slugs=["vaibad"], names=["Vaibad"]),
        make_candidate("8", "Peegel Oval", 130, slugs=["peeglid"], names=["Peeglid"]),
        make_candidate("9", "Söögilaud Tamm", 700, slugs=["soogilauad"], names=["Söögilauad"]),
        make_candidate("10", "Voodi Ada 140x200", 720, slugs=["voodid"], names=["Voodid"]),
    ]


@pytest.fixture
def cabinet_categories() -> list[Category]:
    return [
        Category(id=10, name="KAPID", slug="kapid", parent=0, count=40),
        Category(id=11, name="Öökapid", slug="ookapid", parent=10, count=12),
        Category(id=12, name="Kummutid", slug="kummutid", parent=10, count=9),
        Category(id=13, name="Riidekapid", slug="riidekapid", parent=10, count=4),
        Category(id=14, name="Tühjad kapid", slug="tuhjad", parent=10, count=0),
        Category(id=20, name="VALGUSTID", slug="valgustid", parent=0, count=30),
        Category(id=21, name="Laevalgustid", slug="laevalgustid", parent=20, count=18),
    ]
