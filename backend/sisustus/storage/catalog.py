"""
WooCommerce Store API client.

Reads products and the category tree from the public Store API
(``/wp-json/wc/store/v1``) and maps them onto ProductCandidate / ProductCard
/ Category models. Upstream errors never propagate: they are logged and the
caller gets an empty result.
"""

import json
import logging

import httpx

from sisustus.config import (
    CATALOG_PAGE_SIZE,
    CATALOG_TTL_SECONDS,
    CATEGORY_TREE_MAX_PAGES,
    CATEGORY_TREE_TTL_SECONDS,
    COMMERCE_CONFIG,
    DESCRIPTION_MAX_CHARS,
    HTTP_TIMEOUT_SECONDS,
    MAX_CATALOG_PRODUCTS,
    SEARCH_TTL_SECONDS,
    STORE_BASE_URL,
)
from sisustus.models.product import Category, ProductCandidate, ProductCard, parse_price
from sisustus.services.text import strip_html
from sisustus.storage.cache import NullCache, TTLCache

logger = logging.getLogger(__name__)

PRODUCTS_PATH = "/wp-json/wc/store/v1/products"
CATEGORIES_PATH = "/wp-json/wc/store/v1/products/categories"


# ---------------------------------------------------------------------------
# Mapping helpers (Store API dict -> models)
# ---------------------------------------------------------------------------

def _minor_to_major(raw, minor_unit: int) -> float:
    try:
        return float(raw or 0) / (10 ** minor_unit)
    except (TypeError, ValueError):
        return 0.0


def map_product(raw: dict) -> ProductCandidate:
    """Convert one Store API product into a ProductCandidate."""
    prices = raw.get("prices") or {}
    try:
        minor_unit = int(prices.get("currency_minor_unit", 2))
    except (TypeError, ValueError):
        minor_unit = 2

    images = raw.get("images") or []
    first_image = images[0] if images else {}
    categories = raw.get("categories") or []
    description = strip_html(raw.get("short_description") or raw.get("description") or "")

    return ProductCandidate(
        id=str(raw.get("id", "")),
        title=strip_html(raw.get("name") or ""),
        handle=raw.get("slug") or "",
        price=_minor_to_major(prices.get("price"), minor_unit),
        compare_at_price=_minor_to_major(prices.get("regular_price"), minor_unit),
        image=first_image.get("src") or first_image.get("thumbnail") or "",
        permalink=raw.get("permalink") or "",
        category_names=[c.get("name", "") for c in categories if c.get("name")],
        category_slugs=[c.get("slug", "") for c in categories if c.get("slug")],
        description=description[:DESCRIPTION_MAX_CHARS],
    )


def map_category(raw: dict) -> Category:
    return Category(
        id=int(raw.get("id", 0)),
        name=raw.get("name") or "",
        slug=raw.get("slug") or "",
        parent=int(raw.get("parent") or 0),
        count=int(raw.get("count") or 0),
    )


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class CatalogClient:
    """Blocking Store API client with a read-through TTL cache."""

    def __init__(
        self,
        base_url: str = STORE_BASE_URL,
        cache: TTLCache | NullCache | None = None,
        http_client: httpx.Client | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self.cache = cache if cache is not None else TTLCache()
        self._http = http_client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )
        self.currency_symbol = COMMERCE_CONFIG["currency_symbol"]

    def close(self) -> None:
        self._http.close()

    def _get_json(self, path: str, params: dict) -> list | None:
        query = {key: value for key, value in params.items() if value is not None and value != ""}
        try:
            response = self._http.get(f"{self.base_url}{path}", params=query)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            logger.error("[catalog] Store API request %s failed: %s", path, exc)
        except json.JSONDecodeError as exc:
            logger.error("[catalog] Store API returned invalid JSON for %s: %s", path, exc)
        return None

    # -- Raw endpoints ---------------------------------------------------------

    def list_products(
        self,
        search: str | None = None,
        page: int = 1,
        per_page: int = 12,
        min_price: int | None = None,
        max_price: int | None = None,
        category: str | None = None,
        include: list[int] | None = None,
        slug: str | None = None,
        order: str | None = None,
        orderby: str | None = None,
    ) -> list[ProductCandidate]:
        data = self._get_json(
            PRODUCTS_PATH,
            {
                "search": search,
                "page": page,
                "per_page": per_page,
                "min_price": min_price,
                "max_price": max_price,
                "category": category,
                "include": ",".join(str(i) for i in include) if include else None,
                "slug": slug,
                "order": order,
                "orderby": orderby,
            },
        )
        if not isinstance(data, list):
            return []
        return [map_product(raw) for raw in data if isinstance(raw, dict)]

    def list_categories(
        self,
        page: int = 1,
        per_page: int = 100,
        hide_empty: bool = False,
        parent: int | None = None,
    ) -> list[Category]:
        data = self._get_json(
            CATEGORIES_PATH,
            {
                "page": page,
                "per_page": per_page,
                "hide_empty": "true" if hide_empty else None,
                "parent": parent,
            },
        )
        if not isinstance(data, list):
            return []
        return [map_category(raw) for raw in data if isinstance(raw, dict)]

    # -- Cached views ------------------------------------------------------------

    def fetch_all_categories(self, max_pages: int = CATEGORY_TREE_MAX_PAGES) -> list[Category]:
        """The whole non-empty category tree (cached 10 min)."""
        cache_key = "catalog:categories"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        per_page = 100
        categories: list[Category] = []
        for page in range(1, max(1, min(max_pages, 50)) + 1):
            batch = self.list_categories(page=page, per_page=per_page, hide_empty=True)
            categories.extend(batch)
            if len(batch) < per_page:
                break

        if categories:
            self.cache.set(cache_key, categories, CATEGORY_TREE_TTL_SECONDS)
        return categories

    def fetch_catalog(self) -> list[ProductCandidate]:
        """Newest products, up to MAX_CATALOG_PRODUCTS (cached 5 min)."""
        cache_key = "catalog:products"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        products: list[ProductCandidate] = []
        page = 1
        while len(products) < MAX_CATALOG_PRODUCTS:
            batch = self.list_products(page=page, per_page=CATALOG_PAGE_SIZE, order="desc", orderby="date")
            if not batch:
                break
            products.extend(batch[: MAX_CATALOG_PRODUCTS - len(products)])
            if len(batch) < CATALOG_PAGE_SIZE:
                break
            page += 1

        logger.info("[catalog] Loaded %d products", len(products))
        if products:
            self.cache.set(cache_key, products, CATALOG_TTL_SECONDS)
        return products

    def search_cards(self, query: str, limit: int = 4, budget_max: float | None = None) -> list[ProductCard]:
        """Keyword search through the store, as display cards (cached 60 s)."""
        limit = max(1, min(limit, 30))
        cache_key = f"catalog:search:{query}:{limit}:{budget_max}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        products = self.list_products(
            search=query,
            per_page=min(max(limit * 3, 8), 30),
            order="desc",
            orderby="date",
        )
        cards = [product.to_card(self.currency_symbol) for product in products]
        if budget_max:
            cards = [card for card in cards if parse_price(card.price) <= budget_max]

        cards = cards[:limit]
        self.cache.set(cache_key, cards, SEARCH_TTL_SECONDS)
        return cards

    def get_product(self, handle_or_id: str) -> ProductCard | None:
        """Look a product up by numeric id or by slug."""
        raw = (handle_or_id or "").strip()
        if not raw:
            return None

        if raw.isdigit():
            if int(raw) <= 0:
                return None
            products = self.list_products(include=[int(raw)], per_page=1)
        else:
            products = self.list_products(slug=raw, per_page=1)
        return products[0].to_card(self.currency_symbol) if products else None
