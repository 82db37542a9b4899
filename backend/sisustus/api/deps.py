"""Shared dependencies for the API routers (overridable in tests)."""

from sisustus.services.llm import AIAssist, get_assist as build_assist
from sisustus.storage.catalog import CatalogClient

_catalog: CatalogClient | None = None
_assist: AIAssist | None = None


def get_catalog() -> CatalogClient:
    """Process-wide Store API client, so its cache is shared across requests."""
    global _catalog
    if _catalog is None:
        _catalog = CatalogClient()
    return _catalog


def get_assist() -> AIAssist:
    global _assist
    if _assist is None:
        _assist = build_assist()
    return _assist


def close_catalog() -> None:
    """Release the Store API client's HTTP connections (app shutdown)."""
    global _catalog
    if _catalog is not None:
        _catalog.close()
        _catalog = None
