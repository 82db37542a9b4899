"""Pydantic v2 models for parsed queries, constraints and category clarification."""

from typing import Literal

from pydantic import BaseModel

DimensionAxis = Literal["any", "width", "length"]
Goal = Literal["style", "function", "outdoor"]
RequiredType = Literal["nightstand", "tv-cabinet", "display-cabinet", "dresser", "shelf", "table", "chair"]


class ParsedConstraints(BaseModel):
    """Structured signals extracted from a free-text message."""

    budget_max: float | None = None
    goal: Goal | None = None
    product_types: list[str] = []
    tags: list[str] = []


class DimensionProfile(BaseModel):
    """All dimensions (cm) mentioned in a product title/handle."""

    all: list[float] = []
    width_candidates: list[float] = []
    length_candidates: list[float] = []
    max_dimension: float | None = None


class QuerySemantics(BaseModel):
    """Per-query interpretation used to filter and score candidates."""

    normalized_query: str
    small_preferred: bool = False
    required_type: RequiredType | None = None
    required_aliases: list[str] = []
    excluded_aliases: list[str] = []
    dimension_max_cm: float | None = None
    dimension_min_cm: float | None = None
    has_dimension_request: bool = False
    dimension_axis: DimensionAxis = "any"


class ClarificationOption(BaseModel):
    """One sub-category the user can pick when the query is too broad."""

    label: str
    query_token: str
    keywords: list[str] = []
    slug: str = ""
    count: int = 0


class ClarificationPlan(BaseModel):
    main_category_label: str
    main_category_slug: str = ""
    options: list[ClarificationOption]


class FaqAnswer(BaseModel):
    answer: str
    topic: str | None = None
    recommended_link: str
    links: dict[str, str] = {}
