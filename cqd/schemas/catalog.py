"""Response shapes for the catalog endpoints."""

from pydantic import BaseModel

PARSE_ERROR_MESSAGE = "Failed to parse evaluation data."


class ProductAreaSummary(BaseModel):
    """One product area for a language, aggregated over its records."""

    product_name: str
    samples: int
    score: int | None = None


class RegionTagSummary(BaseModel):
    """Score of the most recent record carrying a region tag."""

    name: str
    score: int | float | None = None


class AppConfig(BaseModel):
    """Deployment diagnostics shown in the dashboard footer."""

    projectId: str | None = None
    bigqueryView: str
