"""Catalog endpoints: languages, product areas, region tags, details."""

from typing import Any

from fastapi import APIRouter

from cqd.api.deps import SettingsDep, WarehouseDep, require_params
from cqd.exceptions import NotFoundError
from cqd.schemas import AppConfig, ProductAreaSummary, RegionTagSummary
from cqd.storage.repositories import (
    get_detail,
    list_languages,
    list_product_areas,
    list_region_tags,
)

router = APIRouter()


@router.get("/config", response_model=AppConfig)
def get_config(settings: SettingsDep):
    """Deployment diagnostics for the dashboard footer."""
    return AppConfig(projectId=settings.project_id, bigqueryView=settings.bigquery_table_id)


@router.get("/languages", response_model=list[str])
def get_languages(warehouse: WarehouseDep):
    """All sample languages, alphabetically."""
    return list_languages(warehouse)


@router.get("/product-areas", response_model=list[ProductAreaSummary])
def get_product_areas(warehouse: WarehouseDep, language: str | None = None):
    """Product areas for a language, most samples first."""
    params = require_params(language=language)
    return list_product_areas(warehouse, params["language"])


@router.get("/region-tags", response_model=list[RegionTagSummary])
def get_region_tags(
    warehouse: WarehouseDep,
    language: str | None = None,
    product_name: str | None = None,
):
    """Latest score per region tag for a product area, worst first."""
    params = require_params(language=language, product_name=product_name)
    return list_region_tags(warehouse, params["language"], params["product_name"])


@router.get("/details")
def get_details(
    warehouse: WarehouseDep,
    language: str | None = None,
    product_name: str | None = None,
    region_tag: str | None = None,
) -> dict[str, Any]:
    """Full evaluation record behind a region tag."""
    params = require_params(language=language, product_name=product_name, region_tag=region_tag)
    detail = get_detail(
        warehouse, params["language"], params["product_name"], params["region_tag"]
    )
    if detail is None:
        raise NotFoundError("Details not found for the given selection.")
    return detail
