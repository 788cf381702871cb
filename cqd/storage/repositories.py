"""Read-only queries over the evaluation table."""

import json
import logging
from typing import Any

from cqd.database import Warehouse
from cqd.schemas import PARSE_ERROR_MESSAGE, ProductAreaSummary, RegionTagSummary

logger = logging.getLogger(__name__)


def list_languages(warehouse: Warehouse) -> list[str]:
    """Distinct sample languages in ascending order."""
    rows = warehouse.query(
        f"""
        SELECT DISTINCT sample_language
        FROM {warehouse.table}
        WHERE sample_language IS NOT NULL
        ORDER BY sample_language
        """
    )
    return [row["sample_language"] for row in rows]


def list_product_areas(warehouse: Warehouse, language: str) -> list[ProductAreaSummary]:
    """
    Product areas for a language with their sample count and average score.

    A sample is a distinct github_link: a file evaluated under several region
    tags is stored once per tag and must only be counted once. Records without
    a product name are left out. The average is rounded once, after
    aggregating at full precision.
    """
    rows = warehouse.query(
        f"""
        SELECT
            product_name,
            COUNT(DISTINCT github_link) AS samples,
            ROUND(AVG(overall_compliance_score)) AS score
        FROM {warehouse.table}
        WHERE sample_language = :language AND product_name IS NOT NULL
        GROUP BY product_name
        ORDER BY samples DESC, product_name ASC
        """,
        language=language,
    )
    return [
        ProductAreaSummary(
            product_name=row["product_name"],
            samples=int(row["samples"]),
            score=int(row["score"]) if row["score"] is not None else None,
        )
        for row in rows
    ]


def list_region_tags(
    warehouse: Warehouse, language: str, product_name: str
) -> list[RegionTagSummary]:
    """
    Latest score per region tag, worst first.

    Each record is expanded into one row per tag; within a tag the newest
    evaluation wins, with the greatest github_link breaking date ties.
    """
    rows = warehouse.query(
        f"""
        SELECT name, score
        FROM (
            SELECT
                tag AS name,
                overall_compliance_score AS score,
                ROW_NUMBER() OVER (
                    PARTITION BY tag
                    ORDER BY evaluation_date DESC, github_link DESC
                ) AS rn
            FROM {warehouse.tagged_rows}
            WHERE sample_language = :language AND product_name = :product_name
        )
        WHERE rn = 1
        ORDER BY score ASC, name ASC
        """,
        language=language,
        product_name=product_name,
    )
    return [RegionTagSummary(name=row["name"], score=row["score"]) for row in rows]


def decode_evaluation_data(raw: Any) -> Any:
    """Decode the stored evaluation JSON, substituting an error marker when it is malformed."""
    if raw is None or isinstance(raw, (dict, list)):
        return raw
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        logger.warning("Could not parse evaluation_data_raw_json: %s", exc)
        return {"error": PARSE_ERROR_MESSAGE}


def get_detail(
    warehouse: Warehouse, language: str, product_name: str, region_tag: str
) -> dict[str, Any] | None:
    """Most recent record for the selection, or None when no record carries the tag."""
    rows = warehouse.query(
        f"""
        SELECT *
        FROM {warehouse.table}
        WHERE sample_language = :language
            AND product_name = :product_name
            AND {warehouse.has_region_tag("region_tag")}
        ORDER BY evaluation_date DESC, github_link DESC
        LIMIT 1
        """,
        language=language,
        product_name=product_name,
        region_tag=region_tag,
    )
    if not rows:
        return None
    detail = rows[0]
    detail["evaluation_data_raw_json"] = decode_evaluation_data(
        detail.get("evaluation_data_raw_json")
    )
    return detail
