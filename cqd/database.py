"""Warehouse engine and query adapter."""

import logging
from functools import lru_cache
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from cqd.config import get_settings
from cqd.exceptions import UpstreamError

logger = logging.getLogger(__name__)


@lru_cache
def get_engine() -> Engine:
    """BigQuery engine; credentials come from Application Default Credentials."""
    settings = get_settings()
    return create_engine(
        f"bigquery://{settings.warehouse_project}",
        echo=settings.log_level == "DEBUG",
    )


def _error_detail(exc: SQLAlchemyError) -> str:
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


class Warehouse:
    """Runs parameterized read queries against the evaluation table."""

    def __init__(self, engine: Engine, table_id: str):
        self.engine = engine
        self.table_id = table_id

    @property
    def table(self) -> str:
        """Quoted table reference for interpolation into SQL."""
        return f"`{self.table_id}`"

    @property
    def tagged_rows(self) -> str:
        """Derived table with one row per (record, region tag); the tag is in column ``tag``."""
        return f"(SELECT t.*, tag FROM {self.table} AS t, UNNEST(t.region_tags) AS tag)"

    def has_region_tag(self, param: str) -> str:
        """Predicate matching records whose region_tags contain the bound ``param``."""
        return f":{param} IN UNNEST(region_tags)"

    def query(self, sql: str, **params: Any) -> list[dict[str, Any]]:
        """Execute ``sql`` with bound ``params`` and return rows as dicts."""
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text(sql), params)
                return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as exc:
            logger.error("Warehouse query failed: %s", _error_detail(exc), exc_info=True)
            raise UpstreamError("Upstream query failed.", details=_error_detail(exc)) from exc


def get_warehouse() -> Warehouse:
    """Dependency for the warehouse adapter."""
    return Warehouse(get_engine(), get_settings().bigquery_table_id)
