"""Shared fixtures. Environment is set before any cqd module reads settings."""

import json
import os

os.environ.setdefault("BIGQUERY_TABLE_ID", "test-project.test_dataset.test_table")
os.environ.setdefault("PROJECT_ID", "test-project")

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from cqd.dashboard.client import ApiError
from cqd.database import Warehouse


class FakeWarehouse(Warehouse):
    """Records queries and returns canned rows."""

    def __init__(self, rows=None, error=None):
        super().__init__(None, "test-project.test_dataset.test_table")
        self.rows = rows or []
        self.error = error
        self.calls = []

    def query(self, sql, **params):
        self.calls.append((sql, params))
        if self.error is not None:
            raise self.error
        return [dict(row) for row in self.rows]


class SqliteWarehouse(Warehouse):
    """Evaluation table in SQLite; region_tags is stored as a JSON array string."""

    @property
    def tagged_rows(self):
        return f"(SELECT t.*, j.value AS tag FROM {self.table} AS t, json_each(t.region_tags) AS j)"

    def has_region_tag(self, param):
        return f"EXISTS (SELECT 1 FROM json_each(region_tags) WHERE value = :{param})"


@pytest.fixture
def fake_warehouse():
    return FakeWarehouse()


@pytest.fixture
def sqlite_warehouse():
    """Warehouse over an in-memory SQLite table with the evaluation columns."""
    engine = create_engine(
        "sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False}
    )
    with engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TABLE evaluations ("
                "sample_language TEXT, product_name TEXT, github_link TEXT, "
                "overall_compliance_score REAL, evaluation_date TEXT, "
                "region_tags TEXT DEFAULT '[]', evaluation_data_raw_json TEXT)"
            )
        )
    return SqliteWarehouse(engine, "evaluations")


@pytest.fixture
def insert_records(sqlite_warehouse):
    """Insert rows into the SQLite evaluation table; region_tags may be given as a list."""

    def insert(*records):
        with sqlite_warehouse.engine.begin() as conn:
            for record in records:
                record = dict(record)
                if isinstance(record.get("region_tags"), (list, tuple)):
                    record["region_tags"] = json.dumps(list(record["region_tags"]))
                columns = ", ".join(record)
                values = ", ".join(f":{name}" for name in record)
                conn.execute(
                    text(f"INSERT INTO evaluations ({columns}) VALUES ({values})"), record
                )

    return insert


class FakeApi:
    """In-memory stand-in for DashboardApi that counts calls."""

    def __init__(self):
        self.calls = []
        self.fail = set()
        self.hooks = {}
        self.languages_data = ["go", "", "python"]
        self.product_area_data = {
            "go": [
                {"product_name": "Cloud Run", "samples": 4, "score": 81},
                {"product_name": "Storage", "samples": 2, "score": 64},
                {"product_name": "Pub/Sub", "samples": 2, "score": 92},
            ],
            "python": [{"product_name": "BigQuery", "samples": 7, "score": 77}],
        }
        self.region_tag_data = {
            ("go", "Cloud Run"): [
                {"name": "run_quickstart", "score": 55},
                {"name": "run_deploy", "score": 88},
            ],
            ("go", "Storage"): [{"name": "storage_upload", "score": 70}],
        }
        self.detail_data = {
            ("go", "Cloud Run", "run_quickstart"): {
                "overall_compliance_score": 55,
                "github_link": "https://github.com/org/repo/blob/main/run/main.go",
                "evaluation_date": "2024-06-01T00:00:00+00:00",
                "last_updated_date": None,
                "raw_code": None,
                "evaluation_data_raw_json": {
                    "identified_generic_problem_categories": ["Error handling"],
                    "criteria_breakdown": [],
                    "llm_fix_summary_for_code_generation": "Check errors\nClose client",
                },
            }
        }
        self.code = "package main\n"

    def _call(self, name, *args):
        self.calls.append((name, *args))
        hook = self.hooks.pop(name, None)
        if hook is not None:
            hook()
        if name in self.fail:
            raise ApiError(f"{name} unavailable", status_code=500)

    def network_calls(self):
        return len(self.calls)

    def config(self):
        self._call("config")
        return {"projectId": "test-project", "bigqueryView": "p.d.t"}

    def languages(self):
        self._call("languages")
        return list(self.languages_data)

    def product_areas(self, language):
        self._call("product_areas", language)
        return [dict(row) for row in self.product_area_data.get(language, [])]

    def region_tags(self, language, product_name):
        self._call("region_tags", language, product_name)
        return [dict(row) for row in self.region_tag_data.get((language, product_name), [])]

    def details(self, language, product_name, region_tag):
        self._call("details", language, product_name, region_tag)
        detail = self.detail_data.get((language, product_name, region_tag))
        if detail is None:
            raise ApiError("Details not found for the given selection.", status_code=404)
        return dict(detail)

    def fetch_code(self, url):
        self._call("fetch_code", url)
        return self.code


@pytest.fixture
def fake_api():
    return FakeApi()
