"""Detail view model for one evaluation record."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from cqd.dashboard.client import ApiError
from cqd.schemas import PARSE_ERROR_MESSAGE

NOT_AVAILABLE = "N/A"
NO_SUMMARY = "No summary available."

SCORE_BANDS = ((60, "critical"), (70, "poor"), (80, "fair"), (90, "good"))

_HIGHLIGHT_LANGUAGES = {
    "bash", "c", "cpp", "csharp", "dart", "go", "java", "javascript", "kotlin",
    "php", "python", "ruby", "rust", "scala", "shell", "swift", "typescript",
}
_HIGHLIGHT_ALIASES = {
    "c#": "csharp",
    "dotnet": "csharp",
    "golang": "go",
    "node": "javascript",
    "nodejs": "javascript",
    "js": "javascript",
    "ts": "typescript",
    "c++": "cpp",
}


def score_band(score: Any) -> str:
    """Colour band for a 0-100 score."""
    if not isinstance(score, (int, float)):
        return "unknown"
    for ceiling, band in SCORE_BANDS:
        if score <= ceiling:
            return band
    return "excellent"


def format_date(value: Any) -> str:
    """Long-form date such as ``June 1, 2024``, or N/A when absent or unparseable.

    Accepts datetimes, ISO strings and the ``{"value": ...}`` wrapper BigQuery
    uses for timestamps in JSON.
    """
    if isinstance(value, dict):
        value = value.get("value")
    if isinstance(value, str) and value.strip():
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return NOT_AVAILABLE
    if not isinstance(value, datetime):
        return NOT_AVAILABLE
    return f"{value:%B} {value.day}, {value.year}"


def normalize_fix_summary(value: Any) -> list[str]:
    """Fix summary as trimmed, non-empty lines from either a list or a newline-delimited string."""
    if isinstance(value, str):
        lines = value.split("\n")
    elif isinstance(value, (list, tuple)):
        lines = [str(item) for item in value if item is not None]
    else:
        return []
    return [line.strip() for line in lines if line.strip()]


def highlight_language(language: str | None) -> str:
    name = (language or "").strip().lower()
    name = _HIGHLIGHT_ALIASES.get(name, name)
    return name if name in _HIGHLIGHT_LANGUAGES else "text"


@dataclass(frozen=True)
class CriterionView:
    name: str
    score: Any
    weight: Any
    assessment: str
    recommendation: str


def _criterion(raw: dict[str, Any]) -> CriterionView:
    recommendation = raw.get("recommendations_for_llm_fix") or NOT_AVAILABLE
    # Markdown bullet list
    if isinstance(recommendation, list):
        recommendation = "\n".join(f"- {item}" for item in recommendation)
    return CriterionView(
        name=raw.get("criterion_name") or NOT_AVAILABLE,
        score=raw.get("score"),
        weight=raw.get("weight"),
        assessment=raw.get("assessment") or NOT_AVAILABLE,
        recommendation=str(recommendation),
    )


@dataclass
class DetailView:
    score: Any
    band: str
    github_link: str | None
    last_updated: str
    evaluated: str
    problem_categories: list[str] = field(default_factory=list)
    criteria: list[CriterionView] = field(default_factory=list)
    fix_summary: list[str] = field(default_factory=list)
    data_error: str | None = None
    code: str | None = None
    code_error: str | None = None
    code_language: str = "text"

    @property
    def fix_summary_lines(self) -> list[str]:
        return self.fix_summary or [NO_SUMMARY]


def _load_code(
    detail: dict[str, Any], fetch_code: Callable[[str], str] | None
) -> tuple[str | None, str | None]:
    raw_code = detail.get("raw_code")
    if raw_code:
        return raw_code, None
    link = detail.get("github_link")
    if not link:
        return None, "Raw code is missing and the sample has no GitHub link."
    if fetch_code is None:
        return None, "Raw code is missing from the data."
    try:
        return fetch_code(link), None
    except ApiError as exc:
        return None, f"Could not retrieve code. {exc}"


def build_detail_view(
    detail: dict[str, Any],
    language: str | None = None,
    fetch_code: Callable[[str], str] | None = None,
) -> DetailView:
    """
    Shape a detail record for display.

    Source text comes from ``raw_code`` when the record embeds it, otherwise
    from ``fetch_code(github_link)``. A failed fetch is reported on the view
    as ``code_error`` and the rest of the view is still built.
    """
    evaluation = detail.get("evaluation_data_raw_json")
    if not isinstance(evaluation, dict):
        evaluation = {}
    data_error = None
    if evaluation.get("error") == PARSE_ERROR_MESSAGE:
        data_error = PARSE_ERROR_MESSAGE

    code, code_error = _load_code(detail, fetch_code)
    score = detail.get("overall_compliance_score")
    return DetailView(
        score=score,
        band=score_band(score),
        github_link=detail.get("github_link") or None,
        last_updated=format_date(detail.get("last_updated_date")),
        evaluated=format_date(detail.get("evaluation_date")),
        problem_categories=[
            str(c) for c in evaluation.get("identified_generic_problem_categories") or []
        ],
        criteria=[
            _criterion(c)
            for c in evaluation.get("criteria_breakdown") or []
            if isinstance(c, dict)
        ],
        fix_summary=normalize_fix_summary(evaluation.get("llm_fix_summary_for_code_generation")),
        data_error=data_error,
        code=code,
        code_error=code_error,
        code_language=highlight_language(language),
    )
