"""
Drill-down selection state for the dashboard.

The controller owns a single DashboardState. Selecting a level fetches the
next level's list once and caches it unfiltered; filter and sort changes only
re-derive the visible rows from that cache. Each fetch remembers the selection
that issued it and its response is dropped if the selection has moved on.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Protocol
from urllib.parse import urlencode

from cqd.dashboard.client import ApiError
from cqd.dashboard.render import DetailView, build_detail_view

logger = logging.getLogger(__name__)


def _name_key(field_name: str) -> Callable[[dict], str]:
    return lambda row: str(row.get(field_name) or "").casefold()


def _number_key(field_name: str) -> Callable[[dict], float]:
    def key(row: dict) -> float:
        value = row.get(field_name)
        return float(value) if isinstance(value, (int, float)) else float("-inf")

    return key


# sort key -> (label, row key, reverse); None keeps server order
SortOptions = dict[str, tuple[str, Callable[[dict], Any], bool] | None]

PRODUCT_AREA_SORTS: SortOptions = {
    "default": None,
    "name": ("Name", _name_key("product_name"), False),
    "count-desc": ("Samples (high to low)", _number_key("samples"), True),
    "count-asc": ("Samples (low to high)", _number_key("samples"), False),
    "score-desc": ("Score (high to low)", _number_key("score"), True),
    "score-asc": ("Score (low to high)", _number_key("score"), False),
}

REGION_TAG_SORTS: SortOptions = {
    "default": None,
    "name": ("Name", _name_key("name"), False),
    "score-desc": ("Score (high to low)", _number_key("score"), True),
    "score-asc": ("Score (low to high)", _number_key("score"), False),
}


def derive_view(
    items: list[dict], name_field: str, filter_text: str, sorts: SortOptions, sort_key: str
) -> list[dict]:
    """Filter by case-insensitive substring on ``name_field``, then sort."""
    if sort_key not in sorts:
        raise ValueError(f"Unknown sort option: {sort_key}")
    needle = filter_text.strip().casefold()
    rows = [row for row in items if needle in str(row.get(name_field) or "").casefold()]
    option = sorts[sort_key]
    if option is not None:
        _, key, reverse = option
        rows.sort(key=key, reverse=reverse)
    return rows


class Level(str, Enum):
    NO_LANGUAGE = "no_language"
    LANGUAGE_SELECTED = "language_selected"
    PRODUCT_AREA_SELECTED = "product_area_selected"
    REGION_TAG_SELECTED = "region_tag_selected"


class InvalidTransition(Exception):
    """A selection was made before its parent level was chosen."""


@dataclass(frozen=True)
class Selection:
    language: str | None = None
    product_area: str | None = None
    region_tag: str | None = None

    @property
    def level(self) -> Level:
        if self.language is None:
            return Level.NO_LANGUAGE
        if self.product_area is None:
            return Level.LANGUAGE_SELECTED
        if self.region_tag is None:
            return Level.PRODUCT_AREA_SELECTED
        return Level.REGION_TAG_SELECTED


@dataclass
class CachedList:
    """Last-fetched unfiltered list for one level plus its filter inputs."""

    name_field: str
    sorts: SortOptions
    prompt: str
    empty_message: str
    items: list[dict] = field(default_factory=list)
    filter_text: str = ""
    sort_key: str = "default"
    loaded: bool = False
    error: str | None = None

    def reset(self) -> None:
        self.items = []
        self.filter_text = ""
        self.loaded = False
        self.error = None

    def visible(self) -> list[dict]:
        return derive_view(self.items, self.name_field, self.filter_text, self.sorts, self.sort_key)

    def placeholder(self) -> str | None:
        """Message to show instead of the list, or None when there are rows."""
        if self.error:
            return "Error loading data."
        if not self.loaded:
            return self.prompt
        if not self.visible():
            return self.empty_message
        return None


def _product_area_list() -> CachedList:
    return CachedList(
        name_field="product_name",
        sorts=PRODUCT_AREA_SORTS,
        prompt="Select a language to see product areas.",
        empty_message="No matching product areas found.",
    )


def _region_tag_list() -> CachedList:
    return CachedList(
        name_field="name",
        sorts=REGION_TAG_SORTS,
        prompt="Select a product area to see region tags.",
        empty_message="No matching region tags found.",
    )


@dataclass
class DashboardState:
    selection: Selection = field(default_factory=Selection)
    languages: list[str] = field(default_factory=list)
    product_areas: CachedList = field(default_factory=_product_area_list)
    region_tags: CachedList = field(default_factory=_region_tag_list)
    detail: dict[str, Any] | None = None
    detail_view: DetailView | None = None
    detail_error: str | None = None
    diagnostics: dict[str, Any] = field(default_factory=dict)
    last_error: str | None = None

    @property
    def level(self) -> Level:
        return self.selection.level

    def clear_detail(self) -> None:
        self.detail = None
        self.detail_view = None
        self.detail_error = None


class CatalogApi(Protocol):
    def config(self) -> dict[str, Any]: ...
    def languages(self) -> list[str]: ...
    def product_areas(self, language: str) -> list[dict[str, Any]]: ...
    def region_tags(self, language: str, product_name: str) -> list[dict[str, Any]]: ...
    def details(self, language: str, product_name: str, region_tag: str) -> dict[str, Any]: ...
    def fetch_code(self, url: str) -> str: ...


class DashboardController:
    """Applies selection, filter and sort events to a DashboardState."""

    def __init__(self, api: CatalogApi, state: DashboardState | None = None):
        self.api = api
        self.state = state or DashboardState()

    def _is_stale(self, origin: Selection) -> bool:
        if self.state.selection != origin:
            logger.debug("Dropping response for %s; current selection is %s", origin, self.state.selection)
            return True
        return False

    def _fail(self, message: str) -> None:
        logger.error(message)
        self.state.last_error = message

    def take_error(self) -> str | None:
        """Pop the pending user-facing error, if any."""
        message, self.state.last_error = self.state.last_error, None
        return message

    def load_languages(self) -> list[str]:
        try:
            languages = self.api.languages()
        except ApiError as exc:
            self._fail(f"Initialization failed: {exc}")
            return []
        self.state.languages = [lang for lang in languages if lang]
        return self.state.languages

    def load_diagnostics(self) -> None:
        """Deployment info for the footer; failures are logged only."""
        try:
            self.state.diagnostics = self.api.config()
        except ApiError as exc:
            logger.warning("Failed to fetch diagnostic info: %s", exc)

    def select_language(self, language: str | None) -> None:
        if not language:
            return
        origin = Selection(language=language)
        self.state.selection = origin
        self.state.product_areas.reset()
        self.state.region_tags.reset()
        self.state.clear_detail()

        try:
            items = self.api.product_areas(language)
        except ApiError as exc:
            if not self._is_stale(origin):
                self.state.product_areas.error = str(exc)
                self._fail(f"Failed to fetch product areas for {language}: {exc}")
            return
        if self._is_stale(origin):
            return
        self.state.product_areas.items = list(items)
        self.state.product_areas.loaded = True

    def select_product_area(self, product_area: str) -> None:
        current = self.state.selection
        if current.language is None:
            raise InvalidTransition("Select a language before choosing a product area.")
        origin = Selection(language=current.language, product_area=product_area)
        self.state.selection = origin
        self.state.region_tags.reset()
        self.state.clear_detail()

        try:
            items = self.api.region_tags(origin.language, product_area)
        except ApiError as exc:
            if not self._is_stale(origin):
                self.state.region_tags.error = str(exc)
                self._fail(f"Failed to fetch region tags for {product_area}: {exc}")
            return
        if self._is_stale(origin):
            return
        self.state.region_tags.items = list(items)
        self.state.region_tags.loaded = True

    def select_region_tag(self, region_tag: str) -> None:
        current = self.state.selection
        if current.product_area is None:
            raise InvalidTransition("Select a product area before choosing a region tag.")
        origin = replace(current, region_tag=region_tag)
        self.state.selection = origin
        self.state.clear_detail()

        try:
            detail = self.api.details(origin.language, origin.product_area, region_tag)
        except ApiError as exc:
            if not self._is_stale(origin):
                self.state.detail_error = str(exc)
                self._fail(f"Failed to fetch details for {region_tag}: {exc}")
            return
        if self._is_stale(origin):
            return
        view = build_detail_view(detail, language=origin.language, fetch_code=self.api.fetch_code)
        if self._is_stale(origin):
            return
        self.state.detail = detail
        self.state.detail_view = view

    def set_product_area_filter(self, text: str) -> list[dict]:
        self.state.product_areas.filter_text = text or ""
        return self.state.product_areas.visible()

    def set_product_area_sort(self, sort_key: str) -> list[dict]:
        if sort_key not in PRODUCT_AREA_SORTS:
            raise ValueError(f"Unknown sort option: {sort_key}")
        self.state.product_areas.sort_key = sort_key
        return self.state.product_areas.visible()

    def set_region_tag_filter(self, text: str) -> list[dict]:
        self.state.region_tags.filter_text = text or ""
        return self.state.region_tags.visible()

    def set_region_tag_sort(self, sort_key: str) -> list[dict]:
        if sort_key not in REGION_TAG_SORTS:
            raise ValueError(f"Unknown sort option: {sort_key}")
        self.state.region_tags.sort_key = sort_key
        return self.state.region_tags.visible()

    def deep_link(self, base_url: str) -> str:
        """Shareable link reproducing the current full selection."""
        selection = self.state.selection
        if selection.level is not Level.REGION_TAG_SELECTED:
            raise InvalidTransition(
                "Please select a language, product area, and region tag to generate a link."
            )
        query = urlencode(
            {"lang": selection.language, "pa": selection.product_area, "rt": selection.region_tag}
        )
        return f"{base_url.rstrip('?')}?{query}"

    def restore(self, language: str | None, product_area: str | None, region_tag: str | None) -> bool:
        """Replay a deep link level by level; stops at the first failed fetch."""
        if not (language and product_area and region_tag):
            return False
        self.select_language(language)
        if not self.state.product_areas.loaded:
            return False
        self.select_product_area(product_area)
        if not self.state.region_tags.loaded:
            return False
        self.select_region_tag(region_tag)
        return self.state.detail is not None
