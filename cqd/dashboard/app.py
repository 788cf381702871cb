"""Streamlit dashboard: language -> product area -> region tag -> details.

Run with ``streamlit run cqd/dashboard/app.py``.
"""

import logging

import streamlit as st

from cqd.config import DashboardSettings
from cqd.dashboard.client import DashboardApi
from cqd.dashboard.render import DetailView
from cqd.dashboard.state import (
    PRODUCT_AREA_SORTS,
    REGION_TAG_SORTS,
    DashboardController,
    InvalidTransition,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

_CONTROLLER_KEY = "_cqd_controller"
_BAND_COLOURS = {
    "critical": "red",
    "poor": "red",
    "fair": "orange",
    "good": "green",
    "excellent": "green",
    "unknown": "gray",
}


def _controller() -> DashboardController:
    """One controller per browser session, created on first run."""
    if _CONTROLLER_KEY not in st.session_state:
        settings = DashboardSettings()
        controller = DashboardController(DashboardApi(settings.api_url, timeout=settings.timeout))
        controller.load_languages()
        controller.load_diagnostics()
        params = st.query_params
        controller.restore(params.get("lang"), params.get("pa"), params.get("rt"))
        st.session_state[_CONTROLLER_KEY] = controller
        st.session_state["cqd_public_url"] = settings.public_url
        st.session_state["cqd_language"] = controller.state.selection.language
    return st.session_state[_CONTROLLER_KEY]


def _sort_label(sorts):
    def label(key: str) -> str:
        option = sorts[key]
        return option[0] if option else "Default"

    return label


def _coloured(score, band: str) -> str:
    return f":{_BAND_COLOURS.get(band, 'gray')}[**{score}**]"


# ── Callbacks ────────────────────────────────────────────────────────────


def _on_language(controller: DashboardController) -> None:
    st.session_state["cqd_pa_filter"] = ""
    st.session_state["cqd_rt_filter"] = ""
    controller.select_language(st.session_state["cqd_language"])


def _on_product_area(controller: DashboardController, name: str) -> None:
    st.session_state["cqd_rt_filter"] = ""
    controller.select_product_area(name)


def _on_region_tag(controller: DashboardController, name: str) -> None:
    controller.select_region_tag(name)


# ── Sections ─────────────────────────────────────────────────────────────


def render_product_areas(controller: DashboardController) -> None:
    cached = controller.state.product_areas
    st.subheader("Product Areas")
    st.text_input(
        "Filter product areas",
        key="cqd_pa_filter",
        on_change=lambda: controller.set_product_area_filter(st.session_state["cqd_pa_filter"]),
    )
    st.selectbox(
        "Sort product areas",
        options=list(PRODUCT_AREA_SORTS),
        format_func=_sort_label(PRODUCT_AREA_SORTS),
        key="cqd_pa_sort",
        on_change=lambda: controller.set_product_area_sort(st.session_state["cqd_pa_sort"]),
    )
    placeholder = cached.placeholder()
    if placeholder:
        st.caption(placeholder)
        return
    selected = controller.state.selection.product_area
    for area in cached.visible():
        name = area["product_name"]
        st.button(
            f"{name} · score {area['score']} · {area['samples']} samples",
            key=f"cqd_pa_{name}",
            type="primary" if name == selected else "secondary",
            use_container_width=True,
            on_click=_on_product_area,
            args=(controller, name),
        )


def render_region_tags(controller: DashboardController) -> None:
    cached = controller.state.region_tags
    st.subheader("Region Tags")
    st.text_input(
        "Filter region tags",
        key="cqd_rt_filter",
        on_change=lambda: controller.set_region_tag_filter(st.session_state["cqd_rt_filter"]),
    )
    st.selectbox(
        "Sort region tags",
        options=list(REGION_TAG_SORTS),
        format_func=_sort_label(REGION_TAG_SORTS),
        key="cqd_rt_sort",
        on_change=lambda: controller.set_region_tag_sort(st.session_state["cqd_rt_sort"]),
    )
    placeholder = cached.placeholder()
    if placeholder:
        st.caption(placeholder)
        return
    selected = controller.state.selection.region_tag
    for tag in cached.visible():
        name = tag["name"]
        st.button(
            f"{name} · {tag['score']}",
            key=f"cqd_rt_{name}",
            type="primary" if name == selected else "secondary",
            use_container_width=True,
            on_click=_on_region_tag,
            args=(controller, name),
        )


def render_detail(view: DetailView) -> None:
    left, right = st.columns([2, 1])
    with left:
        st.markdown("#### Overall Score")
        st.markdown(f"## {_coloured(view.score, view.band)}")
        if view.github_link:
            st.markdown(f"[View on GitHub]({view.github_link})")
    with right:
        st.markdown(f"**Last Updated Date**  \n{view.last_updated}")
        st.markdown(f"**Evaluation Date**  \n{view.evaluated}")

    st.markdown("#### Evaluation Analysis")
    if view.data_error:
        st.warning(view.data_error)
    st.markdown("**Identified Problems:**")
    if view.problem_categories:
        st.markdown(" ".join(f":orange-background[{cat}]" for cat in view.problem_categories))
    else:
        st.caption("None identified.")
    st.markdown("**Criteria Breakdown:**")
    for criterion in view.criteria:
        with st.container(border=True):
            st.markdown(
                f"**{criterion.name}** (Score: {criterion.score} / Weight: {criterion.weight})"
            )
            st.markdown(f"**Assessment:** {criterion.assessment}")
            st.markdown(f"**Recommendation:**\n\n{criterion.recommendation}")

    st.markdown("#### Code File")
    if view.code_error:
        st.error(view.code_error)
    else:
        st.code(view.code or "", language=view.code_language, line_numbers=True)

    st.markdown("#### LLM Suggested Fixes")
    st.markdown("\n".join(f"- {line}" for line in view.fix_summary_lines))


def main() -> None:
    st.set_page_config(page_title="Code Quality Dashboard", layout="wide")
    st.title("Code Quality Dashboard")
    controller = _controller()
    state = controller.state

    st.selectbox(
        "Language",
        options=state.languages,
        index=None,
        placeholder="Select a Language",
        format_func=lambda lang: lang[:1].upper() + lang[1:],
        key="cqd_language",
        on_change=_on_language,
        args=(controller,),
    )

    areas_col, tags_col, detail_col = st.columns([1, 1, 2])
    with areas_col:
        render_product_areas(controller)
    with tags_col:
        render_region_tags(controller)
    with detail_col:
        st.subheader("Details")
        if state.detail_view is not None:
            try:
                link = controller.deep_link(st.session_state["cqd_public_url"])
            except InvalidTransition:
                link = None
            if link:
                with st.expander("Share link"):
                    st.code(link, language="text")
            render_detail(state.detail_view)
        elif state.detail_error:
            st.error("Error loading details.")
        else:
            st.caption("Select a region tag to see details.")

    error = controller.take_error()
    if error:
        st.error(error)

    footer = []
    if state.diagnostics.get("projectId"):
        footer.append(f"Project ID: {state.diagnostics['projectId']}")
    if state.diagnostics.get("bigqueryView"):
        footer.append(f"BigQuery View: {state.diagnostics['bigqueryView']}")
    if footer:
        st.caption(" · ".join(footer))


main()
