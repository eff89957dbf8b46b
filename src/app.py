import logging
import sys
from pathlib import Path
from typing import Callable

import streamlit as st

st.set_page_config(page_title="IDNML Config Admin", layout="wide")
sys.path.insert(0, str(Path(__file__).resolve().parent))

from config import (
    APP_TITLE,
    FILTER_DEFAULTS,
    MATRIX_CSS,
    PAGE_TYPE_PRIORITY,
    VIEWS,
)
from core_helpers import clean_text, parse_int
from data_io import (
    attach_slot_codes,
    bidders_frame,
    distinct_bidders,
    profile_label,
    profile_summary,
    profiles_frame,
)
from matrix_builders import Matrix, build_matrix, cell_rows
from page_state import FilterSpec, PageState
from params_codec import decode_state, encode, format_params_json
from storage_layer import (
    fetch_bidder_index_rows,
    fetch_bidder_rows,
    fetch_profile,
    fetch_profile_configs,
    fetch_profile_slots,
    fetch_profiles,
    save_params,
)
from ui_utils import (
    qp_value,
    render_cell_editor,
    render_filter_bar,
    render_link_table,
    render_matrix,
    render_nav,
)


def profiles_list_specs() -> list[FilterSpec]:
    return [
        FilterSpec("environment", "Env"),
        FilterSpec("geo", "Geo"),
        FilterSpec("device", "Device"),
        FilterSpec("page_type", "Page type"),
    ]


def bidders_list_specs() -> list[FilterSpec]:
    return [
        FilterSpec("geo", "Geo"),
        FilterSpec("device", "Device"),
        FilterSpec("page_type", "Page type"),
    ]


def bidder_matrix_specs() -> list[FilterSpec]:
    return [
        FilterSpec("geo", "Geo", preferred_default=FILTER_DEFAULTS["geo"], coerce=True),
        FilterSpec("device", "Device", preferred_default=FILTER_DEFAULTS["device"], coerce=True),
    ]


def slot_of(row: dict):
    return row.get("slot")


def page_type_of(row: dict):
    return row.get("page_type")


def bidder_of(row: dict):
    return row.get("bidder")


def build_bidder_matrix(rows: list[dict]) -> Matrix:
    return build_matrix(
        rows,
        row_key_of=slot_of,
        col_key_of=page_type_of,
        payload_of=lambda r: r,
        column_priority=PAGE_TYPE_PRIORITY,
    )


def build_profile_matrix(configs: list[dict], slots: list[dict]) -> Matrix:
    return build_matrix(
        attach_slot_codes(configs, slots),
        row_key_of=bidder_of,
        col_key_of=slot_of,
        payload_of=lambda r: r,
        include_rows=[c.get("bidder") for c in configs],
        include_cols=[s["slot_code"] for s in slots],
    )


def cell_params_text(row: dict) -> str:
    return format_params_json((row or {}).get("params"))


def page_state(key: str, specs_factory: Callable[[], list[FilterSpec]]) -> PageState:
    sk = f"page_state::{key}"
    if sk not in st.session_state:
        st.session_state[sk] = PageState(specs=specs_factory())
    return st.session_state[sk]


def reload_button(state: PageState, key: str) -> None:
    if st.button("Reload", key=f"{key}_reload"):
        state.reset()
        st.rerun()


def candidate_label(row: dict) -> str:
    profile = clean_text(row.get("profile_name")) or (
        f"profile #{row.get('profile_id')}" if row.get("profile_id") is not None else ""
    )
    config = f"config #{row.get('bidder_config_id')}"
    return f"{profile} ({config})" if profile else config


def save_cell(record_id, text: str) -> tuple[bool, str]:
    params_state = decode_state(text)
    return save_params(record_id, params_state.to_store())


def render_profiles_page() -> None:
    render_nav("profiles")
    st.title("Profiles")
    state = page_state("profiles", profiles_list_specs)
    if not state.loaded:
        with st.spinner("Loading profiles…"):
            rows, err = fetch_profiles()
        state.load(rows, err)
    reload_button(state, "profiles")

    st.markdown("**Filters:**")
    render_filter_bar(state, "profiles_filter")

    if state.error:
        st.error(f"Error: {state.error}")
        return
    render_link_table(
        profiles_frame(state.filtered_rows()),
        "Matrix",
        "Open matrix",
        "No profiles match the current filters.",
    )


def render_profile_page(raw_id: str) -> None:
    render_nav("profiles")
    profile_id = parse_int(raw_id)
    if not profile_id:
        st.title("Profile")
        st.error("Invalid profile id")
        return

    sk = f"profile_page::{profile_id}"
    if sk not in st.session_state:
        with st.spinner("Loading matrix…"):
            profile, err = fetch_profile(profile_id)
            slots, configs = [], []
            if not err:
                slots, err = fetch_profile_slots(profile_id)
            if not err:
                configs, err = fetch_profile_configs(profile_id)
        st.session_state[sk] = {"profile": profile, "slots": slots, "configs": configs, "error": err}
    page = st.session_state[sk]

    if page["error"]:
        st.title("Profile")
        st.error(page["error"])
        if st.button("Reload", key="profile_reload"):
            st.session_state.pop(sk, None)
            st.rerun()
        return

    profile = page["profile"]
    st.title(f"Profile: {profile_label(profile) if profile else f'#{profile_id}'}")
    if profile:
        st.markdown(f'<div class="tiny-note">{profile_summary(profile)}</div>', unsafe_allow_html=True)
    st.markdown("Matrix view: **bidders** × **slots**. Each cell shows the `params` JSON for that bidder/slot combination.")
    if st.button("Reload", key="profile_reload"):
        st.session_state.pop(sk, None)
        st.rerun()

    if not page["configs"] or not page["slots"]:
        st.info("No bidder mappings found for this profile.")
        return
    matrix = build_profile_matrix(page["configs"], page["slots"])
    render_matrix(matrix, "Bidder", cell_params_text)

    st.subheader("Edit a cell")
    ce1, ce2 = st.columns(2)
    bidder = ce1.selectbox("Bidder", options=matrix.row_keys, key=f"profile_{profile_id}_edit_bidder")
    slot = ce2.selectbox("Slot", options=matrix.col_keys, key=f"profile_{profile_id}_edit_slot")
    candidates = cell_rows(attach_slot_codes(page["configs"], page["slots"]), bidder_of, slot_of, bidder, slot)
    render_params_editor(candidates, bidder, slot, f"profile_{profile_id}", lambda: st.session_state.pop(sk, None))


def render_bidders_page() -> None:
    render_nav("bidders")
    st.title("Bidders")
    st.markdown("Browse bidders and open one to see all mappings for that bidder across profiles and slots.")
    state = page_state("bidders", bidders_list_specs)
    state.search_field = "bidder"
    if not state.loaded:
        with st.spinner("Loading bidders…"):
            rows, err = fetch_bidder_index_rows()
        state.load(rows, err)
    reload_button(state, "bidders")

    state.search = st.text_input("Search bidder code…", value=state.search, key="bidders_search")
    render_filter_bar(state, "bidders_filter")

    if state.error:
        st.error(f"Error: {state.error}")
        return
    render_link_table(
        bidders_frame(distinct_bidders(state.filtered_rows())),
        "Mappings",
        "View mappings",
        "No bidders match the current filters.",
    )


def render_bidder_page(code: str) -> None:
    render_nav("bidders")
    bidder = clean_text(code)
    st.title(f"Bidder: {bidder}")
    st.markdown("Matrix view: **slots × page types** for this bidder. Each cell shows the params JSON for that context.")
    if not bidder:
        st.error("Missing bidder code")
        return

    state = page_state(f"bidder::{bidder}", bidder_matrix_specs)
    if not state.loaded:
        with st.spinner("Loading matrix…"):
            rows, err = fetch_bidder_rows(bidder)
        state.load(rows, err)
    reload_button(state, f"bidder_{bidder}")

    st.markdown("**Filters:**")
    render_filter_bar(state, f"bidder_{bidder}_filter")

    if state.error:
        st.error(f"Error loading mappings: {state.error}")
        return

    matrix = build_bidder_matrix(state.filtered_rows())
    if matrix.is_empty:
        st.info("No mappings for this bidder with the current filters.")
        return
    render_matrix(matrix, "Slot ↓ / Page type →", cell_params_text)

    st.subheader("Edit a cell")
    ce1, ce2 = st.columns(2)
    slot = ce1.selectbox("Slot", options=matrix.row_keys, key=f"bidder_{bidder}_edit_slot")
    page_type = ce2.selectbox("Page type", options=matrix.col_keys, key=f"bidder_{bidder}_edit_page_type")
    candidates = cell_rows(state.filtered_rows(), slot_of, page_type_of, slot, page_type)
    render_params_editor(candidates, slot, page_type, f"bidder_{bidder}", state.reset)


def render_params_editor(
    candidates: list[dict], row_key: str, col_key: str, key: str, on_saved: Callable[[], None]
) -> None:
    if not candidates:
        st.caption(f"No mapping for {row_key} / {col_key}.")
        return
    row = candidates[-1]
    if len(candidates) > 1:
        st.warning(
            f"{len(candidates)} configs share {row_key} / {col_key}; the matrix shows the last one. "
            "Pick the config to edit."
        )
        labels = [candidate_label(r) for r in candidates]
        picked = st.selectbox("Config", options=labels, index=len(labels) - 1, key=f"{key}_{row_key}_{col_key}_config")
        row = candidates[labels.index(picked)]
    else:
        st.caption(f"Editing {candidate_label(row)}")
    record_id = row.get("bidder_config_id")

    def _save(text: str) -> tuple[bool, str]:
        ok, err = save_cell(record_id, text)
        if ok:
            on_saved()
        return ok, err

    render_cell_editor(f"{key}_cell_{record_id}", encode(row.get("params")), _save)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    st.markdown(MATRIX_CSS, unsafe_allow_html=True)
    view = qp_value("view", "profiles").strip().lower() or "profiles"
    if view not in VIEWS:
        view = "profiles"

    st.caption(APP_TITLE)
    if view == "profile":
        render_profile_page(qp_value("id", ""))
    elif view == "bidders":
        render_bidders_page()
    elif view == "bidder":
        render_bidder_page(qp_value("code", ""))
    else:
        render_profiles_page()


if __name__ == "__main__":
    main()
