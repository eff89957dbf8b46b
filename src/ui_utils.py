import html
from typing import Any, Callable

import pandas as pd
import streamlit as st

from config import EMPTY_CELL
from matrix_builders import Matrix, matrix_frame
from page_state import PageState


def qp_value(name: str, default: str = "") -> str:
    v = st.query_params.get(name, default)
    if isinstance(v, list):
        return str(v[0]) if v else str(default)
    return str(v) if v is not None else str(default)


def render_nav(active: str) -> None:
    if active == "profiles":
        line = '<strong>Profiles</strong> · <a href="?view=bidders" target="_self">Bidders</a>'
    else:
        line = '<a href="?view=profiles" target="_self">Profiles</a> · <strong>Bidders</strong>'
    st.markdown(f'<div class="nav-line">{line}</div>', unsafe_allow_html=True)


def render_filter_bar(state: PageState, key_prefix: str) -> None:
    if not state.specs:
        return
    cols = st.columns(len(state.specs))
    for col, spec in zip(cols, state.specs):
        choices = state.choices(spec.field)
        if not choices:
            col.selectbox(spec.label, options=["(none)"], disabled=True, key=f"{key_prefix}_{spec.field}_empty")
            continue
        current = state.filters.get(spec.field, "")
        idx = choices.index(current) if current in choices else 0
        picked = col.selectbox(spec.label, options=choices, index=idx, key=f"{key_prefix}_{spec.field}")
        state.set_filter(spec.field, picked)


def _cell_html(text: str) -> str:
    if not text:
        return f'<span class="empty-cell">{EMPTY_CELL}</span>'
    return f"<pre>{html.escape(text)}</pre>"


def render_matrix(matrix: Matrix, corner: str, render: Callable[[Any], str]) -> None:
    frame = matrix_frame(matrix, render)
    head = "".join(f"<th>{html.escape(str(c))}</th>" for c in frame.columns)
    body = []
    for row_key, values in frame.iterrows():
        cells = "".join(f"<td>{_cell_html(v)}</td>" for v in values.tolist())
        body.append(f'<tr><td class="row-key">{html.escape(str(row_key))}</td>{cells}</tr>')
    st.markdown(
        f'<div style="overflow-x:auto"><table class="param-matrix"><thead><tr><th>{html.escape(corner)}</th>'
        f'{head}</tr></thead><tbody>{"".join(body)}</tbody></table></div>',
        unsafe_allow_html=True,
    )


def render_link_table(df: pd.DataFrame, link_col: str, link_text: str, empty_msg: str) -> None:
    if df.empty:
        st.info(empty_msg)
        return
    st.dataframe(
        df,
        use_container_width=True,
        hide_index=True,
        column_config={
            link_col: st.column_config.LinkColumn(link_col, display_text=link_text),
        },
    )


def render_cell_editor(key: str, value: str, on_save: Callable[[str], tuple[bool, str]]) -> None:
    editing_key = f"{key}_editing"
    draft_key = f"{key}_draft"
    error_key = f"{key}_error"

    if not st.session_state.get(editing_key, False):
        if value:
            st.code(value, language=None)
        else:
            st.caption("No params yet.")
        if st.button("Edit", key=f"{key}_start"):
            st.session_state[editing_key] = True
            st.session_state[draft_key] = value
            st.session_state[error_key] = ""
            st.rerun()
        return

    st.text_area("Params (one `key: value` per line)", key=draft_key, height=180)
    if st.session_state.get(error_key):
        st.error(st.session_state[error_key])
    c_save, c_cancel, c_note = st.columns([1, 1, 4])
    do_save = c_save.button("Save", key=f"{key}_save")
    do_cancel = c_cancel.button("Cancel", key=f"{key}_cancel")
    c_note.caption("Empty & save = delete mapping. `mediatypes` lines are shown but never saved.")

    if do_cancel:
        st.session_state[editing_key] = False
        st.session_state.pop(draft_key, None)
        st.session_state[error_key] = ""
        st.rerun()
    if do_save:
        with st.spinner("Saving…"):
            ok, err = on_save(str(st.session_state.get(draft_key, "")))
        if not ok:
            st.session_state[error_key] = err or "Failed to save"
            st.rerun()
        st.session_state[editing_key] = False
        st.session_state.pop(draft_key, None)
        st.session_state[error_key] = ""
        st.rerun()
