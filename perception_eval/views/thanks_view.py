"""
views/thanks_view.py — 평가 완료 화면
"""

from __future__ import annotations

import streamlit as st


def _go_home() -> None:
    for key in ["controller", "ticker", "empty_message", "thanks_project_id"]:
        st.session_state.pop(key, None)
    st.session_state.page = "consent"


def render() -> None:
    _, col, _ = st.columns([0.8, 2.5, 0.8])
    with col:
        st.markdown(
            "<h2 style='text-align:center;'>참여해 주셔서 감사합니다</h2>",
            unsafe_allow_html=True,
        )
        st.markdown(
            "<p style='text-align:center; color:#6b7280;'>응답이 제출되었습니다. 이 창을 닫으셔도 됩니다.</p>",
            unsafe_allow_html=True,
        )
        st.button("처음으로", type="primary", width="stretch", on_click=_go_home)
