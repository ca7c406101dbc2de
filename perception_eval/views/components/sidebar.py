"""
views/components/sidebar.py

프로젝트 선택 + 화면 이동 사이드바.
평가 진행 중에는 렌더링하지 않는다 (되돌아가기 방지).
"""

from __future__ import annotations

import streamlit as st

from perception_eval.services.api_client import ProjectClient, ProjectLoadError


def render(client: ProjectClient) -> None:
    st.markdown(
        "<h3 style='font-size:1rem; font-weight:700; margin-bottom:16px;'>📋 프로젝트</h3>",
        unsafe_allow_html=True,
    )
    try:
        projects = client.list_projects()
    except ProjectLoadError as e:
        st.error(str(e))
        return
    if not projects:
        st.info("등록된 프로젝트가 없습니다.")
        return

    ids = [p["id"] for p in projects]
    names = {p["id"]: p.get("name") or p["id"] for p in projects}
    current = st.session_state.get("project_id")
    selected = st.selectbox(
        "프로젝트",
        ids,
        index=ids.index(current) if current in ids else 0,
        format_func=lambda pid: names[pid],
        label_visibility="collapsed",
    )
    if selected != current:
        st.session_state.project_id = selected
        st.session_state.page = "consent"
        st.rerun()

    st.markdown('<hr class="eval-divider">', unsafe_allow_html=True)

    if st.button("참여 화면", key="nav_consent", width="stretch"):
        st.session_state.page = "consent"
        st.rerun()
    if st.button("결과 보기", key="nav_metrics", width="stretch"):
        st.session_state.page = "metrics"
        st.rerun()
