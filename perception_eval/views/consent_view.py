"""
views/consent_view.py — 프로젝트 소개 / 참여 동의 화면

기능:
  - 프로젝트 설명·동의 문구 표시
  - 실시 기간 밖이면 시작 불가
  - 동의 체크 후 "평가 시작" → 평가 화면으로 이동
"""

from __future__ import annotations

import html

import streamlit as st

from perception_eval.models.project_model import Project
from perception_eval.services.api_client import ProjectClient, ProjectLoadError
from perception_eval.services.score_service import get_duration_status


def title_html(project: Project) -> str:
    return f"<h1>{html.escape(project.name or project.id)}</h1>"


def _start_evaluation() -> None:
    """이전 세션을 버리고 평가 화면으로 이동. 이미지 사전 로딩은 컨트롤러가 선택한 이미지만."""
    st.session_state.pop("controller", None)
    st.session_state.page = "evaluate"


def render(client: ProjectClient) -> None:
    project_id = st.session_state.get("project_id")
    if not project_id:
        st.info("왼쪽에서 프로젝트를 선택하세요.")
        return

    try:
        project = client.fetch_evaluate_data(project_id)
    except ProjectLoadError as e:
        st.error(str(e))
        return

    st.markdown(title_html(project), unsafe_allow_html=True)
    if project.description:
        st.markdown(project.description)

    c1, c2, c3 = st.columns(3)
    c1.metric("이미지 수", min(project.image_count, len(project.valid_images)))
    c2.metric("이미지당 시간", f"{project.image_duration:g}s")
    c3.metric("문항 수", len(project.questions))

    st.markdown('<hr class="eval-divider">', unsafe_allow_html=True)

    if project.consent_info:
        st.markdown(project.consent_info)

    status = get_duration_status(project.start_date, project.end_date)
    if not status.is_active:
        st.warning("실시 기간이 아닙니다.")

    agreed = st.checkbox("이 프로젝트 참여에 동의합니다", key=f"agree_{project.id}")

    st.button(
        "평가 시작",
        type="primary",
        disabled=not (agreed and status.is_active),
        on_click=_start_evaluation,
    )
