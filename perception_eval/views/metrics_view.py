"""
views/metrics_view.py — 프로젝트 결과 화면 (연구자용)

표시 내용:
  - 요약 (고유 응답자 수, 총 응답 수)
  - 이미지별 응답 수
  - 월별 응답자 수
  - 문항별 평균 점수
  - 이미지 × 문항 평균 표
  - CSV 다운로드
"""

from __future__ import annotations

import streamlit as st

from perception_eval.services.api_client import ProjectClient, ProjectLoadError


def _stat_card(col, label: str, value: str, color: str) -> None:
    col.markdown(
        f"<div style='text-align:center;'>"
        f"<p style='font-size:1.6rem; font-weight:700; color:{color}; margin:0;'>{value}</p>"
        f"<p style='font-size:0.8rem; color:#9ca3af;'>{label}</p></div>",
        unsafe_allow_html=True,
    )


def render(client: ProjectClient) -> None:
    """결과 화면 렌더링."""
    project_id = st.session_state.get("project_id")
    if not project_id:
        st.info("왼쪽에서 프로젝트를 선택하세요.")
        return

    try:
        data = client.fetch_metrics(project_id)
    except ProjectLoadError as e:
        st.error(str(e))
        return

    st.markdown("<h2>결과</h2>", unsafe_allow_html=True)

    s1, s2 = st.columns(2)
    _stat_card(s1, "응답자", str(data.get("uniqueRespondents", 0)), "#4a7fcb")
    _stat_card(s2, "총 응답 수", str(data.get("totalScores", 0)), "#10b981")

    st.markdown('<hr class="eval-divider">', unsafe_allow_html=True)

    per_image = data.get("perImage", [])
    if per_image:
        st.subheader("이미지별 응답 수")
        st.bar_chart(
            {"image": [p["id"] for p in per_image], "count": [p["count"] for p in per_image]},
            x="image",
            y="count",
        )

    monthly = data.get("monthly", [])
    if monthly:
        st.subheader("월별 응답자 수")
        st.line_chart(
            {"month": [m["month"] for m in monthly], "count": [m["count"] for m in monthly]},
            x="month",
            y="count",
        )

    avg = data.get("avgByQuestion", [])
    if avg:
        st.subheader("문항별 평균")
        st.bar_chart(
            {"question": [a["question"] for a in avg], "avg": [a["avg"] for a in avg]},
            x="question",
            y="avg",
        )

    pairs = data.get("questionScoresPerImage", [])
    if pairs:
        st.subheader("이미지 × 문항 평균")
        st.dataframe(pairs, width="stretch", hide_index=True)

    if not data.get("totalScores"):
        st.info("아직 응답이 없습니다.")
        return

    try:
        csv_bytes = client.fetch_csv(project_id)
    except ProjectLoadError as e:
        st.error(str(e))
        return
    st.download_button(
        "CSV 다운로드",
        data=csv_bytes,
        file_name=f"scores-project-{project_id}.csv",
        mime="text/csv",
    )
