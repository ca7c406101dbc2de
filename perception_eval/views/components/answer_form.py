"""
views/components/answer_form.py

현재 이미지에 대한 문항 응답 폼.
slider 방식: -1 ~ 1 (0.01 단위), radio 방식: -3 ~ 3 정수 7단계.
모든 문항은 중립값(0)으로 시작한다.
"""

from __future__ import annotations

import html
from typing import Dict, List, Optional

import streamlit as st

from config import RADIO_MAX, RADIO_MIN, SLIDER_MAX, SLIDER_MIN, SLIDER_STEP
from perception_eval.models.project_model import EvaluationMethod, Question


def question_heading(question: Question) -> str:
    return f"<h4 style='text-align:center;'>{html.escape(question.text)}</h4>"


def _scale_labels(question: Question) -> None:
    if not (question.left_label or question.right_label):
        return
    left, right = st.columns(2)
    left.caption(question.left_label or "")
    right.markdown(
        f"<p style='text-align:right; font-size:0.8rem; color:#9ca3af;'>{html.escape(question.right_label or '')}</p>",
        unsafe_allow_html=True,
    )


def render(
    questions: List[Question],
    method: EvaluationMethod,
    defaults: Dict[str, float],
    form_key: str,
    disabled: bool = False,
) -> Optional[Dict[str, float]]:
    """
    문항 폼을 렌더링하고, 제출되면 {question_id: 값}을 반환한다.

    Args:
        questions: 표시 순서대로의 문항 목록
        method:    평가 방식
        defaults:  문항별 초기값
        form_key:  이미지마다 다른 키 (위젯 상태가 다음 이미지로 넘어가지 않도록)
        disabled:  제출 중이면 True

    Returns:
        제출 시점의 값 딕셔너리, 제출하지 않았으면 None
    """
    values: Dict[str, float] = {}

    with st.form(key=form_key):
        for q in questions:
            st.markdown(question_heading(q), unsafe_allow_html=True)
            widget_key = f"{form_key}_{q.id}"
            if method is EvaluationMethod.RADIO:
                options = list(range(RADIO_MIN, RADIO_MAX + 1))
                default = int(defaults.get(q.id, 0))
                values[q.id] = st.radio(
                    q.text,
                    options,
                    index=options.index(default) if default in options else len(options) // 2,
                    horizontal=True,
                    key=widget_key,
                    disabled=disabled,
                    label_visibility="collapsed",
                )
            else:
                values[q.id] = st.slider(
                    q.text,
                    min_value=SLIDER_MIN,
                    max_value=SLIDER_MAX,
                    value=float(defaults.get(q.id, 0.0)),
                    step=SLIDER_STEP,
                    key=widget_key,
                    disabled=disabled,
                    label_visibility="collapsed",
                )
            _scale_labels(q)

        submitted = st.form_submit_button(
            "제출 중…" if disabled else "다음",
            type="primary",
            width="stretch",
            disabled=disabled,
        )

    if not submitted:
        return None
    # 제출 시점의 값을 복사해 반환
    return dict(values)
