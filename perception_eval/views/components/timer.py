"""
views/components/timer.py

이미지 남은 노출 시간을 렌더링하는 컴포넌트.
값 계산은 컨트롤러가 하고, 여기서는 표시만 한다.
응답 단계에서는 전체 시간으로 고정된 값이 넘어온다.
"""

import streamlit as st

from perception_eval.services.timer import format_remaining


def render(remaining: float, duration: float) -> bool:
    """
    남은 시간 표시.

    Args:
        remaining: 남은 시간 (초)
        duration:  이미지당 노출 시간 (초)

    Returns:
        True  — 시간이 남아 있음
        False — 시간 종료
    """
    st.markdown(
        f'<h6 class="timer-display">⏱ {format_remaining(remaining)}</h6>',
        unsafe_allow_html=True,
    )
    ratio = remaining / duration if duration > 0 else 0.0
    st.progress(min(max(ratio, 0.0), 1.0))
    return remaining > 0
