"""
views/evaluate_view.py — 이미지 평가 화면

레이아웃:
  - 헤더      : 진행 위치 (i / n)
  - ShowImage : 이미지 + 남은 시간. 시간이 끝나면 자동으로 응답 폼으로 전환
  - ShowSliders / Submitting : 남은 시간(고정) + 응답 폼 + 제출 오류

상태 관리:
  - st.session_state.controller (EvaluationController) — 세션 1회분
  - Streamlit rerun 1회 = tick 1프레임 (ManualTicker.fire)
"""

from __future__ import annotations

import io
import time
from typing import Optional, Tuple

import streamlit as st
from PIL import Image, UnidentifiedImageError

from config import TICK_INTERVAL
from perception_eval.models.session_state import Phase
from perception_eval.services.api_client import ProjectClient, ProjectLoadError, ScoreClient
from perception_eval.services.evaluation_controller import (
    AnswerValidationError, EvaluationController
)
from perception_eval.services.preloader import ImagePreloader
from perception_eval.services.timer import ManualTicker
from perception_eval.views.components import answer_form
from perception_eval.views.components import timer as tmr

# 평가 화면에서만 스크롤바 숨김 (다른 화면에는 주입되지 않음)
_EVALUATE_CSS = """
<style>
section.main::-webkit-scrollbar { display: none; }
section.main { scrollbar-width: none; }
</style>
"""


class StreamlitNavigator:
    """컨트롤러의 화면 이동 요청을 session_state 페이지 전환으로 바꾼다."""

    def go_to_thanks(self, project_id: str) -> None:
        st.session_state.thanks_project_id = project_id
        st.session_state.page = "thanks"

    def show_empty_state(self, message: str) -> None:
        st.session_state.empty_message = message


def _build_controller(client: ProjectClient, preloader: ImagePreloader) -> Optional[EvaluationController]:
    project_id = st.session_state.get("project_id")
    try:
        project = client.fetch_evaluate_data(project_id)
    except ProjectLoadError as e:
        st.error(str(e))
        return None
    ticker = ManualTicker()
    controller = EvaluationController(
        project,
        scorer=ScoreClient(base_url=client.base_url),
        navigator=StreamlitNavigator(),
        ticker=ticker,
        preloader=preloader,
    )
    st.session_state.controller = controller
    st.session_state.ticker = ticker
    return controller


def _load_image(preloader: ImagePreloader, url: str) -> Tuple[Optional[bytes], Optional[Tuple[int, int]]]:
    """현재 이미지 바이트와 (width, height). 로딩 실패 시 (None, None)."""
    data = preloader.fetch(url)
    if data is None:
        return None, None
    try:
        with Image.open(io.BytesIO(data)) as img:
            return data, img.size
    except UnidentifiedImageError:
        return data, None


def _render_image_phase(controller: EvaluationController, ticker: ManualTicker, preloader: ImagePreloader) -> None:
    state = controller.state
    image = state.current_image
    data, size = _load_image(preloader, image.url)
    if data is None:
        # load 이벤트가 없으므로 타이머도 시작하지 않는다
        st.warning("이미지를 불러오지 못했습니다.")
        if st.button("다시 불러오기"):
            st.rerun()
        return

    st.image(data, caption=f"Image {state.current_index + 1}", width="stretch")
    if size:
        controller.on_image_loaded(*size)
    else:
        controller.on_image_loaded()

    ticker.fire()
    tmr.render(controller.remaining, controller.project.image_duration)

    if controller.phase is Phase.SHOW_IMAGE:
        time.sleep(TICK_INTERVAL)
    st.rerun()


def _render_answer_phase(controller: EvaluationController) -> None:
    state = controller.state
    project = controller.project

    tmr.render(controller.remaining, project.image_duration)

    values = answer_form.render(
        questions=project.questions,
        method=project.evaluation_method,
        defaults=controller.default_values(),
        form_key=f"answers_{state.session_id}_{state.current_index}",
        disabled=not controller.can_submit,
    )
    if values is not None:
        try:
            controller.submit_answers(values)
        except AnswerValidationError as e:
            st.error(str(e))
            return
        st.rerun()

    if state.submitting:
        st.progress(1.0)
    if state.error:
        st.error(state.error)
        if state.phase is Phase.SUBMITTING and st.button("다시 제출", type="primary"):
            controller.submit_all()
            st.rerun()


def render(client: ProjectClient, preloader: ImagePreloader) -> None:
    """평가 화면 렌더링."""

    # ── 세션 가드 ──────────────────────────────────────────────────────────
    if not st.session_state.get("project_id"):
        st.warning("프로젝트 정보가 없습니다. 처음 화면으로 돌아가세요.")
        if st.button("처음으로", type="primary"):
            st.session_state.page = "consent"
            st.rerun()
        return

    controller: Optional[EvaluationController] = st.session_state.get("controller")
    if controller is None or controller.project.id != st.session_state.project_id:
        controller = _build_controller(client, preloader)
        if controller is None:
            return
    ticker: ManualTicker = st.session_state.ticker

    st.markdown(_EVALUATE_CSS, unsafe_allow_html=True)

    if controller.no_images:
        st.error(st.session_state.get("empty_message") or controller.state.error)
        return

    state = controller.state
    st.markdown(
        f"<h2 style='font-size:1.3rem; font-weight:700;'>"
        f"Evaluation ({min(state.current_index + 1, state.total)}/{state.total})</h2>",
        unsafe_allow_html=True,
    )
    st.markdown('<hr class="eval-divider">', unsafe_allow_html=True)

    if state.phase is Phase.SHOW_IMAGE:
        _render_image_phase(controller, ticker, preloader)
    elif state.phase in (Phase.SHOW_SLIDERS, Phase.SUBMITTING):
        _render_answer_phase(controller)
    else:
        # Submitted — 컨트롤러가 이미 감사 화면으로 전환함
        controller.close()
        st.session_state.pop("controller", None)
        st.rerun()
