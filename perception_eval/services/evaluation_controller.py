"""
services/evaluation_controller.py

참가자 1명의 평가 세션을 진행하는 상태 머신.

흐름:
  ShowImage(i) --(load 후 imageDuration 경과)--> ShowSliders(i)
  ShowSliders(i) --(응답 제출, 다음 이미지 있음)--> ShowImage(i+1)
  ShowSliders(last) --(응답 제출)--> Submitting --(2xx)--> Submitted → 감사 페이지

협력자(주입):
  - scorer     : submit(session_id, answers). 실패 시 ScoringError
  - navigator  : go_to_thanks(project_id), show_empty_state(message)
  - ticker     : 반복 tick 공급자 (services/timer.py)
  - preloader  : preload(url). 선택 사항
  - clock, random_source : 테스트에서 가상 시계·결정적 난수 주입

UI 코드 없음. 모든 오류는 여기서 처리하고 state.error 로만 노출한다.
"""

import logging
import random
import threading
import time
from typing import Callable, Dict, Mapping, Optional, Protocol, Tuple

from perception_eval.models.project_model import Project
from perception_eval.models.score_model import Answer
from perception_eval.models.session_state import EvaluationState, Phase
from perception_eval.services.api_client import ScoringError
from perception_eval.services.sampling import RandomSource, select_images
from perception_eval.services.score_service import neutral_value, validate_value
from perception_eval.services.timer import Ticker, remaining_seconds

logger = logging.getLogger(__name__)

NO_IMAGES_MESSAGE = "등록된 이미지가 없습니다."


class Scorer(Protocol):
    def submit(self, session_id: str, answers: Tuple[Answer, ...]) -> None: ...


class Navigator(Protocol):
    def go_to_thanks(self, project_id: str) -> None: ...

    def show_empty_state(self, message: str) -> None: ...


class Preloader(Protocol):
    def preload(self, url: str) -> object: ...


class AnswerValidationError(ValueError):
    """문항 누락·범위 밖 값 등 응답 폼 입력 오류."""


class EvaluationController:

    def __init__(
        self,
        project: Project,
        scorer: Scorer,
        navigator: Navigator,
        ticker: Ticker,
        *,
        clock: Callable[[], float] = time.monotonic,
        random_source: RandomSource = random.random,
        preloader: Optional[Preloader] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.project = project
        self.scorer = scorer
        self.navigator = navigator
        self.ticker = ticker
        self.clock = clock
        self.preloader = preloader
        self._lock = threading.RLock()
        self._tick_handle: Optional[int] = None

        images = select_images(project.images, project.image_count, random_source)
        state_kwargs = {"session_id": session_id} if session_id else {}
        self.state = EvaluationState(images_to_show=tuple(images), **state_kwargs)

        self.no_images = not images
        if self.no_images:
            logger.warning(f"프로젝트 {project.id}: 유효한 이미지가 없어 세션을 시작하지 않음")
            self.state.error = NO_IMAGES_MESSAGE
            navigator.show_empty_state(NO_IMAGES_MESSAGE)
        else:
            logger.info(
                f"세션 시작: project={project.id}, session={self.state.session_id}, "
                f"이미지 {len(images)}개"
            )
            if preloader is not None:
                preloader.preload(images[0].url)

    # ── 조회 ────────────────────────────────────────────────────────────────

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def remaining(self) -> float:
        """남은 노출 시간(초). ShowImage 이외 단계에서는 전체 시간으로 고정."""
        duration = self.project.image_duration
        if self.state.phase is Phase.SHOW_IMAGE:
            return remaining_seconds(duration, self.state.start_time, self.state.now)
        return float(duration)

    @property
    def can_submit(self) -> bool:
        return (
            self.state.phase in (Phase.SHOW_SLIDERS, Phase.SUBMITTING)
            and not self.state.submitting
        )

    def default_values(self) -> Dict[str, float]:
        """응답 폼 초기값. 모든 문항을 중립값으로 채운다."""
        value = neutral_value(self.project.evaluation_method)
        return {q.id: value for q in self.project.questions}

    # ── 이벤트 ──────────────────────────────────────────────────────────────

    def on_image_loaded(self, width: Optional[int] = None, height: Optional[int] = None) -> None:
        """현재 이미지의 load 이벤트. 이 시점부터 타이머가 돈다."""
        with self._lock:
            state = self.state
            if self.no_images or state.phase is not Phase.SHOW_IMAGE or state.image_loaded:
                return
            state.image_loaded = True
            if width is not None and height is not None:
                state.image_size = (width, height)
            state.start_time = state.now = self.clock()
            self._tick_handle = self.ticker.schedule(self._on_tick)

    def _on_tick(self) -> None:
        with self._lock:
            state = self.state
            if state.phase is not Phase.SHOW_IMAGE or state.start_time is None:
                return
            state.now = self.clock()
            if self.remaining <= 0:
                self._cancel_tick()
                state.phase = Phase.SHOW_SLIDERS

    def _cancel_tick(self) -> None:
        if self._tick_handle is not None:
            self.ticker.cancel(self._tick_handle)
            self._tick_handle = None

    def submit_answers(self, values: Mapping[str, float]) -> bool:
        """
        현재 이미지의 응답을 확정한다.

        Args:
            values: {question_id: 값}. project.questions 의 모든 문항이 있어야 한다.

        Returns:
            다음 단계로 진행했으면 True. 호출이 무시되었거나 최종 제출이 실패하면 False.

        Raises:
            AnswerValidationError: 문항 누락 또는 범위 밖 값.
        """
        with self._lock:
            state = self.state
            if state.phase is Phase.SHOW_SLIDERS:
                batch = self._capture(values)
                state.answers = state.answers + batch
                if not state.is_last_image:
                    self._advance()
                    return True
                state.phase = Phase.SUBMITTING
            elif state.phase is not Phase.SUBMITTING:
                return False
        # Submitting 단계의 재호출은 이미 확정된 응답으로 재시도
        return self.submit_all()

    def _capture(self, values: Mapping[str, float]) -> Tuple[Answer, ...]:
        image = self.state.current_image
        method = self.project.evaluation_method
        batch = []
        for q in self.project.questions:
            if q.id not in values:
                raise AnswerValidationError(f"문항 {q.id}에 대한 응답이 없습니다.")
            try:
                value = validate_value(method, values[q.id])
            except ValueError as e:
                raise AnswerValidationError(str(e)) from e
            batch.append(Answer(image_id=image.id, question_id=q.id, value=value))
        return tuple(batch)

    def _advance(self) -> None:
        state = self.state
        next_image = state.images_to_show[state.current_index + 1]
        if self.preloader is not None:
            self.preloader.preload(next_image.url)
        state.current_index += 1
        state.reset_image_view()
        state.phase = Phase.SHOW_IMAGE

    def submit_all(self) -> bool:
        """
        누적 응답 전체를 최종 제출한다. 진행 중이거나 완료된 제출이 있으면 무시.
        실패 시 응답은 그대로 두고 재시도를 허용한다.
        """
        with self._lock:
            state = self.state
            if state.phase is not Phase.SUBMITTING or state.submitting:
                return False
            state.submitting = True
            state.error = None
            session_id, answers = state.session_id, state.answers

        try:
            self.scorer.submit(session_id, answers)
        except ScoringError as e:
            logger.warning(f"세션 {session_id} 제출 실패: {e}")
            with self._lock:
                state.submitting = False
                state.error = str(e)
            return False
        except Exception:
            # 예상 밖 오류도 제출 버튼은 다시 열어 둔다
            with self._lock:
                state.submitting = False
                state.error = "제출 중 오류가 발생했습니다. 다시 시도해 주세요."
            raise

        with self._lock:
            state.phase = Phase.SUBMITTED
        logger.info(f"세션 {session_id} 제출 완료 ({len(answers)}건)")
        self.navigator.go_to_thanks(self.project.id)
        return True

    def close(self) -> None:
        """화면 이탈 시 호출. 진행 중인 tick을 취소한다."""
        with self._lock:
            self._cancel_tick()
