"""
models/session_state.py

참가자 1명의 평가 세션 상태 모델.
Pydantic BaseModel 기반 — 상태 전이는 services/evaluation_controller.py 가 담당.
UI 코드 없음.
"""

import uuid
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field

from perception_eval.models.project_model import ImageItem
from perception_eval.models.score_model import Answer


class Phase(str, Enum):
    SHOW_IMAGE = "showImage"
    SHOW_SLIDERS = "showSliders"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


class EvaluationState(BaseModel):
    """
    세션 전체 상태.

    Attributes:
        session_id:     세션 시작 시 발급되는 UUID. 영속 식별자와 무관.
        images_to_show: 필터링·셔플·절단을 거친 이미지 목록. 세션 동안 고정.
        current_index:  현재 이미지 인덱스 (0-based, 감소하지 않음).
        phase:          현재 단계.
        answers:        누적 응답. 튜플로 교체만 하고 원소를 수정하지 않는다.
        image_loaded:   현재 이미지의 load 이벤트 수신 여부.
        image_size:     load 시 측정된 (width, height).
        start_time:     타이머 시작 시각 (load 이벤트 시점). None이면 미시작.
        now:            마지막 tick 시각.
        submitting:     최종 제출 요청이 진행 중이거나 완료되어 제출 버튼이 비활성.
        error:          참가자에게 보여줄 오류 메시지.
    """

    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    images_to_show: Tuple[ImageItem, ...] = ()
    current_index: int = Field(default=0, ge=0)
    phase: Phase = Phase.SHOW_IMAGE
    answers: Tuple[Answer, ...] = ()
    image_loaded: bool = False
    image_size: Optional[Tuple[int, int]] = None
    start_time: Optional[float] = None
    now: Optional[float] = None
    submitting: bool = False
    error: Optional[str] = None

    @property
    def total(self) -> int:
        return len(self.images_to_show)

    @property
    def current_image(self) -> Optional[ImageItem]:
        if 0 <= self.current_index < self.total:
            return self.images_to_show[self.current_index]
        return None

    @property
    def is_last_image(self) -> bool:
        return self.current_index + 1 >= self.total

    def reset_image_view(self) -> None:
        """ShowImage 진입 시 load 플래그·이미지 크기·타이머 초기화."""
        self.image_loaded = False
        self.image_size = None
        self.start_time = None
        self.now = None
