"""
models/score_model.py

응답(Answer)과 저장된 점수 레코드 모델.
"""

from datetime import datetime, timezone
from typing import List

from pydantic import ConfigDict, Field

from perception_eval.models.project_model import CamelModel, EvaluationMethod


class Answer(CamelModel):
    """(이미지, 문항) 한 쌍에 대한 참가자의 응답 1건. 생성 후 변경 불가."""

    model_config = ConfigDict(frozen=True)

    image_id: str = Field(..., min_length=1)
    question_id: str = Field(..., min_length=1)
    value: float


class ScoreSubmission(CamelModel):
    """POST /api/scores 요청 본문."""

    session_id: str = Field(..., min_length=1, description="세션 시작 시 클라이언트가 발급한 UUID")
    answers: List[Answer] = Field(default_factory=list)


class ScoreRecord(CamelModel):
    id: int
    session_id: str
    image_id: str
    question_id: str
    value: float
    evaluation_method: EvaluationMethod = EvaluationMethod.SLIDER
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
