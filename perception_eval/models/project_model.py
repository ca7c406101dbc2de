"""
models/project_model.py

연구자가 정의한 평가 프로젝트 모델.
Pydantic v2 적용 — JSON 필드는 camelCase(imageCount 등), 파이썬 속성은 snake_case.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from config import DEFAULT_IMAGE_COUNT, DEFAULT_IMAGE_DURATION


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EvaluationMethod(str, Enum):
    SLIDER = "slider"
    RADIO = "radio"


class Question(CamelModel):
    """평가 문항. 세션 동안 변하지 않는다."""

    id: str = Field(..., min_length=1, description="문항 ID")
    text: str = Field(..., description="문항 본문")
    left_label: Optional[str] = Field(None, description="척도 왼쪽 끝 라벨 (예: Bad)")
    right_label: Optional[str] = Field(None, description="척도 오른쪽 끝 라벨 (예: Good)")


class ImageItem(CamelModel):
    id: str = Field(..., min_length=1, description="이미지 ID")
    url: str = Field("", description="이미지 URL (빈 값이면 평가 대상에서 제외)")

    @property
    def is_valid(self) -> bool:
        return bool(self.url and self.url.strip())


class Project(CamelModel):
    """
    평가 프로젝트.

    Attributes:
        image_count:       세션당 보여줄 이미지 수 (유효 이미지가 적으면 그만큼만).
        image_duration:    이미지당 노출 시간 (초).
        evaluation_method: slider(-1..1 연속값) 또는 radio(-3..3 정수).
        start_date/end_date: 실시 기간. 없으면 제한 없음.
    """

    id: str = Field(..., min_length=1)
    name: str = ""
    description: str = ""
    consent_info: str = ""
    image_count: int = Field(default=DEFAULT_IMAGE_COUNT, ge=0)
    image_duration: float = Field(default=DEFAULT_IMAGE_DURATION, gt=0)
    questions: List[Question] = Field(default_factory=list)
    images: List[ImageItem] = Field(default_factory=list)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    evaluation_method: EvaluationMethod = EvaluationMethod.SLIDER
    allow_multiple_answers: bool = True

    @field_validator("questions")
    @classmethod
    def validate_unique_question_ids(cls, v: List[Question]) -> List[Question]:
        ids = [q.id for q in v]
        if len(ids) != len(set(ids)):
            raise ValueError("문항 ID가 중복되었습니다.")
        return v

    @field_validator("images")
    @classmethod
    def validate_unique_image_ids(cls, v: List[ImageItem]) -> List[ImageItem]:
        ids = [img.id for img in v]
        if len(ids) != len(set(ids)):
            raise ValueError("이미지 ID가 중복되었습니다.")
        return v

    @model_validator(mode="after")
    def validate_period(self) -> "Project":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("실시 기간의 시작일이 종료일보다 늦습니다.")
        return self

    @property
    def valid_images(self) -> List[ImageItem]:
        return [img for img in self.images if img.is_valid]

    def find_image(self, image_id: str) -> Optional[ImageItem]:
        return next((img for img in self.images if img.id == image_id), None)

    def find_question(self, question_id: str) -> Optional[Question]:
        return next((q for q in self.questions if q.id == question_id), None)
