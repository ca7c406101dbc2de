"""
api/sample_projects.py — 기동 시 등록되는 샘플 프로젝트
"""

from perception_eval.models.project_model import EvaluationMethod, ImageItem, Project, Question

# 1x1 PNG
_PIXEL = (
    "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQ"
    "DwAEhQGAhKmMIQAAAABJRU5ErkJggg=="
)

SAMPLE_PROJECTS = [
    Project(
        id="sample-slider",
        name="샘플 프로젝트 (슬라이더)",
        description="이미지를 보고 두 문항에 -1 ~ 1 범위로 답하는 샘플입니다.",
        consent_info="본 평가에 참여하는 데 동의합니다.",
        image_count=2,
        image_duration=3,
        evaluation_method=EvaluationMethod.SLIDER,
        questions=[
            Question(id="q1", text="How do you feel about this image?", left_label="Bad", right_label="Good"),
            Question(id="q2", text="Is this image interesting?", left_label="Boring", right_label="Interesting"),
        ],
        images=[
            ImageItem(id="img1", url=_PIXEL),
            ImageItem(id="img2", url=_PIXEL),
            ImageItem(id="img3", url=""),
        ],
    ),
    Project(
        id="sample-radio",
        name="샘플 프로젝트 (라디오)",
        description="7단계(-3 ~ 3) 라디오 버튼 평가 샘플입니다.",
        consent_info="본 평가에 참여하는 데 동의합니다.",
        image_count=1,
        image_duration=3,
        evaluation_method=EvaluationMethod.RADIO,
        questions=[
            Question(id="r1", text="How natural does this image look?", left_label="Unnatural", right_label="Natural"),
        ],
        images=[ImageItem(id="img-r1", url=_PIXEL)],
    ),
]
