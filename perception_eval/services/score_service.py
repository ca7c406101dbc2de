"""
services/score_service.py

응답 값 검증, 집계(metrics), CSV 내보내기, 실시 기간 판정.
순수 Python 함수로 구성 — 전역 상태 변경 없음.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from config import RADIO_MAX, RADIO_MIN, SLIDER_MAX, SLIDER_MIN
from perception_eval.models.project_model import EvaluationMethod, Project
from perception_eval.models.score_model import Answer, ScoreRecord

CSV_HEADERS = [
    "id",
    "value",
    "questionId",
    "imageId",
    "sessionId",
    "createdAt",
    "questionText",
    "imageUrl",
    "evaluationMethod",
]


# ── 값 검증 ──────────────────────────────────────────────────────────────────

def value_range(method: EvaluationMethod) -> Tuple[float, float]:
    if method is EvaluationMethod.RADIO:
        return float(RADIO_MIN), float(RADIO_MAX)
    return SLIDER_MIN, SLIDER_MAX


def neutral_value(method: EvaluationMethod) -> float:
    """응답 폼 초기값. 두 방식 모두 척도의 가운데(0)."""
    lo, hi = value_range(method)
    return (lo + hi) / 2


def validate_value(method: EvaluationMethod, value: float) -> float:
    """
    평가 방식의 범위에 맞는지 검사하고 float로 반환한다.
    radio 방식은 정수만 허용.

    Raises:
        ValueError: 숫자가 아니거나 범위 밖.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"응답 값이 숫자가 아닙니다: {value!r}")
    lo, hi = value_range(method)
    if not lo <= value <= hi:
        raise ValueError(f"응답 값 {value}이(가) 범위 [{lo:g}, {hi:g}]를 벗어났습니다.")
    if method is EvaluationMethod.RADIO and float(value) != int(value):
        raise ValueError(f"radio 방식은 정수 값만 허용합니다: {value}")
    return float(value)


def validate_answers(project: Project, answers: Sequence[Answer]) -> None:
    """
    제출된 응답이 모두 이 프로젝트의 이미지·문항을 가리키고 값이 범위 안인지 확인.

    Raises:
        ValueError: 첫 번째로 발견된 문제.
    """
    for idx, a in enumerate(answers):
        if project.find_image(a.image_id) is None:
            raise ValueError(f"answers[{idx}]: 알 수 없는 이미지 {a.image_id}")
        if project.find_question(a.question_id) is None:
            raise ValueError(f"answers[{idx}]: 알 수 없는 문항 {a.question_id}")
        validate_value(project.evaluation_method, a.value)


# ── 집계 ────────────────────────────────────────────────────────────────────

def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def build_metrics(project: Project, records: Iterable[ScoreRecord]) -> Dict[str, object]:
    """
    프로젝트 대시보드용 집계.

    Returns:
        {
          "perImage":               [{"id", "url", "count"}],           이미지별 응답 수 (전체 이미지)
          "monthly":                [{"month": "YYYY-MM", "count"}],    월별 고유 세션 수, 월 오름차순
          "avgByQuestion":          [{"questionId", "question", "avg"}], 응답이 있는 문항만
          "questionScoresPerImage": [{"imageId", "questionId", "avg"}],
          "uniqueRespondents":      int,
          "totalScores":            int,
        }
    """
    records = list(records)
    question_text = {q.id: q.text for q in project.questions}

    per_image_count: Dict[str, int] = defaultdict(int)
    sessions_by_month: Dict[str, set] = defaultdict(set)
    by_question: Dict[str, List[float]] = defaultdict(list)
    by_pair: Dict[Tuple[str, str], List[float]] = defaultdict(list)

    for r in records:
        per_image_count[r.image_id] += 1
        sessions_by_month[r.created_at.strftime("%Y-%m")].add(r.session_id)
        by_question[r.question_id].append(r.value)
        by_pair[(r.image_id, r.question_id)].append(r.value)

    question_order = [q.id for q in project.questions]
    ordered_questions = [qid for qid in question_order if qid in by_question]
    ordered_questions += sorted(qid for qid in by_question if qid not in question_text)

    return {
        "perImage": [
            {"id": img.id, "url": img.url or None, "count": per_image_count.get(img.id, 0)}
            for img in project.images
        ],
        "monthly": [
            {"month": month, "count": len(sessions)}
            for month, sessions in sorted(sessions_by_month.items())
        ],
        "avgByQuestion": [
            {
                "questionId": qid,
                "question": question_text.get(qid, "(unknown)"),
                "avg": _mean(by_question[qid]),
            }
            for qid in ordered_questions
        ],
        "questionScoresPerImage": [
            {"imageId": image_id, "questionId": qid, "avg": _mean(vals)}
            for (image_id, qid), vals in by_pair.items()
        ],
        "uniqueRespondents": len({r.session_id for r in records}),
        "totalScores": len(records),
    }


def export_csv(project: Project, records: Iterable[ScoreRecord]) -> str:
    """점수 레코드를 CSV 문자열로. 텍스트 열(questionText, imageUrl)은 항상 따옴표 처리."""
    question_text = {q.id: q.text for q in project.questions}
    image_url = {img.id: img.url for img in project.images}

    rows = [",".join(CSV_HEADERS)]
    for r in records:
        rows.append(",".join([
            str(r.id),
            f"{r.value:g}",
            r.question_id,
            r.image_id,
            r.session_id,
            r.created_at.isoformat(),
            _quote(question_text.get(r.question_id, "")),
            _quote(image_url.get(r.image_id, "")),
            r.evaluation_method.value,
        ]))
    return "\n".join(rows)


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


# ── 실시 기간 ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DurationStatus:
    is_active: bool
    is_started: bool
    is_ended: bool


def get_duration_status(
    start_date: Optional[datetime],
    end_date: Optional[datetime],
    now: Optional[datetime] = None,
) -> DurationStatus:
    """
    실시 기간 상태.
    시작일이 없으면 항상 시작된 것으로, 종료일이 없으면 끝나지 않은 것으로 본다.
    """
    now = _aware(now) if now else datetime.now(timezone.utc)
    is_started = now >= _aware(start_date) if start_date else True
    is_ended = now > _aware(end_date) if end_date else False
    return DurationStatus(
        is_active=is_started and not is_ended,
        is_started=is_started,
        is_ended=is_ended,
    )


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
