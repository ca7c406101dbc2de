"""
api/store.py — 인메모리 프로젝트/점수 저장소

프로젝트는 ID로, 점수는 추가 전용 리스트로 보관.
이미지 ID는 한 프로젝트에만 속한다 (_image_owner). 점수의 소속 프로젝트는 이 색인으로 정한다.
모든 접근은 모듈 락으로 직렬화한다. 프로세스 종료 시 내용은 사라진다.
"""

import itertools
import threading
from typing import Dict, Iterable, List, Optional, Sequence

from perception_eval.models.project_model import Project
from perception_eval.models.score_model import Answer, ScoreRecord

_lock = threading.Lock()
_projects: Dict[str, Project] = {}
_image_owner: Dict[str, str] = {}
_scores: List[ScoreRecord] = []
_score_ids = itertools.count(1)


class ImageConflictError(ValueError):
    """다른 프로젝트가 이미 가진 이미지 ID로 등록하려 함."""

    def __init__(self, image_id: str, owner: str) -> None:
        super().__init__(f"이미지 {image_id}은(는) 이미 프로젝트 {owner}에 등록되어 있습니다.")
        self.image_id = image_id
        self.owner = owner


def _check_image_owners(project: Project) -> None:
    for img in project.images:
        owner = _image_owner.get(img.id)
        if owner is not None and owner != project.id:
            raise ImageConflictError(img.id, owner)


def _drop_scores(image_ids: Iterable[str]) -> None:
    ids = set(image_ids)
    if ids:
        _scores[:] = [s for s in _scores if s.image_id not in ids]


def register_project(project: Project) -> Project:
    """
    프로젝트 등록 (같은 ID면 교체). 이미지 → 프로젝트 역색인도 갱신.
    교체로 빠진 이미지의 점수는 함께 삭제한다.

    Raises:
        ImageConflictError: 이미지 ID를 다른 프로젝트가 이미 사용 중.
    """
    with _lock:
        _check_image_owners(project)
        old = _projects.get(project.id)
        if old is not None:
            kept = {img.id for img in project.images}
            removed = [img.id for img in old.images if img.id not in kept]
            for image_id in removed:
                _image_owner.pop(image_id, None)
            _drop_scores(removed)
        _projects[project.id] = project
        for img in project.images:
            _image_owner[img.id] = project.id
    return project


def delete_project(project_id: str) -> bool:
    """프로젝트와 그 이미지·점수 삭제. 없으면 False."""
    with _lock:
        project = _projects.pop(project_id, None)
        if project is None:
            return False
        image_ids = [img.id for img in project.images]
        for image_id in image_ids:
            _image_owner.pop(image_id, None)
        _drop_scores(image_ids)
    return True


def remove_image(project_id: str, image_id: str) -> Optional[Project]:
    """프로젝트에서 이미지 1장과 그 점수를 삭제. 프로젝트나 이미지가 없으면 None."""
    with _lock:
        project = _projects.get(project_id)
        if project is None or project.find_image(image_id) is None:
            return None
        updated = project.model_copy(
            update={"images": [img for img in project.images if img.id != image_id]}
        )
        _projects[project_id] = updated
        _image_owner.pop(image_id, None)
        _drop_scores([image_id])
    return updated


def get_project(project_id: str) -> Optional[Project]:
    with _lock:
        return _projects.get(project_id)


def list_projects() -> List[Project]:
    with _lock:
        return list(_projects.values())


def find_project_by_image(image_id: str) -> Optional[Project]:
    with _lock:
        project_id = _image_owner.get(image_id)
        return _projects.get(project_id) if project_id else None


def add_scores(session_id: str, project: Project, answers: Sequence[Answer]) -> List[ScoreRecord]:
    """응답마다 점수 레코드 1건 저장. 저장된 레코드 반환."""
    with _lock:
        records = [
            ScoreRecord(
                id=next(_score_ids),
                session_id=session_id,
                image_id=a.image_id,
                question_id=a.question_id,
                value=a.value,
                evaluation_method=project.evaluation_method,
            )
            for a in answers
        ]
        _scores.extend(records)
    return records


def list_scores(project_id: str) -> List[ScoreRecord]:
    """프로젝트 이미지에 대한 점수 레코드 (저장 순서)."""
    with _lock:
        project = _projects.get(project_id)
        if project is None:
            return []
        image_ids = {img.id for img in project.images}
        return [s for s in _scores if s.image_id in image_ids]


def reset() -> None:
    """저장소 초기화."""
    with _lock:
        _projects.clear()
        _image_owner.clear()
        _scores.clear()
