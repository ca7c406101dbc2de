"""
api/routes.py — FastAPI 엔드포인트
"""

import logging

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import ValidationError

import api.store as store
from api.store import ImageConflictError
from perception_eval.models.project_model import Project
from perception_eval.models.score_model import ScoreSubmission
from perception_eval.services.score_service import (
    build_metrics, export_csv, get_duration_status, validate_answers
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ── 헬퍼 ─────────────────────────────────────────────────────────────────────

def _project_to_dict(p: Project) -> dict:
    return p.model_dump(mode="json", by_alias=True)


def _require_project(project_id: str) -> Project:
    project = store.get_project(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


def _register(project: Project) -> None:
    try:
        store.register_project(project)
    except ImageConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))


# ── 프로젝트 ─────────────────────────────────────────────────────────────────

@router.get("/api/projects")
async def list_projects():
    return [
        {
            "id": p.id,
            "name": p.name,
            "description": p.description,
            "imageCount": p.image_count,
            "questionCount": len(p.questions),
        }
        for p in store.list_projects()
    ]


@router.post("/api/projects", status_code=201)
async def create_project(body: Project):
    if store.get_project(body.id) is not None:
        raise HTTPException(status_code=409, detail="이미 존재하는 프로젝트 ID입니다.")
    _register(body)
    logger.info(f"프로젝트 등록: {body.id} (이미지 {len(body.images)}개, 문항 {len(body.questions)}개)")
    return _project_to_dict(body)


@router.get("/api/projects/{project_id}")
async def get_project(project_id: str):
    project = _require_project(project_id)
    status = get_duration_status(project.start_date, project.end_date)
    d = _project_to_dict(project)
    d["durationStatus"] = {
        "isActive": status.is_active,
        "isStarted": status.is_started,
        "isEnded": status.is_ended,
    }
    return d


@router.put("/api/projects/{project_id}")
async def update_project(project_id: str, body: Project):
    """프로젝트 전체 교체. 본문에서 빠진 이미지는 점수와 함께 삭제된다."""
    _require_project(project_id)
    if body.id != project_id:
        raise HTTPException(status_code=400, detail="본문의 id가 경로의 프로젝트 ID와 다릅니다.")
    _register(body)
    logger.info(f"프로젝트 수정: {project_id}")
    return _project_to_dict(body)


@router.delete("/api/projects/{project_id}")
async def delete_project(project_id: str):
    if not store.delete_project(project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    logger.info(f"프로젝트 삭제: {project_id}")
    return {"success": True}


@router.delete("/api/projects/{project_id}/images/{image_id}")
async def delete_image(project_id: str, image_id: str):
    _require_project(project_id)
    if store.remove_image(project_id, image_id) is None:
        raise HTTPException(status_code=404, detail="Image not found")
    logger.info(f"이미지 삭제: project={project_id}, image={image_id}")
    return {"ok": True}


@router.get("/api/projects/{project_id}/evaluate-data")
async def evaluate_data(project_id: str):
    return _project_to_dict(_require_project(project_id))


# ── 점수 ─────────────────────────────────────────────────────────────────────

@router.post("/api/scores")
async def submit_scores(request: Request):
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payload: body must be JSON")

    if (
        not isinstance(payload, dict)
        or not isinstance(payload.get("sessionId"), str)
        or not isinstance(payload.get("answers"), list)
    ):
        raise HTTPException(
            status_code=400,
            detail="Invalid payload: sessionId must be string and answers must be array",
        )
    try:
        submission = ScoreSubmission.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid payload: {e.errors()[0]['msg']}")

    if not submission.answers:
        return {"ok": True, "count": 0}

    project = store.find_project_by_image(submission.answers[0].image_id)
    if project is None:
        raise HTTPException(status_code=422, detail="알 수 없는 이미지에 대한 응답입니다.")
    try:
        validate_answers(project, submission.answers)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    records = store.add_scores(submission.session_id, project, submission.answers)
    logger.info(f"점수 저장: project={project.id}, session={submission.session_id}, {len(records)}건")
    return {"ok": True, "count": len(records)}


@router.get("/api/projects/{project_id}/metrics")
async def metrics(project_id: str):
    project = _require_project(project_id)
    return build_metrics(project, store.list_scores(project_id))


@router.get("/api/projects/{project_id}/export-csv")
async def export_scores_csv(project_id: str):
    project = _require_project(project_id)
    csv_text = export_csv(project, store.list_scores(project_id))
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="scores-project-{project_id}.csv"'},
    )


# ── 완료 화면 ────────────────────────────────────────────────────────────────

@router.get("/projects/{project_id}/thanks")
async def thanks(project_id: str):
    project = _require_project(project_id)
    return {"projectId": project.id, "name": project.name, "message": "참여해 주셔서 감사합니다."}
