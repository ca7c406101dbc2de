"""
api/app.py — FastAPI 앱 팩토리

라우터 등록, CORS, 오류 응답 로그, 기동 시 샘플 프로젝트 등록.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from api.sample_projects import SAMPLE_PROJECTS
import api.store as store

logger = logging.getLogger(__name__)


def _register_samples() -> None:
    added = 0
    for project in SAMPLE_PROJECTS:
        if store.get_project(project.id) is None:
            store.register_project(project)
            added += 1
    if added:
        logger.info(f"샘플 프로젝트 {added}개 등록")


def create_app(load_samples: bool = True) -> FastAPI:
    app = FastAPI(title="Image Perception Evaluation", docs_url=None, redoc_url=None)

    # 참가자 앱(Streamlit)이 다른 포트에서 호출
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_errors(request: Request, call_next):
        response = await call_next(request)
        if response.status_code >= 400:
            logger.warning(f"{request.method} {request.url.path} → {response.status_code}")
        return response

    app.include_router(router)

    @app.get("/")
    async def index():
        return {"service": app.title, "projects": len(store.list_projects())}

    if load_samples:
        _register_samples()

    return app
