"""
services/api_client.py

참가자 클라이언트 → 평가 서버 HTTP 호출.
Public API:
  - ProjectClient.list_projects() -> List[dict]
  - ProjectClient.fetch_evaluate_data(project_id) -> Project
  - ProjectClient.fetch_metrics(project_id) -> dict
  - ProjectClient.fetch_csv(project_id) -> bytes
  - ScoreClient.submit(session_id, answers) -> None   : 실패 시 ScoringError

requests 예외와 2xx 이외 응답은 모두 이 모듈의 예외로 변환한다.
"""

import logging
from typing import List, Optional, Sequence

import requests
from pydantic import ValidationError

from config import API_BASE_URL, REQUEST_TIMEOUT
from perception_eval.models.project_model import Project
from perception_eval.models.score_model import Answer, ScoreSubmission

logger = logging.getLogger(__name__)


class ScoringError(RuntimeError):
    """점수 제출 실패 (네트워크 오류 또는 2xx 이외 응답). 재시도 가능."""


class ProjectLoadError(RuntimeError):
    """프로젝트 데이터 조회 실패."""


class _BaseClient:
    def __init__(
        self,
        base_url: str = API_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"


class ProjectClient(_BaseClient):

    def _get(self, path: str) -> requests.Response:
        try:
            resp = self.session.get(self._url(path), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"GET {path} 실패: {e}")
            raise ProjectLoadError("프로젝트 데이터를 불러오지 못했습니다.") from e
        if not resp.ok:
            logger.error(f"GET {path} → HTTP {resp.status_code}")
            raise ProjectLoadError(f"프로젝트 데이터를 불러오지 못했습니다 (HTTP {resp.status_code}).")
        return resp

    def list_projects(self) -> List[dict]:
        return self._get("/api/projects").json()

    def fetch_evaluate_data(self, project_id: str) -> Project:
        resp = self._get(f"/api/projects/{project_id}/evaluate-data")
        try:
            return Project.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise ProjectLoadError(f"프로젝트 데이터 형식 오류: {e}") from e

    def fetch_metrics(self, project_id: str) -> dict:
        return self._get(f"/api/projects/{project_id}/metrics").json()

    def fetch_csv(self, project_id: str) -> bytes:
        return self._get(f"/api/projects/{project_id}/export-csv").content


class ScoreClient(_BaseClient):

    def submit(self, session_id: str, answers: Sequence[Answer]) -> None:
        """
        세션의 전체 응답을 한 번에 제출한다.

        Raises:
            ScoringError: 네트워크 오류 또는 2xx 이외 응답.
        """
        payload = ScoreSubmission(session_id=session_id, answers=list(answers))
        body = payload.model_dump(by_alias=True)
        try:
            resp = self.session.post(self._url("/api/scores"), json=body, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"점수 제출 네트워크 오류: {e}")
            raise ScoringError("제출 중 오류가 발생했습니다. 다시 시도해 주세요.") from e
        if not resp.ok:
            logger.warning(f"점수 제출 실패: HTTP {resp.status_code}")
            raise ScoringError("제출 중 오류가 발생했습니다. 다시 시도해 주세요.")
        logger.info(f"점수 제출 완료: session={session_id}, {len(body['answers'])}건")
