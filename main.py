"""
main.py — 평가 서버 + 참가자 앱 진입점

  python main.py                : 서버를 띄운 뒤 Streamlit 참가자 앱 실행
  python main.py --server-only  : 평가 서버만 실행 (PORT 환경변수, 기본 8000)
"""

import os
import socket
import subprocess
import sys
import threading
import time
import logging

# ── 패키지 경로 설정 (반드시 최상단) ──────────────────────────────────────────
_BASE_DIR = os.path.dirname(os.path.abspath(__file__))
if _BASE_DIR not in sys.path:
    sys.path.insert(0, _BASE_DIR)

import requests

from config import BASE_DIR, DEFAULT_HOST, DEFAULT_PORT, LOG_FILE, STREAMLIT_APP

logger = logging.getLogger(__name__)


def _setup_logging() -> None:
    handlers = [logging.StreamHandler(sys.stdout)]
    try:
        handlers.append(logging.FileHandler(LOG_FILE, encoding='utf-8'))
    except PermissionError:
        # 로그 파일을 열 수 없으면 콘솔만 사용
        pass
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=handlers,
    )


# ── 평가 서버 ────────────────────────────────────────────────────────────────

def _pick_port() -> int:
    """기본 포트가 비어 있으면 그대로, 아니면 OS가 고른 빈 포트."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((DEFAULT_HOST, DEFAULT_PORT))
        except OSError:
            s.bind((DEFAULT_HOST, 0))
        return s.getsockname()[1]


def _server_ready(base_url: str, timeout: float = 15.0) -> bool:
    """/api/projects 가 200을 돌려줄 때까지 대기."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            if requests.get(f"{base_url}/api/projects", timeout=0.5).ok:
                return True
        except requests.RequestException:
            pass
        time.sleep(0.2)
    return False


def _serve(port: int) -> None:
    import uvicorn
    from api.app import create_app

    logger.info(f"평가 서버 시작 - http://{DEFAULT_HOST}:{port}")
    uvicorn.run(create_app(), host=DEFAULT_HOST, port=port, log_level="warning")


def _serve_in_background(port: int) -> threading.Thread:
    def target():
        try:
            _serve(port)
        except Exception:
            logger.exception("평가 서버가 비정상 종료되었습니다.")

    thread = threading.Thread(target=target, name="eval-server", daemon=True)
    thread.start()
    return thread


# ── 참가자 앱 ────────────────────────────────────────────────────────────────

def _run_participant_app(api_base_url: str) -> int:
    env = os.environ.copy()
    env["API_BASE_URL"] = api_base_url
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [BASE_DIR, env.get("PYTHONPATH")]))
    cmd = [sys.executable, "-m", "streamlit", "run", STREAMLIT_APP, "--server.address", DEFAULT_HOST]
    logger.info(f"참가자 앱 실행: {' '.join(cmd)}")
    return subprocess.call(cmd, env=env, cwd=BASE_DIR)


def main(argv) -> int:
    _setup_logging()
    os.chdir(BASE_DIR)

    if "--server-only" in argv:
        _serve(DEFAULT_PORT)
        return 0

    port = _pick_port()
    api_base_url = f"http://{DEFAULT_HOST}:{port}"
    _serve_in_background(port)

    if not _server_ready(api_base_url):
        logger.error(f"평가 서버가 응답하지 않습니다: {api_base_url}")
        return 1

    logger.info("서버 준비 완료. 참가자 앱을 실행합니다.")
    try:
        return _run_participant_app(api_base_url)
    except KeyboardInterrupt:
        logger.info("사용자에 의해 종료되었습니다.")
        return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
