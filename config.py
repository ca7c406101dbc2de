import os

# 기본 디렉토리 설정
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# 경로 설정
LOG_FILE = os.path.join(BASE_DIR, "launch.log")
STREAMLIT_APP = os.path.join(BASE_DIR, "perception_eval", "streamlit_app.py")

# 서버 설정
DEFAULT_HOST = os.getenv("HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("PORT", "8000"))

# 참가자 클라이언트 설정
API_BASE_URL = os.getenv("API_BASE_URL", f"http://{DEFAULT_HOST}:{DEFAULT_PORT}")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "15.0"))
IMAGE_CACHE_BYTES = int(os.getenv("IMAGE_CACHE_BYTES", str(64 * 1024 * 1024)))   # 이미지 캐시 한도
TICK_INTERVAL = 1 / 30      # 화면 갱신 주기 (초)

# 평가 방식별 값 범위
SLIDER_MIN = -1.0
SLIDER_MAX = 1.0
SLIDER_STEP = 0.01
RADIO_MIN = -3
RADIO_MAX = 3

# 프로젝트 기본값
DEFAULT_IMAGE_COUNT = 6
DEFAULT_IMAGE_DURATION = 5.0
