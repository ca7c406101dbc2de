"""
streamlit_app.py — 참가자/연구자 Streamlit 앱 진입점

실행: streamlit run perception_eval/streamlit_app.py
페이지 전환은 st.session_state.page 로 관리한다 (consent → evaluate → thanks, metrics).
"""

import os
import sys

# ── 패키지 경로 설정 (반드시 최상단) ──────────────────────────────────────────
_BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BASE_DIR not in sys.path:
    sys.path.insert(0, _BASE_DIR)

import streamlit as st

from config import API_BASE_URL
from perception_eval.services.api_client import ProjectClient
from perception_eval.services.preloader import ImagePreloader
from perception_eval.views import consent_view, evaluate_view, metrics_view, thanks_view
from perception_eval.views.components import sidebar as nav

_CSS = """
<style>
.eval-divider { border: none; border-top: 1px solid #e5e7eb; margin: 12px 0; }
.timer-display { font-size: 1.1rem; font-weight: 700; text-align: center; }
</style>
"""


@st.cache_resource
def _get_preloader() -> ImagePreloader:
    # 프로세스 전체에서 공유하는 이미지 캐시
    return ImagePreloader()


def main() -> None:
    st.set_page_config(page_title="Image Evaluation", page_icon="🖼", layout="centered")
    st.markdown(_CSS, unsafe_allow_html=True)

    if "page" not in st.session_state:
        st.session_state.page = "consent"
        st.session_state.project_id = st.query_params.get("project")

    client = ProjectClient(base_url=API_BASE_URL)
    preloader = _get_preloader()
    page = st.session_state.page

    # 평가 중에는 사이드바를 숨겨 되돌아가기를 막는다
    if page != "evaluate":
        with st.sidebar:
            nav.render(client)

    if page == "evaluate":
        evaluate_view.render(client, preloader)
    elif page == "thanks":
        thanks_view.render()
    elif page == "metrics":
        metrics_view.render(client)
    else:
        consent_view.render(client)


main()
