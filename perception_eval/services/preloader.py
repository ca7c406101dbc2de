"""
services/preloader.py

다음 이미지 사전 로딩 (fire-and-forget).
백그라운드 스레드에서 이미지를 받아 프로세스 내 캐시에 저장한다.
현재 이미지 표시는 fetch()로 동기 로딩하며 같은 캐시를 쓴다.
완료 여부는 상태 전이에 영향을 주지 않으며, 실패는 로그만 남긴다.
캐시는 총 바이트 수 기준 LRU (IMAGE_CACHE_BYTES). 같은 URL의 동시 요청은 한 번만 내려받는다.
"""

import base64
import logging
import threading
from typing import Dict, Optional

import requests
from cachetools import LRUCache

from config import IMAGE_CACHE_BYTES, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = "data:"


def decode_data_url(url: str) -> Optional[bytes]:
    """data:image/png;base64,... 형식이면 바이트로 변환. 아니면 None."""
    if not url.startswith(_DATA_URL_PREFIX) or ";base64," not in url:
        return None
    try:
        return base64.b64decode(url.split(";base64,", 1)[1])
    except ValueError:
        return None


class ImagePreloader:
    """URL → 바이트 캐시. preload()는 즉시 반환한다."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
        max_bytes: int = IMAGE_CACHE_BYTES,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout
        self._lock = threading.Lock()
        self._cache: LRUCache = LRUCache(maxsize=max_bytes, getsizeof=len)
        self._pending: Dict[str, threading.Event] = {}

    def get(self, url: str) -> Optional[bytes]:
        with self._lock:
            return self._cache.get(url)

    @property
    def cached_bytes(self) -> int:
        with self._lock:
            return int(self._cache.currsize)

    def preload(self, url: str) -> threading.Thread:
        t = threading.Thread(target=self.fetch, args=(url,), daemon=True)
        t.start()
        return t

    def fetch(self, url: str) -> Optional[bytes]:
        """동기 로딩. 캐시에 있으면 바로 반환, 다른 스레드가 받는 중이면 기다린다. 실패하면 None."""
        with self._lock:
            cached = self._cache.get(url)
            if cached is not None:
                return cached
            pending = self._pending.get(url)
            owner = pending is None
            if owner:
                pending = self._pending[url] = threading.Event()

        if not owner:
            pending.wait(self.timeout)
            return self.get(url)

        try:
            data = self._download(url)
            if data is not None:
                self._store(url, data)
            return data
        finally:
            with self._lock:
                self._pending.pop(url, None)
            pending.set()

    def _download(self, url: str) -> Optional[bytes]:
        data = decode_data_url(url)
        if data is not None:
            return data
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"이미지 로딩 실패 ({url}): {e}")
            return None
        logger.debug(f"이미지 로딩 완료: {url} ({len(resp.content)//1024}KB)")
        return resp.content

    def _store(self, url: str, data: bytes) -> None:
        with self._lock:
            if len(data) > self._cache.maxsize:
                # 캐시 한도보다 큰 이미지는 저장하지 않음
                logger.debug(f"캐시 한도 초과로 저장 생략: {url}")
                return
            self._cache[url] = data
