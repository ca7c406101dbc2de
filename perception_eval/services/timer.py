"""
services/timer.py

이미지 노출 타이머와 반복 tick 공급자.

컨트롤러는 특정 플랫폼 API(프레임 콜백 등)에 묶이지 않고 Ticker 인터페이스만 사용한다.
  - ManualTicker : 호스트가 fire()를 호출할 때마다 한 프레임. Streamlit rerun, 테스트용 가상 시계.
"""

import itertools
from typing import Callable, Dict, Optional, Protocol


TickCallback = Callable[[], None]


class Ticker(Protocol):
    def schedule(self, callback: TickCallback) -> int:
        """반복 콜백 등록. 취소용 핸들 반환."""
        ...

    def cancel(self, handle: int) -> None:
        ...


def remaining_seconds(duration: float, start_time: Optional[float], now: Optional[float]) -> float:
    """
    남은 시간 = max(duration - 경과, 0).
    타이머가 시작되지 않았으면 duration 그대로.
    """
    if start_time is None or now is None:
        return float(duration)
    elapsed = now - start_time
    return max(duration - elapsed, 0.0)


def format_remaining(seconds: float) -> str:
    """남은 시간 표시 문자열 (예: 3s, 1:05)."""
    whole = int(-(-seconds // 1))  # 올림
    if whole < 60:
        return f"{whole}s"
    minutes, secs = divmod(whole, 60)
    return f"{minutes}:{secs:02d}"


class ManualTicker:
    """호스트가 fire()로 구동하는 Ticker. fire 1회 = 1프레임."""

    def __init__(self) -> None:
        self._callbacks: Dict[int, TickCallback] = {}
        self._ids = itertools.count(1)

    def schedule(self, callback: TickCallback) -> int:
        handle = next(self._ids)
        self._callbacks[handle] = callback
        return handle

    def cancel(self, handle: int) -> None:
        self._callbacks.pop(handle, None)

    @property
    def active(self) -> int:
        return len(self._callbacks)

    def fire(self) -> None:
        # 콜백 안에서 cancel 될 수 있으므로 스냅샷 순회
        for handle, callback in list(self._callbacks.items()):
            if handle in self._callbacks:
                callback()
