"""
services/sampling.py

세션에 보여줄 이미지 목록 선택 (필터 → 셔플 → 절단).
난수원은 주입 가능 — 테스트에서 결정적 수열을 넣어 정확한 순열을 검증한다.
"""

import math
import random
from typing import Callable, List, Sequence, TypeVar

from perception_eval.models.project_model import ImageItem

T = TypeVar("T")

RandomSource = Callable[[], float]   # [0, 1) 범위 실수 반환


def shuffle(sequence: Sequence[T], random_source: RandomSource = random.random) -> List[T]:
    """
    Fisher-Yates 셔플. 원본은 건드리지 않고 새 리스트를 반환한다.
    i를 마지막 인덱스부터 1까지 내려가며 [0, i] 범위의 j와 교환.
    """
    shuffled = list(sequence)
    for i in range(len(shuffled) - 1, 0, -1):
        j = math.floor(random_source() * (i + 1))
        # 난수원이 1.0을 돌려주는 경우 방지
        j = min(j, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def select_images(
    images: Sequence[ImageItem],
    image_count: int,
    random_source: RandomSource = random.random,
) -> List[ImageItem]:
    """
    유효 URL 이미지만 남겨 셔플한 뒤 앞에서 image_count개를 취한다.

    Returns:
        최대 min(image_count, 유효 이미지 수)개의 ImageItem. 중복 없음.
    """
    valid = [img for img in images if img.is_valid]
    count = max(0, min(image_count, len(valid)))
    return shuffle(valid, random_source)[:count]
