import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from perception_eval.models.project_model import EvaluationMethod, ImageItem, Project, Question
from perception_eval.services.api_client import ScoringError
from perception_eval.services.timer import ManualTicker


class FakeClock:
    def __init__(self, t: float = 100.0):
        self.t = t

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds


class FakeScorer:
    """submit 호출을 기록. fail_times 만큼 ScoringError 를 던진 뒤 성공."""

    def __init__(self, fail_times: int = 0, on_submit=None):
        self.calls = []
        self.fail_times = fail_times
        self.on_submit = on_submit

    def submit(self, session_id, answers):
        self.calls.append((session_id, tuple(answers)))
        if self.on_submit:
            self.on_submit()
        if self.fail_times > 0:
            self.fail_times -= 1
            raise ScoringError("제출 중 오류가 발생했습니다. 다시 시도해 주세요.")


class FakeNavigator:
    def __init__(self):
        self.thanks = []
        self.empty = []

    def go_to_thanks(self, project_id):
        self.thanks.append(project_id)

    def show_empty_state(self, message):
        self.empty.append(message)


class FakePreloader:
    def __init__(self):
        self.urls = []

    def preload(self, url):
        self.urls.append(url)


def sequence_source(values):
    """주어진 값을 순서대로 돌려주는 난수원."""
    it = iter(values)
    return lambda: next(it)


def make_project(
    n_images: int = 2,
    image_count: int = 2,
    duration: float = 3,
    n_questions: int = 2,
    method: EvaluationMethod = EvaluationMethod.SLIDER,
    blank: int = 0,
    **kwargs,
) -> Project:
    images = [ImageItem(id=f"img{i + 1}", url=f"https://example.com/{i + 1}.png") for i in range(n_images)]
    images += [ImageItem(id=f"blank{i + 1}", url=" " if i % 2 else "") for i in range(blank)]
    return Project(
        id=kwargs.pop("id", "p1"),
        image_count=image_count,
        image_duration=duration,
        evaluation_method=method,
        questions=[Question(id=f"q{i + 1}", text=f"Question {i + 1}") for i in range(n_questions)],
        images=images,
        **kwargs,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ticker():
    return ManualTicker()


@pytest.fixture
def scorer():
    return FakeScorer()


@pytest.fixture
def navigator():
    return FakeNavigator()


@pytest.fixture
def preloader():
    return FakePreloader()
