import uuid

import pytest

from perception_eval.models.project_model import EvaluationMethod
from perception_eval.models.session_state import Phase
from perception_eval.services.evaluation_controller import (
    NO_IMAGES_MESSAGE, AnswerValidationError, EvaluationController
)

from conftest import FakeScorer, make_project, sequence_source


def _controller(project, scorer, navigator, ticker, clock, preloader=None, **kwargs):
    return EvaluationController(
        project,
        scorer=scorer,
        navigator=navigator,
        ticker=ticker,
        clock=clock,
        preloader=preloader,
        **kwargs,
    )


def _view_image(ctrl, ticker, clock, seconds=None):
    """이미지 load 후 노출 시간이 지날 때까지 tick."""
    ctrl.on_image_loaded(640, 480)
    clock.advance(seconds if seconds is not None else ctrl.project.image_duration + 0.5)
    ticker.fire()


def test_scenario_two_images_two_questions(scorer, navigator, ticker, clock, preloader):
    project = make_project(n_images=2, image_count=2, duration=3, n_questions=2)
    ctrl = _controller(project, scorer, navigator, ticker, clock, preloader)
    first, second = ctrl.state.images_to_show

    assert ctrl.phase is Phase.SHOW_IMAGE
    _view_image(ctrl, ticker, clock, seconds=3.1)
    assert ctrl.phase is Phase.SHOW_SLIDERS
    assert ctrl.submit_answers({"q1": 0.5, "q2": -0.2})

    assert ctrl.phase is Phase.SHOW_IMAGE
    assert ctrl.state.current_index == 1
    assert preloader.urls == [first.url, second.url]

    _view_image(ctrl, ticker, clock, seconds=3.5)
    assert ctrl.submit_answers({"q1": 1, "q2": 0})

    assert ctrl.phase is Phase.SUBMITTED
    assert len(scorer.calls) == 1
    session_id, answers = scorer.calls[0]
    assert session_id == ctrl.state.session_id
    assert len(answers) == 4
    assert [a.image_id for a in answers] == [first.id, first.id, second.id, second.id]
    assert [a.question_id for a in answers] == ["q1", "q2", "q1", "q2"]
    assert [a.value for a in answers] == [0.5, -0.2, 1.0, 0.0]
    assert navigator.thanks == ["p1"]


def test_session_id_is_uuid(scorer, navigator, ticker, clock):
    ctrl = _controller(make_project(), scorer, navigator, ticker, clock)
    uuid.UUID(ctrl.state.session_id)
    other = _controller(make_project(), scorer, navigator, ticker, clock)
    assert other.state.session_id != ctrl.state.session_id


def test_images_to_show_uses_injected_random_source(scorer, navigator, ticker, clock):
    project = make_project(n_images=3, image_count=2)
    ctrl = _controller(project, scorer, navigator, ticker, clock, random_source=sequence_source([0.0, 0.0]))
    assert [img.id for img in ctrl.state.images_to_show] == ["img2", "img3"]


@pytest.mark.parametrize("n_images,blank", [(0, 0), (0, 3)])
def test_no_images_is_terminal(n_images, blank, scorer, navigator, ticker, clock):
    project = make_project(n_images=n_images, blank=blank)
    ctrl = _controller(project, scorer, navigator, ticker, clock)

    assert ctrl.no_images
    assert navigator.empty == [NO_IMAGES_MESSAGE]
    ctrl.on_image_loaded()
    assert ticker.active == 0
    assert ctrl.submit_answers({"q1": 0, "q2": 0}) is False
    assert ctrl.submit_all() is False
    assert scorer.calls == []
    assert navigator.thanks == []


def test_timer_does_not_start_before_image_load(scorer, navigator, ticker, clock):
    ctrl = _controller(make_project(duration=3), scorer, navigator, ticker, clock)
    clock.advance(60)
    ticker.fire()
    assert ctrl.phase is Phase.SHOW_IMAGE
    assert ticker.active == 0
    assert ctrl.remaining == 3.0


def test_transition_waits_for_full_duration(scorer, navigator, ticker, clock):
    ctrl = _controller(make_project(duration=3), scorer, navigator, ticker, clock)
    ctrl.on_image_loaded()
    for _ in range(29):
        clock.advance(0.1)
        ticker.fire()
    assert ctrl.phase is Phase.SHOW_IMAGE
    assert 0 < ctrl.remaining < 3

    clock.advance(0.2)
    ticker.fire()
    assert ctrl.phase is Phase.SHOW_SLIDERS


def test_tick_cancelled_when_leaving_image_phase(scorer, navigator, ticker, clock):
    ctrl = _controller(make_project(), scorer, navigator, ticker, clock)
    _view_image(ctrl, ticker, clock)
    assert ticker.active == 0
    # 늦게 도착한 tick은 상태를 바꾸지 않는다
    ctrl._on_tick()
    assert ctrl.phase is Phase.SHOW_SLIDERS


def test_remaining_frozen_at_full_duration_while_answering(scorer, navigator, ticker, clock):
    ctrl = _controller(make_project(duration=4), scorer, navigator, ticker, clock)
    _view_image(ctrl, ticker, clock)
    clock.advance(10)
    assert ctrl.remaining == 4.0


def test_image_view_reset_on_next_image(scorer, navigator, ticker, clock):
    ctrl = _controller(make_project(), scorer, navigator, ticker, clock)
    _view_image(ctrl, ticker, clock)
    assert ctrl.state.image_size == (640, 480)
    ctrl.submit_answers({"q1": 0, "q2": 0})

    state = ctrl.state
    assert state.image_loaded is False
    assert state.image_size is None
    assert state.start_time is None
    assert ctrl.remaining == ctrl.project.image_duration


def test_load_event_ignored_outside_image_phase(scorer, navigator, ticker, clock):
    ctrl = _controller(make_project(), scorer, navigator, ticker, clock)
    _view_image(ctrl, ticker, clock)
    ctrl.on_image_loaded()
    assert ticker.active == 0
    assert ctrl.phase is Phase.SHOW_SLIDERS


def test_answers_rejected_during_image_phase(scorer, navigator, ticker, clock):
    ctrl = _controller(make_project(), scorer, navigator, ticker, clock)
    assert ctrl.submit_answers({"q1": 0, "q2": 0}) is False
    assert ctrl.state.answers == ()


def test_missing_question_rejected_without_state_change(scorer, navigator, ticker, clock):
    ctrl = _controller(make_project(), scorer, navigator, ticker, clock)
    _view_image(ctrl, ticker, clock)
    with pytest.raises(AnswerValidationError):
        ctrl.submit_answers({"q1": 0.3})
    assert ctrl.state.answers == ()
    assert ctrl.phase is Phase.SHOW_SLIDERS


def test_out_of_range_value_rejected(scorer, navigator, ticker, clock):
    ctrl = _controller(make_project(), scorer, navigator, ticker, clock)
    _view_image(ctrl, ticker, clock)
    with pytest.raises(AnswerValidationError):
        ctrl.submit_answers({"q1": 1.5, "q2": 0})


def test_radio_method_requires_integer_values(scorer, navigator, ticker, clock):
    project = make_project(n_images=1, image_count=1, method=EvaluationMethod.RADIO)
    ctrl = _controller(project, scorer, navigator, ticker, clock)
    _view_image(ctrl, ticker, clock)
    assert ctrl.default_values() == {"q1": 0.0, "q2": 0.0}
    with pytest.raises(AnswerValidationError):
        ctrl.submit_answers({"q1": 0.5, "q2": 0})
    assert ctrl.submit_answers({"q1": -3, "q2": 3})
    assert [a.value for a in scorer.calls[0][1]] == [-3.0, 3.0]


def test_captured_values_not_affected_by_later_changes(scorer, navigator, ticker, clock):
    ctrl = _controller(make_project(), scorer, navigator, ticker, clock)
    _view_image(ctrl, ticker, clock)
    values = {"q1": 0.25, "q2": -0.75}
    ctrl.submit_answers(values)
    values["q1"] = -1
    assert [a.value for a in ctrl.state.answers] == [0.25, -0.75]


def test_index_is_monotonic_and_answers_complete(scorer, navigator, ticker, clock):
    project = make_project(n_images=5, image_count=4, n_questions=3)
    ctrl = _controller(project, scorer, navigator, ticker, clock)
    seen = []
    while ctrl.phase is not Phase.SUBMITTED:
        seen.append(ctrl.state.current_index)
        _view_image(ctrl, ticker, clock)
        ctrl.submit_answers({q.id: 0.1 for q in project.questions})

    assert seen == [0, 1, 2, 3]
    answers = scorer.calls[0][1]
    assert len(answers) == 4 * 3
    shown = {img.id for img in ctrl.state.images_to_show}
    assert {a.image_id for a in answers} == shown
    assert {a.question_id for a in answers} == {"q1", "q2", "q3"}


def test_double_submit_sends_once(navigator, ticker, clock):
    project = make_project(n_images=1, image_count=1)
    holder = {}
    # 요청 진행 중 중복 클릭
    scorer = FakeScorer(on_submit=lambda: holder["results"].append(holder["ctrl"].submit_all()))
    holder["results"] = []
    ctrl = _controller(project, scorer, navigator, ticker, clock)
    holder["ctrl"] = ctrl
    _view_image(ctrl, ticker, clock)

    assert ctrl.submit_answers({"q1": 0, "q2": 0})
    assert holder["results"] == [False]
    # 완료 후 다시 눌러도 무시
    assert ctrl.submit_answers({"q1": 0, "q2": 0}) is False
    assert ctrl.submit_all() is False
    assert len(scorer.calls) == 1
    assert ctrl.state.submitting is True
    assert navigator.thanks == ["p1"]


def test_retry_after_failure_sends_identical_payload(navigator, ticker, clock):
    project = make_project(n_images=2, image_count=2)
    scorer = FakeScorer(fail_times=1)
    ctrl = _controller(project, scorer, navigator, ticker, clock)
    for values in ({"q1": 0.1, "q2": 0.2}, {"q1": 0.3, "q2": 0.4}):
        _view_image(ctrl, ticker, clock)
        ctrl.submit_answers(values)

    assert ctrl.phase is Phase.SUBMITTING
    assert ctrl.state.error
    assert ctrl.can_submit
    assert navigator.thanks == []
    answers_before = ctrl.state.answers

    # 폼 값이 바뀌어도 이미 확정된 응답으로 재시도
    assert ctrl.submit_answers({"q1": -1, "q2": -1})
    assert ctrl.phase is Phase.SUBMITTED
    assert ctrl.state.error is None
    assert len(scorer.calls) == 2
    assert scorer.calls[0] == scorer.calls[1]
    assert ctrl.state.answers == answers_before
    assert navigator.thanks == ["p1"]


def test_close_cancels_pending_tick(scorer, navigator, ticker, clock):
    ctrl = _controller(make_project(), scorer, navigator, ticker, clock)
    ctrl.on_image_loaded()
    assert ticker.active == 1
    ctrl.close()
    assert ticker.active == 0


def test_preloads_only_sampled_images(scorer, navigator, ticker, clock, preloader):
    project = make_project(n_images=6, image_count=2, blank=2)
    ctrl = _controller(project, scorer, navigator, ticker, clock, preloader)
    shown = [img.url for img in ctrl.state.images_to_show]
    assert preloader.urls == shown[:1]

    _view_image(ctrl, ticker, clock)
    ctrl.submit_answers({"q1": 0, "q2": 0})
    assert preloader.urls == shown


def test_no_images_preloads_nothing(scorer, navigator, ticker, clock, preloader):
    _controller(make_project(n_images=0, blank=2), scorer, navigator, ticker, clock, preloader)
    assert preloader.urls == []


def test_unexpected_scorer_error_reenables_submission(navigator, ticker, clock):
    class BrokenScorer(FakeScorer):
        def submit(self, session_id, answers):
            super().submit(session_id, answers)
            if len(self.calls) == 1:
                raise KeyError("boom")

    scorer = BrokenScorer()
    ctrl = _controller(make_project(n_images=1, image_count=1), scorer, navigator, ticker, clock)
    _view_image(ctrl, ticker, clock)

    with pytest.raises(KeyError):
        ctrl.submit_answers({"q1": 0.2, "q2": 0.4})
    assert ctrl.state.submitting is False
    assert ctrl.state.error
    assert ctrl.can_submit

    assert ctrl.submit_all()
    assert scorer.calls[0] == scorer.calls[1]
    assert navigator.thanks == ["p1"]
