from __future__ import annotations

from typing import Optional

from core.config import SHOW_NEXT_MESSAGE, SHOW_NONE
from core.experiments import is_under_experiment, resolve_experiment
from core.models import Message, MessageData, MessageMetadata, StyleDescriptor
from core.triggers import PredicateError


class FakeEvaluator:
    def create_context(self) -> dict:
        return {}

    def evaluate(self, expression: str, context) -> bool:
        if expression == "true":
            return True
        if expression == "false":
            return False
        raise PredicateError(f"cannot evaluate {expression}")

    def substitute(self, template: str, context, uuid: Optional[str] = None) -> str:
        return template


class Recorder:
    def __init__(self) -> None:
        self.exposures = 0
        self.malformed: list[str] = []

    def on_exposure(self) -> None:
        self.exposures += 1

    def on_malformed(self, message_id: str) -> None:
        self.malformed.append(message_id)


def _message(
    message_id: str,
    *,
    is_control: bool = False,
    triggers: tuple[str, ...] = ("true",),
    priority: int = 10,
) -> Message:
    return Message(
        id=message_id,
        data=MessageData(surface="home", style="S", action="://a", is_control=is_control),
        action="://a",
        triggers=triggers,
        style=StyleDescriptor(priority=priority, max_display_count=5),
        metadata=MessageMetadata(message_id=message_id),
    )


def _resolve(selected, candidates, experiment_key, on_control, recorder):
    return resolve_experiment(
        selected,
        candidates,
        {},
        FakeEvaluator(),
        experiment_key=experiment_key,
        on_control=on_control,
        on_exposure=recorder.on_exposure,
        on_malformed=recorder.on_malformed,
    )


def test_no_experiment_key_means_not_under_experiment() -> None:
    assert not is_under_experiment(_message("m1"), None)
    assert not is_under_experiment(_message("m1"), "")
    assert not is_under_experiment(_message("m1", is_control=True), None)


def test_control_message_is_under_any_experiment() -> None:
    assert is_under_experiment(_message("unrelated", is_control=True), "exp")


def test_exact_id_match() -> None:
    assert is_under_experiment(_message("exp"), "exp")
    assert not is_under_experiment(_message("exp-a"), "exp")


def test_branch_suffix_uses_prefix_match() -> None:
    assert is_under_experiment(_message("exp-treatment-"), "exp")
    assert is_under_experiment(_message("exp-"), "exp-")
    assert not is_under_experiment(_message("other-"), "exp")


def test_not_under_experiment_returns_selected_without_exposure() -> None:
    recorder = Recorder()
    selected = _message("m1")

    assert _resolve(selected, [selected], "exp", SHOW_NONE, recorder) is selected
    assert recorder.exposures == 0


def test_treatment_is_returned_with_exposure() -> None:
    recorder = Recorder()
    selected = _message("exp")

    assert _resolve(selected, [selected], "exp", SHOW_NONE, recorder) is selected
    assert recorder.exposures == 1


def test_show_none_suppresses_even_with_other_candidates() -> None:
    recorder = Recorder()
    control = _message("exp", is_control=True)
    other = _message("other", priority=1)

    assert _resolve(control, [control, other], "exp", SHOW_NONE, recorder) is None
    assert recorder.exposures == 1


def test_show_next_message_skips_controls_and_untriggered() -> None:
    recorder = Recorder()
    control = _message("exp", is_control=True)
    other_control = _message("exp-b", is_control=True)
    untriggered = _message("quiet", triggers=("false",))
    fallback = _message("fallback", priority=1)

    result = _resolve(
        control,
        [control, other_control, untriggered, fallback],
        "exp",
        SHOW_NEXT_MESSAGE,
        recorder,
    )

    assert result is fallback
    assert recorder.exposures == 1
    assert recorder.malformed == []


def test_show_next_message_with_no_fallback_is_none() -> None:
    recorder = Recorder()
    control = _message("exp", is_control=True)

    assert _resolve(control, [control], "exp", SHOW_NEXT_MESSAGE, recorder) is None
    assert recorder.exposures == 1


def test_fallback_evaluation_errors_are_reported_as_malformed() -> None:
    # Unlike the main selection pass, which silently skips broken triggers.
    recorder = Recorder()
    control = _message("exp", is_control=True)
    broken = _message("broken", triggers=("boom",))
    fallback = _message("fallback", priority=1)

    result = _resolve(control, [control, broken, fallback], "exp", SHOW_NEXT_MESSAGE, recorder)

    assert result is fallback
    assert recorder.malformed == ["broken"]
