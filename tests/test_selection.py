from __future__ import annotations

from typing import Optional

import pytest

from core.eligibility import filter_eligible
from core.models import Message, MessageData, MessageMetadata, StyleDescriptor
from core.selector import select_next, sort_by_priority
from core.triggers import PredicateError, check_triggers, is_eligible


class FakeEvaluator:
    """Evaluates "true"/"false"; anything else fails like a broken expression."""

    def __init__(self) -> None:
        self.evaluated: list[str] = []

    def create_context(self) -> dict:
        return {}

    def evaluate(self, expression: str, context) -> bool:
        self.evaluated.append(expression)
        if expression == "true":
            return True
        if expression == "false":
            return False
        raise PredicateError(f"cannot evaluate {expression}")

    def substitute(self, template: str, context, uuid: Optional[str] = None) -> str:
        return template


def _message(
    message_id: str,
    *,
    surface: str = "home",
    priority: int = 10,
    triggers: tuple[str, ...] = ("true",),
    expired: bool = False,
) -> Message:
    return Message(
        id=message_id,
        data=MessageData(surface=surface, style="S", action="://a", trigger=("T",) * len(triggers)),
        action="://a",
        triggers=triggers,
        style=StyleDescriptor(priority=priority, max_display_count=5),
        metadata=MessageMetadata(message_id=message_id, expired=expired),
    )


def test_filter_drops_expired_and_other_surfaces() -> None:
    messages = [
        _message("a"),
        _message("b", expired=True),
        _message("c", surface="banner"),
        _message("d"),
    ]

    assert [m.id for m in filter_eligible(messages, "home")] == ["a", "d"]


def test_filter_with_unknown_surface_is_empty() -> None:
    assert filter_eligible([_message("a")], "nowhere") == []


def test_sort_is_descending_and_stable() -> None:
    messages = [
        _message("low", priority=1),
        _message("first-high", priority=10),
        _message("mid", priority=5),
        _message("second-high", priority=10),
    ]

    ordered = [m.id for m in sort_by_priority(messages)]

    assert ordered == ["first-high", "second-high", "mid", "low"]


def test_check_triggers_short_circuits_on_false() -> None:
    evaluator = FakeEvaluator()
    message = _message("a", triggers=("true", "false", "boom"))

    assert check_triggers(message, {}, evaluator) is False
    assert evaluator.evaluated == ["true", "false"]


def test_check_triggers_propagates_evaluator_errors() -> None:
    with pytest.raises(PredicateError):
        check_triggers(_message("a", triggers=("boom",)), {}, FakeEvaluator())


def test_is_eligible_swallows_evaluator_errors() -> None:
    assert is_eligible(_message("a", triggers=("true", "boom")), {}, FakeEvaluator()) is False


def test_message_without_triggers_is_eligible() -> None:
    assert is_eligible(_message("a", triggers=()), {}, FakeEvaluator()) is True


def test_select_next_returns_first_triggered() -> None:
    messages = [
        _message("a", triggers=("false",)),
        _message("b", triggers=("boom",)),
        _message("c"),
        _message("d"),
    ]

    selected = select_next(messages, {}, FakeEvaluator())

    assert selected is not None
    assert selected.id == "c"


def test_select_next_returns_none_when_nothing_triggers() -> None:
    messages = [_message("a", triggers=("false",)), _message("b", triggers=("boom",))]

    assert select_next(messages, {}, FakeEvaluator()) is None
