from __future__ import annotations

import pytest

from adapters.jinja_evaluator import JinjaPredicateEvaluator
from core.triggers import PredicateError


def _evaluator() -> JinjaPredicateEvaluator:
    return JinjaPredicateEvaluator(
        {"is_default_browser": False, "days_since_install": 3, "locale": "en-US"}
    )


def test_create_context_is_a_copy() -> None:
    evaluator = _evaluator()
    context = evaluator.create_context()
    context["locale"] = "de-DE"

    assert evaluator.create_context()["locale"] == "en-US"


def test_no_attributes_means_no_context() -> None:
    assert JinjaPredicateEvaluator(None).create_context() is None


def test_evaluates_boolean_expressions() -> None:
    evaluator = _evaluator()
    context = evaluator.create_context()

    assert evaluator.evaluate("true", context) is True
    assert evaluator.evaluate("days_since_install < 7 and not is_default_browser", context) is True
    assert evaluator.evaluate("locale == 'de-DE'", context) is False


def test_missing_attribute_fails() -> None:
    evaluator = _evaluator()

    with pytest.raises(PredicateError):
        evaluator.evaluate("not sync_enabled", evaluator.create_context())


def test_syntax_error_fails() -> None:
    evaluator = _evaluator()

    with pytest.raises(PredicateError):
        evaluator.evaluate("days_since_install <", evaluator.create_context())


def test_non_boolean_result_fails() -> None:
    evaluator = _evaluator()

    with pytest.raises(PredicateError):
        evaluator.evaluate("days_since_install + 1", evaluator.create_context())


def test_substitute_renders_uuid_and_attributes() -> None:
    evaluator = _evaluator()

    rendered = evaluator.substitute(
        "://deep-link?url=settings&flow={{ uuid }}&locale={{ locale }}",
        evaluator.create_context(),
        "abc",
    )

    assert rendered == "://deep-link?url=settings&flow=abc&locale=en-US"


def test_substitute_without_placeholders_is_unchanged() -> None:
    evaluator = _evaluator()

    assert evaluator.substitute("https://example.org", evaluator.create_context()) == "https://example.org"
