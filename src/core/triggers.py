"""Trigger evaluation (core domain)."""

from __future__ import annotations

import logging
from typing import Any

from core.models import Message
from core.ports import PredicateEvaluator

LOGGER = logging.getLogger(__name__)


class PredicateError(Exception):
    """Raised by evaluators when an expression cannot be evaluated."""


def check_triggers(message: Message, context: Any, evaluator: PredicateEvaluator) -> bool:
    """Return True when every trigger expression holds.

    Evaluation stops at the first false expression. Evaluator errors
    propagate to the caller.
    """

    return all(evaluator.evaluate(expression, context) for expression in message.triggers)


def is_eligible(message: Message, context: Any, evaluator: PredicateEvaluator) -> bool:
    """Like check_triggers, but an evaluator failure means "not eligible"."""

    try:
        return check_triggers(message, context, evaluator)
    except Exception as exc:
        LOGGER.warning("Trigger evaluation failed for %s: %s", message.id, exc)
        return False
