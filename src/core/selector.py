"""Priority ordering and first-triggered selection (core domain)."""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

from core.models import Message
from core.ports import PredicateEvaluator
from core.triggers import is_eligible


def sort_by_priority(messages: Iterable[Message]) -> List[Message]:
    """Order by style priority, highest first.

    sorted() is stable, so equal priorities keep catalog order.
    """

    return sorted(messages, key=lambda message: message.style.priority, reverse=True)


def select_next(
    messages: Iterable[Message],
    context: Any,
    evaluator: PredicateEvaluator,
) -> Optional[Message]:
    """Return the first message whose triggers all hold, if any."""

    for message in messages:
        if is_eligible(message, context, evaluator):
            return message
    return None
