"""Experiment membership and control-arm handling (core domain)."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional

from core.config import SHOW_NONE
from core.models import Message
from core.ports import PredicateEvaluator
from core.triggers import check_triggers

LOGGER = logging.getLogger(__name__)

# Message ids ending with this mark a family of experiment branches that
# share the experiment key as a prefix.
BRANCH_SUFFIX = "-"


def is_under_experiment(message: Message, experiment_key: Optional[str]) -> bool:
    """Return True if the message takes part in the running experiment."""

    if not experiment_key:
        return False

    if message.is_control:
        return True

    if message.id.endswith(BRANCH_SUFFIX):
        return message.id.startswith(experiment_key)

    return message.id == experiment_key


def resolve_experiment(
    selected: Message,
    candidates: Iterable[Message],
    context: Any,
    evaluator: PredicateEvaluator,
    experiment_key: Optional[str],
    on_control: str,
    on_exposure: Callable[[], None],
    on_malformed: Callable[[str], None],
) -> Optional[Message]:
    """Apply experiment semantics to the selected message.

    Messages under experiment always report exposure, treatment or not. A
    control message is never shown itself: with "show-none" the surface gets
    nothing, with "show-next-message" the next triggered non-control message
    in the same priority order is used instead.

    Unlike the main selection pass, an evaluation failure while looking for
    the fallback is reported as a malformed message.
    """

    if not is_under_experiment(selected, experiment_key):
        return selected

    on_exposure()

    if not selected.is_control:
        return selected

    if on_control == SHOW_NONE:
        LOGGER.info("Control message %s selected, showing none", selected.id)
        return None

    for candidate in candidates:
        try:
            if check_triggers(candidate, context, evaluator) and not candidate.is_control:
                LOGGER.info("Control message %s replaced by %s", selected.id, candidate.id)
                return candidate
        except Exception:
            on_malformed(candidate.id)
    return None
