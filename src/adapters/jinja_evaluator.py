"""Jinja2 predicate evaluator adapter.

Trigger expressions are Jinja expressions ("days_since_install < 7 and not
is_default_browser") evaluated in a sandbox against a dict of app
attributes. Action templates are rendered with the same attributes plus a
"uuid" variable.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from jinja2 import StrictUndefined, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from core.triggers import PredicateError

_EVALUATION_ERRORS = (TemplateError, ArithmeticError, LookupError, TypeError, ValueError)


class JinjaPredicateEvaluator:
    """Satisfies the PredicateEvaluator port with sandboxed Jinja2."""

    def __init__(self, attributes: Optional[Mapping[str, Any]]) -> None:
        self._attributes = attributes
        # StrictUndefined turns a missing attribute into an error instead of
        # silently comparing against an empty value.
        self._env = SandboxedEnvironment(undefined=StrictUndefined)

    def create_context(self) -> Optional[dict[str, Any]]:
        """Return a fresh copy of the attributes, or None if there are none."""

        if self._attributes is None:
            return None
        return dict(self._attributes)

    def evaluate(self, expression: str, context: Mapping[str, Any]) -> bool:
        try:
            compiled = self._env.compile_expression(expression, undefined_to_none=False)
            result = compiled(**context)
        except _EVALUATION_ERRORS as exc:
            raise PredicateError(f"{expression!r}: {exc}") from exc
        if not isinstance(result, bool):
            raise PredicateError(f"{expression!r} did not evaluate to a boolean")
        return result

    def substitute(
        self,
        template: str,
        context: Mapping[str, Any],
        uuid: Optional[str] = None,
    ) -> str:
        variables = dict(context)
        if uuid is not None:
            variables["uuid"] = uuid
        try:
            return self._env.from_string(template).render(variables)
        except _EVALUATION_ERRORS as exc:
            raise PredicateError(f"{template!r}: {exc}") from exc
