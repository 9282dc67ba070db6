"""Ports (interfaces) used by the message manager.

Ports define the minimal contracts for configuration, evaluation, storage,
telemetry and action adapters so the selection engine can be reused with
different backends and tested with fakes.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from core.models import Catalog, Message, MessageMetadata


class CatalogSource(Protocol):
    """Supplies the current messaging catalog. May change between calls."""

    def current_catalog(self) -> Catalog:
        ...


class PredicateEvaluator(Protocol):
    """Evaluates trigger expressions and renders action templates."""

    def create_context(self) -> Optional[Any]:
        ...

    def evaluate(self, expression: str, context: Any) -> bool:
        ...

    def substitute(self, template: str, context: Any, uuid: Optional[str] = None) -> str:
        ...


class MetadataStore(Protocol):
    """Impression/dismissal bookkeeping. The store owns expiry policy."""

    def get_metadata(self, message_id: str) -> MessageMetadata:
        ...

    def on_message_displayed(self, message: Message) -> None:
        ...

    def on_message_pressed(self, message: Message) -> None:
        ...

    def on_message_dismissed(self, message: Message) -> None:
        ...


class TelemetrySink(Protocol):
    """Fire-and-forget event recording."""

    def record(
        self,
        category: str,
        event: str,
        message_id: Optional[str],
        extras: Optional[dict[str, str]] = None,
    ) -> None:
        ...


class ActionDispatcher(Protocol):
    """Performs the application-level effect of a message action."""

    def open(self, url: str) -> None:
        ...
