"""Message manager: the orchestration layer of the selection engine.

This module is integration-agnostic. It only relies on ports for the
catalog, predicate evaluation, metadata, telemetry and action dispatch, so
surfaces can ask for messages without knowing where any of them live.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, List, Optional

from core.actions import build_action_url
from core.config import EngineConfig
from core.eligibility import filter_eligible
from core.experiments import resolve_experiment
from core.models import Catalog, Malformed, Message
from core.ports import (
    ActionDispatcher,
    CatalogSource,
    MetadataStore,
    PredicateEvaluator,
    TelemetrySink,
)
from core.selector import select_next, sort_by_priority
from core.validator import build_message

LOGGER = logging.getLogger(__name__)

CATEGORY_INFORMATION = "information"
CATEGORY_ACTION = "action"
CATEGORY_EXPERIMENT = "experiment"

EVENT_IMPRESSION = "message_impression"
EVENT_INTERACTED = "message_interacted"
EVENT_DISMISSED = "message_dismissed"
EVENT_MALFORMED = "message_malformed"
EVENT_EXPOSURE = "exposure"

EXTRA_ACTION_UUID = "action_uuid"


class MessageManager:
    """Prepares messages for surfaces and routes their lifecycle bookkeeping.

    To the surface that requests messages, it provides well-formed,
    triggered, non-expired messages in priority order. Impressions,
    dismissals, interactions, exposure and malformed messages are reported
    to telemetry; impression and expiry bookkeeping is left to the store.
    """

    def __init__(
        self,
        catalog_source: CatalogSource,
        evaluator: PredicateEvaluator,
        store: MetadataStore,
        telemetry: TelemetrySink,
        dispatcher: ActionDispatcher,
        config: Optional[EngineConfig] = None,
    ) -> None:
        self._catalog_source = catalog_source
        self._evaluator = evaluator
        self._store = store
        self._telemetry = telemetry
        self._dispatcher = dispatcher
        self._config = config or EngineConfig()

        self.on_startup()

    def on_startup(self) -> None:
        """Hook for startup bookkeeping; nothing is required yet."""

        LOGGER.debug("Message manager started for feature %s", self._config.feature_id)

    def get_next_message(self, surface: str) -> Optional[Message]:
        """Return the next message for a surface, or None to show nothing."""

        try:
            return self._next_message(surface)
        except Exception:
            LOGGER.exception("Message selection failed for surface %s", surface)
            return None

    def get_message(self, message_id: str) -> Optional[Message]:
        """Validate a single catalog entry by id.

        Unknown ids yield None; malformed entries are reported and yield None.
        """

        try:
            return self._single_message(message_id)
        except Exception:
            LOGGER.exception("Could not build message %s", message_id)
            return None

    def on_message_displayed(self, message: Message) -> None:
        """Report the impression and pass bookkeeping to the store."""

        self._update_store(self._store.on_message_displayed, message)
        self._record(CATEGORY_INFORMATION, EVENT_IMPRESSION, message.id)

    def on_message_pressed(self, message: Message) -> None:
        """Handle the call to action of a message.

        The action template is rendered with a fresh correlation uuid, turned
        into a URL and handed to the dispatcher. The same uuid is attached to
        the interaction event, which is only recorded once dispatch succeeds.
        """

        self._update_store(self._store.on_message_pressed, message)
        try:
            self._press(message)
        except Exception:
            LOGGER.exception("Press handling failed for %s", message.id)

    def on_message_dismissed(self, message: Message) -> None:
        """Dismissed messages are expired right away by the store."""

        self._update_store(self._store.on_message_dismissed, message)
        self._record(CATEGORY_ACTION, EVENT_DISMISSED, message.id)

    def on_malformed_message(self, message_key: str) -> None:
        self._record(CATEGORY_INFORMATION, EVENT_MALFORMED, message_key)

    def _single_message(self, message_id: str) -> Optional[Message]:
        catalog = self._catalog_source.current_catalog()

        data = catalog.messages.get(message_id)
        if data is None:
            return None
        result = build_message(message_id, data, catalog, self._store.get_metadata)
        if isinstance(result, Malformed):
            self._report_malformed(result)
            return None
        return result

    def _press(self, message: Message) -> None:
        context = self._evaluator.create_context()
        if context is None:
            LOGGER.info("No evaluation context, ignoring press on %s", message.id)
            return

        action_uuid = str(uuid.uuid4())
        try:
            action = self._evaluator.substitute(message.action, context, action_uuid)
        except Exception as exc:
            LOGGER.warning("Action template failed for %s: %s", message.id, exc)
            self.on_malformed_message(message.id)
            return

        url = build_action_url(action, self._config.internal_scheme)
        if url is None:
            LOGGER.warning("Unparsable action URL for %s: %r", message.id, action)
            self.on_malformed_message(message.id)
            return

        self._dispatcher.open(url)

        self._record(
            CATEGORY_ACTION,
            EVENT_INTERACTED,
            message.id,
            {EXTRA_ACTION_UUID: action_uuid},
        )

    def _update_store(self, update: Callable[[Message], None], message: Message) -> None:
        # Bookkeeping failures must not take the surface down with them.
        try:
            update(message)
        except Exception:
            LOGGER.exception("Metadata store update failed for %s", message.id)

    def _next_message(self, surface: str) -> Optional[Message]:
        catalog = self._catalog_source.current_catalog()

        context = self._evaluator.create_context()
        if context is None:
            LOGGER.info("No evaluation context, no message for %s", surface)
            return None

        # Well-formed, non-expired messages for this surface, highest priority first.
        candidates = sort_by_priority(filter_eligible(self._build_messages(catalog), surface))

        selected = select_next(candidates, context, self._evaluator)
        if selected is None:
            return None

        return resolve_experiment(
            selected,
            candidates,
            context,
            self._evaluator,
            experiment_key=catalog.message_under_experiment,
            on_control=catalog.on_control,
            on_exposure=lambda: self._record_exposure(catalog),
            on_malformed=self.on_malformed_message,
        )

    def _build_messages(self, catalog: Catalog) -> List[Message]:
        messages: List[Message] = []
        for message_id, data in catalog.messages.items():
            result = build_message(message_id, data, catalog, self._store.get_metadata)
            if isinstance(result, Malformed):
                self._report_malformed(result)
                continue
            messages.append(result)
        return messages

    def _report_malformed(self, malformed: Malformed) -> None:
        LOGGER.warning("Malformed message %s: %s", malformed.message_id, malformed.reason)
        self.on_malformed_message(malformed.message_id)

    def _record_exposure(self, catalog: Catalog) -> None:
        self._record(
            CATEGORY_EXPERIMENT,
            EVENT_EXPOSURE,
            None,
            {
                "feature_id": self._config.feature_id,
                "experiment_key": catalog.message_under_experiment or "",
            },
        )

    def _record(
        self,
        category: str,
        event: str,
        message_id: Optional[str],
        extras: Optional[dict[str, str]] = None,
    ) -> None:
        # Telemetry must never break a surface.
        try:
            self._telemetry.record(category, event, message_id, extras)
        except Exception:
            LOGGER.exception("Failed to record %s/%s for %s", category, event, message_id)
