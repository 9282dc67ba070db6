"""JSON catalog adapter.

Implements the core CatalogSource port by reading the "messaging" section
of config.json. The file is re-read on every call so edits show up on the
next request without a restart.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from core.config import CONTROL_BEHAVIORS, SHOW_NEXT_MESSAGE
from core.models import Catalog, MessageData, StyleDescriptor

LOGGER = logging.getLogger(__name__)


def _parse_is_control(value: Any) -> bool:
    # Only a JSON boolean counts; "false" would otherwise be truthy.
    if not isinstance(value, bool):
        LOGGER.warning("Ignoring non-boolean is_control %r", value)
        return False
    return value


def _parse_experiment_key(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        LOGGER.warning("Ignoring non-string message_under_experiment %r", value)
        return None
    return value


def _parse_message(raw: Any) -> MessageData:
    # Missing fields are left empty on purpose: the validator then reports
    # the entry as malformed instead of the whole catalog failing to load.
    if not isinstance(raw, dict):
        raw = {}
    trigger = raw.get("trigger", []) or []
    if isinstance(trigger, str):
        trigger = [trigger]
    return MessageData(
        surface=str(raw.get("surface", "")),
        style=str(raw.get("style", "")),
        action=str(raw.get("action", "")),
        trigger=tuple(str(key) for key in trigger),
        is_control=_parse_is_control(raw.get("is_control", False)),
        title=raw.get("title"),
        text=raw.get("text"),
        button_label=raw.get("button_label"),
    )


def _parse_styles(raw_styles: dict) -> dict[str, StyleDescriptor]:
    styles: dict[str, StyleDescriptor] = {}
    for key, raw in raw_styles.items():
        try:
            styles[key] = StyleDescriptor(
                priority=int(raw.get("priority", 0)),
                max_display_count=int(raw.get("max_display_count", 0)),
            )
        except (AttributeError, TypeError, ValueError):
            # An unusable style behaves like a missing one for its messages.
            LOGGER.warning("Ignoring invalid style %s", key)
    return styles


def parse_catalog(section: dict) -> Catalog:
    """Build a Catalog from the raw "messaging" config section."""

    on_control = section.get("on_control", SHOW_NEXT_MESSAGE)
    if on_control not in CONTROL_BEHAVIORS:
        LOGGER.warning("Unknown on_control %r, using %s", on_control, SHOW_NEXT_MESSAGE)
        on_control = SHOW_NEXT_MESSAGE

    return Catalog(
        messages={
            str(key): _parse_message(raw)
            for key, raw in (section.get("messages") or {}).items()
        },
        styles=_parse_styles(section.get("styles") or {}),
        actions={str(k): str(v) for k, v in (section.get("actions") or {}).items()},
        triggers={str(k): str(v) for k, v in (section.get("triggers") or {}).items()},
        message_under_experiment=_parse_experiment_key(section.get("message_under_experiment")),
        on_control=on_control,
    )


class JsonCatalogSource:
    """Reads the messaging catalog from a JSON config file on each call."""

    def __init__(self, config_path: Union[str, Path], section: str = "messaging") -> None:
        self._config_path = Path(config_path)
        self._section = section

    def current_catalog(self) -> Catalog:
        with self._config_path.open("r", encoding="utf-8") as handle:
            loaded = json.load(handle)
        if not isinstance(loaded, dict):
            raise ValueError("config root must be an object")
        section = loaded.get(self._section) or {}
        if not isinstance(section, dict):
            raise ValueError(f"{self._section} section must be an object")
        return parse_catalog(section)
