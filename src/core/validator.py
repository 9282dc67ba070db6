"""Message validation against the catalog lookup tables (core domain)."""

from __future__ import annotations

from typing import Callable, Union

from core.models import Catalog, Malformed, Message, MessageData, MessageMetadata

ACTION_SEPARATOR = "://"

BuildResult = Union[Message, Malformed]


def build_message(
    message_id: str,
    data: MessageData,
    catalog: Catalog,
    metadata_lookup: Callable[[str], MessageMetadata],
) -> BuildResult:
    """Assemble one message from its raw definition.

    Checks run in order and the first failure wins:
    - the style must exist in the styles table (priority, max impressions);
    - the action is looked up in the actions table, falling back to the raw
      value, and must look like a URL;
    - every trigger key must exist in the triggers table. A message with an
      unknown trigger can never be evaluated, so it is malformed as a whole.

    Reporting the malformed result is left to the caller.
    """

    style = catalog.styles.get(data.style)
    if style is None:
        return Malformed(message_id, f"unknown style {data.style!r}")

    action = catalog.actions.get(data.action, data.action)
    if ACTION_SEPARATOR not in action:
        return Malformed(message_id, f"action {action!r} is not a URL")

    triggers = tuple(
        catalog.triggers[key] for key in data.trigger if key in catalog.triggers
    )
    if len(triggers) != len(data.trigger):
        missing = [key for key in data.trigger if key not in catalog.triggers]
        return Malformed(message_id, f"unknown trigger(s): {', '.join(missing)}")

    return Message(
        id=message_id,
        data=data,
        action=action,
        triggers=triggers,
        style=style,
        metadata=metadata_lookup(message_id),
    )
