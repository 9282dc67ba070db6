"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any configuration or storage-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class StyleDescriptor:
    """Display priority and impression limit for a named style."""

    priority: int
    max_display_count: int


@dataclass(frozen=True)
class MessageData:
    """Raw message definition as published in the catalog."""

    surface: str
    style: str
    action: str
    trigger: Tuple[str, ...] = ()
    is_control: bool = False
    title: Optional[str] = None
    text: Optional[str] = None
    button_label: Optional[str] = None


@dataclass(frozen=True)
class Catalog:
    """Snapshot of the messaging configuration for a single request."""

    messages: Mapping[str, MessageData]
    styles: Mapping[str, StyleDescriptor]
    actions: Mapping[str, str]
    triggers: Mapping[str, str]
    message_under_experiment: Optional[str] = None
    on_control: str = "show-next-message"


@dataclass(frozen=True)
class MessageMetadata:
    """Per-message bookkeeping owned by the metadata store."""

    message_id: str
    impressions: int = 0
    dismissals: int = 0
    expired: bool = False


@dataclass(frozen=True)
class Message:
    """A validated message, ready for trigger evaluation."""

    id: str
    data: MessageData
    action: str
    triggers: Tuple[str, ...]
    style: StyleDescriptor
    metadata: MessageMetadata = field(compare=False)

    @property
    def surface(self) -> str:
        return self.data.surface

    @property
    def is_control(self) -> bool:
        return self.data.is_control

    @property
    def is_expired(self) -> bool:
        return self.metadata.expired


@dataclass(frozen=True)
class Malformed:
    """A catalog entry that failed validation, with the reason for logs."""

    message_id: str
    reason: str
