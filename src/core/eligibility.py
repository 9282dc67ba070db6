"""Surface and expiry filtering (core domain)."""

from __future__ import annotations

from typing import Iterable, List

from core.models import Message


def filter_eligible(messages: Iterable[Message], surface: str) -> List[Message]:
    """Drop expired messages and messages meant for another surface.

    Input order is preserved so the later priority sort stays stable with
    respect to catalog order.
    """

    return [
        message
        for message in messages
        if not message.is_expired and message.surface == surface
    ]
