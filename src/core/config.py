"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

SHOW_NONE = "show-none"
SHOW_NEXT_MESSAGE = "show-next-message"
CONTROL_BEHAVIORS = (SHOW_NONE, SHOW_NEXT_MESSAGE)


@dataclass(frozen=True)
class EngineConfig:
    """Settings for the message manager."""

    feature_id: str = "messaging"
    internal_scheme: str = "internal"
