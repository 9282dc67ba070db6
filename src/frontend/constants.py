"""Shared constants for the Textual UI."""

from __future__ import annotations

BEACON_ORANGE = "#FF7139"
STATUS_COLORS = {
    "ok": "green",
    "expired": "yellow",
    "malformed": "red",
}
