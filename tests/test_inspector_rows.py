from __future__ import annotations

from core.models import Catalog, MessageData, MessageMetadata, StyleDescriptor
from frontend.state import build_catalog_rows, surfaces


def _catalog() -> Catalog:
    return Catalog(
        messages={
            "ok": MessageData(surface="home", style="S", action="://a", trigger=("T",)),
            "gone": MessageData(surface="home", style="S", action="://a"),
            "bad": MessageData(surface="banner", style="MISSING", action="://a", is_control=True),
        },
        styles={"S": StyleDescriptor(priority=7, max_display_count=3)},
        actions={},
        triggers={"T": "true"},
    )


def _lookup(message_id: str) -> MessageMetadata:
    if message_id == "gone":
        return MessageMetadata(message_id=message_id, impressions=3, expired=True)
    return MessageMetadata(message_id=message_id)


def test_rows_describe_every_entry_in_order() -> None:
    rows = build_catalog_rows(_catalog(), _lookup)

    assert [row.message_id for row in rows] == ["ok", "gone", "bad"]
    assert rows[0].status == "ok"
    assert rows[0].priority == 7
    assert rows[1].status == "expired"
    assert rows[1].impressions == 3
    assert rows[2].status.startswith("malformed:")
    assert rows[2].priority is None
    assert rows[2].is_control is True


def test_surfaces_are_distinct_in_catalog_order() -> None:
    assert surfaces(_catalog()) == ["home", "banner"]
