"""Textual catalog inspector for beacon."""

from __future__ import annotations

import logging
from typing import Any, Optional

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import DataTable, Footer, Static

import settings
from adapters.action_dispatcher import BrowserActionDispatcher
from adapters.jinja_evaluator import JinjaPredicateEvaluator
from adapters.json_catalog import JsonCatalogSource
from adapters.sqlite_storage import SQLiteStorage
from core.manager import MessageManager

from .constants import BEACON_ORANGE, STATUS_COLORS
from .state import build_catalog_rows, surfaces

LOGGER = logging.getLogger(__name__)


class _DiscardingTelemetry:
    """Previewing a selection must not count as real telemetry."""

    def record(self, category, event, message_id, extras=None) -> None:
        LOGGER.debug("Preview telemetry %s/%s for %s", category, event, message_id)


class InspectorApp(App):
    """Lists catalog entries with their status and the current pick per surface."""

    CSS = """
    Screen {
        background: #15141a;
        color: #fbfbfe;
    }

    #header {
        height: 5;
        padding: 0 2;
        border-bottom: solid #42414d;
    }

    #title {
        text-style: bold;
    }

    .subtle {
        color: #bfbfc9;
    }

    #catalog-table {
        height: 1fr;
    }

    #selection {
        height: auto;
        padding: 1 2;
        border-top: solid #42414d;
    }
    """

    BINDINGS = [
        ("r", "reload", "Reload"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, attribute_overrides: Optional[dict[str, Any]] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._storage = SQLiteStorage(settings.DB_PATH)
        self._storage.init_db()
        self._catalog_source = JsonCatalogSource(settings.CONFIG_PATH)
        attributes = {**settings.CONTEXT_ATTRIBUTES, **(attribute_overrides or {})}
        self._manager = MessageManager(
            catalog_source=self._catalog_source,
            evaluator=JinjaPredicateEvaluator(attributes),
            store=self._storage,
            telemetry=_DiscardingTelemetry(),
            dispatcher=BrowserActionDispatcher(),
            config=settings.ENGINE,
        )

    def compose(self) -> ComposeResult:
        with Container(id="header"):
            yield Static(self._title_text(), id="title")
            yield Static(f"config: {settings.CONFIG_PATH}", classes="subtle")
            yield Static(f"db: {settings.DB_PATH}", classes="subtle")
        yield DataTable(id="catalog-table", cursor_type="row")
        yield Static("", id="selection")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#catalog-table", DataTable)
        table.add_column("message", key="message_id", width=24)
        table.add_column("surface", key="surface", width=16)
        table.add_column("priority", key="priority", width=8)
        table.add_column("control", key="is_control", width=7)
        table.add_column("seen", key="impressions", width=5)
        table.add_column("dismissed", key="dismissals", width=9)
        table.add_column("status", key="status", width=40)
        table.zebra_stripes = True
        self._load()

    def action_reload(self) -> None:
        self._load()

    def _load(self) -> None:
        table = self.query_one("#catalog-table", DataTable)
        table.clear()
        try:
            catalog = self._catalog_source.current_catalog()
        except (OSError, ValueError) as exc:
            self._set_selection(f"config error: {exc}")
            return

        for row in build_catalog_rows(catalog, self._storage.get_metadata):
            color = STATUS_COLORS.get(row.status.split(":", 1)[0], "white")
            table.add_row(
                row.message_id,
                row.surface,
                "" if row.priority is None else str(row.priority),
                "yes" if row.is_control else "",
                str(row.impressions),
                str(row.dismissals),
                Text(row.status, style=color),
                key=row.message_id,
            )

        lines = []
        for surface in surfaces(catalog):
            message = self._manager.get_next_message(surface)
            lines.append(f"{surface}: {message.id if message else '(none)'}")
        self._set_selection("\n".join(lines) or "catalog has no messages")

    def _set_selection(self, message: str) -> None:
        self.query_one("#selection", Static).update(message)

    @staticmethod
    def _title_text() -> Text:
        return Text.assemble(
            ("BEACON", BEACON_ORANGE),
            (" > Catalog Inspector", "bold"),
        )
