"""Application entry point for the beacon messaging engine."""

from __future__ import annotations

import argparse
import json
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Any, Optional

from art import tprint

import settings
from adapters.action_dispatcher import BrowserActionDispatcher
from adapters.jinja_evaluator import JinjaPredicateEvaluator
from adapters.json_catalog import JsonCatalogSource
from adapters.sqlite_storage import SQLiteStorage
from core.manager import MessageManager
from core.models import Message

NAME = "BEACON"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/beacon.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def parse_attributes(pairs: list[str]) -> dict[str, Any]:
    """Parse key=value overrides; values are JSON when they parse as JSON."""

    attributes: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw_value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {pair!r}")
        try:
            attributes[key] = json.loads(raw_value)
        except json.JSONDecodeError:
            attributes[key] = raw_value
    return attributes


def _print_deep_link(url: str) -> None:
    print(f"deep link: {url}")


def build_manager(overrides: Optional[dict[str, Any]] = None) -> tuple[MessageManager, SQLiteStorage]:
    """Wire the manager with the JSON catalog, Jinja evaluator and SQLite store."""

    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()
    attributes = {**settings.CONTEXT_ATTRIBUTES, **(overrides or {})}
    manager = MessageManager(
        catalog_source=JsonCatalogSource(settings.CONFIG_PATH),
        evaluator=JinjaPredicateEvaluator(attributes),
        store=storage,
        telemetry=storage,
        dispatcher=BrowserActionDispatcher(deep_link_handler=_print_deep_link),
        config=settings.ENGINE,
    )
    return manager, storage


def _describe(message: Message) -> str:
    lines = [
        f"{message.id} (surface={message.surface}, priority={message.style.priority})",
    ]
    if message.data.title:
        lines.append(f"  title:  {message.data.title}")
    if message.data.text:
        lines.append(f"  text:   {message.data.text}")
    if message.data.button_label:
        lines.append(f"  button: {message.data.button_label}")
    lines.append(f"  action: {message.action}")
    lines.append(
        f"  seen {message.metadata.impressions}x, dismissed {message.metadata.dismissals}x"
    )
    return "\n".join(lines)


def _next(args: argparse.Namespace, overrides: dict[str, Any]) -> None:
    manager, _ = build_manager(overrides)
    message = manager.get_next_message(args.surface)
    if message is None:
        print(f"No message for surface {args.surface}")
        return
    print(_describe(message))
    if args.display:
        manager.on_message_displayed(message)


def _lifecycle(args: argparse.Namespace, overrides: dict[str, Any]) -> None:
    manager, _ = build_manager(overrides)
    message = manager.get_message(args.message_id)
    if message is None:
        print(f"Unknown or malformed message: {args.message_id}")
        return

    if args.command == "display":
        manager.on_message_displayed(message)
    elif args.command == "press":
        manager.on_message_pressed(message)
    else:
        manager.on_message_dismissed(message)
    print(f"{args.command}: {message.id}")


def _events(args: argparse.Namespace) -> None:
    _, storage = build_manager()
    events = storage.list_events(limit=args.limit)
    if not events:
        print("No events recorded yet.")
        return
    for event in events:
        extras = " ".join(f"{key}={value}" for key, value in event["extras"].items())
        print(
            f"{event['created_at'][:19]} {event['category']}/{event['event']} "
            f"{event['message_id'] or '-'} {extras}".rstrip()
        )


def _inspect(overrides: dict[str, Any]) -> None:
    _print_banner()
    from frontend.app import InspectorApp

    InspectorApp(attribute_overrides=overrides).run()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="beacon")
    subparsers = parser.add_subparsers(dest="command", required=True)

    next_parser = subparsers.add_parser("next", help="Show the next message for a surface")
    next_parser.add_argument("surface")
    next_parser.add_argument(
        "--display",
        action="store_true",
        help="Also record an impression for the selected message",
    )

    for command, help_text in (
        ("display", "Record an impression for a message"),
        ("press", "Press a message's call to action"),
        ("dismiss", "Dismiss a message"),
    ):
        lifecycle_parser = subparsers.add_parser(command, help=help_text)
        lifecycle_parser.add_argument("message_id")

    events_parser = subparsers.add_parser("events", help="List recent telemetry events")
    events_parser.add_argument("--limit", type=int, default=20)

    subparsers.add_parser("inspect", help="Launch the catalog inspector TUI")

    # Evaluation attribute overrides apply to every command that evaluates triggers.
    for name in ("next", "display", "press", "dismiss", "inspect"):
        subparsers.choices[name].add_argument(
            "--attr",
            action="append",
            default=[],
            metavar="KEY=VALUE",
            help="Override an evaluation attribute (repeatable)",
        )

    args = parser.parse_args(argv)
    try:
        overrides = parse_attributes(getattr(args, "attr", []))
    except ValueError as exc:
        parser.error(str(exc))
    _configure_logging()
    logging.getLogger(__name__).debug("Running %s", args.command)

    if args.command == "next":
        _next(args, overrides)
    elif args.command in {"display", "press", "dismiss"}:
        _lifecycle(args, overrides)
    elif args.command == "events":
        _events(args)
    else:
        _inspect(overrides)


if __name__ == "__main__":
    main()
