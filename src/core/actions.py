"""Helpers for turning a rendered action into a dispatchable URL."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

from core.validator import ACTION_SEPARATOR

WEB_SCHEMES = {"http", "https"}


def build_action_url(action: str, internal_scheme: str) -> Optional[str]:
    """Return the final action URL, or None if it cannot be parsed.

    Actions such as "://deep-link?url=settings" are relative to the host
    application and get the internal scheme prepended.
    """

    url = f"{internal_scheme}{action}" if action.startswith(ACTION_SEPARATOR) else action
    if not url or any(ch.isspace() for ch in url):
        return None
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    if not parts.scheme:
        return None
    return url


def is_web_page(url: str) -> bool:
    return urlsplit(url).scheme.lower() in WEB_SCHEMES
