"""Action dispatch adapter.

Web pages open in a new browser tab. Other schemes (the internal deep-link
scheme, app links) belong to the host application, so this adapter hands
them to an optional callback and logs them otherwise.
"""

from __future__ import annotations

import logging
import webbrowser
from typing import Callable, Optional

from core.actions import is_web_page

LOGGER = logging.getLogger(__name__)


class BrowserActionDispatcher:
    """Satisfies the ActionDispatcher port for a desktop host."""

    def __init__(
        self,
        open_tab: Callable[[str], object] = webbrowser.open_new_tab,
        deep_link_handler: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._open_tab = open_tab
        self._deep_link_handler = deep_link_handler

    def open(self, url: str) -> None:
        if is_web_page(url):
            LOGGER.info("Opening %s in a new tab", url)
            self._open_tab(url)
            return

        if self._deep_link_handler is None:
            LOGGER.info("No deep link handler registered for %s", url)
            return
        self._deep_link_handler(url)
