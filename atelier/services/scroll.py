"""Deferred scroll to a section armed before returning to the home page."""

import asyncio
import logging
from typing import Callable, Optional

from atelier.config import SCROLL_STORAGE_KEY
from atelier.services.document import HtmlDocument
from atelier.services.location import SessionStorage

logger = logging.getLogger(__name__)

Scroller = Callable[[str], None]


class ScrollHandoff:
    """Consumes the pending scroll target once per home render."""

    def __init__(
        self,
        storage: SessionStorage,
        scroller: Scroller,
        *,
        delay_ms: int = 60,
        storage_key: str = SCROLL_STORAGE_KEY,
    ) -> None:
        self._storage = storage
        self._scroller = scroller
        self._delay = delay_ms / 1000
        self._storage_key = storage_key

    async def on_home_render(self, document: HtmlDocument) -> Optional[str]:
        """Scroll to the armed target, if any, and return the element scrolled to.

        The stored id is cleared before anything else, so a target that is
        not on the page is dropped silently.
        """
        target = self._storage.pop(self._storage_key)
        if not target:
            return None
        if not document.has_element(target):
            logger.debug("Scroll target %r not on page", target)
            return None
        # let layout settle before scrolling
        await asyncio.sleep(self._delay)
        self._scroller(target)
        return target
