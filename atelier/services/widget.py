"""Lifecycle of the embedded checkout widget."""

import logging
from typing import Callable, Optional, Protocol

from atelier.config import CHECKOUT_CONTAINER_ID

logger = logging.getLogger(__name__)


class CheckoutWidget(Protocol):
    def mount(self, container_id: str) -> None: ...

    def destroy(self) -> None: ...


WidgetFactory = Callable[[str], CheckoutWidget]


class WidgetSlot:
    """Holds at most one mounted widget, bound to one client secret.

    :meth:`acquire` tears down whatever is mounted before mounting a widget
    for the new token; :meth:`release` tears down unconditionally.
    """

    def __init__(self, factory: WidgetFactory, container_id: str = CHECKOUT_CONTAINER_ID) -> None:
        self._factory = factory
        self._container_id = container_id
        self._widget: Optional[CheckoutWidget] = None
        self.token: Optional[str] = None

    @property
    def mounted(self) -> bool:
        return self._widget is not None

    def acquire(self, token: str) -> None:
        if self._widget is not None and token == self.token:
            return
        self.release()
        widget = self._factory(token)
        widget.mount(self._container_id)
        self._widget = widget
        self.token = token

    def release(self) -> None:
        widget, self._widget, self.token = self._widget, None, None
        if widget is not None:
            logger.debug("Destroying checkout widget")
            widget.destroy()
