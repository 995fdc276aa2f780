"""Location fragment, session storage and the navigation helpers built on them.

These objects stand in for the browser's ``location.hash`` and
``sessionStorage``: the page-composition root owns one of each and passes
them down, and route changes reach interested parties only through
:meth:`LocationNotifier.subscribe`.
"""

import logging
from typing import Callable, Dict, List, Optional

from atelier.config import SCROLL_STORAGE_KEY
from atelier.models.route import Route
from atelier.services.routing import ROUTE_MARKER, parse_route, to_fragment

logger = logging.getLogger(__name__)

Listener = Callable[[str], None]


class LocationNotifier:
    """Holds the current fragment and notifies subscribers when it changes."""

    def __init__(self, fragment: str = ROUTE_MARKER) -> None:
        self._fragment = fragment or ROUTE_MARKER
        self._listeners: List[Listener] = []

    @property
    def fragment(self) -> str:
        return self._fragment

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; the returned callable unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_fragment(self, fragment: str) -> None:
        # Like hashchange, assigning the current value is not a change.
        if fragment == self._fragment:
            return
        self._fragment = fragment
        for listener in list(self._listeners):
            listener(fragment)


class SessionStorage:
    """Ephemeral, session-scoped string storage."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def pop(self, key: str) -> Optional[str]:
        return self._items.pop(key, None)


class NavigationBridge:
    """The only way code moves the site to another route."""

    def __init__(
        self,
        location: LocationNotifier,
        storage: SessionStorage,
        storage_key: str = SCROLL_STORAGE_KEY,
    ) -> None:
        self._location = location
        self._storage = storage
        self._storage_key = storage_key

    def navigate_to(self, target: str) -> None:
        fragment = to_fragment(target)
        logger.debug("Navigating", extra={"fragment": fragment})
        self._location.set_fragment(fragment)

    def arm_scroll_target(self, element_id: str) -> None:
        """Remember *element_id* so the next home render scrolls to it."""
        self._storage.set(self._storage_key, element_id)

    def jump_home_to(self, element_id: str) -> None:
        """Arm *element_id* and return to the home page."""
        self.arm_scroll_target(element_id)
        self.navigate_to("/")


class RouteState:
    """Keeps a :class:`Route` in sync with a :class:`LocationNotifier`."""

    def __init__(self, location: LocationNotifier) -> None:
        self.route: Route = parse_route(location.fragment)
        self._unsubscribe = location.subscribe(self._on_change)

    def _on_change(self, fragment: str) -> None:
        self.route = parse_route(fragment)

    def close(self) -> None:
        self._unsubscribe()
