"""Page-composition root: owns routing state and the page currently shown."""

import logging
from typing import List, NamedTuple, Optional

from atelier.config import SiteConfig, get_config
from atelier.models.package import PackageDescriptor
from atelier.models.page import PageView
from atelier.models.route import Route
from atelier.services.catalog import CATALOG, PricingCatalog
from atelier.services.dispatcher import dispatch
from atelier.services.document import home_document
from atelier.services.funnel import (
    BriefFlow,
    ConfirmationFlow,
    CreateSession,
    FetchSummary,
    PaymentFlow,
    SubmitBrief,
)
from atelier.services.location import LocationNotifier, NavigationBridge, RouteState, SessionStorage
from atelier.services.routing import ROUTE_MARKER
from atelier.services.scroll import Scroller, ScrollHandoff
from atelier.services.widget import WidgetFactory, WidgetSlot

logger = logging.getLogger(__name__)


class PageState(NamedTuple):
    route: Route
    view: PageView
    package: Optional[PackageDescriptor] = None
    brief: Optional[BriefFlow] = None
    payment: Optional[PaymentFlow] = None
    confirmation: Optional[ConfirmationFlow] = None
    scrolled_to: Optional[str] = None


class SiteShell:
    """Wires location, storage, navigation and the funnel flows together.

    External collaborators (form backend, checkout functions, the checkout
    widget and the scroller) are injected; the defaults talk to the real
    services configured in :class:`~atelier.config.SiteConfig`.
    """

    def __init__(
        self,
        *,
        config: Optional[SiteConfig] = None,
        catalog: PricingCatalog = CATALOG,
        fragment: str = ROUTE_MARKER,
        submit: Optional[SubmitBrief] = None,
        create_session: Optional[CreateSession] = None,
        fetch_summary: Optional[FetchSummary] = None,
        widget_factory: Optional[WidgetFactory] = None,
        scroller: Optional[Scroller] = None,
    ) -> None:
        self.config = config or get_config()
        self._catalog = catalog
        self._submit = submit
        self._create_session = create_session
        self._fetch_summary = fetch_summary
        self._widget_factory = widget_factory

        self.location = LocationNotifier(fragment)
        self.storage = SessionStorage()
        self.navigator = NavigationBridge(self.location, self.storage)
        self.routes = RouteState(self.location)
        self.scrolled: List[str] = []
        self.scroll = ScrollHandoff(
            self.storage,
            scroller or self.scrolled.append,
            delay_ms=self.config.scroll_delay_ms,
        )

        self.page: Optional[PageState] = None
        self._stale = True
        self._unsubscribe = self.location.subscribe(self._on_location_change)

    def _on_location_change(self, fragment: str) -> None:
        self._stale = True

    @property
    def needs_render(self) -> bool:
        return self._stale

    async def sync(self) -> Optional[PageState]:
        """Render only if the location changed since the last render."""
        if self._stale:
            return await self.render()
        return self.page

    async def render(self) -> PageState:
        """Show the page for the current route, replacing the previous one."""
        self._stale = False
        self._leave_page()

        route = self.routes.route
        view = dispatch(route, self._catalog)
        package = self._catalog.lookup(view.package_slug) if view.package_slug else None
        logger.info("Rendering page", extra={"page": view.page, "package": view.package_slug})

        if view.page == "home":
            scrolled_to = await self.scroll.on_home_render(home_document())
            self.page = PageState(route, view, scrolled_to=scrolled_to)
        elif view.page == "brief":
            brief = BriefFlow(package, config=self.config, submit=self._submit, navigator=self.navigator)
            self.page = PageState(route, view, package=package, brief=brief)
        elif view.page == "pay":
            slot = WidgetSlot(self._widget_factory) if self._widget_factory else None
            payment = PaymentFlow.from_route(
                package,
                route,
                config=self.config,
                create_session=self._create_session,
                widget_slot=slot,
            )
            self.page = PageState(route, view, package=package, payment=payment)
            await payment.start()
        elif view.page == "thank-you":
            confirmation = ConfirmationFlow.from_route(
                route, config=self.config, fetch_summary=self._fetch_summary
            )
            self.page = PageState(route, view, confirmation=confirmation)
            await confirmation.load()
        else:
            self.page = PageState(route, view)
        return self.page

    def _leave_page(self) -> None:
        if self.page is not None and self.page.payment is not None:
            self.page.payment.close()

    def close(self) -> None:
        self._leave_page()
        self._unsubscribe()
        self.routes.close()
