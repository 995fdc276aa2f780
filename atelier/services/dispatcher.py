"""Maps a parsed route to exactly one page variant."""

from atelier.models.page import PageView
from atelier.models.route import Route
from atelier.services.catalog import CATALOG, PricingCatalog

_STATIC_PAGES = frozenset({"why-us", "projects", "thank-you", "privacy", "tech-terms"})
_PACKAGE_PAGES = frozenset({"brief", "pay"})


def dispatch(route: Route, catalog: PricingCatalog = CATALOG) -> PageView:
    """Return the page for *route*; anything unrecognised is ``not-found``."""
    if route.is_home:
        return PageView(page="home")
    if route.page in _STATIC_PAGES:
        return PageView(page=route.page)
    if route.page in _PACKAGE_PAGES:
        slug = route.params[0] if route.params else None
        if slug and slug in catalog:
            return PageView(page=route.page, package_slug=slug)
    return PageView(page="not-found")
