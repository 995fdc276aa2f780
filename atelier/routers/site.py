import logging

from fastapi import APIRouter, HTTPException, Query

from atelier.models.api import CatalogResponse, RouteResponse, TotalResponse
from atelier.models.package import PackageDescriptor
from atelier.services.catalog import CATALOG, compute_total
from atelier.services.dispatcher import dispatch
from atelier.services.routing import ROUTE_MARKER, parse_route

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Site"])


@router.get("/route", response_model=RouteResponse, summary="Resolve a location fragment to a page")
async def resolve_route(
    fragment: str = Query(default=ROUTE_MARKER, description="Location fragment, e.g. `#/brief/growth`."),
) -> RouteResponse:
    route = parse_route(fragment)
    view = dispatch(route)
    return RouteResponse(route=route, page=view.page, package_slug=view.package_slug)


@router.get("/packages", response_model=CatalogResponse, summary="List pricing packages")
async def list_packages() -> CatalogResponse:
    return CatalogResponse(packages=CATALOG.all())


@router.get("/packages/{slug}", response_model=PackageDescriptor, summary="Get one pricing package")
async def get_package(slug: str) -> PackageDescriptor:
    return _lookup_or_404(slug)


@router.get(
    "/packages/{slug}/total",
    response_model=TotalResponse,
    summary="Price a package with or without rush delivery",
)
async def package_total(slug: str, rush: bool = Query(default=False)) -> TotalResponse:
    package = _lookup_or_404(slug)
    return TotalResponse(slug=slug, rush=rush, total=compute_total(package, rush))


def _lookup_or_404(slug: str) -> PackageDescriptor:
    package = CATALOG.lookup(slug)
    if package is None:
        logger.info("Unknown package requested: %s", slug)
        raise HTTPException(status_code=404, detail="Page not found")
    return package
