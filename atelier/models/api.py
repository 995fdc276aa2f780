from typing import Dict, List, Optional

from pydantic import BaseModel

from atelier.models.checkout import PurchaseSummary
from atelier.models.package import PackageDescriptor
from atelier.models.page import PageName
from atelier.models.route import Route


class RouteResponse(BaseModel):
    route: Route
    page: PageName
    package_slug: Optional[str] = None


class CatalogResponse(BaseModel):
    packages: List[PackageDescriptor]


class TotalResponse(BaseModel):
    slug: str
    rush: bool
    total: int


class SubmissionAccepted(BaseModel):
    message: str


class BriefAccepted(BaseModel):
    redirect: str
    total: int


class ValidationFailed(BaseModel):
    errors: Dict[str, str]


class CheckoutSessionRequest(BaseModel):
    rush: bool = False


class CheckoutSessionResponse(BaseModel):
    client_secret: str
    total: int


class ThankYouResponse(BaseModel):
    state: str
    summary: Optional[PurchaseSummary] = None
    display: Dict[str, str] = {}
    message: str
    error: str = ""
