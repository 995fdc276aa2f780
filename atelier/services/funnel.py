"""Brief → payment → confirmation funnel.

Each page owns one flow object for as long as it is shown:

* :class:`BriefFlow` – drafting, validating and sending the project brief,
  then moving the visitor on to the payment page.
* :class:`PaymentFlow` – obtaining a checkout session for the current rush
  choice and keeping the embedded widget bound to the latest one.
* :class:`ConfirmationFlow` – reconciling a finished session into a
  :class:`~atelier.models.checkout.PurchaseSummary`.

Transport failures never escape a flow; they leave it in
:attr:`FunnelState.FAILED` with a :class:`FailureReason` and a message fit
for the visitor.
"""

import logging
from enum import Enum
from functools import partial
from typing import Awaitable, Callable, Dict, Optional

from atelier.config import SiteConfig, get_config
from atelier.models.checkout import PendingCheckout, PurchaseSummary
from atelier.models.forms import BriefSubmission
from atelier.models.package import PackageDescriptor
from atelier.models.route import Route
from atelier.services.catalog import CATALOG, PricingCatalog, compute_total
from atelier.services.checkout import (
    CheckoutUnavailableError,
    SummaryUnavailableError,
    create_checkout_session,
    fetch_purchase_summary,
)
from atelier.services.forms import SubmissionError, submit_brief
from atelier.services.location import NavigationBridge
from atelier.services.validation import validate_brief
from atelier.services.widget import WidgetSlot

logger = logging.getLogger(__name__)

SubmitBrief = Callable[[BriefSubmission, PackageDescriptor], Awaitable[None]]
CreateSession = Callable[[PendingCheckout], Awaitable[str]]
FetchSummary = Callable[[str], Awaitable[PurchaseSummary]]


class FunnelState(str, Enum):
    BROWSING = "browsing"
    DRAFTING = "drafting"
    SUBMITTING = "submitting"
    AWAITING_CHECKOUT_SESSION = "awaiting-checkout-session"
    CHECKOUT_PRESENTED = "checkout-presented"
    RECONCILING = "reconciling"
    COMPLETE = "complete"
    GENERIC_THANK_YOU = "generic-thank-you"
    FAILED = "failed"


class FailureReason(str, Enum):
    SUBMISSION_FAILED = "submission-failed"
    CHECKOUT_UNAVAILABLE = "checkout-unavailable"
    SUMMARY_UNAVAILABLE = "summary-unavailable"


def payment_fragment(slug: str, rush_requested: bool) -> str:
    return f"/pay/{slug}?rush={'1' if rush_requested else '0'}"


# ---------------------------------------------------------------------------
# Brief
# ---------------------------------------------------------------------------

class BriefFlow:
    """Drafting state for one package's brief."""

    def __init__(
        self,
        package: PackageDescriptor,
        *,
        config: Optional[SiteConfig] = None,
        submit: Optional[SubmitBrief] = None,
        navigator: Optional[NavigationBridge] = None,
    ) -> None:
        self.package = package
        self._config = config or get_config()
        self._submit = submit or partial(submit_brief, config=self._config)
        self._navigator = navigator
        self.brief = BriefSubmission(package_slug=package.slug)
        self.state = FunnelState.DRAFTING
        self.errors: Dict[str, str] = {}
        self.failure: Optional[FailureReason] = None
        self.message = ""

    @property
    def total(self) -> int:
        return compute_total(self.package, self.brief.rush_requested)

    @property
    def next_fragment(self) -> str:
        return payment_fragment(self.package.slug, self.brief.rush_requested)

    def update(self, **fields) -> None:
        """Set brief fields by name as the visitor types."""
        for name, value in fields.items():
            if name not in BriefSubmission.model_fields or name == "package_slug":
                raise AttributeError(f"Brief has no editable field '{name}'.")
            setattr(self.brief, name, value)

    def set_rush(self, rush_requested: bool) -> None:
        self.brief.rush_requested = rush_requested

    async def submit(self) -> bool:
        """Validate and send the brief; on success move on to payment.

        Returns ``True`` once the brief has been handed to the form backend.
        Validation errors keep the flow in ``DRAFTING`` and nothing is sent.
        """
        if self.state not in (FunnelState.DRAFTING, FunnelState.FAILED):
            return False

        self.errors = validate_brief(self.brief)
        if self.errors:
            logger.info(
                "Brief rejected by validation",
                extra={"package": self.package.slug, "fields": sorted(self.errors)},
            )
            self.state = FunnelState.DRAFTING
            return False

        self.state = FunnelState.SUBMITTING
        self.failure = None
        self.message = ""
        try:
            await self._submit(self.brief, self.package)
        except SubmissionError:
            self.state = FunnelState.FAILED
            self.failure = FailureReason.SUBMISSION_FAILED
            self.message = f"Submission failed. Please email {self._config.support_email}"
            return False
        finally:
            self.brief.files = []

        self.state = FunnelState.AWAITING_CHECKOUT_SESSION
        if self._navigator is not None:
            self._navigator.navigate_to(self.next_fragment)
        return True


def open_brief(
    slug: str,
    catalog: PricingCatalog = CATALOG,
    **kwargs,
) -> Optional[BriefFlow]:
    """Start drafting a brief for *slug*, or ``None`` when no such package exists."""
    package = catalog.lookup(slug)
    if package is None:
        return None
    return BriefFlow(package, **kwargs)


# ---------------------------------------------------------------------------
# Payment
# ---------------------------------------------------------------------------

class PaymentFlow:
    """Checkout-session handling for the payment page.

    Every request for a session is tagged with a sequence number; only the
    response to the most recently issued request is applied, whatever order
    the responses arrive in.
    """

    def __init__(
        self,
        package: PackageDescriptor,
        rush_requested: bool = False,
        *,
        config: Optional[SiteConfig] = None,
        create_session: Optional[CreateSession] = None,
        widget_slot: Optional[WidgetSlot] = None,
    ) -> None:
        self.package = package
        self.rush_requested = rush_requested
        self._config = config or get_config()
        self._create_session = create_session or partial(create_checkout_session, config=self._config)
        self._widget_slot = widget_slot
        self._sequence = 0
        self._closed = False
        self.state = FunnelState.BROWSING
        self.client_secret: Optional[str] = None
        self.failure: Optional[FailureReason] = None
        self.error = ""

    @classmethod
    def from_route(cls, package: PackageDescriptor, route: Route, **kwargs) -> "PaymentFlow":
        """Seed the rush toggle from the ``rush`` query value written by the brief page."""
        return cls(package, route.query.get("rush") == "1", **kwargs)

    @property
    def total(self) -> int:
        return compute_total(self.package, self.rush_requested)

    @property
    def widget_mounted(self) -> bool:
        return self._widget_slot is not None and self._widget_slot.mounted

    async def start(self) -> None:
        await self._request_session()

    async def set_rush(self, rush_requested: bool) -> None:
        self.rush_requested = rush_requested
        await self._request_session()

    def close(self) -> None:
        """Leave the page: drop in-flight responses and tear the widget down."""
        self._closed = True
        self._sequence += 1
        if self._widget_slot is not None:
            self._widget_slot.release()

    def _is_current(self, sequence: int) -> bool:
        return not self._closed and sequence == self._sequence

    async def _request_session(self) -> None:
        if self._closed:
            return
        self._sequence += 1
        sequence = self._sequence
        pending = PendingCheckout(
            package_slug=self.package.slug,
            rush_requested=self.rush_requested,
            origin_url=self._config.site_origin,
        )

        self.state = FunnelState.AWAITING_CHECKOUT_SESSION
        self.client_secret = None
        self.failure = None
        self.error = ""
        if self._widget_slot is not None:
            self._widget_slot.release()

        try:
            client_secret = await self._create_session(pending)
        except CheckoutUnavailableError as exc:
            if not self._is_current(sequence):
                return
            self.state = FunnelState.FAILED
            self.failure = FailureReason.CHECKOUT_UNAVAILABLE
            self.error = str(exc)
            return

        if not self._is_current(sequence):
            logger.debug(
                "Discarding stale checkout session",
                extra={"sequence": sequence, "latest": self._sequence},
            )
            return

        self.client_secret = client_secret
        if self._widget_slot is not None:
            self._widget_slot.acquire(client_secret)
        self.state = FunnelState.CHECKOUT_PRESENTED


# ---------------------------------------------------------------------------
# Confirmation
# ---------------------------------------------------------------------------

class ConfirmationFlow:
    """Reconciles the session named in the post-payment redirect."""

    def __init__(
        self,
        session_id: Optional[str],
        *,
        config: Optional[SiteConfig] = None,
        fetch_summary: Optional[FetchSummary] = None,
    ) -> None:
        self.session_id = session_id or None
        self._config = config or get_config()
        self._fetch_summary = fetch_summary or partial(fetch_purchase_summary, config=self._config)
        self.state = FunnelState.CHECKOUT_PRESENTED
        self.summary: Optional[PurchaseSummary] = None
        self.failure: Optional[FailureReason] = None
        self.error = ""

    @classmethod
    def from_route(cls, route: Route, **kwargs) -> "ConfirmationFlow":
        return cls(route.query.get("session_id"), **kwargs)

    @property
    def acknowledgement(self) -> str:
        return f"We’ll email you shortly from {self._config.support_email} with next steps."

    async def load(self) -> None:
        if self.session_id is None:
            self.state = FunnelState.GENERIC_THANK_YOU
            return

        self.state = FunnelState.RECONCILING
        try:
            self.summary = await self._fetch_summary(self.session_id)
        except SummaryUnavailableError:
            # the payment itself went through; only the details are missing
            self.state = FunnelState.FAILED
            self.failure = FailureReason.SUMMARY_UNAVAILABLE
            self.error = "We received your payment, but couldn’t load the details. We’ll email you shortly."
            return
        self.state = FunnelState.COMPLETE
