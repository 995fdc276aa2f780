"""Checkout-session creation and post-payment confirmation endpoints."""

import logging
from functools import partial
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from atelier.config import get_config
from atelier.models.api import CheckoutSessionRequest, CheckoutSessionResponse, ThankYouResponse
from atelier.routers.limits import limiter
from atelier.services.catalog import CATALOG
from atelier.services.checkout import create_checkout_session, fetch_purchase_summary
from atelier.services.funnel import ConfirmationFlow, FunnelState, PaymentFlow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Checkout"])


@router.post(
    "/pay/{slug}/session",
    response_model=CheckoutSessionResponse,
    summary="Start a checkout session for a package",
)
@limiter.limit("10/minute")
async def start_checkout(
    request: Request, slug: str, body: CheckoutSessionRequest
) -> CheckoutSessionResponse:
    package = CATALOG.lookup(slug)
    if package is None:
        raise HTTPException(status_code=404, detail="Page not found")

    config = get_config()
    flow = PaymentFlow(
        package,
        body.rush,
        config=config,
        create_session=partial(create_checkout_session, config=config),
    )
    await flow.start()
    if flow.state is FunnelState.FAILED:
        raise HTTPException(status_code=502, detail=flow.error)

    logger.info("Checkout session ready", extra={"package": slug, "rush": body.rush})
    return CheckoutSessionResponse(client_secret=flow.client_secret, total=flow.total)


@router.get(
    "/thank-you",
    response_model=ThankYouResponse,
    summary="Summarise a completed purchase",
    description=(
        "Without `session_id` only the generic acknowledgement is returned.  "
        "A failed status lookup is reported in `error` but is not an HTTP "
        "error: the payment itself has already gone through."
    ),
)
async def thank_you(session_id: Optional[str] = Query(default=None)) -> ThankYouResponse:
    config = get_config()
    flow = ConfirmationFlow(
        session_id,
        config=config,
        fetch_summary=partial(fetch_purchase_summary, config=config),
    )
    await flow.load()
    return ThankYouResponse(
        state=flow.state.value,
        summary=flow.summary,
        display=flow.summary.display_lines() if flow.summary else {},
        message=flow.acknowledgement,
        error=flow.error,
    )
