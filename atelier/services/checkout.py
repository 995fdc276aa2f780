"""Clients for the hosted checkout's session-creation and session-status functions."""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from atelier.config import SiteConfig, get_config
from atelier.models.checkout import PendingCheckout, PurchaseSummary

logger = logging.getLogger(__name__)


class CheckoutUnavailableError(RuntimeError):
    """A checkout session could not be created; ``str(exc)`` is user-facing."""


class SummaryUnavailableError(RuntimeError):
    """The status of a completed session could not be fetched."""


def checkout_fallback_message(config: SiteConfig) -> str:
    return f"Could not start checkout. Email {config.support_email}."


def _error_message(response: httpx.Response, fallback: str) -> str:
    """Return the ``error`` field of a JSON error body, else *fallback*."""
    try:
        payload = response.json()
    except ValueError:
        return fallback
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return fallback


async def create_checkout_session(
    pending: PendingCheckout,
    *,
    config: Optional[SiteConfig] = None,
) -> str:
    """Ask the checkout service for a session and return its opaque client secret.

    Raises:
        CheckoutUnavailableError: on network errors, a non-success status or
            a response without a client secret.
    """
    config = config or get_config()
    fallback = checkout_fallback_message(config)

    try:
        async with httpx.AsyncClient(timeout=config.request_timeout) as client:
            response = await client.post(config.checkout_session_url, json=pending.to_payload())
    except httpx.HTTPError as exc:
        logger.error("Checkout session request failed for %s: %s", pending.package_slug, exc)
        raise CheckoutUnavailableError(fallback) from exc

    if not response.is_success:
        message = _error_message(response, fallback)
        logger.error(
            "Checkout service returned HTTP %s for %s",
            response.status_code,
            pending.package_slug,
        )
        raise CheckoutUnavailableError(message)

    try:
        client_secret = response.json().get("clientSecret")
    except (ValueError, AttributeError):
        client_secret = None
    if not client_secret:
        logger.error("Checkout service response had no client secret")
        raise CheckoutUnavailableError(fallback)
    return str(client_secret)


async def fetch_purchase_summary(
    session_id: str,
    *,
    config: Optional[SiteConfig] = None,
) -> PurchaseSummary:
    """Look up a completed checkout session by its identifier.

    Raises:
        SummaryUnavailableError: on network errors, a non-success status or
            a body that is not a JSON object of the expected shape.
    """
    config = config or get_config()
    try:
        async with httpx.AsyncClient(timeout=config.request_timeout) as client:
            response = await client.get(config.session_status_url, params={"session_id": session_id})
        payload = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Session status lookup failed: %s", exc)
        raise SummaryUnavailableError(str(exc)) from exc

    if not response.is_success or not isinstance(payload, dict):
        detail = payload.get("error") if isinstance(payload, dict) else None
        logger.warning(
            "Session status returned HTTP %s: %s", response.status_code, detail or "no detail"
        )
        raise SummaryUnavailableError(detail or f"HTTP {response.status_code}")

    try:
        return PurchaseSummary.from_status_payload(payload)
    except (ValidationError, AttributeError, TypeError) as exc:
        logger.warning("Session status body did not match the expected shape: %s", exc)
        raise SummaryUnavailableError("Malformed session status") from exc
