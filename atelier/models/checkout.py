from typing import Any, Dict, Optional

from pydantic import BaseModel

PLACEHOLDER = "—"


class PendingCheckout(BaseModel):
    """Request payload for the checkout-session service."""

    package_slug: str
    rush_requested: bool
    origin_url: str

    def to_payload(self) -> Dict[str, Any]:
        return {"slug": self.package_slug, "rush": self.rush_requested, "origin": self.origin_url}


class PurchaseSummary(BaseModel):
    """Read-only reconciliation of a completed checkout session."""

    payment_status: str
    payment_intent_id: Optional[str] = None
    package_name: Optional[str] = None
    rush_flag: bool = False
    amount_total_minor_units: Optional[int] = None
    currency: Optional[str] = None

    @classmethod
    def from_status_payload(cls, payload: Dict[str, Any]) -> "PurchaseSummary":
        """Build a summary from the session-status service's JSON body."""
        metadata = payload.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}
        payment_intent = payload.get("payment_intent_id")
        # an expanded payment intent arrives as an object
        if isinstance(payment_intent, dict):
            payment_intent = payment_intent.get("id")
        return cls(
            payment_status=str(payload.get("payment_status") or "unknown"),
            payment_intent_id=payment_intent or None,
            package_name=metadata.get("package") or None,
            rush_flag=metadata.get("rush") == "true",
            amount_total_minor_units=payload.get("amount_total"),
            currency=payload.get("currency") or None,
        )

    @property
    def display_total(self) -> str:
        if not self.amount_total_minor_units:
            return PLACEHOLDER
        amount = f"${self.amount_total_minor_units / 100:.2f}"
        if self.currency:
            return f"{amount} {self.currency.upper()}"
        return amount

    def display_lines(self) -> Dict[str, str]:
        """Label → value pairs shown on the confirmation page."""
        return {
            "Status": self.payment_status,
            "Transaction ID": self.payment_intent_id or PLACEHOLDER,
            "Package": self.package_name or PLACEHOLDER,
            "Rush": "Yes" if self.rush_flag else "No",
            "Total": self.display_total,
        }
