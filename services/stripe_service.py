from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import stripe

from core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StripeConfig:
    secret_key: Optional[str]
    webhook_secret: Optional[str]
    price_id: Optional[str]
    checkout_success_url: str
    checkout_cancel_url: str


def get_stripe_config(settings: Settings) -> StripeConfig:
    """
    Load Stripe config from Settings.

    Redirect URLs default to FRONTEND_URL so local dev can proceed
    without extra env config.
    """
    base = (settings.FRONTEND_URL or "http://localhost:5173").rstrip("/")
    return StripeConfig(
        secret_key=settings.STRIPE_SECRET_KEY,
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        price_id=settings.STRIPE_PRICE_ID,
        checkout_success_url=settings.STRIPE_CHECKOUT_SUCCESS_URL or f"{base}/payments?status=success",
        checkout_cancel_url=settings.STRIPE_CHECKOUT_CANCEL_URL or f"{base}/payments?status=cancel",
    )


class StripeService:
    def __init__(self, cfg: StripeConfig) -> None:
        self.cfg = cfg

    @classmethod
    def from_settings(cls, settings: Settings) -> "StripeService":
        return cls(get_stripe_config(settings))

    def _require(self, **values: Optional[str]) -> None:
        # Fail closed: billing endpoints must not proceed half-configured.
        missing = [name for name, val in values.items() if not val]
        if missing:
            raise RuntimeError(f"Stripe not configured (missing: {', '.join(missing)})")

    def create_checkout_session(self, *, email: str) -> str:
        """Create a hosted Checkout session for the premium plan and return its URL."""
        self._require(STRIPE_SECRET_KEY=self.cfg.secret_key, STRIPE_PRICE_ID=self.cfg.price_id)
        session = stripe.checkout.Session.create(
            api_key=self.cfg.secret_key,
            mode="subscription",
            success_url=self.cfg.checkout_success_url,
            cancel_url=self.cfg.checkout_cancel_url,
            line_items=[{"price": self.cfg.price_id, "quantity": 1}],
            customer_email=email,
            client_reference_id=email,
            metadata={"email": email},
        )
        return str(session.url)

    def construct_event(self, *, payload: bytes, sig_header: str) -> Any:
        """Verify the signature over the exact request bytes and parse the event."""
        self._require(STRIPE_WEBHOOK_SECRET=self.cfg.webhook_secret)
        return stripe.Webhook.construct_event(
            payload=payload,
            sig_header=sig_header,
            secret=self.cfg.webhook_secret,
        )


def _event_object(event: Any) -> Any:
    try:
        return event.data.object  # stripe.Event supports attribute access
    except Exception:
        return (event.get("data") or {}).get("object") if isinstance(event, dict) else None


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _on_checkout_completed(obj: Any) -> Dict[str, Any]:
    logger.info(
        "Checkout completed",
        extra={"extra_fields": {"customer": _field(obj, "customer"), "email": _field(obj, "customer_email")}},
    )
    return {"customer": _field(obj, "customer"), "subscription": _field(obj, "subscription")}


def _on_subscription_change(obj: Any) -> Dict[str, Any]:
    status = str(_field(obj, "status") or "").lower()
    tier = "premium" if status in ("active", "trialing") else "free"
    logger.info(
        f"Subscription {_field(obj, 'id')} is {status or 'unknown'}",
        extra={"extra_fields": {"customer": _field(obj, "customer"), "tier": tier}},
    )
    return {"customer": _field(obj, "customer"), "status": status, "tier": tier}


def _on_payment_failed(obj: Any) -> Dict[str, Any]:
    logger.warning(
        "Invoice payment failed",
        extra={"extra_fields": {"customer": _field(obj, "customer"), "invoice": _field(obj, "id")}},
    )
    return {"customer": _field(obj, "customer")}


EVENT_HANDLERS: Dict[str, Callable[[Any], Dict[str, Any]]] = {
    "checkout.session.completed": _on_checkout_completed,
    "customer.subscription.created": _on_subscription_change,
    "customer.subscription.updated": _on_subscription_change,
    "customer.subscription.deleted": _on_subscription_change,
    "invoice.payment_failed": _on_payment_failed,
}


def process_stripe_event(event: Any) -> Dict[str, Any]:
    """Dispatch a verified Stripe event to its handler. Unknown types are acknowledged and ignored."""
    event_id = str(_field(event, "id") or "")
    event_type = str(_field(event, "type") or "")

    handler = EVENT_HANDLERS.get(event_type)
    if handler is None:
        logger.info(f"Ignoring Stripe event {event_id} of type {event_type or 'unknown'}")
        return {"processed": False, "event_id": event_id, "type": event_type}

    details = handler(_event_object(event))
    return {"processed": True, "event_id": event_id, "type": event_type, **details}
