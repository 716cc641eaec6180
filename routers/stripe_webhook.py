"""
Stripe Webhook Router

Receives the unparsed request body. Signature verification runs over the
exact bytes Stripe sent, so this route must be registered ahead of any
JSON handling and must never declare a body model.
"""
import logging

from fastapi import APIRouter, Depends, Request

from core.dependencies import get_stripe_service
from core.exceptions import APIException, ServiceUnavailableError
from services.stripe_service import StripeService, process_stripe_event

logger = logging.getLogger(__name__)

STRIPE_WEBHOOK_PATH = "/api/webhooks/stripe"

router = APIRouter(tags=["webhooks"])


@router.post(STRIPE_WEBHOOK_PATH)
async def stripe_webhook(request: Request, stripe_service: StripeService = Depends(get_stripe_service)):
    """
    Stripe webhook endpoint.

    Verifies signature and dispatches the event by type.
    """
    sig = request.headers.get("stripe-signature")
    if not sig:
        raise APIException(status_code=400, detail="Missing Stripe-Signature header")

    payload = await request.body()
    try:
        event = stripe_service.construct_event(payload=payload, sig_header=sig)
    except RuntimeError as e:
        logger.error(f"Stripe webhook received but not configured: {e}")
        raise ServiceUnavailableError(str(e))
    except Exception as e:
        # Signature verification errors return 400 so Stripe retries appropriately.
        logger.warning(f"Stripe webhook signature verification failed: {e}")
        raise APIException(status_code=400, detail="Invalid webhook signature")

    result = process_stripe_event(event)
    return {"received": True, "result": result}
