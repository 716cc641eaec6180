import logging

from fastapi import APIRouter, Depends

from core.auth import get_current_user
from core.dependencies import get_stripe_service
from core.exceptions import BadGatewayError, ServiceUnavailableError
from schemas import CheckoutResponse, UserIdentity
from services.stripe_service import StripeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("/create-checkout-session", response_model=CheckoutResponse)
def create_checkout(
    user: UserIdentity = Depends(get_current_user),
    stripe_service: StripeService = Depends(get_stripe_service),
):
    """
    Create a Stripe Checkout Session for the premium plan.
    Returns a hosted URL.
    """
    try:
        url = stripe_service.create_checkout_session(email=user.email)
    except RuntimeError as e:
        raise ServiceUnavailableError(str(e))
    except Exception as e:
        logger.error(f"Failed to create checkout session for {user.email}: {e}")
        raise BadGatewayError("Failed to create checkout session")
    return CheckoutResponse(url=url)
