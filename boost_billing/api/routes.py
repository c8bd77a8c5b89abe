"""
API Routes - Session issuing, price lookup, Stripe webhook and health.

Domain errors raised here are turned into status codes by the exception
handlers registered in main.py.
"""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from boost_billing.api.dependencies import (
    get_entitlement_service,
    get_payment_provider,
    get_session_issuer,
)
from boost_billing.config import settings
from boost_billing.db.session import get_db
from boost_billing.exceptions import WebhookVerificationError
from boost_billing.models.api import (
    CheckoutSessionRequest,
    ErrorResponse,
    HealthResponse,
    PortalSessionRequest,
    PriceResponse,
    SessionResponse,
    WebhookAckResponse,
)
from boost_billing.observability.metrics import metrics
from boost_billing.services.entitlements import EntitlementService
from boost_billing.services.payment_provider import PaymentProvider
from boost_billing.services.sessions import SessionIssuer

logger = get_logger(__name__)
router = APIRouter()

# Error bodies documented in OpenAPI for the payment routes
PAYMENT_ERRORS: dict[int | str, dict[str, Any]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    status.HTTP_501_NOT_IMPLEMENTED: {"model": ErrorResponse},
}


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    """Liveness probe."""
    return "Stripe subscription server up"


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse}},
)
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthResponse | JSONResponse:
    """
    Health check for load balancer.

    Verifies database connectivity.
    """
    try:
        await db.execute(text("SELECT 1"))
    except Exception as exc:
        logger.error("health_check_failed", error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": "database unavailable"},
        )

    return HealthResponse(
        status="healthy",
        database="connected",
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/price", response_model=PriceResponse, responses=PAYMENT_ERRORS)
async def get_price(
    provider: PaymentProvider = Depends(get_payment_provider),
) -> PriceResponse:
    """Display price of the configured plan."""
    price = await provider.get_price(settings.stripe_price_id)
    return PriceResponse(
        amount=price.amount_minor,
        currency=price.currency,
        price_id=price.price_id,
    )


@router.post(
    "/create-checkout-session", response_model=SessionResponse, responses=PAYMENT_ERRORS
)
async def create_checkout_session(
    request: CheckoutSessionRequest,
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> SessionResponse:
    """
    Start a subscription checkout for a user.

    The price is fixed server-side; the client only names the user.
    """
    url = await issuer.create_checkout_session(request.user_id, request.email)
    return SessionResponse(url=url)


@router.post(
    "/create-portal-session", response_model=SessionResponse, responses=PAYMENT_ERRORS
)
async def create_portal_session(
    request: PortalSessionRequest,
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> SessionResponse:
    """Open the Stripe customer portal for a user with an existing customer."""
    url = await issuer.create_portal_session(request.user_id)
    return SessionResponse(url=url)


@router.post("/webhook", response_model=WebhookAckResponse, responses=PAYMENT_ERRORS)
async def stripe_webhook(
    request: Request,
    service: EntitlementService = Depends(get_entitlement_service),
) -> WebhookAckResponse:
    """
    Handle Stripe webhook events.

    The body is read as raw bytes because the signature covers them exactly.
    Returns 200 for every verified event, including ignored ones and updates
    that matched no row. Verification failures return 400; store failures
    return 500 so Stripe redelivers.
    """
    payload = await request.body()
    signature = request.headers.get("stripe-signature", "")

    try:
        outcome = await service.handle(payload, signature)
    except WebhookVerificationError:
        metrics.record_webhook_event("unverified", "rejected")
        raise

    logger.info(
        "stripe_webhook_processed",
        event_id=outcome.event_id,
        event_type=outcome.event_type,
        kind=outcome.kind,
        rows_affected=outcome.rows_affected,
    )
    return WebhookAckResponse(received=True)
