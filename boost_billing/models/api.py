"""
API Models - Pydantic models for request/response validation.

Field names follow the JSON the web client already sends (camelCase aliases).
"""

from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# Session Models
# ============================================================================


class CheckoutSessionRequest(BaseModel):
    """POST /create-checkout-session request body."""

    model_config = ConfigDict(populate_by_name=True)

    # Optional here so a missing id is reported as 400, not a 422 validation error
    user_id: str | None = Field(None, alias="userId", max_length=255)
    email: str | None = Field(None, max_length=255)


class PortalSessionRequest(BaseModel):
    """POST /create-portal-session request body."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str | None = Field(None, alias="userId", max_length=255)


class SessionResponse(BaseModel):
    """Hosted page the client should redirect to."""

    url: str


# ============================================================================
# Price / Webhook / Health Models
# ============================================================================


class PriceResponse(BaseModel):
    """GET /price response."""

    amount: int | None = Field(..., description="Unit amount in minor units (cents)")
    currency: str
    price_id: str


class WebhookAckResponse(BaseModel):
    """POST /webhook response."""

    received: bool = True


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str
    database: str
    timestamp: str


class ErrorResponse(BaseModel):
    """Error body for every failure response."""

    error: str
