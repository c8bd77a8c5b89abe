"""
Stripe Payment Provider Implementation.

NO DICTIONARIES - Stripe objects are decoded into typed domain models here and
never leave this module.
"""

import hashlib
import json
from collections.abc import Mapping
from typing import Any

import stripe
from structlog import get_logger

from boost_billing.exceptions import PaymentProviderError, WebhookVerificationError
from boost_billing.models.domain import (
    CheckoutCompleted,
    IgnoredEvent,
    InvoicePaymentSucceeded,
    PriceInfo,
    SubscriptionDeleted,
    SubscriptionUpdated,
    WebhookEvent,
)
from boost_billing.services.payment_provider import CheckoutRequest

logger = get_logger(__name__)


def _object_id(value: Any) -> str | None:
    """Return the id of a Stripe reference, whether expanded or not."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        ref = value.get("id")
        return str(ref) if ref else None
    return str(value) or None


def _invoice_subscription_id(invoice: Mapping[str, Any]) -> str | None:
    """Subscription of an invoice; newer API versions nest it under parent."""
    subscription_id = _object_id(invoice.get("subscription"))
    if subscription_id:
        return subscription_id

    parent = invoice.get("parent") or {}
    details = parent.get("subscription_details") or {}
    return _object_id(details.get("subscription"))


def _search_literal(value: str) -> str:
    """Escape a value for a quoted Stripe search query literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def customer_idempotency_key(account_id: str, email: str | None) -> str:
    """Idempotency key derived from every parameter of the customer create call."""
    digest = hashlib.sha256((email or "").encode("utf-8")).hexdigest()[:16]
    return f"boost-customer-{account_id}-{digest}"


def decode_event(event: Mapping[str, Any]) -> WebhookEvent:
    """
    Decode a verified Stripe event into the webhook event union.

    Unknown event types become IgnoredEvent. Missing required fields raise
    ValueError so the delivery is rejected rather than half-applied.
    """
    event_id = str(event.get("id") or "")
    event_type = str(event.get("type") or "")
    created = event.get("created")
    obj: Mapping[str, Any] = (event.get("data") or {}).get("object") or {}

    if event_type == "checkout.session.completed":
        metadata = obj.get("metadata") or {}
        return CheckoutCompleted(
            event_id=event_id,
            account_id=obj.get("client_reference_id") or metadata.get("user_id") or None,
            customer_id=_object_id(obj.get("customer")),
            subscription_id=_object_id(obj.get("subscription")),
            created=created,
        )

    if event_type == "invoice.payment_succeeded":
        return InvoicePaymentSucceeded(
            event_id=event_id,
            subscription_id=_invoice_subscription_id(obj),
            created=created,
        )

    if event_type in ("customer.subscription.updated", "customer.subscription.deleted"):
        subscription_id = _object_id(obj.get("id"))
        if not subscription_id:
            raise ValueError(f"{event_type} without subscription id")

        if event_type == "customer.subscription.deleted":
            return SubscriptionDeleted(
                event_id=event_id, subscription_id=subscription_id, created=created
            )

        status = obj.get("status")
        if not status:
            raise ValueError(f"{event_type} without status")
        return SubscriptionUpdated(
            event_id=event_id,
            subscription_id=subscription_id,
            status=str(status),
            created=created,
        )

    return IgnoredEvent(event_id=event_id, event_type=event_type, created=created)


class StripeProvider:
    """
    Stripe payment provider implementation.

    Implements the PaymentProvider protocol for Stripe. One instance is built
    at startup and shared by every request.
    """

    def __init__(self, api_key: str, webhook_secret: str, api_version: str | None = None) -> None:
        """
        Initialize Stripe provider.

        Args:
            api_key: Stripe secret API key
            webhook_secret: Stripe webhook signing secret
            api_version: Pinned Stripe API version
        """
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        stripe.api_key = api_key
        if api_version:
            stripe.api_version = api_version

    async def create_customer(self, account_id: str, email: str | None) -> str:
        """
        Find or create the Stripe customer tagged with the account id.

        An existing customer carrying the account id in its metadata is reused,
        so a retry after a failed store write does not create a second one.
        The idempotency key covers every request parameter: concurrent first
        checkouts with the same email converge on one customer, and a retry
        with a different email gets a fresh key instead of an IdempotencyError.
        """
        try:
            existing = stripe.Customer.search(
                query=f"metadata['user_id']:'{_search_literal(account_id)}'", limit=1
            )
            if existing.data:
                customer_id: str = existing.data[0].id
                logger.info(
                    "stripe_customer_reused", account_id=account_id, customer_id=customer_id
                )
                return customer_id

            logger.info("creating_stripe_customer", account_id=account_id)

            customer = stripe.Customer.create(
                email=email or None,
                metadata={"user_id": account_id},
                idempotency_key=customer_idempotency_key(account_id, email),
            )

            logger.info(
                "stripe_customer_created", account_id=account_id, customer_id=customer.id
            )
            customer_id = customer.id
            return customer_id

        except stripe.StripeError as exc:
            logger.error(
                "stripe_customer_create_failed",
                account_id=account_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise PaymentProviderError(f"Stripe customer creation failed: {exc}") from exc

    async def create_checkout_session(self, request: CheckoutRequest) -> str:
        """Create a subscription-mode Checkout Session and return its URL."""
        try:
            logger.info(
                "creating_stripe_checkout_session",
                account_id=request.account_id,
                customer_id=request.customer_id,
                price_id=request.price_id,
            )

            session = stripe.checkout.Session.create(
                mode="subscription",
                customer=request.customer_id,
                line_items=[{"price": request.price_id, "quantity": 1}],
                allow_promotion_codes=True,
                success_url=request.success_url,
                cancel_url=request.cancel_url,
                client_reference_id=request.account_id,
                metadata={"user_id": request.account_id, "origin": request.origin},
            )

            logger.info("stripe_checkout_session_created", session_id=session.id)

            if not session.url:
                raise PaymentProviderError("Stripe checkout session has no URL")
            url: str = session.url
            return url

        except stripe.StripeError as exc:
            logger.error(
                "stripe_checkout_session_failed",
                account_id=request.account_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise PaymentProviderError(f"Stripe checkout failed: {exc}") from exc

    async def create_portal_session(self, customer_id: str, return_url: str) -> str:
        """Create a billing portal session and return its URL."""
        try:
            logger.info("creating_stripe_portal_session", customer_id=customer_id)

            portal = stripe.billing_portal.Session.create(
                customer=customer_id,
                return_url=return_url,
            )

            logger.info("stripe_portal_session_created", session_id=portal.id)
            url: str = portal.url
            return url

        except stripe.StripeError as exc:
            logger.error(
                "stripe_portal_session_failed",
                customer_id=customer_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise PaymentProviderError(f"Stripe portal session failed: {exc}") from exc

    async def get_price(self, price_id: str) -> PriceInfo:
        """Retrieve the configured price."""
        try:
            price = stripe.Price.retrieve(price_id)
            return PriceInfo(
                price_id=price.id,
                amount_minor=price.unit_amount,
                currency=price.currency,
            )

        except stripe.StripeError as exc:
            logger.error(
                "stripe_price_retrieve_failed",
                price_id=price_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise PaymentProviderError(f"Failed to retrieve price: {exc}") from exc

    async def verify_webhook(self, payload: bytes, signature: str) -> WebhookEvent:
        """
        Verify and decode a Stripe webhook event.

        Args:
            payload: Raw webhook payload, exactly as received
            signature: Stripe-Signature header value

        Returns:
            Typed webhook event

        Raises:
            WebhookVerificationError: If signature verification or decoding fails
        """
        if not signature:
            logger.error("stripe_webhook_signature_missing")
            raise WebhookVerificationError("Missing Stripe signature header")

        try:
            event = stripe.Webhook.construct_event(  # type: ignore[no-untyped-call]
                payload, signature, self.webhook_secret
            )
        except stripe.SignatureVerificationError as exc:
            logger.error("stripe_webhook_verification_failed", error=str(exc))
            raise WebhookVerificationError("Invalid Stripe webhook signature") from exc
        except Exception as exc:
            logger.error(
                "stripe_webhook_parsing_failed", error=str(exc), error_type=type(exc).__name__
            )
            raise WebhookVerificationError(f"Failed to parse Stripe webhook: {exc}") from exc

        logger.info("stripe_webhook_verified", event_id=event.id, event_type=event.type)

        try:
            return decode_event(json.loads(payload))
        except (ValueError, TypeError, AttributeError) as exc:
            logger.error("stripe_webhook_decoding_failed", event_id=event.id, error=str(exc))
            raise WebhookVerificationError(f"Malformed Stripe event: {exc}") from exc
