"""
Payment Provider Protocol - Provider-agnostic interface.

NO DICTIONARIES - All data uses strongly typed models.
"""

from dataclasses import dataclass
from typing import Protocol

from boost_billing.models.domain import PriceInfo, WebhookEvent


@dataclass(frozen=True)
class CheckoutRequest:
    """
    Provider-agnostic subscription checkout request.

    The plan is fixed by configuration and never taken from the caller.
    """

    account_id: str
    customer_id: str
    price_id: str
    success_url: str
    cancel_url: str
    origin: str

    def __post_init__(self) -> None:
        if not self.account_id:
            raise ValueError("account_id cannot be empty")
        if not self.customer_id:
            raise ValueError("customer_id cannot be empty")
        if not self.price_id:
            raise ValueError("price_id cannot be empty")


class PaymentProvider(Protocol):
    """
    Payment provider protocol.

    The session issuer and the webhook mapper depend only on this interface,
    so tests can swap in a mock without touching the Stripe SDK.
    """

    async def create_customer(self, account_id: str, email: str | None) -> str:
        """
        Create a customer for the account.

        Returns:
            Provider customer ID

        Raises:
            PaymentProviderError: If the provider call fails
        """
        ...

    async def create_checkout_session(self, request: CheckoutRequest) -> str:
        """
        Create a hosted subscription checkout page.

        Returns:
            Redirect URL of the hosted page

        Raises:
            PaymentProviderError: If the provider call fails
        """
        ...

    async def create_portal_session(self, customer_id: str, return_url: str) -> str:
        """
        Create a hosted customer portal page.

        Returns:
            Redirect URL of the hosted page

        Raises:
            PaymentProviderError: If the provider call fails
        """
        ...

    async def get_price(self, price_id: str) -> PriceInfo:
        """
        Look up display information for a price.

        Raises:
            PaymentProviderError: If the provider call fails
        """
        ...

    async def verify_webhook(self, payload: bytes, signature: str) -> WebhookEvent:
        """
        Verify and decode a webhook delivery.

        Args:
            payload: Raw, unmodified request body
            signature: Signature header value

        Returns:
            Typed webhook event (IgnoredEvent for unknown types)

        Raises:
            WebhookVerificationError: If the signature or body is invalid
        """
        ...
