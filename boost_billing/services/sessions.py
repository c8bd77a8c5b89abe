"""
Session Issuer - Hosted checkout and customer portal sessions.

Stateless: every call reads the account, talks to the provider, and returns a
redirect URL. Payment completion is observed later through webhooks.
"""

from structlog import get_logger

from boost_billing.config import Settings
from boost_billing.db.repository import AccountStore
from boost_billing.exceptions import (
    AccountNotFoundError,
    CustomerNotFoundError,
    InvalidRequestError,
    PaymentProviderError,
)
from boost_billing.observability.metrics import metrics
from boost_billing.services.payment_provider import CheckoutRequest, PaymentProvider

logger = get_logger(__name__)

# Stripe substitutes the session id into this placeholder on redirect
CHECKOUT_SESSION_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"


class SessionIssuer:
    """Builds checkout and portal sessions for an account."""

    def __init__(self, provider: PaymentProvider, store: AccountStore, settings: Settings) -> None:
        self.provider = provider
        self.store = store
        self.settings = settings

    @property
    def return_url(self) -> str:
        return f"{self.settings.client_base_url.rstrip('/')}{self.settings.client_return_path}"

    @property
    def success_url(self) -> str:
        base = self.settings.client_base_url.rstrip("/")
        return f"{base}/success?session_id={CHECKOUT_SESSION_PLACEHOLDER}"

    async def create_checkout_session(
        self, account_id: str | None, contact_email: str | None = None
    ) -> str:
        """
        Create a subscription checkout session for the account.

        Creates and persists a Stripe customer first when the account has none.
        The customer read and write are not transactional; concurrent callers
        are reconciled by the provider's idempotency key.

        Raises:
            InvalidRequestError: account_id is missing
            AccountNotFoundError: no such account
            PaymentProviderError: Stripe call failed
            StoreError: store read or write failed
        """
        if not account_id:
            raise InvalidRequestError("userId required")

        account = await self.store.get_by_id(account_id)
        if account is None:
            logger.warning("checkout_unknown_account", account_id=account_id)
            raise AccountNotFoundError(account_id)

        try:
            customer_id = account.stripe_customer_id
            if not customer_id:
                customer_id = await self.provider.create_customer(account_id, contact_email)
                await self.store.update_by_id(account_id, stripe_customer_id=customer_id)

            url = await self.provider.create_checkout_session(
                CheckoutRequest(
                    account_id=account_id,
                    customer_id=customer_id,
                    price_id=self.settings.stripe_price_id,
                    success_url=self.success_url,
                    cancel_url=self.return_url,
                    origin=self.settings.checkout_origin,
                )
            )
        except PaymentProviderError:
            metrics.record_session("checkout", False)
            raise

        metrics.record_session("checkout", True)
        logger.info("checkout_session_issued", account_id=account_id, customer_id=customer_id)
        return url

    async def create_portal_session(self, account_id: str | None) -> str:
        """
        Create a customer portal session for the account.

        Raises:
            InvalidRequestError: account_id is missing
            CustomerNotFoundError: account unknown or without a Stripe customer
            PaymentProviderError: Stripe call failed
        """
        if not account_id:
            raise InvalidRequestError("userId required")

        account = await self.store.get_by_id(account_id)
        if account is None or not account.stripe_customer_id:
            logger.warning("portal_without_customer", account_id=account_id)
            raise CustomerNotFoundError(account_id)

        try:
            url = await self.provider.create_portal_session(
                account.stripe_customer_id, self.return_url
            )
        except PaymentProviderError:
            metrics.record_session("portal", False)
            raise

        metrics.record_session("portal", True)
        logger.info("portal_session_issued", account_id=account_id)
        return url
