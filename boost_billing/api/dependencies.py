"""
FastAPI Dependencies - Shared clients and per-request services.

The payment provider is built once at startup and kept on app.state; the
store gets a fresh session per request.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from boost_billing.config import settings
from boost_billing.db.repository import AccountStore
from boost_billing.db.session import get_db
from boost_billing.exceptions import UnconfiguredError
from boost_billing.services.entitlements import EntitlementService
from boost_billing.services.payment_provider import PaymentProvider
from boost_billing.services.sessions import SessionIssuer


def get_payment_provider(request: Request) -> PaymentProvider:
    """
    Shared payment provider.

    Raises:
        UnconfiguredError: Stripe settings were absent at startup (501)
    """
    provider: PaymentProvider | None = getattr(request.app.state, "payment_provider", None)
    if provider is None:
        raise UnconfiguredError("Stripe")
    return provider


def get_account_store(db: AsyncSession = Depends(get_db)) -> AccountStore:
    """Account store bound to this request's session."""
    return AccountStore(db)


def get_session_issuer(
    provider: PaymentProvider = Depends(get_payment_provider),
    store: AccountStore = Depends(get_account_store),
) -> SessionIssuer:
    return SessionIssuer(provider, store, settings)


def get_entitlement_service(
    provider: PaymentProvider = Depends(get_payment_provider),
    store: AccountStore = Depends(get_account_store),
) -> EntitlementService:
    return EntitlementService(provider, store)
