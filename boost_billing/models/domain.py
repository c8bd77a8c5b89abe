"""
Domain Models - Internal business logic models using dataclasses.

NO DICTIONARIES - All data structures are strongly typed immutable dataclasses.
Webhook events are a closed tagged union: every verified delivery decodes to
exactly one of the event classes below.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, Literal, Union

# Subscription statuses that keep the boost entitlement
BOOSTED_STATUSES = frozenset({"active", "trialing", "past_due"})


@dataclass(frozen=True)
class AccountData:
    """Immutable snapshot of an account row."""

    account_id: str
    stripe_customer_id: str | None
    stripe_subscription_id: str | None
    is_boosted: bool

    def __post_init__(self) -> None:
        if not self.account_id:
            raise ValueError("account_id cannot be empty")


@dataclass(frozen=True)
class SitemapEntry:
    """One public profile page listed in the sitemap."""

    slug: str
    updated_at: datetime | None = None


@dataclass(frozen=True)
class PriceInfo:
    """Display information for the configured plan."""

    price_id: str
    amount_minor: int | None
    currency: str


# ============================================================================
# Webhook Events
# ============================================================================

EventKind = Literal[
    "checkout_completed",
    "invoice_payment_succeeded",
    "subscription_updated",
    "subscription_deleted",
    "ignored",
]


@dataclass(frozen=True)
class CheckoutCompleted:
    """A hosted checkout finished; links the account to its Stripe objects."""

    kind: ClassVar[EventKind] = "checkout_completed"

    event_id: str
    account_id: str | None
    customer_id: str | None
    subscription_id: str | None
    created: int | None = None


@dataclass(frozen=True)
class InvoicePaymentSucceeded:
    """A recurring invoice was paid."""

    kind: ClassVar[EventKind] = "invoice_payment_succeeded"

    event_id: str
    subscription_id: str | None
    created: int | None = None


@dataclass(frozen=True)
class SubscriptionUpdated:
    """A subscription changed status."""

    kind: ClassVar[EventKind] = "subscription_updated"

    event_id: str
    subscription_id: str
    status: str
    created: int | None = None

    @property
    def is_boosted(self) -> bool:
        return self.status in BOOSTED_STATUSES


@dataclass(frozen=True)
class SubscriptionDeleted:
    """A subscription ended."""

    kind: ClassVar[EventKind] = "subscription_deleted"

    event_id: str
    subscription_id: str
    created: int | None = None


@dataclass(frozen=True)
class IgnoredEvent:
    """Any event type this service does not act on."""

    kind: ClassVar[EventKind] = "ignored"

    event_id: str
    event_type: str
    created: int | None = None


WebhookEvent = Union[
    CheckoutCompleted,
    InvoicePaymentSucceeded,
    SubscriptionUpdated,
    SubscriptionDeleted,
    IgnoredEvent,
]


@dataclass(frozen=True)
class WebhookOutcome:
    """Result of handling one verified webhook delivery."""

    event_id: str
    event_type: str
    kind: EventKind
    rows_affected: int
