"""
Entitlement Service - Maps verified webhook events to account state.

Each transition is an unconditional assignment keyed by a stable identifier,
so re-delivering an event leaves the row unchanged. No event ordering is
enforced: concurrent or out-of-order deliveries resolve last-write-wins.
"""

from structlog import get_logger

from boost_billing.db.repository import AccountStore
from boost_billing.exceptions import StoreError
from boost_billing.models.domain import (
    CheckoutCompleted,
    IgnoredEvent,
    InvoicePaymentSucceeded,
    SubscriptionDeleted,
    SubscriptionUpdated,
    WebhookEvent,
    WebhookOutcome,
)
from boost_billing.observability.metrics import metrics
from boost_billing.observability.tracing import traced_span
from boost_billing.services.payment_provider import PaymentProvider

logger = get_logger(__name__)

_STRIPE_EVENT_TYPES = {
    "checkout_completed": "checkout.session.completed",
    "invoice_payment_succeeded": "invoice.payment_succeeded",
    "subscription_updated": "customer.subscription.updated",
    "subscription_deleted": "customer.subscription.deleted",
}


def _event_type(event: WebhookEvent) -> str:
    if isinstance(event, IgnoredEvent):
        return event.event_type
    return _STRIPE_EVENT_TYPES[event.kind]


class EntitlementService:
    """
    Webhook event mapper.

    Pipeline per delivery:
    1. Verify signature over the raw body (hard gate, nothing is decoded before it)
    2. Decode to a typed event
    3. Apply the event's transition to the store
    4. Report the outcome; store errors propagate so the delivery is retried
    """

    def __init__(self, provider: PaymentProvider, store: AccountStore) -> None:
        self.provider = provider
        self.store = store

    async def handle(self, raw_body: bytes, signature_header: str) -> WebhookOutcome:
        """
        Verify, decode and apply one webhook delivery.

        Raises:
            WebhookVerificationError: Delivery failed verification; nothing was written
            StoreError: The transition could not be written
        """
        event = await self.provider.verify_webhook(raw_body, signature_header)
        return await self.apply(event)

    async def apply(self, event: WebhookEvent) -> WebhookOutcome:
        """Apply the transition for an already verified event."""
        event_type = _event_type(event)
        logger.info(
            "webhook_event_received",
            event_id=event.event_id,
            event_type=event_type,
            kind=event.kind,
            created=event.created,
        )

        try:
            with traced_span("entitlements.apply", event_id=event.event_id, kind=event.kind):
                if isinstance(event, CheckoutCompleted):
                    rows = await self._checkout_completed(event)
                elif isinstance(event, InvoicePaymentSucceeded):
                    rows = await self._invoice_payment_succeeded(event)
                elif isinstance(event, SubscriptionUpdated):
                    rows = await self._subscription_updated(event)
                elif isinstance(event, SubscriptionDeleted):
                    rows = await self._subscription_deleted(event)
                else:
                    rows = 0
        except StoreError:
            metrics.record_webhook_event(event_type, "failed")
            logger.error("webhook_transition_failed", event_id=event.event_id, kind=event.kind)
            raise

        outcome = "ignored" if event.kind == "ignored" else "processed"
        metrics.record_webhook_event(event_type, outcome)
        return WebhookOutcome(
            event_id=event.event_id,
            event_type=event_type,
            kind=event.kind,
            rows_affected=rows,
        )

    async def _checkout_completed(self, event: CheckoutCompleted) -> int:
        if not event.account_id:
            logger.warning(
                "checkout_completed_without_account",
                event_id=event.event_id,
                customer_id=event.customer_id,
            )
            return 0

        values: dict[str, object] = {"is_boosted": True}
        if event.customer_id:
            values["stripe_customer_id"] = event.customer_id
        if event.subscription_id:
            values["stripe_subscription_id"] = event.subscription_id

        rows = await self.store.update_by_id(event.account_id, **values)
        self._applied(event, rows, boosted=True, account_id=event.account_id)
        return rows

    async def _invoice_payment_succeeded(self, event: InvoicePaymentSucceeded) -> int:
        if not event.subscription_id:
            logger.info("invoice_without_subscription", event_id=event.event_id)
            return 0

        rows = await self.store.update_by_subscription_id(event.subscription_id, is_boosted=True)
        self._applied(event, rows, boosted=True, subscription_id=event.subscription_id)
        return rows

    async def _subscription_updated(self, event: SubscriptionUpdated) -> int:
        rows = await self.store.update_by_subscription_id(
            event.subscription_id,
            stripe_subscription_id=event.subscription_id,
            is_boosted=event.is_boosted,
        )
        self._applied(
            event,
            rows,
            boosted=event.is_boosted,
            subscription_id=event.subscription_id,
            status=event.status,
        )
        return rows

    async def _subscription_deleted(self, event: SubscriptionDeleted) -> int:
        rows = await self.store.update_by_subscription_id(event.subscription_id, is_boosted=False)
        self._applied(event, rows, boosted=False, subscription_id=event.subscription_id)
        return rows

    def _applied(self, event: WebhookEvent, rows: int, boosted: bool, **context: object) -> None:
        metrics.record_transition(event.kind, boosted)
        if rows == 0:
            logger.info(
                "entitlement_transition_matched_nothing",
                event_id=event.event_id,
                kind=event.kind,
                **context,
            )
            return
        logger.info(
            "entitlement_transition_applied",
            event_id=event.event_id,
            kind=event.kind,
            is_boosted=boosted,
            rows=rows,
            created=event.created,
            **context,
        )
