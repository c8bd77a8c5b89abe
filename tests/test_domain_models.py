"""
Tests for domain models and API request models.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError

from boost_billing.models.api import CheckoutSessionRequest, PortalSessionRequest
from boost_billing.models.domain import (
    BOOSTED_STATUSES,
    AccountData,
    CheckoutCompleted,
    IgnoredEvent,
    InvoicePaymentSucceeded,
    SubscriptionDeleted,
    SubscriptionUpdated,
)


class TestWebhookEvents:
    """Tests for the webhook event union."""

    def test_kinds_are_distinct(self):
        kinds = {
            CheckoutCompleted.kind,
            InvoicePaymentSucceeded.kind,
            SubscriptionUpdated.kind,
            SubscriptionDeleted.kind,
            IgnoredEvent.kind,
        }

        assert len(kinds) == 5

    def test_events_are_immutable(self):
        event = SubscriptionDeleted(event_id="evt_1", subscription_id="sub_1")

        with pytest.raises(AttributeError):
            event.subscription_id = "sub_2"  # type: ignore[misc]

    @given(status=st.text(max_size=30))
    def test_is_boosted_only_for_boosted_statuses(self, status):
        event = SubscriptionUpdated(event_id="evt_1", subscription_id="sub_1", status=status)

        assert event.is_boosted is (status in BOOSTED_STATUSES)


class TestAccountData:
    """Tests for AccountData."""

    def test_requires_id(self):
        with pytest.raises(ValueError):
            AccountData(
                account_id="",
                stripe_customer_id=None,
                stripe_subscription_id=None,
                is_boosted=False,
            )


class TestRequestModels:
    """Tests for the session request bodies."""

    def test_checkout_accepts_camel_case(self):
        request = CheckoutSessionRequest.model_validate({"userId": "u1", "email": "a@b.c"})

        assert request.user_id == "u1"
        assert request.email == "a@b.c"

    def test_checkout_user_id_optional(self):
        assert CheckoutSessionRequest.model_validate({}).user_id is None

    def test_portal_rejects_non_string(self):
        with pytest.raises(ValidationError):
            PortalSessionRequest.model_validate({"userId": 42})
