"""
Exception Classes - Strongly typed exception hierarchy.

Every class carries the HTTP status it maps to at the request boundary.
"""


class BoostBillingError(Exception):
    """Base exception for all boost billing errors."""

    status_code = 500
    public_message = "server error"


class InvalidRequestError(BoostBillingError):
    """Raised when caller input is malformed or missing."""

    status_code = 400

    def __init__(self, message: str) -> None:
        self.message = message
        self.public_message = message
        super().__init__(message)


class WebhookVerificationError(BoostBillingError):
    """Raised when a webhook delivery fails the authenticity check.

    The message is logged only. Responses always use the generic public message
    so callers cannot learn which part of the check failed.
    """

    status_code = 400
    public_message = "Webhook Error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Webhook verification error: {message}")


class NotFoundError(BoostBillingError):
    """Raised when a referenced account or customer is absent."""

    status_code = 400
    public_message = "Not found"


class AccountNotFoundError(NotFoundError):
    """Raised when no account row matches the given id."""

    public_message = "Unknown user"

    def __init__(self, account_id: str) -> None:
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class CustomerNotFoundError(NotFoundError):
    """Raised when an account has no Stripe customer yet."""

    public_message = "No customer"

    def __init__(self, account_id: str) -> None:
        self.account_id = account_id
        super().__init__(f"No payment customer for account: {account_id}")


class UpstreamFailureError(BoostBillingError):
    """Raised when the payment processor or the store call errors."""

    status_code = 500


class PaymentProviderError(UpstreamFailureError):
    """Raised when payment provider operation fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Payment provider error: {message}")


class StoreError(UpstreamFailureError):
    """Raised when an entitlement store read or write fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Store error: {message}")


class UnconfiguredError(BoostBillingError):
    """Raised when a required integration is absent at runtime."""

    status_code = 501
    public_message = "Payment provider not configured"

    def __init__(self, integration: str) -> None:
        self.integration = integration
        super().__init__(f"{integration} is not configured")
