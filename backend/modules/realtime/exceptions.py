"""
Realtime module exceptions.
"""

from shared.exceptions import AuthenticationError


class SubscriptionTokenError(AuthenticationError):
    """Raised when an observer presents a bad subscription token."""

    def __init__(self, message: str, channel: str):
        super().__init__(
            message,
            code="INVALID_SUBSCRIPTION_TOKEN",
            details={"channel": channel},
        )
