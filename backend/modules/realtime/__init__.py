"""
Realtime module.

Pub/sub channels for debate observers and the short-lived tokens that
grant access to them.

Public API:
- InMemoryBroker: Process-local pub/sub with history replay
- issue_subscription_token / verify_subscription_token: Channel-scoped JWTs
"""

from .broker import InMemoryBroker
from .exceptions import SubscriptionTokenError
from .tokens import (
    DEFAULT_TOPIC,
    channel_for,
    issue_subscription_token,
    verify_subscription_token,
)

__all__ = [
    "InMemoryBroker",
    "SubscriptionTokenError",
    "DEFAULT_TOPIC",
    "channel_for",
    "issue_subscription_token",
    "verify_subscription_token",
]
