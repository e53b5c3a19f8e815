"""
Short-lived subscription tokens for the observer channel.

Tokens are HS256 JWTs scoped to a single channel and a list of topics.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt  # PyJWT

from shared.config import get_settings

from .exceptions import SubscriptionTokenError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_TOPIC = "updates"


def channel_for(debate_id: str) -> str:
    return f"debate:{debate_id}"


def issue_subscription_token(
    debate_id: str,
    topics: Optional[list[str]] = None,
    secret: Optional[str] = None,
    ttl_seconds: Optional[int] = None,
) -> tuple[str, datetime]:
    """
    Issue a token that lets the bearer subscribe to one debate channel.

    Args:
        debate_id: Debate whose channel the token grants access to
        topics: Topics granted (defaults to ["updates"])
        secret: Signing secret (defaults to settings.realtime_token_secret)
        ttl_seconds: Lifetime (defaults to settings.realtime_token_ttl_seconds)

    Returns:
        Tuple of (encoded token, expiry time)
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(
        seconds=ttl_seconds if ttl_seconds is not None else settings.realtime_token_ttl_seconds
    )
    payload = {
        "channel": channel_for(debate_id),
        "topics": topics or [DEFAULT_TOPIC],
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    token = jwt.encode(payload, secret or settings.realtime_token_secret, algorithm=ALGORITHM)
    return token, expires_at


def verify_subscription_token(
    token: str,
    channel: str,
    topic: str = DEFAULT_TOPIC,
    secret: Optional[str] = None,
) -> dict:
    """
    Check that ``token`` is valid and grants ``channel``/``topic``.

    Returns:
        The decoded claims

    Raises:
        SubscriptionTokenError: If the token is expired, malformed, badly
            signed, or scoped to another channel or topic
    """
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            secret or settings.realtime_token_secret,
            algorithms=[ALGORITHM],
            options={"require": ["exp", "channel", "topics"]},
        )
    except jwt.ExpiredSignatureError:
        raise SubscriptionTokenError("Subscription token has expired", channel)
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected subscription token for {channel}: {e}")
        raise SubscriptionTokenError("Invalid subscription token", channel)

    if claims["channel"] != channel:
        raise SubscriptionTokenError("Token is not valid for this channel", channel)
    if topic not in claims["topics"]:
        raise SubscriptionTokenError(f"Token does not grant topic '{topic}'", channel)
    return claims
