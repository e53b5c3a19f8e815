"""
In-process pub/sub broker.

Channels are addressed by name (``debate:{id}``) and carry one or more
topics. Each subscriber gets its own queue; late subscribers first receive
the channel's retained history, so a reconnecting observer can rebuild its
view from scratch. Closing a channel ends every subscriber's iterator.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator

logger = logging.getLogger(__name__)

# Pushed onto subscriber queues when a channel closes
_CLOSED = object()


@dataclass
class _Channel:
    history: dict[str, list[Any]] = field(default_factory=dict)
    subscribers: dict[str, set[asyncio.Queue]] = field(default_factory=dict)
    closed: bool = False


class InMemoryBroker:
    """Process-local broker with per-topic history replay."""

    def __init__(self, history_limit: int = 1000) -> None:
        self._channels: dict[str, _Channel] = {}
        self._history_limit = history_limit

    def _channel(self, name: str) -> _Channel:
        if name not in self._channels:
            self._channels[name] = _Channel()
        return self._channels[name]

    async def publish(self, channel: str, topic: str, message: Any) -> bool:
        """
        Deliver ``message`` to every subscriber of ``channel``/``topic``.

        Returns:
            False if the channel is closed and the message was dropped
        """
        state = self._channel(channel)
        if state.closed:
            logger.debug(f"Dropping message on closed channel {channel}")
            return False

        history = state.history.setdefault(topic, [])
        history.append(message)
        if len(history) > self._history_limit:
            del history[: len(history) - self._history_limit]

        for queue in state.subscribers.get(topic, set()):
            queue.put_nowait(message)
        return True

    async def subscribe(
        self,
        channel: str,
        topic: str,
        replay: bool = True,
    ) -> AsyncIterator[Any]:
        """
        Iterate over messages on ``channel``/``topic``.

        With ``replay`` the retained history is yielded first. The iterator
        ends when the channel is closed.
        """
        state = self._channel(channel)
        backlog = list(state.history.get(topic, [])) if replay else []
        if state.closed:
            for message in backlog:
                yield message
            return

        queue: asyncio.Queue = asyncio.Queue()
        subscribers = state.subscribers.setdefault(topic, set())
        subscribers.add(queue)
        try:
            for message in backlog:
                yield message
            while True:
                message = await queue.get()
                if message is _CLOSED:
                    break
                yield message
        finally:
            subscribers.discard(queue)

    async def close(self, channel: str) -> None:
        """Close ``channel``: later publishes are dropped and subscribers finish."""
        state = self._channel(channel)
        if state.closed:
            return
        state.closed = True
        for queues in state.subscribers.values():
            for queue in queues:
                queue.put_nowait(_CLOSED)
        logger.debug(f"Closed channel {channel}")

    def history(self, channel: str, topic: str) -> list[Any]:
        state = self._channels.get(channel)
        if state is None:
            return []
        return list(state.history.get(topic, []))

    def is_closed(self, channel: str) -> bool:
        state = self._channels.get(channel)
        return state is not None and state.closed
