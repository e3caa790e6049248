"""
In-process change feed.

Delivers events to subscribers on the same event loop. Used in tests and in
single-process deployments configured with ``REALTIME_BACKEND=memory``.
"""

import logging
from collections import defaultdict

from practiceboard.domain.repositories import (
    ChangeCallback,
    ChangeEvent,
    IChangeFeed,
    IChangeSubscription,
    therapist_channel,
)

logger = logging.getLogger(__name__)


class _MemorySubscription(IChangeSubscription):
    def __init__(self, feed: "InMemoryChangeFeed", channel: str, callback: ChangeCallback) -> None:
        self._feed = feed
        self._channel = channel
        self._callback = callback
        self._open = True

    @property
    def channel(self) -> str:
        return self._channel

    @property
    def is_open(self) -> bool:
        return self._open

    async def deliver(self, event: ChangeEvent) -> None:
        if not self._open:
            return
        try:
            await self._callback(event)
        except Exception as e:
            logger.error(f"Change callback on {self._channel} failed: {e!s}", exc_info=True)

    async def close(self) -> None:
        if not self._open:
            return
        self._open = False
        self._feed._remove(self)


class InMemoryChangeFeed(IChangeFeed):
    def __init__(self) -> None:
        self._subscriptions: dict[str, list[_MemorySubscription]] = defaultdict(list)
        self.published: list[ChangeEvent] = []

    async def subscribe(self, therapist_id: str, callback: ChangeCallback) -> IChangeSubscription:
        channel = therapist_channel(therapist_id)
        subscription = _MemorySubscription(self, channel, callback)
        self._subscriptions[channel].append(subscription)
        return subscription

    async def publish(self, event: ChangeEvent) -> None:
        self.published.append(event)
        channel = therapist_channel(event.therapist_id)
        for subscription in list(self._subscriptions.get(channel, ())):
            await subscription.deliver(event)

    def subscriber_count(self, therapist_id: str) -> int:
        return len(self._subscriptions.get(therapist_channel(therapist_id), ()))

    def _remove(self, subscription: _MemorySubscription) -> None:
        subscribers = self._subscriptions.get(subscription.channel, [])
        if subscription in subscribers:
            subscribers.remove(subscription)
        if not subscribers:
            self._subscriptions.pop(subscription.channel, None)

    async def close(self) -> None:
        for subscribers in list(self._subscriptions.values()):
            for subscription in list(subscribers):
                await subscription.close()
