"""
Change-Notification Bridge.

Keeps one subscription open on the mounted therapist's instance channel and
re-runs the full instance listing whenever any change event arrives. Event
payloads are not inspected.
"""

import logging
from collections.abc import Awaitable, Callable

from practiceboard.domain.repositories import (
    ChangeCallback,
    ChangeEvent,
    IChangeFeed,
    IChangeSubscription,
)

logger = logging.getLogger(__name__)


class ChangeNotificationBridge:
    """
    Args:
        feed: Push channel for instance changes
        on_change: Refetch callback, called with the mounted therapist id
    """

    def __init__(self, feed: IChangeFeed, on_change: Callable[[str], Awaitable[object]]) -> None:
        self._feed = feed
        self._on_change = on_change
        self._therapist_id: str | None = None
        self._subscription: IChangeSubscription | None = None

    @property
    def therapist_id(self) -> str | None:
        return self._therapist_id

    @property
    def subscription(self) -> IChangeSubscription | None:
        return self._subscription

    @property
    def is_mounted(self) -> bool:
        return self._subscription is not None and self._subscription.is_open

    async def mount(self, therapist_id: str) -> None:
        """Open the therapist's subscription, closing any previous one first."""
        if therapist_id == self._therapist_id and self.is_mounted:
            return

        await self.unmount()
        self._therapist_id = therapist_id
        self._subscription = await self._feed.subscribe(therapist_id, self._handler_for(therapist_id))
        logger.debug(f"Subscribed to {self._subscription.channel}")

    async def unmount(self) -> None:
        subscription, self._subscription = self._subscription, None
        self._therapist_id = None
        if subscription is not None:
            await subscription.close()
            logger.debug(f"Unsubscribed from {subscription.channel}")

    def _handler_for(self, therapist_id: str) -> ChangeCallback:
        async def handle(event: ChangeEvent) -> None:
            if therapist_id != self._therapist_id:
                logger.debug("Ignoring change event for a therapist no longer mounted")
                return
            logger.debug(f"{event.change_type.value} on {event.table}, refetching instances")
            await self._on_change(therapist_id)

        return handle
