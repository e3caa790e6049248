"""
Redis change feed.

Change events are published as JSON on one Redis pub/sub channel per
therapist. Each subscription owns a ``PubSub`` connection and a listener
task that hands decoded events to its callback.
"""

import asyncio
import json
import logging

from redis.asyncio.client import PubSub, Redis

from practiceboard.domain.repositories import (
    ChangeCallback,
    ChangeEvent,
    IChangeFeed,
    IChangeSubscription,
    therapist_channel,
)

logger = logging.getLogger(__name__)


class _RedisSubscription(IChangeSubscription):
    def __init__(self, pubsub: PubSub, channel: str, callback: ChangeCallback) -> None:
        self._pubsub = pubsub
        self._channel = channel
        self._callback = callback
        self._task: asyncio.Task | None = None
        self._open = True
        self._closed = False

    @property
    def channel(self) -> str:
        return self._channel

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def closed(self) -> bool:
        """True once ``close`` has released the pub/sub connection."""
        return self._closed

    def start(self) -> None:
        self._task = asyncio.create_task(self._listen(), name=f"listen:{self._channel}")

    async def _listen(self) -> None:
        try:
            async for message in self._pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    event = ChangeEvent.from_dict(json.loads(message["data"]))
                except (ValueError, KeyError, TypeError) as e:
                    logger.warning(f"Discarding malformed change event on {self._channel}: {e!s}")
                    continue
                try:
                    await self._callback(event)
                except Exception as e:
                    logger.error(f"Change callback on {self._channel} failed: {e!s}", exc_info=True)
        except Exception as e:
            logger.error(f"Redis listener on '{self._channel}' stopped: {e!s}")
        finally:
            # Nothing more is delivered once the listener stops
            self._open = False

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._open = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        try:
            await self._pubsub.unsubscribe(self._channel)
            await self._pubsub.aclose()
        except Exception as e:
            logger.warning(f"Redis unsubscribe error for '{self._channel}': {e!s}")


class RedisChangeFeed(IChangeFeed):
    """
    Change feed backed by Redis pub/sub.

    Args:
        redis_client: An initialized asynchronous Redis client
    """

    def __init__(self, redis_client: Redis) -> None:
        self._redis = redis_client
        self._subscriptions: set[_RedisSubscription] = set()

    async def subscribe(self, therapist_id: str, callback: ChangeCallback) -> IChangeSubscription:
        channel = therapist_channel(therapist_id)
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(channel)
        subscription = _RedisSubscription(pubsub, channel, callback)
        subscription.start()
        self._subscriptions = {s for s in self._subscriptions if not s.closed}
        self._subscriptions.add(subscription)
        logger.debug(f"Redis subscription opened on '{channel}'")
        return subscription

    async def publish(self, event: ChangeEvent) -> None:
        """Publish an event; failures are logged, the write that caused it stands."""
        channel = therapist_channel(event.therapist_id)
        try:
            await self._redis.publish(channel, json.dumps(event.to_dict()))
        except Exception as e:
            logger.error(f"Redis publish error for channel '{channel}': {e!s}")

    async def close(self) -> None:
        for subscription in list(self._subscriptions):
            await subscription.close()
        self._subscriptions.clear()
        try:
            await self._redis.aclose()
        except Exception as e:
            logger.error(f"Redis close error: {e!s}")
