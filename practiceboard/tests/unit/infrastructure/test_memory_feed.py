"""
Tests for the in-process change feed.
"""

from unittest.mock import AsyncMock

import pytest

from practiceboard.domain.repositories import ChangeEvent, ChangeType
from practiceboard.infrastructure.realtime import InMemoryChangeFeed


def _event(therapist_id="t1"):
    return ChangeEvent(ChangeType.INSERT, therapist_id=therapist_id, record_id="inst_1")


class TestInMemoryChangeFeed:
    @pytest.mark.asyncio
    async def test_delivers_to_channel_subscribers(self):
        feed = InMemoryChangeFeed()
        callback = AsyncMock()
        await feed.subscribe("t1", callback)

        await feed.publish(_event())

        callback.assert_awaited_once_with(_event())
        assert feed.published == [_event()]

    @pytest.mark.asyncio
    async def test_closed_subscription_receives_nothing(self):
        feed = InMemoryChangeFeed()
        callback = AsyncMock()
        subscription = await feed.subscribe("t1", callback)

        await subscription.close()
        await subscription.close()
        await feed.publish(_event())

        callback.assert_not_awaited()
        assert feed.subscriber_count("t1") == 0

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_block_others(self):
        feed = InMemoryChangeFeed()
        failing = AsyncMock(side_effect=RuntimeError("boom"))
        healthy = AsyncMock()
        await feed.subscribe("t1", failing)
        await feed.subscribe("t1", healthy)

        await feed.publish(_event())

        healthy.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_closes_all_subscriptions(self):
        feed = InMemoryChangeFeed()
        first = await feed.subscribe("t1", AsyncMock())
        second = await feed.subscribe("t2", AsyncMock())

        await feed.close()

        assert not first.is_open
        assert not second.is_open
