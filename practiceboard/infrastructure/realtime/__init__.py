"""Change feed implementations."""

from practiceboard.infrastructure.realtime.memory_feed import InMemoryChangeFeed
from practiceboard.infrastructure.realtime.redis_feed import RedisChangeFeed

__all__ = ["InMemoryChangeFeed", "RedisChangeFeed"]
