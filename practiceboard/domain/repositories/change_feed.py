"""
Interface for the push channel that announces instance changes.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    """A server-side mutation of an ``assessment_instances`` row."""

    change_type: ChangeType
    therapist_id: str
    record_id: str | None = None
    table: str = "assessment_instances"

    def to_dict(self) -> dict[str, Any]:
        return {
            "change_type": self.change_type.value,
            "therapist_id": self.therapist_id,
            "record_id": self.record_id,
            "table": self.table,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChangeEvent":
        return cls(
            change_type=ChangeType(data["change_type"]),
            therapist_id=str(data["therapist_id"]),
            record_id=data.get("record_id"),
            table=data.get("table", "assessment_instances"),
        )


ChangeCallback = Callable[[ChangeEvent], Awaitable[None]]


def therapist_channel(therapist_id: str) -> str:
    """Channel name scoped to one therapist's instances."""
    return f"assessment_instances:therapist:{therapist_id}"


class IChangeSubscription(ABC):
    @property
    @abstractmethod
    def channel(self) -> str:
        pass

    @property
    @abstractmethod
    def is_open(self) -> bool:
        pass

    @abstractmethod
    async def close(self) -> None:
        """Stop delivering events. Idempotent."""
        pass


class IChangeFeed(ABC):
    """Publish/subscribe channel for instance change events."""

    @abstractmethod
    async def subscribe(self, therapist_id: str, callback: ChangeCallback) -> IChangeSubscription:
        pass

    @abstractmethod
    async def publish(self, event: ChangeEvent) -> None:
        pass

    async def close(self) -> None:
        """Release transport resources."""
        return None
