"""Client profile summary attached to assessment instances."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ClientSummary:
    id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None

    @property
    def display_name(self) -> str:
        full_name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full_name or self.email or "Unknown client"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientSummary":
        return cls(
            id=str(data["id"]),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            email=data.get("email"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
        }
