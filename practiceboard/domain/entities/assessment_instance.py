"""
Assessment instance entity.

An instance is one assignment of a template to one client by one therapist,
with its own lifecycle.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from practiceboard.domain.entities.assessment_template import AssessmentTemplate
from practiceboard.domain.entities.client import ClientSummary
from practiceboard.domain.utils.datetime_utils import parse_datetime


class InstanceStatus(str, Enum):
    """Lifecycle state of an assessment instance."""

    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {InstanceStatus.COMPLETED, InstanceStatus.CANCELLED, InstanceStatus.EXPIRED}
)


class ReminderFrequency(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    BEFORE_DUE = "before_due"


@dataclass
class AssessmentInstance:
    """
    One assessment assigned to one client.

    ``template`` and ``client`` are resolved summaries; either may be ``None``
    when the referenced row could not be resolved, and callers render a
    placeholder in that case.
    """

    id: str
    template_id: str
    therapist_id: str
    client_id: str
    title: str
    status: InstanceStatus = InstanceStatus.ASSIGNED
    case_id: str | None = None
    instructions: str | None = None
    reminder_frequency: ReminderFrequency = ReminderFrequency.NONE
    assigned_at: datetime | None = None
    due_date: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    expires_at: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    template: AssessmentTemplate | None = None
    client: ClientSummary | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def is_overdue(self, now: datetime) -> bool:
        """True when the due date has elapsed on a non-terminal instance."""
        return self.due_date is not None and not self.is_terminal and self.due_date < now

    def effective_status(self, now: datetime) -> InstanceStatus:
        """
        Status as it should be displayed at ``now``.

        Expiry is derived at read time; nothing is written back to the store.
        """
        if self.is_overdue(now):
            return InstanceStatus.EXPIRED
        return self.status

    def with_relations(
        self,
        template: AssessmentTemplate | None,
        client: ClientSummary | None,
    ) -> "AssessmentInstance":
        return replace(self, template=template, client=client)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AssessmentInstance":
        """Create an instance from a store row, with optional nested relations."""
        template_data = data.get("template")
        client_data = data.get("client")
        return cls(
            id=str(data["id"]),
            template_id=str(data["template_id"]),
            therapist_id=str(data["therapist_id"]),
            client_id=str(data["client_id"]),
            case_id=str(data["case_id"]) if data.get("case_id") else None,
            title=data.get("title") or "",
            instructions=data.get("instructions"),
            status=InstanceStatus(data.get("status") or InstanceStatus.ASSIGNED.value),
            reminder_frequency=ReminderFrequency(
                data.get("reminder_frequency") or ReminderFrequency.NONE.value
            ),
            assigned_at=parse_datetime(data.get("assigned_at")),
            due_date=parse_datetime(data.get("due_date")),
            started_at=parse_datetime(data.get("started_at")),
            completed_at=parse_datetime(data.get("completed_at")),
            expires_at=parse_datetime(data.get("expires_at")),
            metadata=dict(data.get("metadata") or {}),
            created_at=parse_datetime(data.get("created_at")),
            updated_at=parse_datetime(data.get("updated_at")),
            template=AssessmentTemplate.from_dict(template_data) if template_data else None,
            client=ClientSummary.from_dict(client_data) if client_data else None,
        )


@dataclass(frozen=True)
class NewAssessmentInstance:
    """Insert payload for one assignment; the store assigns id and assigned_at."""

    template_id: str
    therapist_id: str
    client_id: str
    title: str
    instructions: str | None = None
    due_date: datetime | None = None
    reminder_frequency: ReminderFrequency = ReminderFrequency.NONE
    case_id: str | None = None
    status: InstanceStatus = InstanceStatus.ASSIGNED
    metadata: dict[str, Any] = field(default_factory=dict)
