"""
In-memory implementation of the assessment store.

Holds templates, client profiles, instances and scores in dictionaries.
Failures for a named operation can be injected with ``fail_on`` so callers
can exercise their error paths without a database.
"""

import logging
import uuid
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime
from typing import Any

from practiceboard.domain.entities import (
    AssessmentInstance,
    AssessmentScore,
    AssessmentTemplate,
    ClientSummary,
    InstanceStatus,
    InstanceSummary,
    NewAssessmentInstance,
    select_latest_score,
)
from practiceboard.domain.exceptions import StoreError
from practiceboard.domain.repositories import (
    ChangeEvent,
    ChangeType,
    IAssessmentStore,
    IChangeFeed,
)
from practiceboard.domain.utils.datetime_utils import UTC, Clock, now_utc

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=UTC)


def _newest_first(instances: Iterable[AssessmentInstance]) -> list[AssessmentInstance]:
    return sorted(instances, key=lambda i: i.assigned_at or _EPOCH, reverse=True)


class InMemoryAssessmentStore(IAssessmentStore):
    """
    Args:
        change_feed: Optional feed notified after every write
        clock: Source of ``assigned_at`` and ``updated_at`` timestamps
    """

    def __init__(self, change_feed: IChangeFeed | None = None, clock: Clock = now_utc) -> None:
        self._change_feed = change_feed
        self._clock = clock
        self.templates: dict[str, AssessmentTemplate] = {}
        self.clients: dict[str, ClientSummary] = {}
        self.instances: dict[str, AssessmentInstance] = {}
        self.scores: dict[str, list[AssessmentScore]] = {}
        self.calls: list[str] = []
        self._failures: dict[str, StoreError] = {}

    # ------------------------------------------------------------------
    # Seeding and failure injection
    # ------------------------------------------------------------------

    def add_template(self, template: AssessmentTemplate) -> AssessmentTemplate:
        self.templates[template.id] = template
        return template

    def add_client(self, client: ClientSummary) -> ClientSummary:
        self.clients[client.id] = client
        return client

    def add_instance(self, instance: AssessmentInstance) -> AssessmentInstance:
        self.instances[instance.id] = replace(instance, template=None, client=None)
        return instance

    def add_score(self, score: AssessmentScore) -> AssessmentScore:
        self.scores.setdefault(score.instance_id, []).append(score)
        return score

    def fail_on(self, operation: str, error: StoreError) -> None:
        """Raise ``error`` from every later call to ``operation``."""
        self._failures[operation] = error

    def clear_failures(self) -> None:
        self._failures.clear()

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        error = self._failures.get(operation)
        if error is not None:
            raise error

    async def _publish(self, change_type: ChangeType, therapist_id: str, record_id: str) -> None:
        if self._change_feed is not None:
            await self._change_feed.publish(
                ChangeEvent(change_type=change_type, therapist_id=therapist_id, record_id=record_id)
            )

    def _for_therapist(self, therapist_id: str) -> list[AssessmentInstance]:
        rows = [i for i in self.instances.values() if i.therapist_id == therapist_id]
        return _newest_first(rows)

    # ------------------------------------------------------------------
    # IAssessmentStore
    # ------------------------------------------------------------------

    async def list_active_templates(self) -> list[AssessmentTemplate]:
        self._enter("list_active_templates")
        return sorted((t for t in self.templates.values() if t.is_active), key=lambda t: t.name)

    async def fetch_instances_with_relations(self, therapist_id: str) -> list[AssessmentInstance]:
        self._enter("fetch_instances_with_relations")
        return [
            i.with_relations(self.templates.get(i.template_id), self.clients.get(i.client_id))
            for i in self._for_therapist(therapist_id)
        ]

    async def fetch_instances(self, therapist_id: str) -> list[AssessmentInstance]:
        self._enter("fetch_instances")
        return self._for_therapist(therapist_id)

    async def fetch_templates_by_ids(self, template_ids: Iterable[str]) -> list[AssessmentTemplate]:
        self._enter("fetch_templates_by_ids")
        return [self.templates[t] for t in set(template_ids) if t in self.templates]

    async def fetch_clients_by_ids(self, client_ids: Iterable[str]) -> list[ClientSummary]:
        self._enter("fetch_clients_by_ids")
        return [self.clients[c] for c in set(client_ids) if c in self.clients]

    async def insert_instances(
        self, drafts: list[NewAssessmentInstance]
    ) -> list[AssessmentInstance]:
        self._enter("insert_instances")
        now = self._clock()
        created = [
            AssessmentInstance(
                id=str(uuid.uuid4()),
                template_id=draft.template_id,
                therapist_id=draft.therapist_id,
                client_id=draft.client_id,
                title=draft.title,
                status=draft.status,
                case_id=draft.case_id,
                instructions=draft.instructions,
                reminder_frequency=draft.reminder_frequency,
                assigned_at=now,
                due_date=draft.due_date,
                metadata=dict(draft.metadata),
                created_at=now,
                updated_at=now,
            )
            for draft in drafts
        ]
        for instance in created:
            self.instances[instance.id] = instance
        for instance in created:
            await self._publish(ChangeType.INSERT, instance.therapist_id, instance.id)
        return created

    async def get_instance(self, instance_id: str) -> AssessmentInstance | None:
        self._enter("get_instance")
        return self.instances.get(instance_id)

    async def update_instance(
        self, instance_id: str, changes: dict[str, Any]
    ) -> AssessmentInstance | None:
        self._enter("update_instance")
        current = self.instances.get(instance_id)
        if current is None:
            return None
        changes = dict(changes)
        if "status" in changes:
            changes["status"] = InstanceStatus(changes["status"])
        updated = replace(current, updated_at=self._clock(), **changes)
        self.instances[instance_id] = updated
        await self._publish(ChangeType.UPDATE, updated.therapist_id, instance_id)
        return updated

    async def delete_instance(self, instance_id: str) -> bool:
        self._enter("delete_instance")
        removed = self.instances.pop(instance_id, None)
        if removed is None:
            return False
        await self._publish(ChangeType.DELETE, removed.therapist_id, instance_id)
        return True

    async def fetch_latest_score(self, instance_id: str) -> AssessmentScore | None:
        self._enter("fetch_latest_score")
        return select_latest_score(self.scores.get(instance_id, ()))

    async def list_instance_summaries(
        self,
        therapist_id: str | None = None,
        client_id: str | None = None,
        status: InstanceStatus | None = None,
    ) -> list[InstanceSummary]:
        self._enter("list_instance_summaries")
        rows = _newest_first(self.instances.values())
        summaries = []
        for instance in rows:
            if therapist_id and instance.therapist_id != therapist_id:
                continue
            if client_id and instance.client_id != client_id:
                continue
            if status and instance.status is not InstanceStatus(status):
                continue
            template = self.templates.get(instance.template_id)
            summaries.append(
                InstanceSummary(
                    instance_id=instance.id,
                    template_id=instance.template_id,
                    therapist_id=instance.therapist_id,
                    client_id=instance.client_id,
                    title=instance.title,
                    status=instance.status,
                    assigned_at=instance.assigned_at,
                    due_date=instance.due_date,
                    completed_at=instance.completed_at,
                    template_name=template.name if template else "Unknown template",
                    template_abbreviation=template.abbreviation if template else None,
                    score=select_latest_score(self.scores.get(instance.id, ())),
                )
            )
        return summaries
