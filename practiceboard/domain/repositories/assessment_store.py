"""
Interface for the assessment store.

The store is the boundary to the authorization-gated relational database.
Implementations raise ``StoreError`` with a classified ``StoreErrorKind``
for every failed call.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from practiceboard.domain.entities import (
    AssessmentInstance,
    AssessmentScore,
    AssessmentTemplate,
    ClientSummary,
    InstanceStatus,
    InstanceSummary,
    NewAssessmentInstance,
)


class IAssessmentStore(ABC):
    """Abstract base class defining the assessment store interface."""

    @abstractmethod
    async def list_active_templates(self) -> list[AssessmentTemplate]:
        """Active templates ordered by name."""
        pass

    @abstractmethod
    async def fetch_instances_with_relations(self, therapist_id: str) -> list[AssessmentInstance]:
        """
        Single joined fetch: the therapist's instances, newest assignment first,
        each carrying its nested template and client.
        """
        pass

    @abstractmethod
    async def fetch_instances(self, therapist_id: str) -> list[AssessmentInstance]:
        """Bare instance rows for the therapist, newest assignment first."""
        pass

    @abstractmethod
    async def fetch_templates_by_ids(self, template_ids: Iterable[str]) -> list[AssessmentTemplate]:
        pass

    @abstractmethod
    async def fetch_clients_by_ids(self, client_ids: Iterable[str]) -> list[ClientSummary]:
        pass

    @abstractmethod
    async def insert_instances(
        self, drafts: list[NewAssessmentInstance]
    ) -> list[AssessmentInstance]:
        """Insert all drafts as one batch; the store assigns ids and assigned_at."""
        pass

    @abstractmethod
    async def get_instance(self, instance_id: str) -> AssessmentInstance | None:
        pass

    @abstractmethod
    async def update_instance(
        self, instance_id: str, changes: dict[str, Any]
    ) -> AssessmentInstance | None:
        """Apply column changes; returns None when no row matched."""
        pass

    @abstractmethod
    async def delete_instance(self, instance_id: str) -> bool:
        """Delete one instance; returns False when no row matched."""
        pass

    @abstractmethod
    async def fetch_latest_score(self, instance_id: str) -> AssessmentScore | None:
        """Read the latest-score projection for one instance."""
        pass

    @abstractmethod
    async def list_instance_summaries(
        self,
        therapist_id: str | None = None,
        client_id: str | None = None,
        status: InstanceStatus | None = None,
    ) -> list[InstanceSummary]:
        """Latest-score projection rows, newest assignment first."""
        pass
