"""
Instance Store Accessor.

Fetches a therapist's assessment instances with their template and client.
The single joined query is tried first. Some backend access-policy setups
fail while evaluating nested relations, so on any failure the accessor
degrades to a bare instance fetch followed by two concurrent batched
lookups, composed in memory.
"""

import asyncio
import logging
from collections.abc import Awaitable, Iterable
from typing import TypeVar

from practiceboard.application.services.instance_cache import InstanceCache
from practiceboard.application.services.store_errors import to_assessment_error
from practiceboard.domain.entities import (
    AssessmentInstance,
    AssessmentTemplate,
    ClientSummary,
)
from practiceboard.domain.exceptions import AssessmentError, StoreError
from practiceboard.domain.repositories import IAssessmentStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _distinct(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def compose_instances(
    rows: list[AssessmentInstance],
    templates_by_id: dict[str, AssessmentTemplate],
    clients_by_id: dict[str, ClientSummary],
) -> list[AssessmentInstance]:
    """Attach resolved template/client to each row; unresolved ids become None."""
    return [
        row.with_relations(
            templates_by_id.get(row.template_id),
            clients_by_id.get(row.client_id),
        )
        for row in rows
    ]


class InstanceStoreAccessor:
    """
    Reads a therapist's instances and publishes them to the instance cache.

    Args:
        store: Assessment store adapter
        cache: Session cache that receives every refresh
        timeout: Optional per-call timeout in seconds; None relies on the transport
    """

    def __init__(
        self,
        store: IAssessmentStore,
        cache: InstanceCache,
        timeout: float | None = None,
    ) -> None:
        self._store = store
        self._cache = cache
        self._timeout = timeout

    @property
    def cache(self) -> InstanceCache:
        return self._cache

    async def list_instances_for_therapist(self, therapist_id: str) -> list[AssessmentInstance]:
        """
        Return the therapist's instances annotated with template and client.

        Raises:
            AssessmentConfigurationError: If the bare fetch hits policy recursion.
            FetchFailedError: If the bare fetch fails for any other reason.
        """
        try:
            return await self._call(self._store.fetch_instances_with_relations(therapist_id))
        except Exception as e:
            logger.warning(f"Joined instance fetch failed, falling back to multi-fetch: {e}")

        try:
            rows = await self._call(self._store.fetch_instances(therapist_id))
        except (StoreError, TimeoutError) as e:
            error = to_assessment_error(e)
            logger.error(f"Instance fetch failed ({error.kind.value}): {e}")
            raise error from e

        if not rows:
            return []

        templates_by_id, clients_by_id = await asyncio.gather(
            self._templates_by_id(_distinct(r.template_id for r in rows)),
            self._clients_by_id(_distinct(r.client_id for r in rows)),
        )
        return compose_instances(rows, templates_by_id, clients_by_id)

    async def refresh(self, therapist_id: str) -> list[AssessmentInstance]:
        """
        Re-run the listing and fully replace the cached list.

        Failures are recorded on the cache together with an empty list.
        A result that arrives after the cache moved to another therapist is
        discarded.
        """
        token = self._cache.begin_fetch(therapist_id)
        try:
            instances = await self.list_instances_for_therapist(therapist_id)
        except AssessmentError as e:
            self._cache.commit(token, [], error=e)
            return []
        finally:
            self._cache.abandon(token)

        if not self._cache.commit(token, instances):
            logger.debug("Instance refresh superseded by a newer fetch")
        return instances

    async def _templates_by_id(self, template_ids: list[str]) -> dict[str, AssessmentTemplate]:
        if not template_ids:
            return {}
        try:
            templates = await self._call(self._store.fetch_templates_by_ids(template_ids))
        except (StoreError, TimeoutError) as e:
            logger.warning(f"Template lookup failed, instances will show unknown template: {e}")
            return {}
        return {t.id: t for t in templates}

    async def _clients_by_id(self, client_ids: list[str]) -> dict[str, ClientSummary]:
        if not client_ids:
            return {}
        try:
            clients = await self._call(self._store.fetch_clients_by_ids(client_ids))
        except (StoreError, TimeoutError) as e:
            logger.warning(f"Client lookup failed, instances will show unknown client: {e}")
            return {}
        return {c.id: c for c in clients}

    async def _call(self, awaitable: Awaitable[T]) -> T:
        if self._timeout is None:
            return await awaitable
        async with asyncio.timeout(self._timeout):
            return await awaitable
