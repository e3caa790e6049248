"""
Assessment Workspace.

Session-level facade used by the therapist dashboard: it wires the catalog,
accessor, assignment, lifecycle, resolver and change bridge around one
instance cache and exposes the state a screen renders (templates,
instances, loading, error).

Listing failures are recorded on the workspace so the screen can still
render; mutation failures are raised to the caller.
"""

import asyncio
import logging
from datetime import datetime

from practiceboard.application.services.assignment_service import (
    AssessmentAssignmentService,
    AssignmentOptions,
)
from practiceboard.application.services.change_bridge import ChangeNotificationBridge
from practiceboard.application.services.instance_accessor import InstanceStoreAccessor
from practiceboard.application.services.instance_cache import InstanceCache
from practiceboard.application.services.lifecycle_controller import (
    AssessmentLifecycleController,
)
from practiceboard.application.services.score_resolver import ScoreResolver
from practiceboard.application.services.template_catalog import TemplateCatalogService
from practiceboard.domain.entities import (
    AssessmentCategory,
    AssessmentInstance,
    AssessmentTemplate,
    InstanceStatus,
)
from practiceboard.domain.exceptions import AssessmentError, CatalogUnavailableError
from practiceboard.domain.repositories import IAssessmentStore, IChangeFeed
from practiceboard.domain.utils.datetime_utils import Clock, now_utc

logger = logging.getLogger(__name__)


class AssessmentWorkspace:
    """
    Args:
        store: Assessment store adapter
        feed: Push channel for instance changes
        clock: Injected clock for timestamps and derived expiry
        timeout: Optional per-call store timeout in seconds
    """

    def __init__(
        self,
        store: IAssessmentStore,
        feed: IChangeFeed,
        clock: Clock = now_utc,
        timeout: float | None = None,
    ) -> None:
        self._clock = clock
        self._therapist_id: str | None = None
        self._template_error: CatalogUnavailableError | None = None
        self._templates_loading = False

        self.cache = InstanceCache(clock=clock)
        self.catalog = TemplateCatalogService(store)
        self.accessor = InstanceStoreAccessor(store, self.cache, timeout=timeout)
        self.assignments = AssessmentAssignmentService(store, self.catalog, self._refresh_instances)
        self.lifecycle = AssessmentLifecycleController(store, self._refresh_instances, clock=clock)
        self.results = ScoreResolver(store)
        self.bridge = ChangeNotificationBridge(feed, self._refresh_instances)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def therapist_id(self) -> str | None:
        return self._therapist_id

    @property
    def templates(self) -> list[AssessmentTemplate]:
        return self.catalog.templates

    @property
    def instances(self) -> list[AssessmentInstance]:
        return list(self.cache.instances)

    @property
    def loading(self) -> bool:
        return self._templates_loading or self.cache.loading

    @property
    def error(self) -> AssessmentError | None:
        return self.cache.error or self._template_error

    # ------------------------------------------------------------------
    # Mounting
    # ------------------------------------------------------------------

    async def mount(self, therapist_id: str) -> None:
        """Subscribe to the therapist's changes and load templates and instances."""
        if therapist_id != self._therapist_id:
            logger.info("Mounting assessment workspace")
            self._therapist_id = therapist_id
        await self.bridge.mount(therapist_id)
        await self.refetch()

    async def unmount(self) -> None:
        await self.bridge.unmount()
        self._therapist_id = None
        self._template_error = None
        self.cache.reset()
        self.catalog.clear()

    async def refetch(self) -> None:
        """Reload templates and instances concurrently."""
        therapist_id = self._require_therapist()
        await asyncio.gather(
            self.refresh_templates(),
            self._refresh_instances(therapist_id),
        )

    async def refresh_templates(self) -> list[AssessmentTemplate]:
        self._templates_loading = True
        try:
            listing = await self.catalog.list_active_templates()
            self._template_error = listing.error
        except CatalogUnavailableError as e:
            self._template_error = e
        finally:
            self._templates_loading = False
        return self.catalog.templates

    async def _refresh_instances(self, therapist_id: str) -> list[AssessmentInstance]:
        if therapist_id != self._therapist_id:
            logger.debug("Skipping refresh for a therapist that is not mounted")
            return []
        return await self.accessor.refresh(therapist_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def assign_assessment(
        self,
        template_id: str,
        client_ids: list[str],
        options: AssignmentOptions | None = None,
    ) -> list[AssessmentInstance]:
        therapist_id = self._require_therapist()
        return await self.assignments.assign_template(therapist_id, template_id, client_ids, options)

    async def update_instance_status(
        self, instance_id: str, status: InstanceStatus | str
    ) -> AssessmentInstance:
        therapist_id = self._require_therapist()
        return await self.lifecycle.set_status(instance_id, status, owner_id=therapist_id)

    async def delete_instance(self, instance_id: str) -> None:
        therapist_id = self._require_therapist()
        await self.lifecycle.delete_instance(instance_id, owner_id=therapist_id)

    # ------------------------------------------------------------------
    # Views over the cached list
    # ------------------------------------------------------------------

    def instances_by_client(self, client_id: str) -> list[AssessmentInstance]:
        return [i for i in self.cache.instances if i.client_id == client_id]

    def instances_by_status(self, status: InstanceStatus | str) -> list[AssessmentInstance]:
        status = InstanceStatus(status)
        return [i for i in self.cache.instances if i.status is status]

    def overdue_instances(self, now: datetime | None = None) -> list[AssessmentInstance]:
        now = now or self._clock()
        return [i for i in self.cache.instances if i.is_overdue(now)]

    def templates_by_category(self, category: AssessmentCategory | str) -> list[AssessmentTemplate]:
        return self.catalog.by_category(category)

    def _require_therapist(self) -> str:
        if self._therapist_id is None:
            raise RuntimeError("Assessment workspace is not mounted for a therapist")
        return self._therapist_id
