"""
Assessment Lifecycle Controller.

The only writer of instance status. Every successful mutation is followed by
a full refresh of the therapist's list; the cached list is never patched in
place.
"""

import logging
from collections.abc import Awaitable, Callable

from practiceboard.application.services.store_errors import to_assessment_error
from practiceboard.domain.entities import AssessmentInstance, InstanceStatus
from practiceboard.domain.exceptions import InstanceNotFoundError, StoreError
from practiceboard.domain.repositories import IAssessmentStore
from practiceboard.domain.services.assessment_lifecycle import plan_transition
from practiceboard.domain.utils.datetime_utils import Clock, now_utc

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[str], Awaitable[object]]


class AssessmentLifecycleController:
    """
    Applies status transitions to stored instances.

    Args:
        store: Assessment store adapter
        refresh: Called with the therapist id after every successful mutation
        clock: Source of ``started_at``/``completed_at`` timestamps
    """

    def __init__(
        self,
        store: IAssessmentStore,
        refresh: RefreshCallback,
        clock: Clock = now_utc,
    ) -> None:
        self._store = store
        self._refresh = refresh
        self._clock = clock

    async def set_status(
        self,
        instance_id: str,
        status: InstanceStatus | str,
        owner_id: str | None = None,
    ) -> AssessmentInstance:
        """
        Move an instance to ``status``.

        When ``owner_id`` is given, instances assigned by another therapist
        are reported as not found.

        Raises:
            InstanceNotFoundError: If the store does not know the instance or it is not owned
            InvalidStatusTransitionError: If the transition is not allowed
            FetchFailedError / AssessmentConfigurationError: On store failure
        """
        instance = await self.get_instance(instance_id, owner_id)
        changes = plan_transition(instance, status, self._clock())

        try:
            updated = await self._store.update_instance(instance_id, changes)
        except StoreError as e:
            error = to_assessment_error(e, user_message="Failed to update assessment status.")
            logger.error(f"Status update for instance {instance_id} failed: {e}")
            raise error from e
        if updated is None:
            raise InstanceNotFoundError(instance_id)

        logger.info(
            f"Instance {instance_id} moved {instance.status.value} -> {updated.status.value}"
        )
        await self._refresh(updated.therapist_id)
        return updated

    async def start(self, instance_id: str) -> AssessmentInstance:
        return await self.set_status(instance_id, InstanceStatus.IN_PROGRESS)

    async def complete(self, instance_id: str) -> AssessmentInstance:
        return await self.set_status(instance_id, InstanceStatus.COMPLETED)

    async def cancel(self, instance_id: str) -> AssessmentInstance:
        return await self.set_status(instance_id, InstanceStatus.CANCELLED)

    async def expire(self, instance_id: str) -> AssessmentInstance:
        return await self.set_status(instance_id, InstanceStatus.EXPIRED)

    async def delete_instance(self, instance_id: str, owner_id: str | None = None) -> None:
        """
        Therapist-initiated removal of an instance.

        Raises:
            InstanceNotFoundError: If nothing was deleted
        """
        instance = await self.get_instance(instance_id, owner_id)
        try:
            deleted = await self._store.delete_instance(instance_id)
        except StoreError as e:
            error = to_assessment_error(e, user_message="Failed to delete assessment.")
            logger.error(f"Delete of instance {instance_id} failed: {e}")
            raise error from e
        if not deleted:
            raise InstanceNotFoundError(instance_id)

        logger.info(f"Instance {instance_id} deleted")
        await self._refresh(instance.therapist_id)

    async def get_instance(
        self, instance_id: str, owner_id: str | None = None
    ) -> AssessmentInstance:
        """Stored instance, or ``InstanceNotFoundError`` if missing or not owned."""
        try:
            instance = await self._store.get_instance(instance_id)
        except StoreError as e:
            raise to_assessment_error(e) from e
        if instance is None or (owner_id is not None and instance.therapist_id != owner_id):
            raise InstanceNotFoundError(instance_id)
        return instance
