"""
Score/Interpretation Resolver.

Pure reads over the externally maintained latest-score projection. No score
is computed here.
"""

import logging

from practiceboard.application.services.store_errors import to_assessment_error
from practiceboard.domain.entities import AssessmentScore, InstanceStatus, InstanceSummary
from practiceboard.domain.exceptions import StoreError
from practiceboard.domain.repositories import IAssessmentStore

logger = logging.getLogger(__name__)


class ScoreResolver:
    def __init__(self, store: IAssessmentStore) -> None:
        self._store = store

    async def latest_score_for(self, instance_id: str) -> AssessmentScore | None:
        """Most recently calculated score for the instance, or None."""
        try:
            return await self._store.fetch_latest_score(instance_id)
        except StoreError as e:
            logger.error(f"Latest score lookup for instance {instance_id} failed: {e}")
            raise to_assessment_error(e, user_message="Failed to load results.") from e

    async def list_results(
        self,
        therapist_id: str | None = None,
        client_id: str | None = None,
        status: InstanceStatus | str | None = None,
    ) -> list[InstanceSummary]:
        """Instance summaries with their latest score, newest assignment first."""
        status = InstanceStatus(status) if status else None
        try:
            return await self._store.list_instance_summaries(
                therapist_id=therapist_id, client_id=client_id, status=status
            )
        except StoreError as e:
            logger.error(f"Result listing failed: {e}")
            raise to_assessment_error(e, user_message="Failed to load results.") from e
