"""
Assessment Assignment Service.

Fans one template assignment out into one instance per client and submits
them to the store as a single batch insert.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date, datetime

from practiceboard.application.services.template_catalog import TemplateCatalogService
from practiceboard.domain.entities import (
    AssessmentInstance,
    NewAssessmentInstance,
    ReminderFrequency,
)
from practiceboard.domain.exceptions import (
    AssessmentConfigurationError,
    AssignmentFailedError,
    InvalidAssignmentError,
    StoreError,
)
from practiceboard.domain.repositories import IAssessmentStore
from practiceboard.domain.utils.datetime_utils import parse_datetime

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[str], Awaitable[object]]


@dataclass(frozen=True)
class AssignmentOptions:
    """Optional per-assignment settings; unset values fall back to the template."""

    due_date: datetime | date | str | None = None
    instructions: str | None = None
    reminder_frequency: ReminderFrequency | str | None = None
    title_override: str | None = None
    case_id: str | None = None


class AssessmentAssignmentService:
    """
    Service for assigning templates to clients.

    Args:
        store: Assessment store adapter
        catalog: Catalog holding the currently loaded active templates
        refresh: Called with the therapist id after a successful assignment
    """

    def __init__(
        self,
        store: IAssessmentStore,
        catalog: TemplateCatalogService,
        refresh: RefreshCallback,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._refresh = refresh

    def build_drafts(
        self,
        therapist_id: str,
        template_id: str,
        client_ids: list[str],
        options: AssignmentOptions | None = None,
    ) -> list[NewAssessmentInstance]:
        """
        Build one insert payload per distinct client.

        Raises:
            TemplateNotFoundError: If the template is not a loaded active template
            InvalidAssignmentError: If no client ids were given or an option is invalid
        """
        options = options or AssignmentOptions()
        template = self._catalog.get(template_id)

        clients = list(dict.fromkeys(c for c in client_ids if c))
        if not clients:
            raise InvalidAssignmentError("Select at least one client to assign.")

        if isinstance(options.due_date, str) and not options.due_date.strip():
            due_date = None
        else:
            try:
                due_date = parse_datetime(options.due_date)
            except ValueError as e:
                raise InvalidAssignmentError(f"Invalid due date: {options.due_date}") from e

        try:
            reminder = ReminderFrequency(options.reminder_frequency or ReminderFrequency.NONE)
        except ValueError as e:
            raise InvalidAssignmentError(
                f"Invalid reminder frequency: {options.reminder_frequency}"
            ) from e

        title = options.title_override or template.name
        instructions = options.instructions or template.instructions or None

        return [
            NewAssessmentInstance(
                template_id=template.id,
                therapist_id=therapist_id,
                client_id=client_id,
                title=title,
                instructions=instructions,
                due_date=due_date,
                reminder_frequency=reminder,
                case_id=options.case_id,
            )
            for client_id in clients
        ]

    async def assign_template(
        self,
        therapist_id: str,
        template_id: str,
        client_ids: list[str],
        options: AssignmentOptions | None = None,
    ) -> list[AssessmentInstance]:
        """
        Assign ``template_id`` to every client in one batch.

        Returns:
            The created instances.

        Raises:
            TemplateNotFoundError: If the template is not a loaded active template
            InvalidAssignmentError: If the request is malformed
            AssessmentConfigurationError: If the insert hit policy recursion
            AssignmentFailedError: If the batch insert failed
        """
        drafts = self.build_drafts(therapist_id, template_id, client_ids, options)

        try:
            created = await self._store.insert_instances(drafts)
        except StoreError as e:
            logger.error(f"Batch assignment of template {template_id} failed: {e}")
            if e.is_recursion:
                raise AssessmentConfigurationError(str(e)) from e
            raise AssignmentFailedError(str(e)) from e

        logger.info(f"Assigned template {template_id} to {len(created)} client(s)")
        await self._refresh(therapist_id)
        return created
