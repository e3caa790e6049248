"""Assessment API routes.

Template catalog, instance listing and lifecycle, bulk assignment and the
latest-score results view for the calling therapist. Assessment errors are
rendered by the registered exception handlers.
"""

import logging

from fastapi import APIRouter, Query, status

from practiceboard.application.services import AssignmentOptions
from practiceboard.domain.entities import AssessmentCategory, InstanceStatus
from practiceboard.presentation.api.v1.dependencies import (
    AccessorDep,
    AssignmentServiceDep,
    CatalogDep,
    ClockDep,
    LifecycleDep,
    ScoreResolverDep,
    TherapistIdDep,
)
from practiceboard.presentation.api.v1.schemas.assessment import (
    AssignmentRequest,
    ErrorRead,
    InstanceRead,
    ResultRead,
    ScoreRead,
    StatusUpdateRequest,
    TemplateListResponse,
    TemplateRead,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/templates",
    response_model=TemplateListResponse,
    name="assessments:list_templates",
    summary="List active assessment templates",
)
async def list_templates(
    catalog: CatalogDep,
    therapist_id: TherapistIdDep,
    category: AssessmentCategory | None = Query(None),
) -> TemplateListResponse:
    """
    Active templates ordered by name.

    A degraded catalog is returned as an empty list with ``error`` set rather
    than as an error response.
    """
    listing = await catalog.list_active_templates()
    templates = catalog.by_category(category) if category else listing.templates
    return TemplateListResponse(
        templates=[TemplateRead.model_validate(t) for t in templates],
        error=ErrorRead.from_error(listing.error) if listing.error else None,
    )


@router.get(
    "/instances",
    response_model=list[InstanceRead],
    name="assessments:list_instances",
    summary="List the therapist's assessment instances",
)
async def list_instances(
    accessor: AccessorDep,
    therapist_id: TherapistIdDep,
    clock: ClockDep,
    client_id: str | None = Query(None),
    instance_status: InstanceStatus | None = Query(None, alias="status"),
) -> list[InstanceRead]:
    instances = await accessor.list_instances_for_therapist(therapist_id)
    if client_id:
        instances = [i for i in instances if i.client_id == client_id]
    if instance_status:
        instances = [i for i in instances if i.status is instance_status]
    now = clock()
    return [InstanceRead.from_entity(i, now) for i in instances]


@router.post(
    "/instances",
    response_model=list[InstanceRead],
    status_code=status.HTTP_201_CREATED,
    name="assessments:assign",
    summary="Assign a template to one or more clients",
)
async def assign_assessment(
    payload: AssignmentRequest,
    catalog: CatalogDep,
    assignments: AssignmentServiceDep,
    therapist_id: TherapistIdDep,
    clock: ClockDep,
) -> list[InstanceRead]:
    """Create one instance per distinct client in a single batch."""
    listing = await catalog.list_active_templates()
    if listing.error:
        raise listing.error

    created = await assignments.assign_template(
        therapist_id,
        payload.template_id,
        payload.client_ids,
        AssignmentOptions(
            due_date=payload.due_date,
            instructions=payload.instructions,
            reminder_frequency=payload.reminder_frequency,
            title_override=payload.title_override,
            case_id=payload.case_id,
        ),
    )
    template = catalog.find(payload.template_id)
    now = clock()
    return [InstanceRead.from_entity(i.with_relations(template, None), now) for i in created]


@router.patch(
    "/instances/{instance_id}/status",
    response_model=InstanceRead,
    name="assessments:update_status",
    summary="Move an instance to a new lifecycle status",
)
async def update_instance_status(
    instance_id: str,
    payload: StatusUpdateRequest,
    lifecycle: LifecycleDep,
    therapist_id: TherapistIdDep,
    clock: ClockDep,
) -> InstanceRead:
    updated = await lifecycle.set_status(instance_id, payload.status, owner_id=therapist_id)
    return InstanceRead.from_entity(updated, clock())


@router.delete(
    "/instances/{instance_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    name="assessments:delete_instance",
    summary="Delete an assessment instance",
)
async def delete_instance(
    instance_id: str,
    lifecycle: LifecycleDep,
    therapist_id: TherapistIdDep,
) -> None:
    await lifecycle.delete_instance(instance_id, owner_id=therapist_id)


@router.get(
    "/instances/{instance_id}/score",
    response_model=ScoreRead | None,
    name="assessments:latest_score",
    summary="Latest calculated score for an instance",
)
async def latest_score(
    instance_id: str,
    lifecycle: LifecycleDep,
    results: ScoreResolverDep,
    therapist_id: TherapistIdDep,
) -> ScoreRead | None:
    """Returns null until the scoring process has produced a result."""
    await lifecycle.get_instance(instance_id, owner_id=therapist_id)
    score = await results.latest_score_for(instance_id)
    return ScoreRead.model_validate(score) if score else None


@router.get(
    "/results",
    response_model=list[ResultRead],
    name="assessments:list_results",
    summary="Instances with their latest score",
)
async def list_results(
    results: ScoreResolverDep,
    therapist_id: TherapistIdDep,
    client_id: str | None = Query(None),
    instance_status: InstanceStatus | None = Query(None, alias="status"),
) -> list[ResultRead]:
    summaries = await results.list_results(
        therapist_id=therapist_id, client_id=client_id, status=instance_status
    )
    return [ResultRead.from_summary(s) for s in summaries]
