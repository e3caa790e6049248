"""
Dependency providers for the assessment API.

Services are built per request around the store and clock held in the
application state. Every request reads the store directly; there is no
server-side instance cache to refresh after a mutation.
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from practiceboard.application.services import (
    AssessmentAssignmentService,
    AssessmentLifecycleController,
    InstanceCache,
    InstanceStoreAccessor,
    ScoreResolver,
    TemplateCatalogService,
)
from practiceboard.core.config import Settings
from practiceboard.domain.repositories import IAssessmentStore
from practiceboard.domain.utils.datetime_utils import Clock, now_utc


async def _no_refresh(therapist_id: str) -> None:
    return None


def get_settings_from_state(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> IAssessmentStore:
    """Assessment store created during application startup."""
    return request.app.state.assessment_store


def get_clock(request: Request) -> Clock:
    return getattr(request.app.state, "clock", now_utc)


def get_therapist_id(
    x_therapist_id: Annotated[str | None, Header(alias="X-Therapist-ID")] = None,
) -> str:
    """Therapist identity established by the session layer in front of this API."""
    if not x_therapist_id or not x_therapist_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing therapist identity",
        )
    return x_therapist_id.strip()


StoreDep = Annotated[IAssessmentStore, Depends(get_store)]
ClockDep = Annotated[Clock, Depends(get_clock)]
SettingsDep = Annotated[Settings, Depends(get_settings_from_state)]
TherapistIdDep = Annotated[str, Depends(get_therapist_id)]


def get_catalog(store: StoreDep) -> TemplateCatalogService:
    return TemplateCatalogService(store)


CatalogDep = Annotated[TemplateCatalogService, Depends(get_catalog)]


def get_accessor(store: StoreDep, clock: ClockDep, settings: SettingsDep) -> InstanceStoreAccessor:
    return InstanceStoreAccessor(
        store, InstanceCache(clock=clock), timeout=settings.STORE_TIMEOUT_SECONDS
    )


def get_assignment_service(store: StoreDep, catalog: CatalogDep) -> AssessmentAssignmentService:
    return AssessmentAssignmentService(store, catalog, _no_refresh)


def get_lifecycle_controller(store: StoreDep, clock: ClockDep) -> AssessmentLifecycleController:
    return AssessmentLifecycleController(store, _no_refresh, clock=clock)


def get_score_resolver(store: StoreDep) -> ScoreResolver:
    return ScoreResolver(store)


AccessorDep = Annotated[InstanceStoreAccessor, Depends(get_accessor)]
AssignmentServiceDep = Annotated[AssessmentAssignmentService, Depends(get_assignment_service)]
LifecycleDep = Annotated[AssessmentLifecycleController, Depends(get_lifecycle_controller)]
ScoreResolverDep = Annotated[ScoreResolver, Depends(get_score_resolver)]
