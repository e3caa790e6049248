"""
Version 1 API router.

Collects the v1 route modules under their URL prefixes.
"""

from fastapi import APIRouter

from practiceboard.presentation.api.v1.routes.assessments import router as assessments_router

api_v1_router = APIRouter()

api_v1_router.include_router(assessments_router, prefix="/assessments", tags=["Assessments"])
