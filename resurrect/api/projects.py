"""Archived project endpoints."""

from fastapi import APIRouter

from ..errors import ResurrectionError
from ..models.restoration import EstimateRequest
from ..restoration.formatting import summarize_estimates
from ..services.archive_catalog import monthly_cost
from ..services.resurrection_manager import resurrection_manager
from .errors import http_error

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("")
async def list_projects():
    projects = await resurrection_manager.catalog.list_projects()
    return [
        {
            **project.model_dump(mode="json"),
            "monthly_cost": monthly_cost(project, resurrection_manager.pricing),
        }
        for project in projects
    ]


@router.get("/{project_id}")
async def get_project(project_id: str):
    try:
        return await resurrection_manager.catalog.get_project(project_id)
    except ResurrectionError as e:
        raise http_error(e)


@router.post("/{project_id}/estimate")
async def estimate_project(project_id: str, body: EstimateRequest):
    """Preview what restoring a project would cost before submitting a request."""
    try:
        estimates = await resurrection_manager.preview_estimate(
            project_id, body.scope, body.options
        )
    except ResurrectionError as e:
        raise http_error(e)
    return {"estimates": estimates, "summary": summarize_estimates(estimates)}
