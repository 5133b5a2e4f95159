"""Resurrection request endpoints."""

from typing import Optional

from fastapi import APIRouter

from ..errors import ResurrectionError
from ..models.restoration import (
    ApprovalDecisionRequest,
    CancelRequest,
    RestorationStatus,
    ResurrectionSubmission,
)
from ..services.resurrection_manager import resurrection_manager
from .errors import http_error

router = APIRouter(prefix="/requests", tags=["requests"])


@router.post("", status_code=201)
async def submit_request(submission: ResurrectionSubmission):
    try:
        return await resurrection_manager.submit(submission)
    except ResurrectionError as e:
        raise http_error(e)


@router.get("")
async def list_requests(
    project_id: Optional[str] = None, status: Optional[RestorationStatus] = None
):
    return resurrection_manager.list_requests(project_id=project_id, status=status)


@router.get("/{request_id}")
async def get_request(request_id: str):
    try:
        return resurrection_manager.get_request(request_id)
    except ResurrectionError as e:
        raise http_error(e)


@router.post("/{request_id}/approvals")
async def record_approval(request_id: str, body: ApprovalDecisionRequest):
    try:
        return await resurrection_manager.record_approval(
            request_id, body.role, body.decision, body.actor_id, body.comment
        )
    except ResurrectionError as e:
        raise http_error(e)


@router.post("/{request_id}/cancel")
async def cancel_request(request_id: str, body: CancelRequest):
    try:
        return await resurrection_manager.cancel(request_id, body.actor_id)
    except ResurrectionError as e:
        raise http_error(e)
