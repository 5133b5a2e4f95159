"""Approval gates derived from an estimate and a priority."""

from pydantic import BaseModel

from ..config import settings
from ..models.common import GIB
from ..models.restoration import (
    ApprovalRecord,
    ApprovalRole,
    Priority,
    RestorationEstimates,
)


class ApprovalPolicy(BaseModel):
    finance_cost_threshold: float = 50.0
    finance_size_threshold_bytes: int = 500 * GIB

    model_config = {"frozen": True}

    @classmethod
    def from_settings(cls) -> "ApprovalPolicy":
        return cls(
            finance_cost_threshold=settings.finance_cost_threshold,
            finance_size_threshold_bytes=settings.finance_size_threshold_gib * GIB,
        )


DEFAULT_POLICY = ApprovalPolicy()


def required_approvals(
    estimates: RestorationEstimates,
    priority: Priority,
    policy: ApprovalPolicy = DEFAULT_POLICY,
) -> list[ApprovalRecord]:
    """Roles that must sign off, in evaluation order, all pending.

    MANAGER always; FINANCE above the cost or size threshold; DIRECTOR for
    urgent requests regardless of cost.
    """
    roles = [ApprovalRole.MANAGER]
    if (
        estimates.restore_cost > policy.finance_cost_threshold
        or estimates.total_size_bytes > policy.finance_size_threshold_bytes
    ):
        roles.append(ApprovalRole.FINANCE)
    if priority == Priority.URGENT:
        roles.append(ApprovalRole.DIRECTOR)
    return [ApprovalRecord(role=role) for role in roles]
