"""Allowed lifecycle transitions for a resurrection request."""

from ..models.restoration import RestorationStatus

S = RestorationStatus

ALLOWED_TRANSITIONS: dict[RestorationStatus, set[RestorationStatus]] = {
    S.PENDING: {S.ESTIMATING, S.CANCELLED},
    S.ESTIMATING: {S.AWAITING_APPROVAL, S.FAILED, S.CANCELLED},
    S.AWAITING_APPROVAL: {S.RESTORING_METADATA, S.RESTORING_ASSETS, S.CANCELLED},
    S.RESTORING_METADATA: {S.RESTORING_ASSETS, S.FAILED, S.CANCELLED},
    S.RESTORING_ASSETS: {S.VERIFYING, S.COMPLETED, S.FAILED, S.CANCELLED},
    S.VERIFYING: {S.COMPLETED, S.FAILED, S.CANCELLED},
    S.COMPLETED: set(),
    S.FAILED: set(),
    S.CANCELLED: set(),
}


def can_transition(source: RestorationStatus, target: RestorationStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(source, set())
