"""Data models."""

from .common import ArchivedProject, AssetStorageRecord, RestorationTier, StorageTier
from .restoration import (
    ApprovalRecord,
    ApprovalRole,
    ApprovalStatus,
    Priority,
    ProjectResurrectionRequest,
    RestorationEstimates,
    RestorationOptions,
    RestorationScope,
    RestorationStatus,
    ResurrectionSubmission,
    SubmittedOptions,
    TierBreakdownEntry,
    ValidationResult,
)

__all__ = [
    "ArchivedProject",
    "AssetStorageRecord",
    "RestorationTier",
    "StorageTier",
    "ApprovalRecord",
    "ApprovalRole",
    "ApprovalStatus",
    "Priority",
    "ProjectResurrectionRequest",
    "RestorationEstimates",
    "RestorationOptions",
    "RestorationScope",
    "RestorationStatus",
    "ResurrectionSubmission",
    "SubmittedOptions",
    "TierBreakdownEntry",
    "ValidationResult",
]
