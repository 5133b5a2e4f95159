"""Restoration request models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel, Field, field_validator
import uuid

from .common import RestorationTier, StorageTier


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


class Priority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class ScopeType(str, Enum):
    FULL = "full"
    PARTIAL = "partial"


class ApprovalRole(str, Enum):
    MANAGER = "MANAGER"
    FINANCE = "FINANCE"
    DIRECTOR = "DIRECTOR"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RestorationStatus(str, Enum):
    PENDING = "pending"
    ESTIMATING = "estimating"
    AWAITING_APPROVAL = "awaiting_approval"
    RESTORING_METADATA = "restoring_metadata"
    RESTORING_ASSETS = "restoring_assets"
    VERIFYING = "verifying"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (
            RestorationStatus.COMPLETED,
            RestorationStatus.FAILED,
            RestorationStatus.CANCELLED,
        )

    @property
    def is_executing(self) -> bool:
        return self in (
            RestorationStatus.RESTORING_METADATA,
            RestorationStatus.RESTORING_ASSETS,
            RestorationStatus.VERIFYING,
        )


class AssetRestoreStatus(str, Enum):
    PENDING = "pending"
    RESTORED = "restored"
    FAILED = "failed"


class RestorationScope(BaseModel):
    type: ScopeType = ScopeType.FULL
    asset_types: Optional[set[str]] = None
    target_tier: StorageTier = StorageTier.HOT


class RestorationOptions(BaseModel):
    tier: RestorationTier = RestorationTier.STANDARD
    staged_restore: bool = True
    generate_proxies: bool = True
    verify_integrity: bool = True
    notify_on_complete: list[str] = Field(default_factory=list)
    notify_on_milestone: bool = True
    auto_re_archive_days: int = 30


class TierBreakdownEntry(BaseModel):
    tier: StorageTier
    asset_count: int = 0
    size_bytes: int = 0
    restore_cost: float = 0.0
    restore_time_minutes: int = 0


class RestorationEstimates(BaseModel):
    total_assets: int = 0
    assets_in_glacier: int = 0
    assets_in_deep_archive: int = 0
    total_size_bytes: int = 0
    metadata_restore_minutes: int = 0
    asset_restore_minutes: int = 0
    total_restore_minutes: int = 0
    restore_cost: float = 0.0
    storage_cost_per_month: float = 0.0
    tier_breakdown: list[TierBreakdownEntry] = Field(default_factory=list)


class ApprovalRecord(BaseModel):
    role: ApprovalRole
    status: ApprovalStatus = ApprovalStatus.PENDING
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    comment: Optional[str] = None


class ValidationResult(BaseModel):
    valid: bool = True
    errors: list[str] = Field(default_factory=list)


class RestorationProgress(BaseModel):
    phase: RestorationStatus = RestorationStatus.PENDING
    percent_complete: float = 0.0
    assets_restored: int = 0
    assets_total: int = 0
    bytes_restored: int = 0
    message: str = ""


class AssetRestoreItem(BaseModel):
    asset_id: str
    storage_tier: StorageTier
    size_bytes: int = 0
    job_handle: Optional[str] = None
    status: AssetRestoreStatus = AssetRestoreStatus.PENDING
    error: Optional[str] = None


class ErrorInfo(BaseModel):
    kind: str
    message: str
    at: datetime = Field(default_factory=_now)

    @classmethod
    def from_exception(cls, exc: Exception) -> "ErrorInfo":
        return cls(kind=getattr(exc, "kind", type(exc).__name__), message=str(exc))


class StaleOverrun(BaseModel):
    """Restore running well past its estimate; flagged for an operator, status unchanged."""

    flagged_at: datetime = Field(default_factory=_now)
    elapsed_minutes: float
    estimated_minutes: int


class ProjectResurrectionRequest(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    project_id: str
    project_name: str = ""
    requested_by: str
    requested_at: datetime = Field(default_factory=_now)
    reason: str
    priority: Priority = Priority.NORMAL
    scope: RestorationScope = Field(default_factory=RestorationScope)
    options: RestorationOptions = Field(default_factory=RestorationOptions)
    estimates: Optional[RestorationEstimates] = None
    approvals: list[ApprovalRecord] = Field(default_factory=list)
    status: RestorationStatus = RestorationStatus.PENDING
    progress: RestorationProgress = Field(default_factory=RestorationProgress)
    items: list[AssetRestoreItem] = Field(default_factory=list)
    version: int = 0
    cancel_requested: bool = False
    cancelled_by: Optional[str] = None
    error: Optional[ErrorInfo] = None
    overrun: Optional[StaleOverrun] = None
    restore_started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    re_archive_at: Optional[datetime] = None

    def approval_for(self, role: ApprovalRole) -> Optional[ApprovalRecord]:
        for approval in self.approvals:
            if approval.role == role:
                return approval
        return None

    @property
    def fully_approved(self) -> bool:
        return bool(self.approvals) and all(
            a.status == ApprovalStatus.APPROVED for a in self.approvals
        )


class SubmittedOptions(RestorationOptions):
    """Options as received. An unknown speed is kept as text so the validator
    reports it together with every other problem in the submission."""

    tier: Union[RestorationTier, str] = RestorationTier.STANDARD


class ResurrectionSubmission(BaseModel):
    project_id: str
    requested_by: str
    reason: str
    priority: Priority = Priority.NORMAL
    scope: RestorationScope = Field(default_factory=RestorationScope)
    options: SubmittedOptions = Field(default_factory=SubmittedOptions)

    @field_validator("options", mode="before")
    @classmethod
    def _from_restoration_options(cls, value):
        if isinstance(value, RestorationOptions) and not isinstance(value, SubmittedOptions):
            return value.model_dump()
        return value

    def restoration_options(self) -> RestorationOptions:
        """The options as stored on a request; call only after validation."""
        return RestorationOptions(**self.options.model_dump())


class ApprovalDecisionRequest(BaseModel):
    role: ApprovalRole
    decision: ApprovalStatus
    actor_id: str
    comment: Optional[str] = None


class CancelRequest(BaseModel):
    actor_id: str


class EstimateRequest(BaseModel):
    scope: RestorationScope = Field(default_factory=RestorationScope)
    options: RestorationOptions = Field(default_factory=RestorationOptions)
