"""In-process restore provider for local runs and tests."""

import uuid
from typing import Optional

from ..errors import ProviderError, ProviderTransientError
from ..models.common import RestorationTier, StorageTier
from .base import BaseRestoreProvider, RestoreJobStatus
from .registry import register_provider


class SimulatedRestoreProvider(BaseRestoreProvider):
    provider_id = "simulated"
    name = "Simulated cold storage"

    def __init__(
        self,
        polls_until_restored: int = 1,
        failing_assets: Optional[set[str]] = None,
        transient_failures: int = 0,
        metadata_error: Optional[Exception] = None,
        integrity_ok: bool = True,
    ):
        self.polls_until_restored = max(polls_until_restored, 0)
        self.failing_assets = set(failing_assets or ())
        self.transient_failures = transient_failures
        self.metadata_error = metadata_error
        self.integrity_ok = integrity_ok
        self.issued: list[tuple[str, StorageTier, RestorationTier]] = []
        self.metadata_calls: list[str] = []
        self.verified: list[str] = []
        self._jobs: dict[str, dict] = {}

    def _maybe_fail_transiently(self, operation: str) -> None:
        if self.transient_failures > 0:
            self.transient_failures -= 1
            raise ProviderTransientError(f"{operation}: provider throttled, try again")

    async def restore_metadata(self, project_id: str, asset_ids: list[str]) -> None:
        self._maybe_fail_transiently("restore_metadata")
        if self.metadata_error is not None:
            raise self.metadata_error
        self.metadata_calls.append(project_id)

    async def issue_restore(
        self, asset_id: str, storage_tier: StorageTier, speed: RestorationTier
    ) -> str:
        self._maybe_fail_transiently("issue_restore")
        handle = f"sim-{uuid.uuid4().hex[:10]}"
        self._jobs[handle] = {"asset_id": asset_id, "polls": 0}
        self.issued.append((asset_id, storage_tier, speed))
        return handle

    async def poll_status(self, job_handle: str) -> RestoreJobStatus:
        self._maybe_fail_transiently("poll_status")
        job = self._jobs.get(job_handle)
        if job is None:
            raise ProviderError(f"Unknown restore job: {job_handle}")
        job["polls"] += 1
        if job["asset_id"] in self.failing_assets:
            return RestoreJobStatus.FAILED
        if job["polls"] >= self.polls_until_restored:
            return RestoreJobStatus.RESTORED
        return RestoreJobStatus.PENDING

    async def verify_integrity(self, asset_ids: list[str]) -> bool:
        self._maybe_fail_transiently("verify_integrity")
        self.verified.extend(asset_ids)
        return self.integrity_ok


register_provider(SimulatedRestoreProvider())
