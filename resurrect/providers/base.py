"""Abstract restore provider interface."""

from abc import ABC, abstractmethod
from enum import Enum

from ..models.common import RestorationTier, StorageTier


class RestoreJobStatus(str, Enum):
    PENDING = "pending"
    RESTORED = "restored"
    FAILED = "failed"


class BaseRestoreProvider(ABC):
    """Cold-storage backends implement this interface.

    Implementations raise ProviderTransientError for failures worth retrying
    and ProviderError for anything else.
    """

    provider_id: str = ""
    name: str = ""

    @abstractmethod
    async def restore_metadata(self, project_id: str, asset_ids: list[str]) -> None:
        """Bring lightweight metadata back so a project can be browsed early."""
        ...

    @abstractmethod
    async def issue_restore(
        self, asset_id: str, storage_tier: StorageTier, speed: RestorationTier
    ) -> str:
        """Start restoring one asset and return an opaque job handle."""
        ...

    @abstractmethod
    async def poll_status(self, job_handle: str) -> RestoreJobStatus:
        ...

    @abstractmethod
    async def verify_integrity(self, asset_ids: list[str]) -> bool:
        ...
