"""Core shared models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

GIB = 1024 ** 3


class StorageTier(str, Enum):
    HOT = "HOT"
    WARM = "WARM"
    COLD = "COLD"
    GLACIER = "GLACIER"
    DEEP_ARCHIVE = "DEEP_ARCHIVE"

    @property
    def requires_restore(self) -> bool:
        return self not in (StorageTier.HOT, StorageTier.WARM)


class RestorationTier(str, Enum):
    EXPEDITED = "expedited"
    STANDARD = "standard"
    BULK = "bulk"


class AssetStorageRecord(BaseModel):
    asset_id: str
    storage_tier: StorageTier
    size_bytes: int = 0
    asset_type: Optional[str] = None  # e.g. "video", "audio", "image"

    model_config = {"frozen": True}


class ArchivedProject(BaseModel):
    id: str
    name: str
    description: str = ""
    archived_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))
    archived_by: str = ""
    asset_count: int = 0
    total_size_bytes: int = 0
    storage_tier: StorageTier = StorageTier.GLACIER
    last_accessed: Optional[datetime] = None
