"""Archived projects and the storage records of their assets."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Iterable

from ..errors import ProjectNotFound
from ..models.common import GIB, ArchivedProject, AssetStorageRecord, StorageTier
from ..restoration.pricing import DEFAULT_PRICING, TierPricing

ASSET_TYPES = ("video", "audio", "image", "document")


class ArchiveCatalog(ABC):
    @abstractmethod
    async def list_projects(self) -> list[ArchivedProject]:
        ...

    @abstractmethod
    async def get_project(self, project_id: str) -> ArchivedProject:
        """Raises ProjectNotFound for unknown ids."""
        ...

    @abstractmethod
    async def list_assets(self, project_id: str) -> list[AssetStorageRecord]:
        ...


class InMemoryArchiveCatalog(ArchiveCatalog):
    def __init__(self):
        self._projects: dict[str, ArchivedProject] = {}
        self._assets: dict[str, list[AssetStorageRecord]] = {}

    def add_project(
        self, project: ArchivedProject, assets: Iterable[AssetStorageRecord]
    ) -> ArchivedProject:
        records = list(assets)
        project = project.model_copy(update={
            "asset_count": len(records),
            "total_size_bytes": sum(a.size_bytes for a in records),
        })
        self._projects[project.id] = project
        self._assets[project.id] = records
        return project

    async def list_projects(self) -> list[ArchivedProject]:
        return sorted(self._projects.values(), key=lambda p: p.archived_at, reverse=True)

    async def get_project(self, project_id: str) -> ArchivedProject:
        project = self._projects.get(project_id)
        if project is None:
            raise ProjectNotFound(f"Archived project not found: {project_id}")
        return project

    async def list_assets(self, project_id: str) -> list[AssetStorageRecord]:
        await self.get_project(project_id)
        return list(self._assets.get(project_id, []))


def monthly_cost(project: ArchivedProject, pricing: TierPricing = DEFAULT_PRICING) -> float:
    """What keeping the project in its current tier costs per month."""
    return (project.total_size_bytes / GIB) * pricing.monthly_cost(project.storage_tier)


def uniform_assets(
    project_id: str, count: int, total_size_bytes: int, storage_tier: StorageTier
) -> list[AssetStorageRecord]:
    """Evenly sized assets cycling through the common media types."""
    if count <= 0:
        return []
    size, remainder = divmod(total_size_bytes, count)
    return [
        AssetStorageRecord(
            asset_id=f"{project_id}-asset-{i}",
            storage_tier=storage_tier,
            size_bytes=size + (1 if i < remainder else 0),
            asset_type=ASSET_TYPES[i % len(ASSET_TYPES)],
        )
        for i in range(count)
    ]


def demo_catalog() -> InMemoryArchiveCatalog:
    catalog = InMemoryArchiveCatalog()
    seeds = [
        ("proj-1", "Summer Campaign 2023", "Q3 marketing campaign with beach scenes",
         datetime(2023, 12, 15, tzinfo=timezone.utc), "john.doe@studio.com",
         2450, 850 * GIB, StorageTier.GLACIER),
        ("proj-2", "Product Launch Video", "Tech product launch video with VFX",
         datetime(2023, 9, 1, tzinfo=timezone.utc), "jane.smith@studio.com",
         1280, int(2.1 * 1024 * GIB), StorageTier.DEEP_ARCHIVE),
        ("proj-3", "Documentary Series S1", "6-part documentary series",
         datetime(2024, 3, 1, tzinfo=timezone.utc), "producer@studio.com",
         8500, int(5.5 * 1024 * GIB), StorageTier.COLD),
    ]
    for project_id, name, description, archived_at, archived_by, count, size, tier in seeds:
        catalog.add_project(
            ArchivedProject(
                id=project_id,
                name=name,
                description=description,
                archived_at=archived_at,
                archived_by=archived_by,
                storage_tier=tier,
            ),
            uniform_assets(project_id, count, size, tier),
        )
    return catalog
