from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from resurrect.models.common import GIB, ArchivedProject, AssetStorageRecord, StorageTier
from resurrect.models.restoration import ProjectResurrectionRequest
from resurrect.providers import SimulatedRestoreProvider
from resurrect.services.archive_catalog import InMemoryArchiveCatalog, uniform_assets
from resurrect.services.notifier import Notifier
from resurrect.services.repository import InMemoryRequestRepository
from resurrect.services.resurrection_manager import ResurrectionManager


class FakeClock:
    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(0)) -> None:
        self.now = start or datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current

    def advance(self, minutes: float) -> None:
        self.now = self.now + timedelta(minutes=minutes)


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, list[str]]] = []

    async def send(
        self, event: str, request: ProjectResurrectionRequest, recipients: list[str]
    ) -> None:
        self.sent.append((event, request.id, list(recipients)))

    def events(self) -> list[str]:
        return [event for event, _, _ in self.sent]


def make_catalog(
    project_id: str = "proj-a",
    assets: list[AssetStorageRecord] | None = None,
    storage_tier: StorageTier = StorageTier.GLACIER,
) -> InMemoryArchiveCatalog:
    catalog = InMemoryArchiveCatalog()
    if assets is None:
        assets = uniform_assets(project_id, 3, 3 * GIB, storage_tier)
    catalog.add_project(
        ArchivedProject(id=project_id, name=f"Project {project_id}", storage_tier=storage_tier),
        assets,
    )
    return catalog


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def provider() -> SimulatedRestoreProvider:
    return SimulatedRestoreProvider()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def repository() -> InMemoryRequestRepository:
    return InMemoryRequestRepository()


@pytest.fixture()
def manager(repository, provider, notifier, clock) -> ResurrectionManager:
    return ResurrectionManager(
        repository=repository,
        catalog=make_catalog(),
        provider=provider,
        notifier=notifier,
        poll_interval=0,
        retry_attempts=3,
        retry_base_delay=0,
        clock=clock,
    )
