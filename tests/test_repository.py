from __future__ import annotations

import pytest

from resurrect.errors import InvalidTransition, RequestConflict, VersionConflict
from resurrect.models.restoration import ProjectResurrectionRequest, RestorationStatus
from resurrect.services.repository import InMemoryRequestRepository


def _request(project_id: str = "proj-a") -> ProjectResurrectionRequest:
    return ProjectResurrectionRequest(
        project_id=project_id, requested_by="editor@studio.com", reason="re-edit"
    )


def test_add_assigns_first_version() -> None:
    repository = InMemoryRequestRepository()

    stored = repository.add(_request())

    assert stored.version == 1
    assert repository.get(stored.id).version == 1


def test_second_open_request_for_project_is_refused() -> None:
    repository = InMemoryRequestRepository()
    repository.add(_request())

    with pytest.raises(RequestConflict):
        repository.add(_request())
    repository.add(_request(project_id="proj-b"))


def test_terminal_request_frees_the_project() -> None:
    repository = InMemoryRequestRepository()
    first = repository.add(_request())
    first.status = RestorationStatus.CANCELLED
    repository.save(first, expected_version=1)

    second = repository.add(_request())

    assert repository.find_open("proj-a").id == second.id


def test_save_is_compare_and_swap() -> None:
    repository = InMemoryRequestRepository()
    stored = repository.add(_request())
    stale = repository.get(stored.id)

    stored.reason = "updated"
    saved = repository.save(stored, expected_version=1)

    assert saved.version == 2
    stale.reason = "lost update"
    with pytest.raises(VersionConflict):
        repository.save(stale, expected_version=stale.version)
    assert repository.get(stored.id).reason == "updated"


def test_terminal_requests_are_immutable() -> None:
    repository = InMemoryRequestRepository()
    stored = repository.add(_request())
    stored.status = RestorationStatus.FAILED
    failed = repository.save(stored, expected_version=1)

    failed.reason = "rewrite history"
    with pytest.raises(InvalidTransition):
        repository.save(failed, expected_version=failed.version)


def test_returned_copies_are_detached() -> None:
    repository = InMemoryRequestRepository()
    stored = repository.add(_request())

    stored.reason = "mutated locally"

    assert repository.get(stored.id).reason == "re-edit"
