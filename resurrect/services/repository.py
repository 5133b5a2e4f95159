"""Request persistence with versioned compare-and-swap."""

from abc import ABC, abstractmethod
from typing import Optional

from ..errors import InvalidTransition, RequestConflict, VersionConflict
from ..models.restoration import ProjectResurrectionRequest, RestorationStatus


class RequestRepository(ABC):
    """Canonical store for resurrection requests.

    ``save`` commits only when the stored version still equals
    ``expected_version`` and bumps the version on success.
    """

    @abstractmethod
    def get(self, request_id: str) -> Optional[ProjectResurrectionRequest]:
        ...

    @abstractmethod
    def add(self, request: ProjectResurrectionRequest) -> ProjectResurrectionRequest:
        """Insert a new request; refuses a second open request for the same project."""
        ...

    @abstractmethod
    def save(
        self, request: ProjectResurrectionRequest, expected_version: int
    ) -> ProjectResurrectionRequest:
        ...

    @abstractmethod
    def list(
        self,
        project_id: Optional[str] = None,
        status: Optional[RestorationStatus] = None,
    ) -> list[ProjectResurrectionRequest]:
        ...

    def find_open(self, project_id: str) -> Optional[ProjectResurrectionRequest]:
        for request in self.list(project_id=project_id):
            if not request.status.is_terminal:
                return request
        return None


class InMemoryRequestRepository(RequestRepository):
    def __init__(self):
        self._requests: dict[str, ProjectResurrectionRequest] = {}

    def get(self, request_id: str) -> Optional[ProjectResurrectionRequest]:
        stored = self._requests.get(request_id)
        return stored.model_copy(deep=True) if stored else None

    def add(self, request: ProjectResurrectionRequest) -> ProjectResurrectionRequest:
        existing = self.find_open(request.project_id)
        if existing is not None:
            raise RequestConflict(
                f"Project {request.project_id} already has an open request ({existing.id})"
            )
        if request.id in self._requests:
            raise RequestConflict(f"Request {request.id} already exists")
        stored = request.model_copy(deep=True, update={"version": 1})
        self._requests[stored.id] = stored
        return stored.model_copy(deep=True)

    def save(
        self, request: ProjectResurrectionRequest, expected_version: int
    ) -> ProjectResurrectionRequest:
        current = self._requests.get(request.id)
        if current is None:
            raise VersionConflict(f"Request {request.id} does not exist")
        if current.version != expected_version:
            raise VersionConflict(
                f"Request {request.id} is at version {current.version}, expected {expected_version}"
            )
        if current.status.is_terminal:
            raise InvalidTransition(f"Request {request.id} is already {current.status.value}")
        stored = request.model_copy(deep=True, update={"version": expected_version + 1})
        self._requests[stored.id] = stored
        return stored.model_copy(deep=True)

    def list(
        self,
        project_id: Optional[str] = None,
        status: Optional[RestorationStatus] = None,
    ) -> list[ProjectResurrectionRequest]:
        results = [
            r for r in self._requests.values()
            if (project_id is None or r.project_id == project_id)
            and (status is None or r.status == status)
        ]
        results.sort(key=lambda r: r.requested_at, reverse=True)
        return [r.model_copy(deep=True) for r in results]
