"""Restoration error taxonomy."""

from typing import Optional


class ResurrectionError(Exception):
    """Base class for restoration-domain errors."""

    @property
    def kind(self) -> str:
        return type(self).__name__


class ValidationError(ResurrectionError):
    """Raised when a restoration request fails validation. Carries every violation."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid restoration request")


class UnsupportedRestorationCombination(ResurrectionError):
    """Raised when a storage tier cannot be restored at the requested speed."""

    def __init__(self, storage_tier, speed):
        self.storage_tier = storage_tier
        self.speed = speed
        super().__init__(
            f"{_value(speed)} restoration is not available for {_value(storage_tier)}"
        )


class ApprovalRejected(ResurrectionError):
    """Recorded when a required approver rejects a request."""

    def __init__(self, role, actor_id: str, reason: Optional[str] = None):
        self.role = role
        self.actor_id = actor_id
        self.reason = reason
        message = f"{_value(role)} approval rejected by {actor_id}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ProviderTransientError(ResurrectionError):
    """Raised by a restore provider for failures worth retrying."""


class ProviderError(ResurrectionError):
    """Raised by a restore provider for unrecoverable failures."""


class IntegrityCheckFailed(ProviderError):
    """Raised when restored assets fail post-restore verification."""


class InvalidTransition(ResurrectionError):
    """Raised when an action is not permitted in the request's current state."""


class VersionConflict(ResurrectionError):
    """Raised when a request changed between read and commit."""


class RequestConflict(ResurrectionError):
    """Raised when a project already has an open restoration request."""


class RequestNotFound(ResurrectionError):
    pass


class ProjectNotFound(ResurrectionError):
    pass


class UnknownProvider(ResurrectionError):
    """Raised when no restore provider is registered under the configured id."""

    def __init__(self, provider_id: str, available: list[str]):
        self.provider_id = provider_id
        self.available = list(available)
        super().__init__(
            f"Unknown restore provider '{provider_id}'; available: "
            + (", ".join(self.available) or "none")
        )


def _value(item) -> str:
    return getattr(item, "value", str(item))
