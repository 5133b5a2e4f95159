"""Restore providers."""

from .base import BaseRestoreProvider, RestoreJobStatus
from .registry import get_provider, get_all_providers, register_provider
from .simulated import SimulatedRestoreProvider

__all__ = [
    "BaseRestoreProvider",
    "RestoreJobStatus",
    "get_provider",
    "get_all_providers",
    "register_provider",
    "SimulatedRestoreProvider",
]
