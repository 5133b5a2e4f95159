"""Restore provider registration."""

from ..errors import UnknownProvider
from .base import BaseRestoreProvider

_registry: dict[str, BaseRestoreProvider] = {}


def register_provider(provider: BaseRestoreProvider) -> None:
    _registry[provider.provider_id] = provider


def get_provider(provider_id: str) -> BaseRestoreProvider:
    """Look up a registered provider; raises UnknownProvider naming the known ids."""
    provider = _registry.get(provider_id)
    if provider is None:
        raise UnknownProvider(provider_id, sorted(_registry))
    return provider


def get_all_providers() -> dict[str, BaseRestoreProvider]:
    return dict(_registry)
