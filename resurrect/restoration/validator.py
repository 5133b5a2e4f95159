"""Structural and semantic checks on restoration requests."""

from typing import Iterable, Optional, Union

from ..models.common import RestorationTier, StorageTier
from ..models.restoration import (
    ProjectResurrectionRequest,
    ResurrectionSubmission,
    ScopeType,
    ValidationResult,
)
from .pricing import DEFAULT_PRICING, TierPricing


def validate_request(
    request: Union[ProjectResurrectionRequest, ResurrectionSubmission],
    storage_tiers: Iterable[StorageTier] = (),
    pricing: TierPricing = DEFAULT_PRICING,
) -> ValidationResult:
    """Collect every problem with ``request``; never raises.

    ``storage_tiers`` are the tiers the project's assets currently live in,
    used to check the requested speed is available for each of them.
    """
    errors: list[str] = []

    if not (request.reason or "").strip():
        errors.append("reason is required")

    scope = request.scope
    if scope.type == ScopeType.PARTIAL and not scope.asset_types:
        errors.append("partial scope requires at least one asset type")

    options = request.options
    days = options.auto_re_archive_days
    if not isinstance(days, int) or days < 0:
        errors.append("auto_re_archive_days must be a non-negative integer")

    speed = _restoration_tier(options.tier)
    if speed is None:
        errors.append(f"unrecognized restoration tier: {_value(options.tier)}")
    else:
        for tier in sorted(set(storage_tiers), key=list(StorageTier).index):
            if pricing.supports(tier, speed):
                continue
            message = f"{speed.value} restoration is not available for {tier.value}"
            fallback = pricing.cheapest_speed(tier)
            if fallback is not None:
                message += f" (cheapest supported speed: {fallback.value})"
            errors.append(message)

    return ValidationResult(valid=not errors, errors=errors)


def _restoration_tier(value) -> Optional[RestorationTier]:
    try:
        return RestorationTier(value)
    except ValueError:
        return None


def _value(item) -> str:
    return getattr(item, "value", item)
