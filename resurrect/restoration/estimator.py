"""Restoration time and cost estimation."""

import math
from collections import defaultdict
from typing import Iterable

from ..models.common import GIB, AssetStorageRecord, StorageTier
from ..models.restoration import (
    RestorationEstimates,
    RestorationOptions,
    RestorationScope,
    ScopeType,
    TierBreakdownEntry,
)
from .pricing import DEFAULT_PRICING, TierPricing

METADATA_MINUTES_PER_BATCH = 5
METADATA_BATCH_SIZE = 1000


def select_assets(
    assets: Iterable[AssetStorageRecord], scope: RestorationScope
) -> list[AssetStorageRecord]:
    """Apply the restoration scope to a project's assets."""
    if scope.type == ScopeType.FULL or not scope.asset_types:
        return list(assets)
    wanted = {t.lower() for t in scope.asset_types}
    return [a for a in assets if (a.asset_type or "").lower() in wanted]


def metadata_restore_minutes(total_assets: int) -> int:
    if total_assets <= 0:
        return 0
    return math.ceil(total_assets / METADATA_BATCH_SIZE) * METADATA_MINUTES_PER_BATCH


def estimate_restoration(
    assets: Iterable[AssetStorageRecord],
    options: RestorationOptions,
    target_tier: StorageTier = StorageTier.HOT,
    pricing: TierPricing = DEFAULT_PRICING,
) -> RestorationEstimates:
    """Estimate cost and duration of restoring ``assets`` at ``options.tier`` speed.

    Tiers are restored concurrently by the provider, so the asset phase takes
    as long as the slowest tier present. Raises
    UnsupportedRestorationCombination if any tier present cannot be restored
    at the requested speed.
    """
    by_tier: dict[StorageTier, list[AssetStorageRecord]] = defaultdict(list)
    total_assets = 0
    total_size = 0
    for asset in assets:
        by_tier[asset.storage_tier].append(asset)
        total_assets += 1
        total_size += asset.size_bytes

    breakdown = []
    for tier in StorageTier:
        tier_assets = by_tier.get(tier)
        if not tier_assets or not tier.requires_restore:
            continue
        size = sum(a.size_bytes for a in tier_assets)
        breakdown.append(
            TierBreakdownEntry(
                tier=tier,
                asset_count=len(tier_assets),
                size_bytes=size,
                restore_cost=(size / GIB) * pricing.restore_cost(tier, options.tier),
                restore_time_minutes=pricing.restore_time(tier, options.tier),
            )
        )

    metadata_minutes = metadata_restore_minutes(total_assets)
    asset_minutes = max((e.restore_time_minutes for e in breakdown), default=0)

    return RestorationEstimates(
        total_assets=total_assets,
        assets_in_glacier=len(by_tier.get(StorageTier.GLACIER, [])),
        assets_in_deep_archive=len(by_tier.get(StorageTier.DEEP_ARCHIVE, [])),
        total_size_bytes=total_size,
        metadata_restore_minutes=metadata_minutes,
        asset_restore_minutes=asset_minutes,
        total_restore_minutes=metadata_minutes + asset_minutes,
        restore_cost=sum(e.restore_cost for e in breakdown),
        storage_cost_per_month=(total_size / GIB) * pricing.monthly_cost(target_tier),
        tier_breakdown=breakdown,
    )
