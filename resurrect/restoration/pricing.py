"""Per-tier restore cost, restore time and monthly storage cost tables."""

from typing import Optional
from pydantic import BaseModel

from ..errors import UnsupportedRestorationCombination
from ..models.common import RestorationTier, StorageTier

_SPEED_ORDER = (RestorationTier.BULK, RestorationTier.STANDARD, RestorationTier.EXPEDITED)


class TierPricing(BaseModel):
    """Immutable pricing configuration.

    ``restore_cost_per_gb`` and ``restore_time_minutes`` are keyed by storage
    tier then restoration speed. A missing speed means the pair is unsupported.
    Tiers that never need a restore (HOT, WARM) have no entries at all.
    """

    restore_cost_per_gb: dict[StorageTier, dict[RestorationTier, float]]
    restore_time_minutes: dict[StorageTier, dict[RestorationTier, int]]
    monthly_cost_per_gb: dict[StorageTier, float]

    model_config = {"frozen": True}

    def supports(self, storage_tier: StorageTier, speed: RestorationTier) -> bool:
        if not storage_tier.requires_restore:
            return True
        return (
            speed in self.restore_cost_per_gb.get(storage_tier, {})
            and speed in self.restore_time_minutes.get(storage_tier, {})
        )

    def restore_cost(self, storage_tier: StorageTier, speed: RestorationTier) -> float:
        """USD per GB to restore from ``storage_tier`` at ``speed``."""
        if not storage_tier.requires_restore:
            return 0.0
        if not self.supports(storage_tier, speed):
            raise UnsupportedRestorationCombination(storage_tier, speed)
        return self.restore_cost_per_gb[storage_tier][speed]

    def restore_time(self, storage_tier: StorageTier, speed: RestorationTier) -> int:
        """Fixed restore window in minutes, independent of size."""
        if not storage_tier.requires_restore:
            return 0
        if not self.supports(storage_tier, speed):
            raise UnsupportedRestorationCombination(storage_tier, speed)
        return self.restore_time_minutes[storage_tier][speed]

    def monthly_cost(self, storage_tier: StorageTier) -> float:
        return self.monthly_cost_per_gb.get(storage_tier, 0.0)

    def cheapest_speed(self, storage_tier: StorageTier) -> Optional[RestorationTier]:
        supported = [s for s in _SPEED_ORDER if self.supports(storage_tier, s)]
        if not supported:
            return None
        return min(supported, key=lambda s: self.restore_cost(storage_tier, s))


DEFAULT_PRICING = TierPricing(
    restore_cost_per_gb={
        StorageTier.COLD: {
            RestorationTier.EXPEDITED: 0.0,
            RestorationTier.STANDARD: 0.0,
            RestorationTier.BULK: 0.0,
        },
        StorageTier.GLACIER: {
            RestorationTier.EXPEDITED: 0.03,
            RestorationTier.STANDARD: 0.01,
            RestorationTier.BULK: 0.0025,
        },
        StorageTier.DEEP_ARCHIVE: {
            RestorationTier.STANDARD: 0.02,
            RestorationTier.BULK: 0.0025,
        },
    },
    restore_time_minutes={
        StorageTier.COLD: {
            RestorationTier.EXPEDITED: 1,
            RestorationTier.STANDARD: 1,
            RestorationTier.BULK: 1,
        },
        StorageTier.GLACIER: {
            RestorationTier.EXPEDITED: 5,
            RestorationTier.STANDARD: 240,
            RestorationTier.BULK: 480,
        },
        StorageTier.DEEP_ARCHIVE: {
            RestorationTier.STANDARD: 720,
            RestorationTier.BULK: 2880,
        },
    },
    monthly_cost_per_gb={
        StorageTier.HOT: 0.023,
        StorageTier.WARM: 0.0125,
        StorageTier.COLD: 0.01,
        StorageTier.GLACIER: 0.0036,
        StorageTier.DEEP_ARCHIVE: 0.00099,
    },
)
