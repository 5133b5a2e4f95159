"""Restoration estimation, validation and approval policy."""

from .approvals import ApprovalPolicy, required_approvals
from .estimator import estimate_restoration, select_assets
from .pricing import DEFAULT_PRICING, TierPricing
from .validator import validate_request

__all__ = [
    "ApprovalPolicy",
    "required_approvals",
    "estimate_restoration",
    "select_assets",
    "DEFAULT_PRICING",
    "TierPricing",
    "validate_request",
]
