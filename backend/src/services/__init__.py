"""Services for Climb Gear Planner backend."""

from .auth_service import AuthenticationError, AuthService
from .climb_service import ClimbService
from .gear_catalog import lookup_defaults, normalize_name
from .gear_recommendation_service import (
    GearMergeResult,
    backfill_gear_item,
    generate_recommended_gear,
    merge_recommended_gear,
    merge_with_report,
)
from .pack_weight_service import summarize_pack_weight, summarize_required_gear

__all__ = [
    "AuthService",
    "AuthenticationError",
    "ClimbService",
    "GearMergeResult",
    "backfill_gear_item",
    "generate_recommended_gear",
    "lookup_defaults",
    "merge_recommended_gear",
    "merge_with_report",
    "normalize_name",
    "summarize_pack_weight",
    "summarize_required_gear",
]
