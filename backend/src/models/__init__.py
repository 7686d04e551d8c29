"""Data models for Climb Gear Planner."""

from .climb import (
    Climb,
    ClimbCreate,
    ClimbingStyle,
    ClimbProfile,
    ClimbStatus,
    ClimbUpdate,
    DifficultyLevel,
    GearListUpdate,
)
from .gear import (
    CatalogEntry,
    GearCategory,
    GearImportance,
    GearItem,
    PackWeightSummary,
    RequiredGearSummary,
)

__all__ = [
    "Climb",
    "ClimbCreate",
    "ClimbUpdate",
    "ClimbProfile",
    "ClimbStatus",
    "ClimbingStyle",
    "DifficultyLevel",
    "GearListUpdate",
    "CatalogEntry",
    "GearCategory",
    "GearImportance",
    "GearItem",
    "PackWeightSummary",
    "RequiredGearSummary",
]
