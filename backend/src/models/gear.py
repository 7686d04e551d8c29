"""Gear list data models."""

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GearCategory(str, Enum):
    """Gear item category."""

    SAFETY = "safety"
    CLOTHING = "clothing"
    TECHNICAL = "technical"
    CAMPING = "camping"
    NAVIGATION = "navigation"
    HEALTH = "health"
    FOOD_WATER = "food_water"
    OTHER = "other"


class GearImportance(str, Enum):
    """How strongly an item is recommended."""

    CRITICAL = "critical"
    HIGH = "high"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"  # Shown as "Nice to have"


def _coerce_enum_value(value: Any, enum_cls: type[Enum]) -> str | None:
    """Return the enum value for a known member, None for anything else."""
    if isinstance(value, enum_cls):
        return value.value
    if isinstance(value, str):
        candidate = value.strip().lower()
        if candidate in {member.value for member in enum_cls}:
            return candidate
    return None


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return False


@dataclass(frozen=True)
class CatalogEntry:
    """Default metadata for a known gear item.

    Only ever used to fill in missing values, never to override them.
    """

    weight_kg: float
    importance: GearImportance
    category: GearCategory


class GearItem(BaseModel):
    """A single entry on a climb's gear checklist.

    Items arrive from user-edited lists stored as opaque JSON, so every field
    is coerced leniently instead of rejected: bad quantities become 1, bad
    weights, categories and importances become None (unknown).
    """

    item_name: str = Field(default="", description="Display name, also the identity")
    category: GearCategory | None = Field(None, description="Gear category")
    quantity: int = Field(default=1, ge=1, description="Number of units carried")
    required: bool = Field(default=False, description="Whether the item is required")
    packed: bool = Field(default=False, description="Whether the item is in the pack")
    importance: GearImportance | None = Field(None, description="Importance level")
    estimated_weight_kg: float | None = Field(
        None, description="Per-unit weight in kg; None/0 means unknown"
    )
    notes: str = Field(default="", description="Free-text notes")

    # Persisted items can carry extra keys (e.g. an editor row id); keep them
    model_config = ConfigDict(use_enum_values=True, extra="allow")

    @field_validator("item_name", "notes", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v: Any) -> str | None:
        return _coerce_enum_value(v, GearCategory)

    @field_validator("importance", mode="before")
    @classmethod
    def coerce_importance(cls, v: Any) -> str | None:
        return _coerce_enum_value(v, GearImportance)

    @field_validator("required", "packed", mode="before")
    @classmethod
    def coerce_flags(cls, v: Any) -> bool:
        return _coerce_bool(v)

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v: Any) -> int:
        """Default to 1 for missing, non-numeric or non-positive quantities."""
        if isinstance(v, bool) or v is None:
            return 1
        try:
            number = float(v)
        except (TypeError, ValueError):
            return 1
        if math.isnan(number) or math.isinf(number) or number < 1:
            return 1
        return int(number)

    @field_validator("estimated_weight_kg", mode="before")
    @classmethod
    def coerce_weight(cls, v: Any) -> float | None:
        """Keep non-negative numbers, treat everything else as unknown."""
        if v is None or isinstance(v, bool):
            return None
        if not isinstance(v, (int, float, str, Decimal)):
            return None
        try:
            number = float(v)
        except (TypeError, ValueError):
            return None
        if math.isnan(number) or math.isinf(number) or number < 0:
            return None
        return number

    @property
    def has_known_weight(self) -> bool:
        """True when the item carries a usable positive weight."""
        return self.estimated_weight_kg is not None and self.estimated_weight_kg > 0


class PackWeightSummary(BaseModel):
    """Pack weight totals for a gear list.

    total_* is the planning-mode estimate (every item), packed_* counts only
    items marked packed. Both include the empty backpack weight.
    """

    base_pack_weight_kg: float = Field(default=0.0, ge=0)
    base_pack_weight_lb: float = Field(default=0.0, ge=0)
    total_weight_kg: float = Field(..., ge=0, description="Base + all items")
    packed_weight_kg: float = Field(..., ge=0, description="Base + packed items")
    remaining_weight_kg: float = Field(..., ge=0, description="Still to pack")
    total_weight_lb: float = Field(..., ge=0)
    packed_weight_lb: float = Field(..., ge=0)
    packed_count: int = Field(..., ge=0, description="Items marked packed")
    total_count: int = Field(..., ge=0, description="Items on the list")


class RequiredGearSummary(BaseModel):
    """Count and estimated weight of the items flagged as required."""

    required_count: int = Field(..., ge=0)
    required_weight_kg: float = Field(..., ge=0)
    required_weight_lb: float = Field(..., ge=0)
