"""Climb planning data models."""

import math
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.gear import GearItem
from utils.dynamodb_utils import decode_gear_blob


class DifficultyLevel(str, Enum):
    """Climb difficulty."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"
    EXTREME = "extreme"


class ClimbingStyle(str, Enum):
    """Style of the outing."""

    DAY_HIKE = "day_hike"
    OVERNIGHT = "overnight"
    MULTI_DAY = "multi_day"
    EXPEDITION = "expedition"
    TECHNICAL_CLIMB = "technical_climb"


class ClimbStatus(str, Enum):
    """Climb planning status."""

    PLANNING = "planning"  # Still being planned
    CONFIRMED = "confirmed"  # Dates and team locked in
    IN_PROGRESS = "in_progress"  # On the mountain
    COMPLETED = "completed"  # Climb finished
    CANCELLED = "cancelled"  # Climb called off


def _to_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _validate_date(v: str) -> str:
    try:
        datetime.strptime(v, "%Y-%m-%d")
        return v
    except ValueError:
        raise ValueError("Date must be in YYYY-MM-DD format")


class ClimbProfile(BaseModel):
    """The climb attributes that drive gear recommendations.

    Validation is lenient so that any stored or client-supplied record can be
    read: unknown enum values fall back to the defaults, bad numbers to 0 or
    None, missing text to "".
    """

    mountain_name: str = Field(default="", description="Mountain or route name")
    elevation: int = Field(default=0, ge=0, description="Summit elevation in feet")
    duration_days: int | None = Field(None, description="Trip length in days")
    difficulty_level: DifficultyLevel = Field(default=DifficultyLevel.INTERMEDIATE)
    climbing_style: ClimbingStyle = Field(default=ClimbingStyle.DAY_HIKE)
    group_size: int | None = Field(None, description="Number of climbers")
    weather_concerns: str = Field(default="", description="Expected weather, free text")
    special_equipment: str = Field(default="", description="Special gear notes, free text")
    base_pack_weight_kg: float = Field(default=0.0, ge=0, description="Empty pack weight")

    model_config = ConfigDict(use_enum_values=True, extra="ignore")

    @field_validator("mountain_name", "weather_concerns", "special_equipment", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)

    @field_validator("elevation", mode="before")
    @classmethod
    def coerce_elevation(cls, v: Any) -> int:
        number = _to_number(v)
        if number is None or number < 0:
            return 0
        return int(number)

    @field_validator("duration_days", "group_size", mode="before")
    @classmethod
    def coerce_positive_count(cls, v: Any) -> int | None:
        number = _to_number(v)
        if number is None or number < 1:
            return None
        return int(number)

    @field_validator("base_pack_weight_kg", mode="before")
    @classmethod
    def coerce_base_weight(cls, v: Any) -> float:
        number = _to_number(v)
        if number is None or number < 0:
            return 0.0
        return number

    @field_validator("difficulty_level", mode="before")
    @classmethod
    def coerce_difficulty(cls, v: Any) -> str:
        values = {level.value for level in DifficultyLevel}
        if isinstance(v, DifficultyLevel):
            return v.value
        if isinstance(v, str) and v.strip().lower() in values:
            return v.strip().lower()
        return DifficultyLevel.INTERMEDIATE.value

    @field_validator("climbing_style", mode="before")
    @classmethod
    def coerce_style(cls, v: Any) -> str:
        values = {style.value for style in ClimbingStyle}
        if isinstance(v, ClimbingStyle):
            return v.value
        if isinstance(v, str) and v.strip().lower() in values:
            return v.strip().lower()
        return ClimbingStyle.DAY_HIKE.value


class Climb(ClimbProfile):
    """A planned climb as stored for a user."""

    climb_id: str = Field(..., description="Unique climb identifier")
    user_id: str = Field(..., description="Owner of the climb")

    location: str | None = Field(None, description="Range, park or region")
    planned_start_date: str | None = Field(None, description="Start date (YYYY-MM-DD)")
    status: ClimbStatus = Field(default=ClimbStatus.PLANNING)
    emergency_contact: str | None = Field(None, description="Who to call")
    notes: str | None = Field(None, description="User notes")

    # Gear
    backpack_name: str | None = Field(None, description="Backpack model")
    required_gear: list[GearItem] = Field(
        default_factory=list, description="Gear checklist"
    )

    # Timestamps
    created_at: str = Field(..., description="When the climb was created")
    updated_at: str = Field(..., description="When the climb was last updated")

    # TTL for completed/cancelled climbs
    ttl: int | None = Field(None, description="Unix timestamp for record expiration")

    @field_validator("required_gear", mode="before")
    @classmethod
    def decode_required_gear(cls, v: Any) -> list[Any]:
        """Accept JSON strings and drop entries that are not objects."""
        return [
            item for item in decode_gear_blob(v) if isinstance(item, (dict, GearItem))
        ]

    @property
    def days_until_start(self) -> int | None:
        """Days until the planned start, None if unknown or already started."""
        if not self.planned_start_date:
            return None
        try:
            start = datetime.strptime(self.planned_start_date, "%Y-%m-%d")
        except ValueError:
            return None
        today = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
        delta = (start - today).days
        return delta if delta >= 0 else None

    @property
    def packed_item_count(self) -> int:
        """Count gear items marked packed."""
        return sum(1 for item in self.required_gear if item.packed)


class ClimbCreate(BaseModel):
    """Request model for creating a climb."""

    mountain_name: str = Field(..., min_length=1, max_length=200)
    elevation: int = Field(..., ge=0, le=30000, description="Summit elevation in feet")
    location: str | None = Field(None, max_length=200)
    planned_start_date: str = Field(..., description="Start date (YYYY-MM-DD)")
    duration_days: int | None = Field(None, ge=1, le=365)
    difficulty_level: DifficultyLevel = Field(default=DifficultyLevel.INTERMEDIATE)
    climbing_style: ClimbingStyle = Field(default=ClimbingStyle.DAY_HIKE)
    group_size: int | None = Field(None, ge=1, le=100)
    emergency_contact: str | None = Field(None, max_length=200)
    weather_concerns: str | None = Field(None, max_length=1000)
    special_equipment: str | None = Field(None, max_length=1000)
    backpack_name: str | None = Field(None, max_length=200)
    base_pack_weight_kg: float | None = Field(None, ge=0, le=50)
    status: ClimbStatus = Field(default=ClimbStatus.PLANNING)
    notes: str | None = Field(None, max_length=2000)
    required_gear: list[GearItem] = Field(default_factory=list)

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("planned_start_date")
    @classmethod
    def validate_date_format(cls, v: str) -> str:
        """Validate date format is YYYY-MM-DD."""
        return _validate_date(v)


class ClimbUpdate(BaseModel):
    """Request model for updating a climb. Only set fields are applied."""

    mountain_name: str | None = Field(None, min_length=1, max_length=200)
    elevation: int | None = Field(None, ge=0, le=30000)
    location: str | None = Field(None, max_length=200)
    planned_start_date: str | None = None
    duration_days: int | None = Field(None, ge=1, le=365)
    difficulty_level: DifficultyLevel | None = None
    climbing_style: ClimbingStyle | None = None
    group_size: int | None = Field(None, ge=1, le=100)
    emergency_contact: str | None = Field(None, max_length=200)
    weather_concerns: str | None = Field(None, max_length=1000)
    special_equipment: str | None = Field(None, max_length=1000)
    status: ClimbStatus | None = None
    notes: str | None = Field(None, max_length=2000)

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("planned_start_date")
    @classmethod
    def validate_date_format(cls, v: str | None) -> str | None:
        """Validate date format is YYYY-MM-DD."""
        if v is None:
            return v
        return _validate_date(v)


class GearListUpdate(BaseModel):
    """Request model for saving the gear page."""

    required_gear: list[GearItem] | None = Field(None, description="Full gear list")
    backpack_name: str | None = Field(None, max_length=200)
    base_pack_weight_kg: float | None = Field(None, ge=0, le=50)
