"""Gear recommendation, backfill and merge for climbs.

Pure functions over in-memory values: nothing here touches the database,
keeps a cache or mutates its arguments. ClimbService and the API handler both
call into this module so the rules live in one place.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from models.climb import ClimbingStyle, ClimbProfile
from models.gear import GearCategory, GearImportance, GearItem
from services.gear_catalog import lookup_defaults, normalize_name
from utils.constants import (
    ADVANCED_DIFFICULTY_LEVELS,
    CAMPING_MIN_DAYS,
    CRAMPON_ELEVATION_FT,
    GROUP_SHELTER_MIN_SIZE,
    HIGH_ELEVATION_FT,
)

logger = logging.getLogger(__name__)

SNOW_OR_ICE_PATTERN = re.compile(r"snow|ice|glacier|mixed|nevé|winter")
ICE_OR_MIXED_PATTERN = re.compile(r"ice|mixed")


def _gear(
    item_name: str,
    category: GearCategory,
    importance: GearImportance,
    weight_kg: float,
    required: bool = True,
    notes: str = "",
) -> dict[str, Any]:
    return {
        "item_name": item_name,
        "category": category.value,
        "quantity": 1,
        "required": required,
        "packed": False,
        "importance": importance.value,
        "estimated_weight_kg": weight_kg,
        "notes": notes,
    }


_C = GearCategory
_I = GearImportance

# Carried on every climb
BASE_GEAR = (
    _gear("First Aid Kit", _C.HEALTH, _I.CRITICAL, 0.25),
    _gear("Water (3L)", _C.FOOD_WATER, _I.CRITICAL, 3.0, notes="Hydration system or bottles"),
    _gear("Nutrition (energy bars/gels)", _C.FOOD_WATER, _I.HIGH, 0.5),
    _gear("Map & Compass or GPS", _C.NAVIGATION, _I.CRITICAL, 0.15),
    _gear("Headlamp", _C.TECHNICAL, _I.HIGH, 0.1, notes="With spare batteries"),
    _gear("Insulating Layer", _C.CLOTHING, _I.HIGH, 0.4, notes="Fleece or puffy"),
    _gear("Shell (Jacket)", _C.CLOTHING, _I.HIGH, 0.35, notes="Water/wind resistant"),
    _gear("Gloves & Hat", _C.CLOTHING, _I.RECOMMENDED, 0.2),
    _gear("Trekking Poles", _C.TECHNICAL, _I.OPTIONAL, 0.6, required=False),
)

MOUNTAINEERING_BOOTS = _gear("Mountaineering Boots", _C.CLOTHING, _I.HIGH, 1.8)
HIKING_BOOTS = _gear("Hiking Boots", _C.CLOTHING, _I.HIGH, 1.2)

CAMPING_GEAR = (
    _gear("Tent or Bivy", _C.CAMPING, _I.HIGH, 2.0),
    _gear("Sleeping Bag", _C.CAMPING, _I.HIGH, 1.2, notes="Appropriate temp rating"),
    _gear("Sleeping Pad", _C.CAMPING, _I.RECOMMENDED, 0.5),
    _gear("Stove & Fuel", _C.FOOD_WATER, _I.RECOMMENDED, 0.4),
    _gear("Cook Kit", _C.FOOD_WATER, _I.RECOMMENDED, 0.3),
)

TECHNICAL_GEAR = (
    _gear("Helmet", _C.SAFETY, _I.CRITICAL, 0.35),
    _gear("Harness", _C.TECHNICAL, _I.HIGH, 0.4),
    _gear("Belay Device & Locking Carabiners", _C.TECHNICAL, _I.HIGH, 0.25),
    _gear("Rope (60m)", _C.TECHNICAL, _I.HIGH, 3.5),
    _gear("Quickdraws (8–12)", _C.TECHNICAL, _I.RECOMMENDED, 1.0, required=False),
    _gear("Protection (nuts/cams)", _C.TECHNICAL, _I.RECOMMENDED, 1.5, required=False),
)

MICROSPIKES = _gear("Microspikes", _C.TECHNICAL, _I.RECOMMENDED, 0.4, required=False)
CRAMPONS = _gear("Crampons", _C.TECHNICAL, _I.RECOMMENDED, 0.9, required=False)
ICE_AXE = _gear("Ice Axe", _C.TECHNICAL, _I.RECOMMENDED, 0.5, required=False, notes="If steep snow")
ICE_TOOLS = _gear("Ice Tools (pair)", _C.TECHNICAL, _I.OPTIONAL, 1.2, required=False)
GAITERS = _gear("Gaiters", _C.CLOTHING, _I.OPTIONAL, 0.25, required=False)
EXTRA_LAYERS = _gear("Extra Layers", _C.CLOTHING, _I.HIGH, 0.6, notes="Storm/insulation")
GROUP_SHELTER = _gear("Group Emergency Shelter", _C.SAFETY, _I.HIGH, 0.9)


@dataclass
class GearMergeResult:
    """Outcome of merging recommendations into an existing gear list."""

    items: list[GearItem]
    added_count: int = 0
    backfilled_count: int = 0
    added_names: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Whether the merged list differs from what the caller passed in."""
        return self.added_count > 0 or self.backfilled_count > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "required_gear": [item.model_dump() for item in self.items],
            "added_count": self.added_count,
            "backfilled_count": self.backfilled_count,
            "added_names": list(self.added_names),
            "changed": self.changed,
        }


def as_climb_profile(climb: Any) -> ClimbProfile:
    """Read any climb-shaped value (model, dict or None) as a ClimbProfile."""
    if isinstance(climb, ClimbProfile):
        return climb
    if isinstance(climb, BaseModel):
        return ClimbProfile.model_validate(climb.model_dump())
    if isinstance(climb, dict):
        return ClimbProfile.model_validate(climb)
    return ClimbProfile()


def coerce_gear_list(gear: Any) -> list[GearItem]:
    """Turn a stored/request gear value into a fresh list of GearItem.

    Non-list input is an empty list. Entries that are neither dicts nor
    GearItem are dropped.
    """
    if not isinstance(gear, (list, tuple)):
        return []

    items = []
    for index, entry in enumerate(gear):
        if isinstance(entry, GearItem):
            items.append(entry.model_copy())
        elif isinstance(entry, dict):
            items.append(GearItem.model_validate(entry))
        else:
            logger.debug("Skipping gear entry %d of type %s", index, type(entry).__name__)
    return items


def generate_recommended_gear(climb: Any) -> list[GearItem]:
    """
    Build the recommended gear list for a climb.

    Starts from the base kit everyone carries and appends bundles driven by
    the climb's style, elevation, duration, difficulty, group size and the
    free-text weather/equipment notes. Rules only ever add items. The result
    is deduplicated by normalized name, keeping the first occurrence.

    Args:
        climb: ClimbProfile, Climb, or a dict with the same fields

    Returns:
        New GearItem objects, in rule order
    """
    profile = as_climb_profile(climb)

    technical = profile.climbing_style == ClimbingStyle.TECHNICAL_CLIMB.value
    high_elevation = profile.elevation >= HIGH_ELEVATION_FT
    text = f"{profile.weather_concerns} {profile.special_equipment}".lower()
    mentions_snow_or_ice = SNOW_OR_ICE_PATTERN.search(text) is not None
    advanced_difficulty = profile.difficulty_level in ADVANCED_DIFFICULTY_LEVELS

    templates: list[dict[str, Any]] = list(BASE_GEAR)

    # Footwear
    if technical or high_elevation:
        templates.append(MOUNTAINEERING_BOOTS)
    else:
        templates.append(HIKING_BOOTS)

    # Overnight or longer
    if profile.duration_days and profile.duration_days >= CAMPING_MIN_DAYS:
        templates.extend(CAMPING_GEAR)

    # Roped climbing kit
    if technical:
        templates.extend(TECHNICAL_GEAR)

    # Snow and ice
    if high_elevation or mentions_snow_or_ice:
        templates.append(MICROSPIKES)
    if (
        technical
        or profile.elevation >= CRAMPON_ELEVATION_FT
        or mentions_snow_or_ice
        or advanced_difficulty
    ):
        templates.extend((CRAMPONS, ICE_AXE))
    if technical and (ICE_OR_MIXED_PATTERN.search(text) or advanced_difficulty):
        templates.append(ICE_TOOLS)
    if mentions_snow_or_ice or high_elevation:
        templates.append(GAITERS)

    if "storm" in profile.weather_concerns.lower():
        templates.append(EXTRA_LAYERS)

    if profile.group_size and profile.group_size > GROUP_SHELTER_MIN_SIZE:
        templates.append(GROUP_SHELTER)

    seen: set[str] = set()
    gear = []
    for template in templates:
        key = normalize_name(template["item_name"])
        if key in seen:
            continue
        seen.add(key)
        gear.append(GearItem.model_validate(template))
    return gear


def backfill_gear_item(item: GearItem | dict[str, Any]) -> GearItem:
    """Fill in missing weight, importance and category from the catalog.

    A weight counts as missing unless it is a number > 0. Fields that already
    hold a valid value are never touched, and nothing is filled when the
    catalog and heuristics don't recognise the name.

    Returns:
        A new GearItem; the argument is left unchanged
    """
    if isinstance(item, GearItem):
        gear_item = item
    elif isinstance(item, dict):
        gear_item = GearItem.model_validate(item)
    else:
        gear_item = GearItem()

    missing_weight = not gear_item.has_known_weight
    if not (missing_weight or gear_item.importance is None or gear_item.category is None):
        return gear_item.model_copy()

    defaults = lookup_defaults(gear_item.item_name)
    if defaults is None:
        return gear_item.model_copy()

    updates: dict[str, Any] = {}
    if missing_weight:
        updates["estimated_weight_kg"] = defaults.weight_kg
    if gear_item.importance is None:
        updates["importance"] = defaults.importance.value
    if gear_item.category is None:
        updates["category"] = defaults.category.value
    return gear_item.model_copy(update=updates)


def _backfill_changed(before: GearItem, after: GearItem) -> bool:
    return (
        (before.estimated_weight_kg or 0) != (after.estimated_weight_kg or 0)
        or before.importance != after.importance
        or before.category != after.category
    )


def merge_with_report(existing: Any, climb: Any) -> GearMergeResult:
    """Merge recommendations into an existing list and report what changed.

    Existing items keep their order and are backfilled; recommended items
    whose normalized name is not already present are appended in generation
    order. Running it again on its own output adds nothing.
    """
    current = coerce_gear_list(existing)
    backfilled = [backfill_gear_item(item) for item in current]
    backfilled_count = sum(
        1 for before, after in zip(current, backfilled) if _backfill_changed(before, after)
    )

    recommended = generate_recommended_gear(climb)
    present_names = {normalize_name(item.item_name) for item in backfilled}
    additions = [
        item for item in recommended if normalize_name(item.item_name) not in present_names
    ]

    return GearMergeResult(
        items=backfilled + additions,
        added_count=len(additions),
        backfilled_count=backfilled_count,
        added_names=[item.item_name for item in additions],
    )


def merge_recommended_gear(existing: Any, climb: Any) -> list[GearItem]:
    """Backfill the existing gear list and append missing recommendations."""
    return merge_with_report(existing, climb).items
