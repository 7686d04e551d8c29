"""Pack weight aggregation for gear lists."""

import math
from collections.abc import Iterable
from typing import Any

from models.gear import GearItem, PackWeightSummary, RequiredGearSummary
from services.gear_recommendation_service import coerce_gear_list
from utils.constants import KG_TO_LB


def kg_to_lb(weight_kg: float) -> float:
    """Convert kilograms to pounds."""
    return weight_kg * KG_TO_LB


def _base_weight(base_pack_weight_kg: Any) -> float:
    if base_pack_weight_kg is None or isinstance(base_pack_weight_kg, bool):
        return 0.0
    try:
        base = float(base_pack_weight_kg)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(base) or math.isinf(base) or base < 0:
        return 0.0
    return base


def item_weight_kg(item: GearItem) -> float:
    """Weight one line contributes: per-unit weight times quantity.

    Unknown (None), zero or negative weights contribute nothing.
    """
    per_unit = item.estimated_weight_kg if item.has_known_weight else 0.0
    return per_unit * max(item.quantity, 1)


def _sum_weight(items: Iterable[GearItem]) -> float:
    return sum((item_weight_kg(item) for item in items), 0.0)


def planning_weight_kg(gear: Any, base_pack_weight_kg: Any = 0) -> float:
    """Estimated carried load: base pack plus every item on the list."""
    return _base_weight(base_pack_weight_kg) + _sum_weight(coerce_gear_list(gear))


def packed_weight_kg(gear: Any, base_pack_weight_kg: Any = 0) -> float:
    """Current load: base pack plus only the items marked packed."""
    items = coerce_gear_list(gear)
    return _base_weight(base_pack_weight_kg) + _sum_weight(i for i in items if i.packed)


def summarize_pack_weight(gear: Any, base_pack_weight_kg: Any = 0) -> PackWeightSummary:
    """
    Aggregate a gear list into planning and packed weight totals.

    Args:
        gear: List of GearItem or dicts; anything else counts as empty
        base_pack_weight_kg: Empty backpack weight; invalid values count as 0

    Returns:
        PackWeightSummary with kg/lb totals and packed/total item counts
    """
    items = coerce_gear_list(gear)
    base = _base_weight(base_pack_weight_kg)

    total_kg = base + _sum_weight(items)
    packed_kg = base + _sum_weight(item for item in items if item.packed)
    remaining_kg = max(0.0, total_kg - packed_kg)

    return PackWeightSummary(
        base_pack_weight_kg=base,
        base_pack_weight_lb=kg_to_lb(base),
        total_weight_kg=total_kg,
        packed_weight_kg=packed_kg,
        remaining_weight_kg=remaining_kg,
        total_weight_lb=kg_to_lb(total_kg),
        packed_weight_lb=kg_to_lb(packed_kg),
        packed_count=sum(1 for item in items if item.packed),
        total_count=len(items),
    )


def summarize_required_gear(gear: Any) -> RequiredGearSummary:
    """Count and weigh the named items flagged as required (no base pack)."""
    required = [item for item in coerce_gear_list(gear) if item.required and item.item_name]
    weight_kg = _sum_weight(required)
    return RequiredGearSummary(
        required_count=len(required),
        required_weight_kg=weight_kg,
        required_weight_lb=kg_to_lb(weight_kg),
    )
