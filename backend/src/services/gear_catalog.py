"""Gear name normalization and the default-metadata catalog.

Every layer that needs to recognise a gear item (dedup on merge, backfilling
missing weights) goes through normalize_name() and lookup_defaults() here, so
there is exactly one definition of what "the same item" means.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from models.gear import CatalogEntry, GearCategory, GearImportance

_NON_WORD_RUN = re.compile(r"[^\w]+", re.ASCII)


def normalize_name(name: Any) -> str:
    """Canonicalize a display name into a lookup/dedup key.

    Lowercases, collapses every run of non-word characters into one space and
    trims. "Shell (Jacket)" -> "shell jacket", "Quickdraws (8–12)" ->
    "quickdraws 8 12". None and non-strings normalize to "".
    """
    if not name or not isinstance(name, str):
        return ""
    return _NON_WORD_RUN.sub(" ", name.lower()).strip()


def _entry(weight_kg: float, importance: GearImportance, category: GearCategory) -> CatalogEntry:
    return CatalogEntry(weight_kg=weight_kg, importance=importance, category=category)


_CRITICAL = GearImportance.CRITICAL
_HIGH = GearImportance.HIGH
_RECOMMENDED = GearImportance.RECOMMENDED
_OPTIONAL = GearImportance.OPTIONAL

# Keys are normalized names; weights in kg per unit.
GEAR_CATALOG: dict[str, CatalogEntry] = {
    "first aid kit": _entry(0.25, _CRITICAL, GearCategory.HEALTH),
    "water 3l": _entry(3.0, _CRITICAL, GearCategory.FOOD_WATER),
    "nutrition energy bars gels": _entry(0.5, _HIGH, GearCategory.FOOD_WATER),
    "map compass or gps": _entry(0.15, _CRITICAL, GearCategory.NAVIGATION),
    "headlamp": _entry(0.1, _HIGH, GearCategory.TECHNICAL),
    "insulating layer": _entry(0.4, _HIGH, GearCategory.CLOTHING),
    "shell jacket": _entry(0.35, _HIGH, GearCategory.CLOTHING),
    "gloves hat": _entry(0.2, _RECOMMENDED, GearCategory.CLOTHING),
    "trekking poles": _entry(0.6, _OPTIONAL, GearCategory.TECHNICAL),
    "hiking boots": _entry(1.2, _HIGH, GearCategory.CLOTHING),
    "mountaineering boots": _entry(1.8, _HIGH, GearCategory.CLOTHING),
    "tent or bivy": _entry(2.0, _HIGH, GearCategory.CAMPING),
    "sleeping bag": _entry(1.2, _HIGH, GearCategory.CAMPING),
    "sleeping pad": _entry(0.5, _RECOMMENDED, GearCategory.CAMPING),
    "stove fuel": _entry(0.4, _RECOMMENDED, GearCategory.FOOD_WATER),
    "cook kit": _entry(0.3, _RECOMMENDED, GearCategory.FOOD_WATER),
    "helmet": _entry(0.35, _CRITICAL, GearCategory.SAFETY),
    "harness": _entry(0.4, _HIGH, GearCategory.TECHNICAL),
    "belay device locking carabiners": _entry(0.25, _HIGH, GearCategory.TECHNICAL),
    "rope 60m": _entry(3.5, _HIGH, GearCategory.TECHNICAL),
    "quickdraws 8 12": _entry(1.0, _RECOMMENDED, GearCategory.TECHNICAL),
    "protection nuts cams": _entry(1.5, _RECOMMENDED, GearCategory.TECHNICAL),
    "microspikes": _entry(0.4, _RECOMMENDED, GearCategory.TECHNICAL),
    "micro spikes": _entry(0.4, _RECOMMENDED, GearCategory.TECHNICAL),
    "crampons": _entry(0.9, _RECOMMENDED, GearCategory.TECHNICAL),
    "ice axe": _entry(0.5, _RECOMMENDED, GearCategory.TECHNICAL),
    "ice tools pair": _entry(1.2, _OPTIONAL, GearCategory.TECHNICAL),
    "gaiters": _entry(0.25, _OPTIONAL, GearCategory.CLOTHING),
    "extra layers": _entry(0.6, _HIGH, GearCategory.CLOTHING),
    "group emergency shelter": _entry(0.9, _HIGH, GearCategory.SAFETY),
}


@dataclass(frozen=True)
class HeuristicRule:
    """A fallback rule: if predicate(normalized_name) holds, use defaults."""

    name: str
    predicate: Callable[[str], bool]
    defaults: CatalogEntry

    def matches(self, normalized: str) -> bool:
        return self.predicate(normalized)


def _contains(*fragments: str) -> Callable[[str], bool]:
    return lambda normalized: all(fragment in normalized for fragment in fragments)


# Evaluated in order, first match wins: "Waterproof Gaiters" resolves as water.
HEURISTIC_RULES: tuple[HeuristicRule, ...] = (
    HeuristicRule("water", _contains("water"), GEAR_CATALOG["water 3l"]),
    HeuristicRule("quickdraw", _contains("quickdraw"), GEAR_CATALOG["quickdraws 8 12"]),
    HeuristicRule("rope", _contains("rope"), GEAR_CATALOG["rope 60m"]),
    HeuristicRule("crampon", _contains("crampon"), GEAR_CATALOG["crampons"]),
    HeuristicRule("microspike", _contains("micro", "spike"), GEAR_CATALOG["microspikes"]),
    HeuristicRule("ice axe", _contains("ice axe"), GEAR_CATALOG["ice axe"]),
    HeuristicRule("gaiter", _contains("gaiter"), GEAR_CATALOG["gaiters"]),
)


def match_heuristic(normalized: str) -> HeuristicRule | None:
    """Return the first heuristic rule matching an already-normalized name."""
    for rule in HEURISTIC_RULES:
        if rule.matches(normalized):
            return rule
    return None


def lookup_defaults(name: Any) -> CatalogEntry | None:
    """Find default weight/importance/category for a gear item name.

    Tries an exact catalog match on the normalized name first, then the
    ordered heuristic rules. Returns None when the item is unknown; callers
    must leave the item's fields unset in that case.
    """
    normalized = normalize_name(name)
    if not normalized:
        return None

    entry = GEAR_CATALOG.get(normalized)
    if entry is not None:
        return entry

    rule = match_heuristic(normalized)
    return rule.defaults if rule else None
