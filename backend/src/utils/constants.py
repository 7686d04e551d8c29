"""Shared constants for the Climb Gear Planner backend."""

# Pounds per kilogram, used for every weight shown in imperial units.
KG_TO_LB: float = 2.20462

# Elevation thresholds (feet) used by the gear recommendation rules.
# Summits at or above this need mountaineering boots, microspikes and gaiters.
HIGH_ELEVATION_FT: int = 10000
# Crampons and ice axe become recommended from this elevation on, even
# without snow/ice in the forecast.
CRAMPON_ELEVATION_FT: int = 11000

# Trips of at least this many days get the camping bundle.
CAMPING_MIN_DAYS: int = 2

# Groups larger than this carry a group emergency shelter.
GROUP_SHELTER_MIN_SIZE: int = 2

# Difficulty levels that call for full snow/ice traction.
ADVANCED_DIFFICULTY_LEVELS: frozenset[str] = frozenset({"advanced", "expert", "extreme"})

# Completed/cancelled climbs are auto-deleted after this many days.
COMPLETED_CLIMB_TTL_DAYS: int = 365
