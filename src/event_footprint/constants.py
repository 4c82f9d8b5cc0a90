from __future__ import annotations

DEFAULT_EVENT_ID = 1

FOOTPRINT_UNIT = "kg CO2e"

# Emissions per unit of distance travelled. Lookup is exact and case-sensitive.
TRAVEL_MODE_FACTORS: dict[str, float] = {
    "car": 0.24,
    "plane": 0.18,
    "train": 0.14,
}

VIRTUAL_ACTIVITY_TYPE = "virtual"
VIRTUAL_ACTIVITY_FOOTPRINT = 10.0
IN_PERSON_ACTIVITY_FOOTPRINT = 50.0
