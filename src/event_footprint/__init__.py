from .calculator import (
    Activity,
    Attendee,
    EventFootprintResult,
    activity_footprint,
    aggregate_event_footprint,
    attendee_footprint,
    calculate_event_footprint,
    run_from_config,
    update_event_footprint,
)
from .constants import DEFAULT_EVENT_ID, FOOTPRINT_UNIT, TRAVEL_MODE_FACTORS
from .storage import (
    DataAccessError,
    EventFootprintStore,
    QueryError,
    StorageConnectionError,
    WriteError,
    open_store,
)

__all__ = [
    "DEFAULT_EVENT_ID",
    "FOOTPRINT_UNIT",
    "TRAVEL_MODE_FACTORS",
    "Activity",
    "Attendee",
    "DataAccessError",
    "EventFootprintResult",
    "EventFootprintStore",
    "QueryError",
    "StorageConnectionError",
    "WriteError",
    "activity_footprint",
    "aggregate_event_footprint",
    "attendee_footprint",
    "calculate_event_footprint",
    "open_store",
    "run_from_config",
    "update_event_footprint",
]
