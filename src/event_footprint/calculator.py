"""Calculate the carbon footprint of an event.

The footprint is the sum of per-attendee travel emissions (distance times a
travel-mode factor) and a fixed cost per activity (virtual or in-person).
Unrecognised travel modes contribute nothing and every non-virtual activity is
charged as in-person; neither case is treated as an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Mapping

import numpy as np
import pandas as pd
import yaml

from .constants import (
    DEFAULT_EVENT_ID,
    IN_PERSON_ACTIVITY_FOOTPRINT,
    TRAVEL_MODE_FACTORS,
    VIRTUAL_ACTIVITY_FOOTPRINT,
    VIRTUAL_ACTIVITY_TYPE,
)

if TYPE_CHECKING:  # pragma: no cover
    from .storage import EventFootprintStore

LOGGER = logging.getLogger("event_footprint")
if not LOGGER.handlers:
    handler = logging.StreamHandler()
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    LOGGER.addHandler(handler)
LOGGER.setLevel(logging.INFO)
LOGGER.propagate = False


@dataclass(frozen=True)
class Attendee:
    id: int
    travel_mode: str
    distance: float


@dataclass(frozen=True)
class Activity:
    id: int
    activity_type: str


@dataclass
class EventFootprintResult:
    """Itemised footprint of one event."""

    attendee_footprints: pd.Series
    activity_footprints: pd.Series
    travel_modes: pd.Series
    activity_types: pd.Series
    total: float
    event_id: int | None = None
    persisted: bool = False

    def by_travel_mode(self) -> pd.Series:
        """Summed attendee footprint per travel mode."""
        if self.attendee_footprints.empty:
            return pd.Series(dtype=float, name="footprint")
        grouped = self.attendee_footprints.groupby(self.travel_modes.to_numpy()).sum()
        return grouped.rename("footprint").sort_index()

    def by_activity_type(self) -> pd.Series:
        """Summed activity footprint per activity type."""
        if self.activity_footprints.empty:
            return pd.Series(dtype=float, name="footprint")
        grouped = self.activity_footprints.groupby(self.activity_types.to_numpy()).sum()
        return grouped.rename("footprint").sort_index()


def attendee_footprint(travel_mode: str, distance: float) -> float:
    """Return ``distance`` times the factor for ``travel_mode`` (0.0 if unknown)."""
    factor = TRAVEL_MODE_FACTORS.get(travel_mode)
    if factor is None:
        return 0.0
    return distance * factor


def activity_footprint(activity_type: str) -> float:
    if activity_type == VIRTUAL_ACTIVITY_TYPE:
        return VIRTUAL_ACTIVITY_FOOTPRINT
    return IN_PERSON_ACTIVITY_FOOTPRINT


def calculate_event_footprint(
    attendees: Iterable[Attendee],
    activities: Iterable[Activity],
    *,
    event_id: int | None = None,
) -> EventFootprintResult:
    """Compute per-attendee and per-activity footprints and their total."""
    attendee_df = pd.DataFrame(
        [(a.id, a.travel_mode, a.distance) for a in attendees],
        columns=["id", "travel_mode", "distance"],
    )
    activity_df = pd.DataFrame(
        [(b.id, b.activity_type) for b in activities],
        columns=["id", "activity_type"],
    )

    # Series.map on a dict is an exact lookup; anything missing maps to NaN.
    factors = attendee_df["travel_mode"].map(TRAVEL_MODE_FACTORS).fillna(0.0).astype(float)
    travel = pd.Series(
        attendee_df["distance"].astype(float).to_numpy() * factors.to_numpy(),
        index=pd.Index(attendee_df["id"], name="attendee_id"),
        dtype=float,
        name="footprint",
    )

    per_activity = np.where(
        activity_df["activity_type"] == VIRTUAL_ACTIVITY_TYPE,
        VIRTUAL_ACTIVITY_FOOTPRINT,
        IN_PERSON_ACTIVITY_FOOTPRINT,
    )
    activity = pd.Series(
        per_activity,
        index=pd.Index(activity_df["id"], name="activity_id"),
        dtype=float,
        name="footprint",
    )

    total = float(travel.sum()) + float(activity.sum())
    return EventFootprintResult(
        attendee_footprints=travel,
        activity_footprints=activity,
        travel_modes=pd.Series(
            attendee_df["travel_mode"].to_numpy(dtype=object), index=travel.index, name="travel_mode"
        ),
        activity_types=pd.Series(
            activity_df["activity_type"].to_numpy(dtype=object),
            index=activity.index,
            name="activity_type",
        ),
        total=total,
        event_id=event_id,
    )


def aggregate_event_footprint(
    attendees: Iterable[Attendee],
    activities: Iterable[Activity],
) -> float:
    """Return the total footprint of ``attendees`` and ``activities``."""
    return calculate_event_footprint(attendees, activities).total


def update_event_footprint(store: EventFootprintStore, event_id: int) -> EventFootprintResult:
    """Recompute the footprint of ``event_id`` and overwrite the stored value.

    Read failures propagate before anything is written. A failed write is
    logged and reported through ``persisted=False``; it is not retried.
    """
    from .storage import WriteError  # local import to avoid cycle

    attendees = store.fetch_attendees(event_id)
    activities = store.fetch_activities(event_id)

    result = calculate_event_footprint(attendees, activities, event_id=event_id)
    LOGGER.info(
        "Event %s footprint: %.4f (%d attendees, %d activities)",
        event_id,
        result.total,
        len(result.attendee_footprints),
        len(result.activity_footprints),
    )

    try:
        result.persisted = store.persist_event_footprint(event_id, result.total)
    except WriteError as exc:
        LOGGER.error("Footprint for event %s not stored: %s", event_id, exc)
        result.persisted = False
    return result


def load_config(config_path: Path | str | None = None) -> Mapping[str, object]:
    from config_paths import get_config_path

    path = Path(config_path) if config_path is not None else get_config_path()
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with path.open() as handle:
        config = yaml.safe_load(handle) or {}
    if not isinstance(config, Mapping):
        raise ValueError(f"Configuration file '{path}' must contain a mapping.")
    return config


def run_from_config(
    config_path: Path | str | None = None,
    *,
    event_id: int | None = None,
    database_url: str | None = None,
    config: Mapping[str, object] | None = None,
) -> EventFootprintResult:
    """Run the footprint update for the event named in ``config.yaml``.

    A mapping passed as ``config`` is used instead of reading ``config_path``.
    """
    from config_paths import resolve_database_url, resolve_event_id

    from .storage import open_store

    if config is None:
        config = load_config(config_path)
    url = resolve_database_url(config, database_url)
    target = resolve_event_id(config, event_id, default=DEFAULT_EVENT_ID)

    with open_store(url) as store:
        return update_event_footprint(store, target)
