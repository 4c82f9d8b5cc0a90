from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

from .constants import FOOTPRINT_UNIT

if TYPE_CHECKING:  # pragma: no cover
    from .calculator import EventFootprintResult


def _write_csv(df: pd.DataFrame, path: Path, unit: str) -> Path:
    with path.open("w", encoding="utf-8") as fh:
        if unit:
            fh.write(f"# unit: {unit}\n")
        df.to_csv(fh, index=False)
    return path


def _build_summary(result: EventFootprintResult) -> pd.DataFrame:
    frames = []
    for category, series in (
        ("travel_mode", result.by_travel_mode()),
        ("activity_type", result.by_activity_type()),
    ):
        if series.empty:
            continue
        frames.append(
            pd.DataFrame(
                {"category": category, "key": series.index.astype(str), "footprint": series.values}
            )
        )
    frames.append(pd.DataFrame({"category": ["total"], "key": ["total"], "footprint": [result.total]}))
    return pd.concat(frames, ignore_index=True)


def write_footprint_report(
    result: EventFootprintResult,
    destination: Path,
    unit: str = FOOTPRINT_UNIT,
) -> list[Path]:
    """Write attendees.csv, activities.csv and summary.csv under ``destination``."""
    dest_dir = Path(destination)
    dest_dir.mkdir(parents=True, exist_ok=True)

    attendees = result.attendee_footprints.rename("footprint").reset_index()
    attendees.columns = ["attendee_id", "footprint"]
    activities = result.activity_footprints.rename("footprint").reset_index()
    activities.columns = ["activity_id", "footprint"]

    return [
        _write_csv(attendees, dest_dir / "attendees.csv", unit),
        _write_csv(activities, dest_dir / "activities.csv", unit),
        _write_csv(_build_summary(result), dest_dir / "summary.csv", unit),
    ]
