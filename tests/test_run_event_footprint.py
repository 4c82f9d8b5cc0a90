import json
from pathlib import Path

import pandas as pd
import pytest
from scripts import run_event_footprint
from sqlalchemy import create_engine, insert, select

from config_paths import DATABASE_URL_ENV_VAR
from event_footprint import Activity, Attendee, calculate_event_footprint, run_from_config
from event_footprint.storage import (
    StorageConnectionError,
    activities_table,
    attendees_table,
    create_schema,
    events_table,
)
from event_footprint.writers import write_footprint_report


@pytest.fixture
def database_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.delenv(DATABASE_URL_ENV_VAR, raising=False)
    url = f"sqlite:///{tmp_path / 'events.db'}"
    engine = create_engine(url)
    create_schema(engine)
    with engine.begin() as conn:
        conn.execute(insert(events_table), [{"id": 1}, {"id": 4}])
        conn.execute(
            insert(attendees_table),
            [
                {"id": 1, "event_id": 4, "travel_mode": "car", "distance": 100.0},
                {"id": 2, "event_id": 1, "travel_mode": "plane", "distance": 10.0},
            ],
        )
        conn.execute(
            insert(activities_table),
            [{"id": 1, "event_id": 4, "activity_type": "virtual"}],
        )
    engine.dispose()
    return url


def _stored(url: str, event_id: int):
    engine = create_engine(url)
    try:
        with engine.connect() as conn:
            return conn.execute(
                select(events_table.c.carbon_footprint).where(events_table.c.id == event_id)
            ).scalar_one()
    finally:
        engine.dispose()


def _write_config(root: Path, section: dict) -> Path:
    config_path = root / "config.yaml"
    # JSON is valid YAML for yaml.safe_load.
    config_path.write_text(json.dumps({"event_footprint": section}))
    return config_path


def test_run_from_config_updates_configured_event(tmp_path: Path, database_url: str):
    config_path = _write_config(tmp_path, {"database_url": database_url, "event_id": 4})

    result = run_from_config(config_path)

    assert result.event_id == 4
    assert result.persisted is True
    assert result.total == pytest.approx(34.0)
    assert _stored(database_url, 4) == pytest.approx(34.0)
    assert _stored(database_url, 1) is None


def test_run_from_config_defaults_to_event_one(tmp_path: Path, database_url: str):
    config_path = _write_config(tmp_path, {"database_url": database_url})
    result = run_from_config(config_path)
    assert result.event_id == 1
    assert _stored(database_url, 1) == pytest.approx(1.8)


def test_run_from_config_unreachable_database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv(DATABASE_URL_ENV_VAR, raising=False)
    bad_url = f"sqlite:///{tmp_path / 'nope' / 'x.db'}"
    config_path = _write_config(tmp_path, {"database_url": bad_url})
    with pytest.raises(StorageConnectionError):
        run_from_config(config_path)


def test_write_footprint_report_creates_csvs(tmp_path: Path):
    result = calculate_event_footprint(
        [Attendee(1, "car", 100.0), Attendee(2, "bike", 3.0)],
        [Activity(5, "virtual")],
        event_id=1,
    )

    paths = write_footprint_report(result, tmp_path / "report")

    assert [p.name for p in paths] == ["attendees.csv", "activities.csv", "summary.csv"]
    first_line = paths[0].read_text(encoding="utf-8").splitlines()[0]
    assert first_line == "# unit: kg CO2e"
    attendees = pd.read_csv(paths[0], comment="#")
    assert attendees["attendee_id"].tolist() == [1, 2]
    assert attendees["footprint"].tolist() == pytest.approx([24.0, 0.0])
    summary = pd.read_csv(paths[2], comment="#")
    total = summary.loc[summary["category"] == "total", "footprint"].iloc[0]
    assert total == pytest.approx(34.0)
    assert set(summary["category"]) == {"travel_mode", "activity_type", "total"}


def test_cli_main_writes_total_and_report(tmp_path: Path, database_url: str):
    config_path = _write_config(tmp_path, {"database_url": database_url})
    report_dir = tmp_path / "reports"

    exit_code = run_event_footprint.main(
        ["--config", str(config_path), "--event-id", "4", "--report-dir", str(report_dir)]
    )

    assert exit_code == 0
    assert _stored(database_url, 4) == pytest.approx(34.0)
    assert (report_dir / "event_4" / "summary.csv").exists()


def test_cli_main_returns_error_code_on_connection_failure(tmp_path: Path, database_url: str):
    config_path = _write_config(tmp_path, {"database_url": database_url})
    bad_url = f"sqlite:///{tmp_path / 'nope' / 'x.db'}"

    exit_code = run_event_footprint.main(
        ["--config", str(config_path), "--database-url", bad_url]
    )

    assert exit_code == 1
    assert _stored(database_url, 1) is None


def test_cli_main_missing_config_returns_error_code(tmp_path: Path):
    exit_code = run_event_footprint.main(["--config", str(tmp_path / "absent.yaml")])
    assert exit_code == 1


def test_cli_main_invalid_event_id_leaves_database_untouched(tmp_path: Path, database_url: str):
    config_path = _write_config(tmp_path, {"database_url": database_url, "event_id": 2.7})

    exit_code = run_event_footprint.main(["--config", str(config_path)])

    assert exit_code == 1
    assert _stored(database_url, 1) is None
