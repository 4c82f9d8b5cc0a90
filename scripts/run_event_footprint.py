"""Recompute and store the carbon footprint of one event.

Attendee and activity rows are read from the configured database, the total is
written to ``events.carbon_footprint`` and an optional CSV breakdown is saved.
All logging is routed through the standard logging module so output integrates
with larger pipelines.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

sys.path.insert(0, str(ROOT / "src"))

from config_paths import resolve_report_directory  # noqa: E402
from event_footprint import DataAccessError, run_from_config  # noqa: E402
from event_footprint.calculator import load_config  # noqa: E402
from event_footprint.writers import write_footprint_report  # noqa: E402

LOGGER = logging.getLogger("event_footprint.run")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Calculate an event's carbon footprint and store it in the events table"
    )
    parser.add_argument("--config", help="Path to a config.yaml with an event_footprint section")
    parser.add_argument("--event-id", type=int, help="Event to process (default from config)")
    parser.add_argument(
        "--database-url",
        help="SQLAlchemy database URL; overrides config and EVENT_FOOTPRINT_DATABASE_URL",
    )
    parser.add_argument("--report-dir", help="Directory for the CSV footprint breakdown")
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(name)s: %(message)s")

    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        result = run_from_config(
            args.config,
            event_id=args.event_id,
            database_url=args.database_url,
            config=config,
        )
    except (DataAccessError, FileNotFoundError, ValueError) as exc:
        LOGGER.error("%s", exc)
        return 1

    LOGGER.info("Event %s total footprint: %.4f", result.event_id, result.total)
    by_mode = result.by_travel_mode()
    if not by_mode.empty:
        LOGGER.info("Travel footprint by mode:\n%s", by_mode.to_frame().to_string())
    by_type = result.by_activity_type()
    if not by_type.empty:
        LOGGER.info("Activity footprint by type:\n%s", by_type.to_frame().to_string())
    if not result.persisted:
        LOGGER.warning("Footprint for event %s was not stored", result.event_id)

    report_dir = resolve_report_directory(config, args.report_dir, repo_root=ROOT)
    if report_dir is not None:
        paths = write_footprint_report(result, report_dir / f"event_{result.event_id}")
        LOGGER.info("Footprint report written under %s", paths[0].parent)
    return 0


if __name__ == "__main__":
    sys.exit(main())
