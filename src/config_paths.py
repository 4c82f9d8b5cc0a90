"""Helpers to resolve the configuration file and database settings."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

REPO_ROOT = Path(__file__).resolve().parents[1]

CONFIG_ENV_VAR = "EVENT_FOOTPRINT_CONFIG_PATH"
DATABASE_URL_ENV_VAR = "EVENT_FOOTPRINT_DATABASE_URL"
CONFIG_SECTION = "event_footprint"


def get_config_path(default: Path | None = None) -> Path:
    """Return the configuration path, honouring EVENT_FOOTPRINT_CONFIG_PATH when set."""

    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser().resolve()
    if default is not None:
        return default.resolve()
    return (REPO_ROOT / "config.yaml").resolve()


def get_module_config(config: Mapping[str, object] | None) -> Mapping[str, object]:
    """Return the ``event_footprint`` section, or an empty mapping."""

    if not isinstance(config, Mapping):
        return {}
    section = config.get(CONFIG_SECTION)
    if not isinstance(section, Mapping):
        return {}
    return section


def resolve_database_url(
    config: Mapping[str, object] | None,
    explicit: str | None = None,
) -> str:
    """Pick the database URL: explicit argument, then environment, then config."""

    if explicit and explicit.strip():
        return explicit.strip()
    from_env = os.environ.get(DATABASE_URL_ENV_VAR)
    if from_env and from_env.strip():
        return from_env.strip()
    value = get_module_config(config).get("database_url")
    if isinstance(value, str) and value.strip():
        return value.strip()
    raise ValueError(
        f"No database URL configured. Set {CONFIG_SECTION}.database_url in config.yaml "
        f"or the {DATABASE_URL_ENV_VAR} environment variable."
    )


def resolve_event_id(
    config: Mapping[str, object] | None,
    explicit: int | None = None,
    default: int = 1,
) -> int:
    """Return the event identifier to process as a positive integer."""

    raw = explicit if explicit is not None else get_module_config(config).get("event_id", default)
    if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
        raise ValueError(f"event_id must be a positive integer, got {raw!r}")
    try:
        event_id = int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"event_id must be a positive integer, got {raw!r}") from exc
    if event_id <= 0:
        raise ValueError(f"event_id must be a positive integer, got {event_id}")
    return event_id


def resolve_report_directory(
    config: Mapping[str, object] | None,
    explicit: Path | str | None = None,
    *,
    repo_root: Path | None = None,
) -> Path | None:
    """Return the report directory, resolving relative paths against the repo root."""

    value = explicit if explicit is not None else get_module_config(config).get("report_directory")
    if value is None or not str(value).strip():
        return None
    path = Path(str(value)).expanduser()
    if path.is_absolute():
        return path
    return ((repo_root or REPO_ROOT) / path).resolve()
