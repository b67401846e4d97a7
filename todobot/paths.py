from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


CONFIG_FILENAME = "config.toml"
RECORDS_FILENAME = "records.toml"
EVENTS_FILENAME = "events.jsonl"


def config_root() -> Path:
    """Directory holding config.toml, the default data dir and logs.

    `TODOBOT_HOME` wins; otherwise we follow XDG and fall back to ~/.config.
    """

    override = os.environ.get("TODOBOT_HOME", "").strip()
    if override:
        return Path(override).expanduser()
    xdg = os.environ.get("XDG_CONFIG_HOME", "").strip()
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / "todobot"


def default_config_path() -> Path:
    return config_root() / CONFIG_FILENAME


@dataclass(frozen=True)
class RuntimePaths:
    config_file: Path
    data_dir: Path
    records_file: Path
    logs_dir: Path
    events_file: Path


def runtime_paths(config_file: Path, data_path: str = "") -> RuntimePaths:
    root = config_file.parent
    data_dir = Path(data_path).expanduser() if data_path.strip() else root / "data"
    logs_dir = root / "logs"
    return RuntimePaths(
        config_file=config_file,
        data_dir=data_dir,
        records_file=data_dir / RECORDS_FILENAME,
        logs_dir=logs_dir,
        events_file=logs_dir / EVENTS_FILENAME,
    )
