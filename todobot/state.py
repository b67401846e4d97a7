from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .config import TodoConfig, load_config, write_config
from .events import DebugLog, EventKind
from .git_sync import pull_records, push_records
from .paths import RuntimePaths, runtime_paths
from .records import RecordSet, load_records, save_records


@dataclass
class AppState:
    """Everything a command, motion or form commit may read or mutate."""

    config: TodoConfig
    config_path: Path
    records: RecordSet = field(default_factory=RecordSet)
    debug_log: DebugLog = field(default_factory=DebugLog)
    dirty: bool = False

    @property
    def paths(self) -> RuntimePaths:
        return runtime_paths(self.config_path, self.config.data_path)


def load_state(config_path: Path) -> AppState:
    """Read config, pull the record dir when sync is on, then read records.

    ConfigError, SyncError and RecordFileError propagate; callers treat them as fatal.
    """

    config = load_config(config_path)
    state = AppState(config=config, config_path=config_path)
    paths = state.paths
    if config.debug:
        state.debug_log = DebugLog(paths.events_file)

    if config.git.enabled:
        result = pull_records(paths.data_dir, config.git)
        state.debug_log.record(EventKind.SYNC, "pull", result.summary, changed=result.changed)

    state.records = load_records(paths.records_file)
    state.debug_log.record(
        EventKind.RECORDS,
        "loaded",
        f"{len(state.records.tasks)} tasks, {len(state.records.goals)} goals",
        path=str(paths.records_file),
    )
    return state


def save_state(state: AppState, *, message: str = "todobot: update records") -> None:
    """Rewrite config every time; write and push records only when dirty."""

    write_config(state.config_path, state.config)
    if not state.dirty:
        return

    paths = state.paths
    save_records(paths.records_file, state.records)
    state.dirty = False
    state.debug_log.record(EventKind.RECORDS, "saved", str(paths.records_file))

    if state.config.git.enabled:
        result = push_records(paths.data_dir, state.config.git, message=message)
        state.debug_log.record(EventKind.SYNC, "push", result.summary, commit=result.commit)
