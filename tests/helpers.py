from __future__ import annotations

from contextlib import redirect_stderr, redirect_stdout
from dataclasses import dataclass
import io
from pathlib import Path

from todobot import cli
from todobot.config import TodoConfig
from todobot.records import GoalType, RecordSet
from todobot.state import AppState


@dataclass(frozen=True)
class CliRun:
    code: int
    stdout: str
    stderr: str


def run_cli(config_path: Path, *words: str) -> CliRun:
    out = io.StringIO()
    err = io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        code = cli.main(["--config", str(config_path), *words])
    return CliRun(code, out.getvalue(), err.getvalue())


def make_state(root: Path, *, records: RecordSet | None = None) -> AppState:
    config = TodoConfig(data_path=str(root / "data"))
    return AppState(config=config, config_path=root / "config.toml", records=records or RecordSet())


def sample_records() -> RecordSet:
    records = RecordSet()
    reading = records.add_goal("Read", maximum=10)
    reading.tally.progress = 3
    records.add_goal("Garden", goal_type=GoalType.ELEMENTS)
    records.add_task("Buy milk")
    records.add_task("Pay rent")
    return records
