from __future__ import annotations

import argparse
from pathlib import Path
import sys

from . import __version__
from .commands import build_command_tree, dispatch
from .errors import CommandError, ConfigError, RecordFileError, SyncError
from .events import EventKind
from .paths import default_config_path
from .records import format_listing
from .state import AppState, load_state, save_state


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="todobot",
        description="todobot: tasks and goals from the command line or a modal terminal app",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.toml")
    parser.add_argument("--tui", action="store_true", help="Start the interactive terminal app.")
    parser.add_argument(
        "words",
        nargs=argparse.REMAINDER,
        help="config|task|goal ... (no words prints the current listing)",
    )
    return parser


def _run_terminal_app_entry(state: AppState) -> int:
    from .app import run_terminal_app

    return run_terminal_app(state)


def cmd_app(state: AppState) -> int:
    try:
        return _run_terminal_app_entry(state)
    except ModuleNotFoundError as exc:
        if exc.name == "textual":
            print("Interactive app requires `textual`. Install it (pip install textual), then retry.", file=sys.stderr)
            return 1
        raise


def cmd_listing(state: AppState) -> int:
    print(format_listing(state.records))
    save_state(state)
    return 0


def cmd_dispatch(state: AppState, words: list[str]) -> int:
    code = 0
    try:
        outcome = dispatch(build_command_tree(), words, state)
    except CommandError as exc:
        state.debug_log.record(EventKind.COMMAND, "rejected", str(exc), ok=False, args=words)
        print(f"error: {exc}", file=sys.stderr)
        code = 1
    else:
        state.debug_log.record(
            EventKind.COMMAND,
            "dispatched",
            outcome.message,
            path=list(outcome.path),
            changed=outcome.changed,
        )
        print(outcome.message)

    save_state(state, message=f"todobot: {' '.join(words[:2])}")
    return code


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else sys.argv[1:])
    config_path = args.config or default_config_path()

    try:
        state = load_state(config_path)
        if args.tui:
            return cmd_app(state)
        if not args.words:
            return cmd_listing(state)
        return cmd_dispatch(state, list(args.words))
    except (ConfigError, RecordFileError, SyncError) as exc:
        print(f"fatal: {exc}", file=sys.stderr)
        return 1
