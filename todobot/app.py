from __future__ import annotations

import sys

from textual import events
from textual.app import App, ComposeResult
from textual.widgets import Static

from .errors import SyncError
from .motions import MotionEngine, build_motion_tree
from .pages import page_text, status_text
from .state import AppState, save_state

NAMED_KEYS = frozenset({"enter", "backspace", "up", "down", "escape"})


def key_token(event: events.Key) -> str | None:
    """Map a textual key event onto the engine's key vocabulary."""

    if event.key in NAMED_KEYS:
        return event.key
    if event.key.startswith("ctrl+"):
        return None
    character = event.character
    if character and len(character) == 1 and character.isprintable():
        return character
    return None


class TodoTerminalApp(App[None]):
    CSS = """
    Screen {
        layout: vertical;
    }

    #status-bar {
        height: 1;
        padding: 0 1;
        background: $boost;
        color: $text;
    }

    #page {
        height: 1fr;
        border: solid $accent;
        padding: 0 1;
    }
    """

    BINDINGS = [
        ("ctrl+c", "request_quit", "Quit"),
        ("ctrl+q", "request_quit", "Quit"),
    ]

    def __init__(self, state: AppState) -> None:
        super().__init__()
        self.state = state
        self.engine = MotionEngine(build_motion_tree(), state)

        self.status_bar: Static
        self.page_panel: Static

    def compose(self) -> ComposeResult:
        yield Static("", id="status-bar", markup=False)
        yield Static("", id="page", markup=False)

    def on_mount(self) -> None:
        self.status_bar = self.query_one("#status-bar", Static)
        self.page_panel = self.query_one("#page", Static)
        self._redraw()

    def on_key(self, event: events.Key) -> None:
        key = key_token(event)
        if key is None:
            return
        event.stop()
        self.engine.handle_key(key)
        self._redraw()

    def action_request_quit(self) -> None:
        self.exit()

    def _redraw(self) -> None:
        self.status_bar.update(status_text(self.engine))
        self.page_panel.update(page_text(self.engine))


def run_terminal_app(state: AppState) -> int:
    app = TodoTerminalApp(state)
    app.run(mouse=False)
    # The loop only ends on an explicit quit; flush before the process exits.
    try:
        save_state(state, message="todobot: update records from terminal app")
    except (OSError, SyncError) as exc:
        print(f"save failed: {exc}", file=sys.stderr)
        return 1
    return 0
