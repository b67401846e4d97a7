from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum

from .errors import CommandError
from .events import EventKind
from .forms import DIGITS, KEY_CONFIRM, Form, FormEditor, FormSignal, build_forms
from .nodes import Node, NodeKind, mnemonic, numeric, parent
from .records import Goal, Task
from .state import AppState

KEY_BACK = "backspace"


class InputMode(str, Enum):
    NAVIGATION = "navigation"
    FIELD_ENTRY = "field_entry"


@dataclass(frozen=True)
class Motion:
    node: Node
    value: int | None = None

    @property
    def label(self) -> str:
        if self.value is None:
            return self.node.page
        return f"{self.node.page} {self.value}"


class MotionLog:
    """Breadcrumb of resolved motions. The root entry is permanent."""

    def __init__(self, root: Node) -> None:
        self._entries: list[Motion] = [Motion(root)]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Motion]:
        return iter(self._entries)

    @property
    def current(self) -> Motion:
        return self._entries[-1]

    def push(self, motion: Motion) -> None:
        self._entries.append(motion)

    def pop(self) -> bool:
        if len(self._entries) == 1:
            return False
        self._entries.pop()
        return True

    def labels(self) -> list[str]:
        return [motion.label for motion in self._entries]


class MotionEngine:
    def __init__(self, root: Node, state: AppState, forms: Mapping[str, Form] | None = None) -> None:
        self.root = root
        self.state = state
        self.forms = dict(forms) if forms is not None else build_forms()
        self.log = MotionLog(root)
        self.mode = InputMode.NAVIGATION
        self.editor: FormEditor | None = None
        self.message = ""

    @property
    def page(self) -> str:
        return self.log.current.node.page

    @property
    def form(self) -> Form | None:
        return self.forms.get(self.page)

    def handle_key(self, key: str) -> bool:
        """Apply one keystroke; returns whether any state changed."""

        if self.mode is InputMode.FIELD_ENTRY:
            return self._edit(key)
        return self._navigate(key)

    def _navigate(self, key: str) -> bool:
        current = self.log.current.node
        if key == KEY_CONFIRM:
            form = self.form
            if form is None:
                return False
            self.editor = FormEditor(form)
            self.mode = InputMode.FIELD_ENTRY
            return True
        if key == KEY_BACK:
            return self.log.pop()
        if key in DIGITS:
            return self._select(current, int(key))
        child = current.find_mnemonic(key)
        if child is None:
            return False
        self.log.push(Motion(child))
        return True

    def _select(self, current: Node, digit: int) -> bool:
        child = current.find_numeric()
        if child is None:
            return False
        if digit >= len(self.state.records.collection(child.bound)):
            return False
        self.log.push(Motion(child, digit))
        return True

    def _edit(self, key: str) -> bool:
        assert self.editor is not None
        signal = self.editor.handle_key(key)
        if signal is FormSignal.CANCEL:
            self._leave_form()
            return True
        if signal is FormSignal.CONFIRM:
            selected = self._selected_records()
            self._commit(self.editor.form)
            self._leave_form()
            self._drop_stale_selection(selected)
            return True
        return signal is FormSignal.CHANGED

    def _commit(self, form: Form) -> None:
        try:
            self.message = form.confirm(self.state, self.selection())
        except CommandError as exc:
            self.message = f"error: {exc}"
            self.state.debug_log.record(EventKind.FORM, "rejected", str(exc), ok=False, page=form.page)
            return
        self.state.dirty = True
        self.state.debug_log.record(EventKind.FORM, "committed", self.message, page=form.page)

    def _leave_form(self) -> None:
        self.editor = None
        self.mode = InputMode.NAVIGATION
        self.log.pop()

    def _selected_records(self) -> dict[str, Goal | Task | None]:
        return {"goals": self.selected_goal(), "tasks": self.selected_task()}

    def _drop_stale_selection(self, before: dict[str, Goal | Task | None]) -> None:
        # Positions shift after a removal; never leave the breadcrumb on a neighbour.
        while self.log.current.node.kind is NodeKind.NUMERIC:
            bound = self.log.current.node.bound
            record = before.get(bound)
            if record is None or any(item is record for item in self.state.records.collection(bound)):
                return
            self.log.pop()

    def selection(self) -> dict[str, int]:
        return {
            motion.node.bound: motion.value
            for motion in self.log
            if motion.node.kind is NodeKind.NUMERIC and motion.value is not None
        }

    def selected_goal(self) -> Goal | None:
        position = self.selection().get("goals")
        goals = self.state.records.goals
        if position is None or position >= len(goals):
            return None
        return goals[position]

    def selected_task(self) -> Task | None:
        position = self.selection().get("tasks")
        tasks = self.state.records.tasks
        if position is None or position >= len(tasks):
            return None
        return tasks[position]


def build_motion_tree() -> Node:
    return parent(
        "home",
        mnemonic(
            "g",
            "goals",
            mnemonic("+", "goal.new"),
            numeric(
                "goal",
                "goals",
                mnemonic("p", "goal.progress"),
                mnemonic("e", "goal.element"),
                mnemonic("c", "goal.check"),
                mnemonic("x", "goal.remove"),
            ),
        ),
        mnemonic(
            "t",
            "tasks",
            mnemonic("+", "task.new"),
            numeric("task", "tasks", mnemonic("x", "task.remove")),
        ),
        mnemonic("s", "settings"),
        page="home",
    )
