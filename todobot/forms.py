from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from .errors import InvalidIndex, MissingArgument, RecordNotFound
from .records import Element, Goal, GoalType, Task, require_goal_type
from .state import AppState

KEY_CONFIRM = "enter"
KEY_CANCEL = "escape"
KEY_UP = "up"
KEY_DOWN = "down"

DIGITS = frozenset("0123456789")

# (state, field values, selection by collection) -> status message
FormCommit = Callable[[AppState, dict[str, int | str], Mapping[str, int]], str]


class FieldKind(str, Enum):
    INT = "int"
    STRING = "string"


class FormSignal(str, Enum):
    IGNORED = "ignored"
    CHANGED = "changed"
    CANCEL = "cancel"
    CONFIRM = "confirm"


@dataclass
class InputField:
    name: str
    kind: FieldKind
    bounds: tuple[int, int] = (0, 9999)
    value: int | str = field(init=False)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.value = 0 if self.kind is FieldKind.INT else ""

    def accept(self, char: str) -> bool:
        """Append one character; anything the field cannot hold is ignored.

        Entry is append-only: there is no cursor and no in-field deletion.
        """

        if len(char) != 1:
            return False
        if self.kind is FieldKind.INT:
            if char not in DIGITS:
                return False
            candidate = int(self.value) * 10 + int(char)
            if candidate > self.bounds[1]:
                return False
            self.value = candidate
            return True
        if not char.isalpha():
            return False
        self.value = f"{self.value}{char}"
        return True

    def committed_value(self) -> int | str:
        if self.kind is FieldKind.INT:
            low, high = self.bounds
            return min(max(int(self.value), low), high)
        return str(self.value)


@dataclass
class Form:
    page: str
    fields: list[InputField]
    commit: FormCommit

    def __post_init__(self) -> None:
        if not self.fields:
            raise ValueError(f"{self.page}: forms need at least one field")

    def values(self) -> dict[str, int | str]:
        return {item.name: item.committed_value() for item in self.fields}

    def reset(self) -> None:
        for item in self.fields:
            item.reset()

    def confirm(self, state: AppState, selection: Mapping[str, int]) -> str:
        message = self.commit(state, self.values(), selection)
        self.reset()
        return message


class FormEditor:
    """Focused-field editing for one form; the caller owns mode changes."""

    def __init__(self, form: Form) -> None:
        self.form = form
        self.focused = 0

    @property
    def field(self) -> InputField:
        return self.form.fields[self.focused]

    @property
    def on_last_field(self) -> bool:
        return self.focused == len(self.form.fields) - 1

    def move(self, delta: int) -> bool:
        target = min(max(self.focused + delta, 0), len(self.form.fields) - 1)
        if target == self.focused:
            return False
        self.focused = target
        return True

    def handle_key(self, key: str) -> FormSignal:
        if key == KEY_CANCEL:
            return FormSignal.CANCEL
        if key == KEY_UP:
            if self.focused == 0:
                return FormSignal.CANCEL
            self.move(-1)
            return FormSignal.CHANGED
        if key == KEY_DOWN:
            return FormSignal.CHANGED if self.move(1) else FormSignal.IGNORED
        if key == KEY_CONFIRM:
            if self.on_last_field:
                return FormSignal.CONFIRM
            self.move(1)
            return FormSignal.CHANGED
        return FormSignal.CHANGED if self.field.accept(key) else FormSignal.IGNORED


def _selected_goal(state: AppState, selection: Mapping[str, int]) -> Goal:
    position = selection.get("goals")
    if position is None or position >= len(state.records.goals):
        raise RecordNotFound("goal", -1 if position is None else position)
    return state.records.goals[position]


def _selected_task(state: AppState, selection: Mapping[str, int]) -> Task:
    position = selection.get("tasks")
    if position is None or position >= len(state.records.tasks):
        raise RecordNotFound("task", -1 if position is None else position)
    return state.records.tasks[position]


def _commit_new_goal(state: AppState, values: dict[str, int | str], _selection: Mapping[str, int]) -> str:
    name = str(values["name"])
    if not name:
        raise MissingArgument("name")
    goal_type = GoalType.ELEMENTS if values["type"] == 1 else GoalType.TALLY
    goal = state.records.add_goal(name, goal_type=goal_type, maximum=int(values["max"]))
    return f"goal {goal.index} created: {goal.name}"


def _commit_progress(state: AppState, values: dict[str, int | str], selection: Mapping[str, int]) -> str:
    goal = require_goal_type(_selected_goal(state, selection), GoalType.TALLY)
    goal.tally.progress = min(int(values["progress"]), goal.tally.max)
    return f"goal {goal.index} progress set to {goal.tally.progress}/{goal.tally.max}"


def _commit_element(state: AppState, values: dict[str, int | str], selection: Mapping[str, int]) -> str:
    goal = require_goal_type(_selected_goal(state, selection), GoalType.ELEMENTS)
    name = str(values["name"])
    if not name:
        raise MissingArgument("name")
    goal.elements.append(Element(name=name))
    return f"goal {goal.index} element added: {name}"


def _commit_check(state: AppState, values: dict[str, int | str], selection: Mapping[str, int]) -> str:
    goal = require_goal_type(_selected_goal(state, selection), GoalType.ELEMENTS)
    position = int(values["element"])
    if position >= len(goal.elements):
        raise InvalidIndex(str(position))
    element = goal.elements[position]
    element.is_done = not element.is_done
    return f"goal {goal.index} element {position} {'done' if element.is_done else 'open'}"


def _commit_remove_goal(state: AppState, values: dict[str, int | str], selection: Mapping[str, int]) -> str:
    goal = _selected_goal(state, selection)
    if values["confirm"] != 1:
        return f"goal {goal.index} kept"
    state.records.remove_goal(goal.index)
    return f"goal {goal.index} removed: {goal.name}"


def _commit_new_task(state: AppState, values: dict[str, int | str], _selection: Mapping[str, int]) -> str:
    name = str(values["name"])
    if not name:
        raise MissingArgument("name")
    task = state.records.add_task(name)
    return f"task {task.index} created: {task.name}"


def _commit_remove_task(state: AppState, values: dict[str, int | str], selection: Mapping[str, int]) -> str:
    task = _selected_task(state, selection)
    if values["confirm"] != 1:
        return f"task {task.index} kept"
    state.records.remove_task(task.index)
    return f"task {task.index} removed: {task.name}"


def build_forms() -> dict[str, Form]:
    forms = [
        Form(
            "goal.new",
            [
                InputField("name", FieldKind.STRING),
                InputField("type", FieldKind.INT, bounds=(0, 1)),
                InputField("max", FieldKind.INT),
            ],
            _commit_new_goal,
        ),
        Form("goal.progress", [InputField("progress", FieldKind.INT)], _commit_progress),
        Form("goal.element", [InputField("name", FieldKind.STRING)], _commit_element),
        Form("goal.check", [InputField("element", FieldKind.INT, bounds=(0, 99))], _commit_check),
        Form("goal.remove", [InputField("confirm", FieldKind.INT, bounds=(0, 1))], _commit_remove_goal),
        Form("task.new", [InputField("name", FieldKind.STRING)], _commit_new_task),
        Form("task.remove", [InputField("confirm", FieldKind.INT, bounds=(0, 1))], _commit_remove_task),
    ]
    return {form.page: form for form in forms}
