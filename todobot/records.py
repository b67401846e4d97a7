from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
import tomllib
from typing import Any

from .config import toml_string
from .errors import GoalTypeMismatch, RecordFileError, RecordNotFound


class GoalType(str, Enum):
    TALLY = "tally"
    ELEMENTS = "elements"


@dataclass
class Tally:
    max: int = 0
    progress: int = 0


@dataclass
class Element:
    name: str
    is_done: bool = False


@dataclass
class Goal:
    name: str
    index: int
    goal_type: GoalType = GoalType.TALLY
    tally: Tally = field(default_factory=Tally)
    elements: list[Element] = field(default_factory=list)

    def summary(self) -> str:
        if self.goal_type is GoalType.TALLY:
            return f"{self.tally.progress}/{self.tally.max}"
        done = sum(1 for element in self.elements if element.is_done)
        return f"{done}/{len(self.elements)} done"


@dataclass
class Task:
    name: str
    index: int


@dataclass
class RecordSet:
    goals: list[Goal] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    next_goal_index: int = 0
    next_task_index: int = 0

    def collection(self, name: str) -> list:
        if name == "goals":
            return self.goals
        if name == "tasks":
            return self.tasks
        raise KeyError(name)

    def add_task(self, name: str) -> Task:
        task = Task(name=name, index=self.next_task_index)
        self.next_task_index += 1
        self.tasks.append(task)
        return task

    def find_task(self, index: int) -> Task:
        for task in self.tasks:
            if task.index == index:
                return task
        raise RecordNotFound("task", index)

    def remove_task(self, index: int) -> Task:
        task = self.find_task(index)
        self.tasks.remove(task)
        return task

    def add_goal(self, name: str, *, goal_type: GoalType = GoalType.TALLY, maximum: int = 0) -> Goal:
        goal = Goal(name=name, index=self.next_goal_index, goal_type=goal_type, tally=Tally(max=max(0, maximum)))
        self.next_goal_index += 1
        self.goals.append(goal)
        return goal

    def find_goal(self, index: int) -> Goal:
        for goal in self.goals:
            if goal.index == index:
                return goal
        raise RecordNotFound("goal", index)

    def remove_goal(self, index: int) -> Goal:
        goal = self.find_goal(index)
        self.goals.remove(goal)
        return goal


def require_goal_type(goal: Goal, goal_type: GoalType) -> Goal:
    if goal.goal_type is not goal_type:
        raise GoalTypeMismatch(goal.index, goal_type.value)
    return goal


def format_listing(records: RecordSet) -> str:
    lines = ["Tasks"]
    if records.tasks:
        lines.extend(f"{task.index}: {task.name}" for task in records.tasks)
    else:
        lines.append("(none)")
    lines.append("")
    lines.append("Goals")
    if records.goals:
        for goal in records.goals:
            lines.append(f"{goal.index}: {goal.name} [{goal.goal_type.value} {goal.summary()}]")
            if goal.goal_type is GoalType.ELEMENTS:
                for position, element in enumerate(goal.elements):
                    mark = "x" if element.is_done else " "
                    lines.append(f"    [{mark}] {position}: {element.name}")
    else:
        lines.append("(none)")
    return "\n".join(lines)


def _require(table: dict[str, Any], key: str, kind: type, where: str):
    value = table.get(key)
    # bool is an int subclass; keep the two apart.
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise RecordFileError(f"{where}: `{key}` must be {kind.__name__}")
    return value


def _require_index(table: dict[str, Any], where: str) -> int:
    index = _require(table, "index", int, where)
    if index < 0:
        raise RecordFileError(f"{where}: `index` must not be negative")
    return index


def _require_unique(kind: str, indices: list[int]) -> None:
    seen: set[int] = set()
    for index in indices:
        if index in seen:
            raise RecordFileError(f"{kind}: index {index} is used more than once")
        seen.add(index)


def _parse_goal(raw: Any, position: int) -> Goal:
    where = f"goals[{position}]"
    if not isinstance(raw, dict):
        raise RecordFileError(f"{where}: expected a table")
    type_token = _require(raw, "type", str, where)
    try:
        goal_type = GoalType(type_token)
    except ValueError as exc:
        raise RecordFileError(f"{where}: unknown goal type {type_token!r}") from exc

    tally_raw = raw.get("tally", {})
    if not isinstance(tally_raw, dict):
        raise RecordFileError(f"{where}.tally: expected a table")
    tally = Tally(
        max=_require(tally_raw, "max", int, f"{where}.tally") if "max" in tally_raw else 0,
        progress=_require(tally_raw, "progress", int, f"{where}.tally") if "progress" in tally_raw else 0,
    )

    elements_raw = raw.get("elements", [])
    if not isinstance(elements_raw, list):
        raise RecordFileError(f"{where}.elements: expected an array of tables")
    elements: list[Element] = []
    for element_pos, item in enumerate(elements_raw):
        element_where = f"{where}.elements[{element_pos}]"
        if not isinstance(item, dict):
            raise RecordFileError(f"{element_where}: expected a table")
        elements.append(
            Element(
                name=_require(item, "name", str, element_where),
                is_done=_require(item, "done", bool, element_where) if "done" in item else False,
            )
        )

    return Goal(
        name=_require(raw, "name", str, where),
        index=_require_index(raw, where),
        goal_type=goal_type,
        tally=tally,
        elements=elements,
    )


def _parse_task(raw: Any, position: int) -> Task:
    where = f"tasks[{position}]"
    if not isinstance(raw, dict):
        raise RecordFileError(f"{where}: expected a table")
    return Task(name=_require(raw, "name", str, where), index=_require_index(raw, where))


def load_records(path: Path) -> RecordSet:
    """Read records.toml. Missing file means an empty record set.

    Anything malformed raises RecordFileError; there is no partial recovery.
    """

    if not path.exists():
        return RecordSet()
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise RecordFileError(f"{path.name} parse failed: {exc}") from exc

    goals_raw = data.get("goals", [])
    tasks_raw = data.get("tasks", [])
    if not isinstance(goals_raw, list) or not isinstance(tasks_raw, list):
        raise RecordFileError("`goals` and `tasks` must be arrays of tables")
    goals = [_parse_goal(raw, pos) for pos, raw in enumerate(goals_raw)]
    tasks = [_parse_task(raw, pos) for pos, raw in enumerate(tasks_raw)]
    _require_unique("goals", [goal.index for goal in goals])
    _require_unique("tasks", [task.index for task in tasks])

    counters = data.get("counters", {})
    if not isinstance(counters, dict):
        raise RecordFileError("`counters` must be a table")
    next_goal = counters.get("goal", 0)
    next_task = counters.get("task", 0)
    if not isinstance(next_goal, int) or not isinstance(next_task, int):
        raise RecordFileError("counters must be integers")

    # A hand-edited file may lag behind its own entries; never hand out a live index.
    next_goal = max([next_goal, *(goal.index + 1 for goal in goals)])
    next_task = max([next_task, *(task.index + 1 for task in tasks)])
    return RecordSet(goals=goals, tasks=tasks, next_goal_index=next_goal, next_task_index=next_task)


def render_records(records: RecordSet) -> str:
    lines = [
        "[counters]",
        f"goal = {records.next_goal_index}",
        f"task = {records.next_task_index}",
    ]
    for task in records.tasks:
        lines.extend(["", "[[tasks]]", f"name = {toml_string(task.name)}", f"index = {task.index}"])
    for goal in records.goals:
        lines.extend(
            [
                "",
                "[[goals]]",
                f"name = {toml_string(goal.name)}",
                f"index = {goal.index}",
                f"type = {toml_string(goal.goal_type.value)}",
                "",
                "[goals.tally]",
                f"max = {goal.tally.max}",
                f"progress = {goal.tally.progress}",
            ]
        )
        for element in goal.elements:
            lines.extend(
                [
                    "",
                    "[[goals.elements]]",
                    f"name = {toml_string(element.name)}",
                    f"done = {'true' if element.is_done else 'false'}",
                ]
            )
    return "\n".join(lines) + "\n"


def save_records(path: Path, records: RecordSet) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_records(records), encoding="utf-8")
