from __future__ import annotations

from .forms import FieldKind, Form
from .motions import InputMode, MotionEngine, MotionLog
from .records import Goal, GoalType, RecordSet


def breadcrumb_text(log: MotionLog) -> str:
    return " > ".join(log.labels())


def status_text(engine: MotionEngine) -> str:
    mode = "edit" if engine.mode is InputMode.FIELD_ENTRY else "nav"
    parts = [breadcrumb_text(engine.log), f"[{mode}]"]
    if engine.message:
        parts.append(engine.message)
    return "  ".join(parts)


def _home(records: RecordSet) -> str:
    return "\n".join(
        [
            "todobot",
            "",
            f"goals: {len(records.goals)}",
            f"tasks: {len(records.tasks)}",
        ]
    )


def _goals(records: RecordSet) -> str:
    lines = ["Goals", ""]
    if not records.goals:
        lines.append("(none)")
    for position, goal in enumerate(records.goals):
        lines.append(f"{position}  {goal.name}  [{goal.summary()}]")
    return "\n".join(lines)


def _tasks(records: RecordSet) -> str:
    lines = ["Tasks", ""]
    if not records.tasks:
        lines.append("(none)")
    for position, task in enumerate(records.tasks):
        lines.append(f"{position}  {task.name}")
    return "\n".join(lines)


def _goal(goal: Goal | None) -> str:
    if goal is None:
        return "goal no longer exists"
    lines = [f"{goal.name}  (#{goal.index}, {goal.goal_type.value})", ""]
    if goal.goal_type is GoalType.TALLY:
        lines.append(f"progress: {goal.tally.progress}/{goal.tally.max}")
    elif not goal.elements:
        lines.append("(no elements)")
    for position, element in enumerate(goal.elements):
        mark = "x" if element.is_done else " "
        lines.append(f"[{mark}] {position}  {element.name}")
    return "\n".join(lines)


def _form(form: Form, engine: MotionEngine) -> str:
    editing = engine.mode is InputMode.FIELD_ENTRY and engine.editor is not None
    lines = [form.page, ""]
    for position, item in enumerate(form.fields):
        marker = ">" if editing and engine.editor.focused == position else " "
        value = item.value if item.kind is FieldKind.INT else f'"{item.value}"'
        lines.append(f"{marker} {item.name}: {value}")
    return "\n".join(lines)


def _settings(engine: MotionEngine) -> str:
    config = engine.state.config
    lines = [
        "Settings",
        "",
        f"data_path: {config.data_path or '(default)'}",
        f"debug: {'on' if config.debug else 'off'}",
        f"git sync: {'on' if config.git.enabled else 'off'}",
    ]
    last = engine.state.debug_log.last()
    if last is not None:
        lines.append(f"last event: {last.name} ({last.message})")
    return "\n".join(lines)


def page_text(engine: MotionEngine) -> str:
    """Text for the current page, resolved against live records every call."""

    records = engine.state.records
    page = engine.page
    header = ""
    if page.startswith("goal."):
        goal = engine.selected_goal()
        header = _goal(goal) + "\n\n" if goal is not None else ""
    elif page.startswith("task."):
        task = engine.selected_task()
        header = f"{task.name}  (#{task.index})\n\n" if task is not None else ""

    form = engine.form
    if form is not None:
        return header + _form(form, engine)
    if page == "goals":
        return _goals(records)
    if page == "tasks":
        return _tasks(records)
    if page == "goal":
        return _goal(engine.selected_goal())
    if page == "task":
        task = engine.selected_task()
        return "task no longer exists" if task is None else f"{task.name}  (#{task.index})"
    if page == "settings":
        return _settings(engine)
    return _home(records)
