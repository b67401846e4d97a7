from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from typing import Any

from .config import explain_config
from .errors import InvalidBoolToken, InvalidIndex, InvalidNumber, MissingArgument, UnknownCommand
from .nodes import Node, NodeKind, action, bool_value, parent, string_value
from .records import Element, GoalType, require_goal_type
from .state import AppState


BOOL_TOKENS = {"on": True, "off": False}


@dataclass(frozen=True)
class ValueBinding:
    get: Callable[[AppState], Any]
    set: Callable[[AppState, Any], None]


@dataclass(frozen=True)
class CommandOutcome:
    path: tuple[str, ...]
    message: str
    changed: bool


def _set_config(state: AppState, **changes: Any) -> None:
    state.config = replace(state.config, **changes)


def _set_git(state: AppState, **changes: Any) -> None:
    state.config = replace(state.config, git=replace(state.config.git, **changes))


VALUE_BINDINGS: dict[str, ValueBinding] = {
    "config.data_path": ValueBinding(
        get=lambda state: state.config.data_path,
        set=lambda state, value: _set_config(state, data_path=value),
    ),
    "config.debug": ValueBinding(
        get=lambda state: state.config.debug,
        set=lambda state, value: _set_config(state, debug=value),
    ),
    "config.git.username": ValueBinding(
        get=lambda state: state.config.git.username,
        set=lambda state, value: _set_git(state, username=value),
    ),
    "config.git.mail": ValueBinding(
        get=lambda state: state.config.git.mail,
        set=lambda state, value: _set_git(state, mail=value),
    ),
    "config.git.token": ValueBinding(
        get=lambda state: state.config.git.token,
        set=lambda state, value: _set_git(state, token=value),
    ),
}


def dispatch(
    node: Node,
    args: Sequence[str],
    state: AppState,
    carried_value: str = "",
    *,
    path: tuple[str, ...] = (),
) -> CommandOutcome:
    """Route `args` down from `node` to exactly one leaf and apply it.

    Children are tried in declaration order and the first name match wins. A
    child that captures a value takes `args[0]` as the carried value and is
    matched against `args[1]`; the carried value then reaches every action
    below it.
    """

    path = (*path, node.name)
    if node.requires_argument and not args:
        raise MissingArgument(" ".join(path))

    if node.children:
        return _dispatch_children(node, args, state, carried_value, path)

    if node.kind is NodeKind.ACTION:
        argument = args[0] if args else ""
        changed, message = node.action(state, argument, carried_value)
        if changed:
            state.dirty = True
        return CommandOutcome(path, message, changed)

    binding = VALUE_BINDINGS[node.binding]
    token = args[0]
    if node.kind is NodeKind.BOOL:
        if token not in BOOL_TOKENS:
            raise InvalidBoolToken(token)
        binding.set(state, BOOL_TOKENS[token])
    else:
        binding.set(state, token)
    dotted = ".".join(path[1:])
    if node.binding.endswith(".token"):
        return CommandOutcome(path, f"{dotted} updated", True)
    return CommandOutcome(path, f"{dotted} set to {token}", True)


def _dispatch_children(
    node: Node,
    args: Sequence[str],
    state: AppState,
    carried_value: str,
    path: tuple[str, ...],
) -> CommandOutcome:
    offending = ""
    for child in node.children:
        value = carried_value
        offset = 0
        if child.captures_value:
            if not args:
                continue
            value = args[0]
            offset = 1
        if offset >= len(args):
            continue
        token = args[offset]
        if token == child.name:
            return dispatch(child, args[offset + 1 :], state, value, path=path)
        if not offending:
            offending = token
    if not offending:
        raise MissingArgument(" ".join(path))
    raise UnknownCommand(offending)


def _is_plain_number(token: str) -> bool:
    return token.isascii() and token.isdigit()


def _parse_index(token: str) -> int:
    if not _is_plain_number(token):
        raise InvalidIndex(token)
    return int(token)


def _parse_number(token: str) -> int:
    if not _is_plain_number(token):
        raise InvalidNumber(token)
    return int(token)


def _config_show(state: AppState, _argument: str, _carried: str) -> tuple[bool, str]:
    return False, explain_config(state.config, path=state.config_path)


def _task_new(state: AppState, argument: str, _carried: str) -> tuple[bool, str]:
    task = state.records.add_task(argument)
    return True, f"task {task.index} created: {task.name}"


def _task_remove(state: AppState, argument: str, _carried: str) -> tuple[bool, str]:
    task = state.records.remove_task(_parse_index(argument))
    return True, f"task {task.index} removed: {task.name}"


def _goal_new(state: AppState, argument: str, _carried: str) -> tuple[bool, str]:
    goal = state.records.add_goal(argument or "untitled")
    return True, f"goal {goal.index} created: {goal.name}"


def _goal_remove(state: AppState, argument: str, _carried: str) -> tuple[bool, str]:
    goal = state.records.remove_goal(_parse_index(argument))
    return True, f"goal {goal.index} removed: {goal.name}"


def _tally_max(state: AppState, argument: str, carried: str) -> tuple[bool, str]:
    goal = require_goal_type(state.records.find_goal(_parse_index(carried)), GoalType.TALLY)
    if not argument:
        return False, f"goal {goal.index} max: {goal.tally.max}"
    goal.tally.max = _parse_number(argument)
    goal.tally.progress = min(goal.tally.progress, goal.tally.max)
    return True, f"goal {goal.index} max set to {goal.tally.max}"


def _tally_progress(state: AppState, argument: str, carried: str) -> tuple[bool, str]:
    goal = require_goal_type(state.records.find_goal(_parse_index(carried)), GoalType.TALLY)
    if not argument:
        return False, f"goal {goal.index} progress: {goal.tally.progress}/{goal.tally.max}"
    goal.tally.progress = min(_parse_number(argument), goal.tally.max)
    return True, f"goal {goal.index} progress set to {goal.tally.progress}/{goal.tally.max}"


def _element_add(state: AppState, argument: str, carried: str) -> tuple[bool, str]:
    goal = require_goal_type(state.records.find_goal(_parse_index(carried)), GoalType.ELEMENTS)
    goal.elements.append(Element(name=argument))
    return True, f"goal {goal.index} element {len(goal.elements) - 1} added: {argument}"


def _element_check(state: AppState, argument: str, carried: str) -> tuple[bool, str]:
    goal = require_goal_type(state.records.find_goal(_parse_index(carried)), GoalType.ELEMENTS)
    position = _parse_index(argument)
    if position >= len(goal.elements):
        raise InvalidIndex(argument)
    element = goal.elements[position]
    element.is_done = not element.is_done
    return True, f"goal {goal.index} element {position} {'done' if element.is_done else 'open'}: {element.name}"


def build_command_tree() -> Node:
    return parent(
        "todobot",
        parent(
            "config",
            string_value("data_path", "config.data_path"),
            bool_value("debug", "config.debug"),
            parent(
                "git",
                string_value("username", "config.git.username"),
                string_value("mail", "config.git.mail"),
                string_value("token", "config.git.token"),
            ),
            action("show", _config_show, requires_argument=False),
        ),
        parent(
            "task",
            action("new", _task_new),
            action("remove", _task_remove),
        ),
        parent(
            "goal",
            action("new", _goal_new, requires_argument=False),
            action("remove", _goal_remove),
            parent(
                "tally",
                action("max", _tally_max, requires_argument=False, captures_value=True),
                action("progress", _tally_progress, requires_argument=False, captures_value=True),
            ),
            parent(
                "element",
                action("add", _element_add, captures_value=True),
                action("check", _element_check, captures_value=True),
            ),
        ),
    )
