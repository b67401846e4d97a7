from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .state import AppState

# (state, argument, carried value) -> (changed, message)
CommandAction = Callable[[AppState, str, str], tuple[bool, str]]


class NodeKind(str, Enum):
    PARENT = "parent"
    STRING = "string"
    BOOL = "bool"
    ACTION = "action"
    MNEMONIC = "mnemonic"
    NUMERIC = "numeric"


LEAF_KINDS = frozenset({NodeKind.STRING, NodeKind.BOOL, NodeKind.ACTION})


@dataclass(frozen=True)
class Node:
    """One grammar node, shared by the argv tree and the keystroke tree.

    Text-mode nodes match on `name`; key-mode nodes match on `key` (mnemonic)
    or a digit bounded by the live size of the `bound` collection (numeric).
    """

    name: str
    kind: NodeKind
    children: tuple[Node, ...] = ()
    captures_value: bool = False
    requires_argument: bool = True
    binding: str = ""
    action: CommandAction | None = None
    key: str = ""
    page: str = ""
    bound: str = ""

    def __post_init__(self) -> None:
        if self.kind in LEAF_KINDS and self.children:
            raise ValueError(f"{self.name}: value/action leaves cannot have children")
        if self.kind is NodeKind.PARENT and not self.children:
            raise ValueError(f"{self.name}: parent nodes need at least one child")
        if self.kind in {NodeKind.STRING, NodeKind.BOOL} and not self.binding:
            raise ValueError(f"{self.name}: value nodes need a binding key")
        if self.kind is NodeKind.ACTION and self.action is None:
            raise ValueError(f"{self.name}: action nodes need a callable")
        if self.kind is NodeKind.MNEMONIC and len(self.key) != 1:
            raise ValueError(f"{self.name}: mnemonic key must be one character")
        if self.kind is NodeKind.NUMERIC and not self.bound:
            raise ValueError(f"{self.name}: numeric nodes need a bound collection")

    def find_mnemonic(self, key: str) -> Node | None:
        for child in self.children:
            if child.kind is NodeKind.MNEMONIC and child.key == key:
                return child
        return None

    def find_numeric(self) -> Node | None:
        for child in self.children:
            if child.kind is NodeKind.NUMERIC:
                return child
        return None


def parent(name: str, *children: Node, captures_value: bool = False, page: str = "") -> Node:
    return Node(name=name, kind=NodeKind.PARENT, children=children, captures_value=captures_value, page=page)


def string_value(name: str, binding: str) -> Node:
    return Node(name=name, kind=NodeKind.STRING, binding=binding)


def bool_value(name: str, binding: str) -> Node:
    return Node(name=name, kind=NodeKind.BOOL, binding=binding)


def action(name: str, fn: CommandAction, *, requires_argument: bool = True, captures_value: bool = False) -> Node:
    return Node(
        name=name,
        kind=NodeKind.ACTION,
        action=fn,
        requires_argument=requires_argument,
        captures_value=captures_value,
    )


def mnemonic(key: str, page: str, *children: Node) -> Node:
    return Node(name=page, kind=NodeKind.MNEMONIC, children=children, key=key, page=page, requires_argument=False)


def numeric(page: str, bound: str, *children: Node) -> Node:
    return Node(name=page, kind=NodeKind.NUMERIC, children=children, page=page, bound=bound, requires_argument=False)
