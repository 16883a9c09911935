"""
pgibbs/graph/tree.py

Per-vertex tree-growth state.

Each state is its own frozen variant carrying only the fields that mean
something in that state:

    Available                       not in any tree
    Candidate(parent)               proposed as a child of `parent`
    Boundary(parent, height)        in a tree, on its growing frontier
    TreeNode(parent, height, marked_up)
                                    in a tree, interior
    Calibrated(parent, height)      upward message sent

`parent` is None for a tree root. NULL_VID stands in for None wherever a
parent has to be written as an integer (checkpoints, reports).
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Union

NULL_VID = -1


class VertexState(IntEnum):
    """Raw enumerant values; stable across checkpoints."""
    AVAILABLE = 0
    CANDIDATE = 1
    BOUNDARY = 2
    TREE_NODE = 3
    CALIBRATED = 4


class InvalidTransitionError(RuntimeError):
    """A tree-growth transition was requested from the wrong state."""


@dataclass(frozen=True)
class Available:
    state = VertexState.AVAILABLE


@dataclass(frozen=True)
class Candidate:
    parent: int
    state = VertexState.CANDIDATE


@dataclass(frozen=True)
class Boundary:
    parent: Optional[int]
    height: int
    state = VertexState.BOUNDARY


@dataclass(frozen=True)
class TreeNode:
    parent: Optional[int]
    height: int
    marked_up: int = 0
    state = VertexState.TREE_NODE


@dataclass(frozen=True)
class Calibrated:
    parent: Optional[int]
    height: int
    state = VertexState.CALIBRATED


TreeState = Union[Available, Candidate, Boundary, TreeNode, Calibrated]


def tree_state_from_fields(state: int, parent: int, height: int, marked_up: int = 0) -> TreeState:
    """
    Rebuild a variant from its flat (state, parent, height) encoding.

    Raises:
        ValueError: unknown enumerant or a parent missing where required
    """
    try:
        st = VertexState(state)
    except ValueError:
        raise ValueError(f"Unknown vertex state enumerant {state}") from None
    p = None if parent == NULL_VID else parent
    if st is VertexState.AVAILABLE:
        return Available()
    if st is VertexState.CANDIDATE:
        if p is None:
            raise ValueError("CANDIDATE vertex must carry a parent proposal")
        return Candidate(p)
    if st is VertexState.BOUNDARY:
        return Boundary(p, height)
    if st is VertexState.TREE_NODE:
        return TreeNode(p, height, marked_up)
    return Calibrated(p, height)


class AtomicCounter:
    """
    Integer counter safe under concurrent increment/decrement.

    Reset only at a round boundary, when no writer can be mid-update.
    """

    __slots__ = ("_value", "_lock")

    def __init__(self, value: int = 0):
        self._value = value
        self._lock = threading.Lock()

    def increment(self, n: int = 1) -> int:
        """Add n and return the new value."""
        with self._lock:
            self._value += n
            return self._value

    def decrement(self, n: int = 1) -> int:
        """Subtract n and return the new value."""
        with self._lock:
            self._value -= n
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def reset(self, value: int = 0) -> None:
        with self._lock:
            self._value = value

    def __eq__(self, other) -> bool:
        if isinstance(other, AtomicCounter):
            return self.value == other.value
        return NotImplemented

    def __repr__(self) -> str:
        return f"AtomicCounter({self.value})"
