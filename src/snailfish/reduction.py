"""Rewrite rules for tree-shaped compound numbers: explode, split, magnitude."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

from snailfish.number import Node

RuleKind: TypeAlias = Literal["explode", "split"]

EXPLODE_DEPTH = 4
SPLIT_THRESHOLD = 10


@dataclass(frozen=True)
class ReductionEvent:
    """A single successful rewrite.

    ``position`` is the reading-order index of the affected leaf (the left
    child for an explode), ``depth`` the depth of the exploded branch or split
    leaf, and ``values`` the leaf pair consumed by an explode or produced by a
    split.
    """

    kind: RuleKind
    position: int
    depth: int
    values: tuple[int, int]


def split_halves(value: int) -> tuple[int, int]:
    half = value // 2
    return half, value - half


# ---------- Explode ----------


def find_explosion(
    root: Node, explode_depth: int = EXPLODE_DEPTH
) -> tuple[Node, int, int] | None:
    """Find the first branch at depth >= *explode_depth* holding two leaves.

    Returns ``(branch, depth, leaf_position)`` in pre-order, or None.
    """
    leaf_position = 0
    stack: list[tuple[Node, int]] = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        if node.is_leaf:
            leaf_position += 1
            continue
        left, right = node.children
        if depth >= explode_depth and left.is_leaf and right.is_leaf:
            return node, depth, leaf_position
        stack.append((right, depth + 1))
        stack.append((left, depth + 1))
    return None


def explode_step(
    root: Node, *, explode_depth: int = EXPLODE_DEPTH
) -> ReductionEvent | None:
    found = find_explosion(root, explode_depth)
    if found is None:
        return None
    branch, depth, position = found
    left, right = branch.children
    values = (left.value, right.value)

    left_neighbor = branch.left_leaf_neighbor()
    if left_neighbor is not None:
        left_neighbor.add_to_value(values[0])
    right_neighbor = branch.right_leaf_neighbor()
    if right_neighbor is not None:
        right_neighbor.add_to_value(values[1])
    branch.collapse(0)

    return ReductionEvent("explode", position, depth, values)


def explode(root: Node, *, explode_depth: int = EXPLODE_DEPTH) -> bool:
    """Explode the first qualifying pair; return whether one was found."""
    return explode_step(root, explode_depth=explode_depth) is not None


# ---------- Split ----------


def find_split(
    root: Node, split_threshold: int = SPLIT_THRESHOLD
) -> tuple[Node, int, int] | None:
    """Find the first leaf with value >= *split_threshold*.

    Returns ``(leaf, depth, leaf_position)``, or None.
    """
    leaf_position = 0
    stack: list[tuple[Node, int]] = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        if node.is_leaf:
            if node.value >= split_threshold:
                return node, depth, leaf_position
            leaf_position += 1
            continue
        left, right = node.children
        stack.append((right, depth + 1))
        stack.append((left, depth + 1))
    return None


def split_step(
    root: Node, *, split_threshold: int = SPLIT_THRESHOLD
) -> ReductionEvent | None:
    found = find_split(root, split_threshold)
    if found is None:
        return None
    leaf, depth, position = found
    halves = split_halves(leaf.value)
    leaf.expand(*halves)
    return ReductionEvent("split", position, depth, halves)


def split(root: Node, *, split_threshold: int = SPLIT_THRESHOLD) -> bool:
    """Split the first large leaf; return whether one was found."""
    return split_step(root, split_threshold=split_threshold) is not None


# ---------- Magnitude ----------


def magnitude(node: Node) -> int:
    if node.is_leaf:
        return node.value
    left, right = node.children
    return 3 * magnitude(left) + 2 * magnitude(right)
