"""Mutable binary tree for compound numbers.

A node is either a leaf holding a non-negative integer or a branch owning
exactly two children. Children hold a weak reference back to their parent so
that lateral "next leaf" queries can climb the tree without re-walking from
the root. Bracket notation is for display and comparison only.
"""

from __future__ import annotations

import weakref
from collections.abc import Iterator

from snailfish.errors import AlreadyAttachedError, StructuralInvariantViolation


class Node:
    """A compound number: a leaf value or a pair of child nodes."""

    __slots__ = ("_value", "_left", "_right", "_parent", "__weakref__")

    def __init__(self, value: int) -> None:
        self._value: int | None = _check_value(value)
        self._left: Node | None = None
        self._right: Node | None = None
        self._parent: weakref.ref[Node] | None = None

    # ---------- Kind and contents ----------

    @property
    def is_leaf(self) -> bool:
        return self._value is not None

    @property
    def value(self) -> int:
        if self._value is None:
            raise TypeError(f"Branch has no leaf value: {self}")
        return self._value

    @property
    def left(self) -> Node:
        return self.children[0]

    @property
    def right(self) -> Node:
        return self.children[1]

    @property
    def children(self) -> tuple[Node, Node]:
        if self._left is None or self._right is None:
            raise TypeError(f"Leaf has no children: {self}")
        return self._left, self._right

    @property
    def leaves_count(self) -> int:
        return sum(1 for _ in self.leaves())

    def leaves(self) -> Iterator[Node]:
        """Yield leaves in reading order (left to right)."""
        stack = [self]
        while stack:
            node = stack.pop()
            if node._value is not None:
                yield node
            else:
                stack.append(node._right)
                stack.append(node._left)

    # ---------- Upward navigation ----------

    @property
    def parent(self) -> Node | None:
        if self._parent is None:
            return None
        return self._parent()

    @property
    def depth(self) -> int:
        depth = 0
        node = self.parent
        while node is not None:
            depth += 1
            node = node.parent
        return depth

    def is_left_child(self) -> bool | None:
        """Return whether this node is its parent's left child; None at the root."""
        parent = self.parent
        if parent is None:
            return None
        if parent._left is self:
            return True
        if parent._right is self:
            return False
        raise StructuralInvariantViolation(
            f"{self!r} points at parent {parent!r} which does not own it"
        )

    def is_right_child(self) -> bool | None:
        is_left = self.is_left_child()
        return None if is_left is None else not is_left

    # ---------- Leaf navigation ----------

    def leftmost_leaf(self) -> Node:
        node = self
        while node._left is not None:
            node = node._left
        return node

    def rightmost_leaf(self) -> Node:
        node = self
        while node._right is not None:
            node = node._right
        return node

    def left_leaf_neighbor(self) -> Node | None:
        """Return the leaf immediately before this subtree in reading order.

        Climbs while the current node is a left child; the first ancestor
        entered from its right side holds the neighbour as the rightmost leaf
        of its left subtree.
        """
        child = self
        ancestor = self.parent
        while ancestor is not None:
            if child.is_right_child():
                return ancestor.left.rightmost_leaf()
            child, ancestor = ancestor, ancestor.parent
        return None

    def right_leaf_neighbor(self) -> Node | None:
        """Return the leaf immediately after this subtree in reading order."""
        child = self
        ancestor = self.parent
        while ancestor is not None:
            if child.is_left_child():
                return ancestor.right.leftmost_leaf()
            child, ancestor = ancestor, ancestor.parent
        return None

    # ---------- In-place rewrites ----------

    def add_to_value(self, amount: int) -> None:
        self._value = self.value + amount

    def collapse(self, value: int = 0) -> tuple[Node, Node]:
        """Turn this branch into a leaf, detaching and returning its children."""
        left, right = self.children
        left._parent = None
        right._parent = None
        self._left = self._right = None
        self._value = _check_value(value)
        return left, right

    def expand(self, left_value: int, right_value: int) -> tuple[Node, Node]:
        """Turn this leaf into a branch of two fresh leaves."""
        if self._value is None:
            raise TypeError(f"Cannot expand a branch: {self}")
        left = Node(left_value)
        right = Node(right_value)
        self._value = None
        self._attach(left, right)
        return left, right

    def _attach(self, left: Node, right: Node) -> None:
        self._left = left
        self._right = right
        ref = weakref.ref(self)
        left._parent = ref
        right._parent = ref

    # ---------- Comparison and display ----------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        stack = [(self, other)]
        while stack:
            a, b = stack.pop()
            if a._value != b._value:
                return False
            if a._value is None:
                stack.append((a._left, b._left))
                stack.append((a._right, b._right))
        return True

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        if self._value is not None:
            return str(self._value)
        return f"[{self._left},{self._right}]"

    def __repr__(self) -> str:
        return f"Node({self})"


def _check_value(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Leaf value must be an int, got {value!r}")
    if value < 0:
        raise ValueError(f"Leaf value must be non-negative, got {value}")
    return value


# ---------- Public functions ----------


def new_leaf(value: int) -> Node:
    """Create an orphan leaf."""
    return Node(value)


def new_pair(left: Node, right: Node) -> Node:
    """Create a branch that takes ownership of two unattached roots.

    Raises AlreadyAttachedError if either node already has a parent or if the
    same node is passed twice, since grafting it would give it two owners.
    """
    if left is right:
        raise AlreadyAttachedError(f"Cannot pair {left!r} with itself")
    for node in (left, right):
        if not isinstance(node, Node):
            raise TypeError(f"Expected a Node, got {node!r}")
        if node.parent is not None:
            raise AlreadyAttachedError(
                f"{node!r} is already a child of {node.parent!r}"
            )
    branch = Node(0)
    branch._value = None
    branch._attach(left, right)
    return branch


def copy_number(node: Node) -> Node:
    """Deep-copy *node* into a new orphan tree."""
    if node.is_leaf:
        return Node(node.value)
    left, right = node.children
    return new_pair(copy_number(left), copy_number(right))


def check_links(root: Node) -> None:
    """Verify that every child's parent reference points at its owner."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_leaf:
            continue
        for child in node.children:
            if child.parent is not node:
                raise StructuralInvariantViolation(
                    f"{child!r} has parent {child.parent!r}, expected {node!r}"
                )
            stack.append(child)
