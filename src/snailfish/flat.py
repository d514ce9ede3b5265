"""Flattened leaf-sequence representation of compound numbers.

A number is stored as its leaves in reading order, each tagged with its
nesting depth and whether it is the left or right child of its parent. The
rewrite rules become positional scans over the list, with no parent links
to maintain.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, replace
from enum import Enum
from typing import TypeVar

from snailfish.errors import StructuralInvariantViolation
from snailfish.number import Node, new_leaf, new_pair
from snailfish.parser import parse_with
from snailfish.reduction import (
    EXPLODE_DEPTH,
    SPLIT_THRESHOLD,
    ReductionEvent,
    split_halves,
)

T = TypeVar("T")


class Side(Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class LeafRecord:
    """One leaf: its value, nesting depth, and side under its parent."""

    value: int
    depth: int
    side: Side | None = None


def _leaf_records(value: int) -> list[LeafRecord]:
    return [LeafRecord(value, 0)]


def _pair_records(left: list[LeafRecord], right: list[LeafRecord]) -> list[LeafRecord]:
    records: list[LeafRecord] = []
    for side, operand in ((Side.LEFT, left), (Side.RIGHT, right)):
        for rec in operand:
            records.append(
                LeafRecord(
                    rec.value,
                    rec.depth + 1,
                    side if rec.depth == 0 else rec.side,
                )
            )
    return records


class FlatNumber:
    """A compound number held as a flat list of leaf records."""

    __slots__ = ("_records",)

    def __init__(self, records: list[LeafRecord]) -> None:
        self._records = list(records)

    # ---------- Construction ----------

    @classmethod
    def from_text(cls, text: str) -> FlatNumber:
        return cls(parse_with(text, _leaf_records, _pair_records))

    @classmethod
    def from_tree(cls, node: Node) -> FlatNumber:
        if node.is_leaf:
            return cls(_leaf_records(node.value))
        left, right = node.children
        return cls(
            _pair_records(cls.from_tree(left)._records, cls.from_tree(right)._records)
        )

    @classmethod
    def pair(cls, left: FlatNumber, right: FlatNumber) -> FlatNumber:
        return cls(_pair_records(left._records, right._records))

    def copy(self) -> FlatNumber:
        return FlatNumber(self._records)

    @property
    def records(self) -> tuple[LeafRecord, ...]:
        return tuple(self._records)

    # ---------- Shape ----------

    def _build(self, leaf: Callable[[int], T], pair: Callable[[T, T], T]) -> T:
        records = self._records
        if not records:
            raise StructuralInvariantViolation("empty leaf sequence")

        def walk(i: int, depth: int) -> tuple[T, int]:
            if i >= len(records):
                raise StructuralInvariantViolation(
                    f"leaf sequence ended while expecting depth {depth}"
                )
            rec = records[i]
            if rec.depth < depth:
                raise StructuralInvariantViolation(
                    f"record {i} at depth {rec.depth} where depth >= {depth} expected"
                )
            if rec.depth == depth:
                return leaf(rec.value), i + 1
            left, i = walk(i, depth + 1)
            right, i = walk(i, depth + 1)
            return pair(left, right), i

        result, end = walk(0, 0)
        if end != len(records):
            raise StructuralInvariantViolation(
                f"{len(records) - end} trailing record(s) after a complete number"
            )
        return result

    def check_shape(self) -> None:
        """Verify depths and sides describe a well-formed nesting."""
        rebuilt = self._build(_leaf_records, _pair_records)
        if rebuilt != self._records:
            raise StructuralInvariantViolation(
                f"side tags disagree with nesting: {self._records!r}"
            )

    def to_tree(self) -> Node:
        return self._build(new_leaf, new_pair)

    # ---------- Rewrite rules ----------

    def _pair_at(self, level: int, start: int = 0) -> int | None:
        records = self._records
        for i in range(start, len(records) - 1):
            a, b = records[i], records[i + 1]
            if (
                a.depth == level
                and b.depth == level
                and a.side is Side.LEFT
                and b.side is Side.RIGHT
            ):
                return i
        return None

    def _collapse_side(self, i: int, depth: int) -> Side | None:
        # Any left sibling has already been collapsed to a single leaf.
        if depth == 0:
            return None
        if i > 0:
            prior = self._records[i - 1]
            if prior.side is Side.LEFT and prior.depth == depth:
                return Side.RIGHT
        return Side.LEFT

    def explode_step(
        self, *, explode_depth: int = EXPLODE_DEPTH
    ) -> ReductionEvent | None:
        records = self._records
        for i in range(len(records) - 1):
            a, b = records[i], records[i + 1]
            if (
                a.depth > explode_depth
                and a.depth == b.depth
                and a.side is Side.LEFT
                and b.side is Side.RIGHT
            ):
                break
        else:
            return None

        if i > 0:
            prior = records[i - 1]
            records[i - 1] = replace(prior, value=prior.value + a.value)
        if i + 2 < len(records):
            following = records[i + 2]
            records[i + 2] = replace(following, value=following.value + b.value)
        depth = a.depth - 1
        records[i : i + 2] = [LeafRecord(0, depth, self._collapse_side(i, depth))]
        return ReductionEvent("explode", i, depth, (a.value, b.value))

    def explode(self, *, explode_depth: int = EXPLODE_DEPTH) -> bool:
        return self.explode_step(explode_depth=explode_depth) is not None

    def split_step(
        self, *, split_threshold: int = SPLIT_THRESHOLD
    ) -> ReductionEvent | None:
        records = self._records
        for i, rec in enumerate(records):
            if rec.value >= split_threshold:
                break
        else:
            return None

        halves = split_halves(rec.value)
        records[i : i + 1] = [
            LeafRecord(halves[0], rec.depth + 1, Side.LEFT),
            LeafRecord(halves[1], rec.depth + 1, Side.RIGHT),
        ]
        return ReductionEvent("split", i, rec.depth, halves)

    def split(self, *, split_threshold: int = SPLIT_THRESHOLD) -> bool:
        return self.split_step(split_threshold=split_threshold) is not None

    def magnitude(self) -> int:
        """Fold pairs bottom-up, deepest level first, into one weighted value."""
        work = FlatNumber(self._records)
        max_depth = max(rec.depth for rec in work._records)
        for level in range(max_depth, 0, -1):
            while (i := work._pair_at(level)) is not None:
                a, b = work._records[i], work._records[i + 1]
                work._records[i : i + 2] = [
                    LeafRecord(
                        3 * a.value + 2 * b.value,
                        level - 1,
                        work._collapse_side(i, level - 1),
                    )
                ]
        if len(work._records) != 1:
            raise StructuralInvariantViolation(
                f"magnitude left {len(work._records)} records unpaired"
            )
        return work._records[0].value

    # ---------- Comparison and display ----------

    def __iter__(self) -> Iterator[LeafRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FlatNumber):
            return NotImplemented
        return self._records == other._records

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return self._build(str, lambda left, right: f"[{left},{right}]")

    def __repr__(self) -> str:
        return f"FlatNumber({self})"
