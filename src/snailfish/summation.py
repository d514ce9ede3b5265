"""Summation orchestration: fold homework lines and search pairwise sums."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from functools import reduce as fold
from pathlib import Path

from snailfish.config import ReductionConfig, Strategy
from snailfish.engine import Number, Reducer, magnitude
from snailfish.errors import NotationSyntaxError
from snailfish.flat import FlatNumber
from snailfish.number import copy_number
from snailfish.observer import ReductionObserver
from snailfish.parser import parse_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SumResult:
    """Return payload for folding every number into one sum."""

    strategy: Strategy
    total: str
    magnitude: int
    count: int
    steps: int
    skipped: list[tuple[int, str]]
    observer: ReductionObserver = field(repr=False)


@dataclass(frozen=True)
class PairResult:
    """Largest magnitude reachable by combining two distinct inputs."""

    strategy: Strategy
    magnitude: int
    left_index: int
    right_index: int
    total: str
    skipped: list[tuple[int, str]]


def read_lines(path: Path) -> list[str]:
    """Return the stripped lines of *path*; blank lines are kept so numbering matches."""
    text = path.read_text(encoding="utf-8")
    return [line.strip() for line in text.splitlines()]


def parse_as(text: str, strategy: Strategy) -> Number:
    if strategy == "flat":
        return FlatNumber.from_text(text)
    return parse_number(text)


def load_numbers(
    lines: Iterable[str],
    strategy: Strategy = "tree",
) -> tuple[list[Number], list[tuple[int, str]]]:
    """Parse each line, skipping and reporting malformed ones.

    Returns the parsed numbers and a list of ``(line_number, message)``
    for lines that failed to parse. Line numbers are 1-based.
    """
    numbers: list[Number] = []
    skipped: list[tuple[int, str]] = []
    for line_no, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            numbers.append(parse_as(line, strategy))
        except NotationSyntaxError as exc:
            logger.warning("Skipping line %d: %s", line_no, exc)
            skipped.append((line_no, str(exc)))
    return numbers, skipped


def sum_numbers(
    lines: Iterable[str],
    cfg: ReductionConfig | None = None,
    *,
    observer: ReductionObserver | None = None,
) -> SumResult:
    """Fold all numbers left to right with combine."""
    cfg = cfg if cfg is not None else ReductionConfig()
    if observer is None:
        observer = ReductionObserver(verify_every=cfg.verify_every)
    numbers, skipped = load_numbers(lines, cfg.strategy)
    if not numbers:
        raise ValueError("no compound numbers to sum")

    reducer = Reducer(cfg, observer)
    total = fold(reducer.combine, numbers[1:], numbers[0])

    return SumResult(
        strategy=cfg.strategy,
        total=str(total),
        magnitude=magnitude(total),
        count=len(numbers),
        steps=observer.total_steps,
        skipped=skipped,
        observer=observer,
    )


def largest_pairwise_magnitude(
    lines: Iterable[str],
    cfg: ReductionConfig | None = None,
) -> PairResult:
    """Combine every ordered pair of distinct inputs and keep the largest magnitude.

    Inputs with equal notation are never paired with each other, even when
    they come from different lines.
    """
    cfg = cfg if cfg is not None else ReductionConfig()
    numbers, skipped = load_numbers(lines, cfg.strategy)
    if len(numbers) < 2:
        raise ValueError(
            f"need at least two compound numbers, got {len(numbers)}"
        )

    reducer = Reducer(cfg)
    best: tuple[int, int, int, str] | None = None
    for i, left in enumerate(numbers):
        for j, right in enumerate(numbers):
            if left == right:
                continue
            total = reducer.combine(_fresh(left), _fresh(right))
            value = magnitude(total)
            if best is None or value > best[0]:
                best = (value, i, j, str(total))

    if best is None:
        raise ValueError("need at least two distinct compound numbers")
    value, i, j, text = best
    logger.debug("largest pairwise magnitude %d from numbers %d and %d", value, i, j)
    return PairResult(
        strategy=cfg.strategy,
        magnitude=value,
        left_index=i,
        right_index=j,
        total=text,
        skipped=skipped,
    )


def _fresh(number: Number) -> Number:
    if isinstance(number, FlatNumber):
        return number.copy()
    return copy_number(number)
