"""Reduction engine: drives explode/split to a fixpoint for either representation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import TypeAlias

from snailfish import reduction
from snailfish.config import ReductionConfig
from snailfish.errors import ReductionLimitExceeded
from snailfish.flat import FlatNumber
from snailfish.number import Node, new_pair
from snailfish.observer import ReductionObserver
from snailfish.reduction import ReductionEvent

logger = logging.getLogger(__name__)

Number: TypeAlias = Node | FlatNumber


class ReduceState(Enum):
    SCANNING_EXPLODE = "scanning_explode"
    SCANNING_SPLIT = "scanning_split"
    DONE = "done"


class Reducer:
    """Applies the rewrite rules of a ReductionConfig to compound numbers."""

    def __init__(
        self,
        cfg: ReductionConfig | None = None,
        observer: ReductionObserver | None = None,
    ) -> None:
        self.cfg = cfg if cfg is not None else ReductionConfig()
        if observer is None:
            observer = ReductionObserver(
                verify_every=self.cfg.verify_every, record_events=False
            )
        self.observer = observer

    # ---------- Single rules ----------

    def explode_step(self, number: Number) -> ReductionEvent | None:
        depth = self.cfg.explode_depth
        if isinstance(number, FlatNumber):
            return number.explode_step(explode_depth=depth)
        return reduction.explode_step(number, explode_depth=depth)

    def split_step(self, number: Number) -> ReductionEvent | None:
        threshold = self.cfg.split_threshold
        if isinstance(number, FlatNumber):
            return number.split_step(split_threshold=threshold)
        return reduction.split_step(number, split_threshold=threshold)

    def reduction_step(self, number: Number) -> ReductionEvent | None:
        """Apply one rewrite, explode taking priority over split."""
        event = self.explode_step(number)
        if event is None:
            event = self.split_step(number)
        return event

    # ---------- Fixpoint ----------

    def reduce(self, number: Number) -> int:
        """Rewrite *number* in place until no rule applies; return the rewrite count.

        Every successful rewrite restarts the scan from the leftmost leaf with
        explode, so splits only happen when nothing can explode.
        """
        rules: dict[ReduceState, Callable[[Number], ReductionEvent | None]] = {
            ReduceState.SCANNING_EXPLODE: self.explode_step,
            ReduceState.SCANNING_SPLIT: self.split_step,
        }
        state = ReduceState.SCANNING_EXPLODE
        steps = 0
        while state is not ReduceState.DONE:
            event = rules[state](number)
            if event is None:
                state = (
                    ReduceState.SCANNING_SPLIT
                    if state is ReduceState.SCANNING_EXPLODE
                    else ReduceState.DONE
                )
                continue

            steps += 1
            self.observer.record(number, event)
            if self.cfg.max_steps is not None and steps > self.cfg.max_steps:
                raise ReductionLimitExceeded(self.cfg.max_steps)
            state = ReduceState.SCANNING_EXPLODE

        logger.debug("reduced %s in %d step(s)", type(number).__name__, steps)
        return steps

    def combine(self, left: Number, right: Number) -> Number:
        """Pair two numbers under a new root and reduce the result.

        Tree operands are consumed and become interior nodes of the result;
        flat operands are left untouched.
        """
        if isinstance(left, FlatNumber) and isinstance(right, FlatNumber):
            result: Number = FlatNumber.pair(left, right)
        elif isinstance(left, Node) and isinstance(right, Node):
            result = new_pair(left, right)
        else:
            raise TypeError(
                f"Cannot combine {type(left).__name__} with {type(right).__name__}"
            )
        self.reduce(result)
        return result


# ---------- Module-level helpers ----------


def magnitude(number: Number) -> int:
    if isinstance(number, FlatNumber):
        return number.magnitude()
    return reduction.magnitude(number)


def explode(number: Number) -> bool:
    return Reducer().explode_step(number) is not None


def split(number: Number) -> bool:
    return Reducer().split_step(number) is not None


def reduce(number: Number, cfg: ReductionConfig | None = None) -> int:
    return Reducer(cfg).reduce(number)


def combine(left: Number, right: Number, cfg: ReductionConfig | None = None) -> Number:
    return Reducer(cfg).combine(left, right)
