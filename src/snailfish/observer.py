"""Observer module: per-rewrite trace rows and structural verification."""

from __future__ import annotations

import csv
from pathlib import Path

from snailfish.flat import FlatNumber
from snailfish.number import Node, check_links
from snailfish.reduction import ReductionEvent

FIELDNAMES = ["step", "kind", "position", "depth", "left", "right", "leaves"]


class ReductionObserver:
    """Records every rewrite applied during reduction."""

    def __init__(
        self,
        *,
        verify_every: int | None = None,
        record_events: bool = True,
    ) -> None:
        self.records: list[dict[str, object]] = []
        self.events: list[ReductionEvent] = []
        self.total_steps: int = 0
        self.verify_every = verify_every
        self.record_events = record_events

    def verify(self, number: Node | FlatNumber) -> None:
        if isinstance(number, FlatNumber):
            number.check_shape()
        else:
            check_links(number)

    def snapshot(
        self, step: int, number: Node | FlatNumber, event: ReductionEvent
    ) -> dict[str, object]:
        leaves = len(number) if isinstance(number, FlatNumber) else number.leaves_count
        return {
            "step": step,
            "kind": event.kind,
            "position": event.position,
            "depth": event.depth,
            "left": event.values[0],
            "right": event.values[1],
            "leaves": leaves,
        }

    def record(self, number: Node | FlatNumber, event: ReductionEvent) -> None:
        self.total_steps += 1
        step = self.total_steps
        if self.verify_every and step % self.verify_every == 0:
            self.verify(number)
        if not self.record_events:
            return
        self.events.append(event)
        self.records.append(self.snapshot(step, number, event))

    def to_csv(self, path: Path) -> None:
        if not self.records:
            return
        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
            writer.writeheader()
            writer.writerows(self.records)
