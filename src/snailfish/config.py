"""Reduction parameters.

Frozen dataclass with JSON serialization so a run can be reproduced from a
saved parameter file.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Literal, TypeAlias

Strategy: TypeAlias = Literal["tree", "flat"]

STRATEGIES: tuple[Strategy, ...] = ("tree", "flat")


@dataclass(frozen=True)
class ReductionConfig:
    """How numbers are represented and reduced.

    Defaults are the standard rules: pairs nested inside four pairs explode,
    values of ten or more split.
    """

    strategy: Strategy = "tree"
    explode_depth: int = 4
    split_threshold: int = 10
    max_steps: int | None = None  # None = run to fixpoint
    verify_every: int | None = None

    def __post_init__(self) -> None:
        """Validate reduction parameters."""
        if self.strategy not in STRATEGIES:
            raise ValueError(
                f"Invalid strategy '{self.strategy}', must be one of {STRATEGIES}"
            )
        if self.explode_depth < 0:
            raise ValueError(
                f"explode_depth must be non-negative, got {self.explode_depth}"
            )
        if self.split_threshold < 2:
            raise ValueError(
                f"split_threshold must be >= 2, got {self.split_threshold}"
            )
        if self.max_steps is not None and self.max_steps < 0:
            raise ValueError(f"max_steps must be non-negative, got {self.max_steps}")
        if self.verify_every is not None and self.verify_every < 1:
            raise ValueError(f"verify_every must be >= 1, got {self.verify_every}")

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2, ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> ReductionConfig:
        data = json.loads(json_str)
        if not isinstance(data, dict):
            raise ValueError("reduction config must be a JSON object")
        try:
            return cls(**data)
        except TypeError as exc:
            raise ValueError(f"invalid reduction config: {exc}") from exc

    def save(self, path: Path) -> None:
        path.write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> ReductionConfig:
        return cls.from_json(path.read_text(encoding="utf-8"))
