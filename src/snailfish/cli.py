"""CLI entrypoint: sum a homework file or find its largest pairwise magnitude."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from snailfish.config import STRATEGIES, ReductionConfig
from snailfish.errors import SnailfishError
from snailfish.summation import (
    PairResult,
    SumResult,
    largest_pairwise_magnitude,
    read_lines,
    sum_numbers,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reduce and sum compound numbers")
    parser.add_argument("input", type=Path)
    parser.add_argument("--part", type=int, choices=(1, 2), default=1)
    parser.add_argument("--strategy", choices=STRATEGIES, default=None)
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--max-steps", type=int, default=None)
    parser.add_argument("--verify-every", type=int, default=None)
    parser.add_argument("--trace-csv", type=Path, default=None)
    parser.add_argument("--summary-json", type=Path, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> ReductionConfig:
    cfg = ReductionConfig.load(args.config) if args.config else ReductionConfig()
    overrides: dict[str, object] = {}
    if args.strategy is not None:
        overrides["strategy"] = args.strategy
    if args.max_steps is not None:
        overrides["max_steps"] = args.max_steps
    if args.verify_every is not None:
        overrides["verify_every"] = args.verify_every
    return replace(cfg, **overrides) if overrides else cfg


def _summary(result: SumResult | PairResult) -> dict[str, object]:
    summary: dict[str, object] = {
        "strategy": result.strategy,
        "magnitude": result.magnitude,
        "total": result.total,
        "skipped_lines": [line_no for line_no, _ in result.skipped],
    }
    if isinstance(result, SumResult):
        summary["count"] = result.count
        summary["steps"] = result.steps
    else:
        summary["left_index"] = result.left_index
        summary["right_index"] = result.right_index
    return summary


def run(args: argparse.Namespace) -> None:
    cfg = _build_config(args)
    lines = read_lines(args.input)

    if args.part == 1:
        result: SumResult | PairResult = sum_numbers(lines, cfg)
        print(f"final sum: {result.total}")
        print(f"magnitude of sum: {result.magnitude}")
        if args.trace_csv is not None:
            args.trace_csv.parent.mkdir(parents=True, exist_ok=True)
            result.observer.to_csv(args.trace_csv)
    else:
        if args.trace_csv is not None:
            print("--trace-csv is ignored for part 2", file=sys.stderr)
        result = largest_pairwise_magnitude(lines, cfg)
        print(f"max magnitude pairwise sum: {result.magnitude}")

    if args.summary_json is not None:
        args.summary_json.parent.mkdir(parents=True, exist_ok=True)
        args.summary_json.write_text(
            json.dumps(_summary(result), indent=2), encoding="utf-8"
        )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        run(args)
    except (OSError, ValueError, SnailfishError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
