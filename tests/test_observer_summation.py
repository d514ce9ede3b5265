"""Tests for observer.py and summation.py."""

import logging
from pathlib import Path

import pytest

from snailfish.config import ReductionConfig
from snailfish.errors import StructuralInvariantViolation
from snailfish.flat import FlatNumber, LeafRecord, Side
from snailfish.observer import ReductionObserver
from snailfish.parser import parse_number
from snailfish.reduction import ReductionEvent
from snailfish.summation import (
    largest_pairwise_magnitude,
    load_numbers,
    read_lines,
    sum_numbers,
)

from cases import (
    HOMEWORK,
    HOMEWORK_LARGEST_PAIR,
    HOMEWORK_MAGNITUDE,
    HOMEWORK_SUM,
    SMALL_SUMS,
)

# ---------- Observer ----------


def test_observer_records_rows_per_rewrite():
    observer = ReductionObserver()
    number = parse_number("[[1,2],3]")
    observer.record(number, ReductionEvent("split", 0, 2, (5, 6)))
    observer.record(number, ReductionEvent("explode", 1, 4, (3, 4)))
    assert observer.total_steps == 2
    assert [row["step"] for row in observer.records] == [1, 2]
    assert observer.records[0] == {
        "step": 1,
        "kind": "split",
        "position": 0,
        "depth": 2,
        "left": 5,
        "right": 6,
        "leaves": 3,
    }


def test_observer_can_skip_event_rows():
    observer = ReductionObserver(record_events=False)
    observer.record(parse_number("[1,2]"), ReductionEvent("split", 0, 1, (5, 5)))
    assert observer.total_steps == 1
    assert observer.records == []
    assert observer.events == []


def test_observer_verifies_flat_shape():
    observer = ReductionObserver(verify_every=1)
    broken = FlatNumber([LeafRecord(1, 1, Side.LEFT)])
    with pytest.raises(StructuralInvariantViolation):
        observer.record(broken, ReductionEvent("explode", 0, 1, (0, 0)))


def test_observer_verifies_only_every_n_steps():
    observer = ReductionObserver(verify_every=2)
    broken = FlatNumber([LeafRecord(1, 1, Side.LEFT)])
    observer.record(broken, ReductionEvent("split", 0, 0, (1, 1)))
    with pytest.raises(StructuralInvariantViolation):
        observer.record(broken, ReductionEvent("split", 0, 0, (1, 1)))


def test_observer_can_write_csv(tmp_path: Path):
    result = sum_numbers(HOMEWORK[:3])
    out = tmp_path / "trace.csv"
    result.observer.to_csv(out)
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "step,kind,position,depth,left,right,leaves"
    assert len(lines) == result.steps + 1


def test_observer_skips_empty_csv(tmp_path: Path):
    out = tmp_path / "trace.csv"
    ReductionObserver().to_csv(out)
    assert not out.exists()


# ---------- Summation ----------


@pytest.mark.parametrize("strategy", ["tree", "flat"])
def test_sum_homework(strategy):
    result = sum_numbers(HOMEWORK, ReductionConfig(strategy=strategy))
    assert result.total == HOMEWORK_SUM
    assert result.magnitude == HOMEWORK_MAGNITUDE
    assert result.count == len(HOMEWORK)
    assert result.skipped == []
    assert result.strategy == strategy
    assert result.steps > 0


@pytest.mark.parametrize(("lines", "expected"), SMALL_SUMS)
def test_sum_small_lists(lines, expected):
    assert sum_numbers(lines).total == expected


def test_tree_and_flat_record_identical_traces():
    tree = sum_numbers(HOMEWORK, ReductionConfig(strategy="tree"))
    flat = sum_numbers(HOMEWORK, ReductionConfig(strategy="flat"))
    assert tree.observer.events == flat.observer.events
    assert tree.observer.records == flat.observer.records


def test_sum_single_number_is_returned_as_is():
    result = sum_numbers(["[[1,2],3]"])
    assert result.total == "[[1,2],3]"
    assert result.magnitude == 27
    assert result.steps == 0


def test_sum_skips_and_reports_bad_lines(caplog):
    lines = ["[1,1]", "[2,", "", "[3,3]"]
    with caplog.at_level(logging.WARNING, logger="snailfish.summation"):
        result = sum_numbers(lines)
    assert result.total == "[[1,1],[3,3]]"
    assert [line_no for line_no, _ in result.skipped] == [2]
    assert "Skipping line 2" in caplog.text


@pytest.mark.parametrize("strategy", ["tree", "flat"])
def test_sum_skips_overly_nested_line(strategy):
    lines = ["[1,1]", "[" * 5000 + "1", "[2,2]"]
    result = sum_numbers(lines, ReductionConfig(strategy=strategy))
    assert result.total == "[[1,1],[2,2]]"
    assert [line_no for line_no, _ in result.skipped] == [2]
    assert "Nesting deeper" in result.skipped[0][1]


def test_sum_requires_a_number():
    with pytest.raises(ValueError, match="no compound numbers"):
        sum_numbers(["", "oops"])


def test_sum_with_verification_enabled():
    result = sum_numbers(HOMEWORK, ReductionConfig(verify_every=1))
    assert result.total == HOMEWORK_SUM


def test_load_numbers_flat_strategy():
    numbers, skipped = load_numbers(["[1,2]", "x"], strategy="flat")
    assert isinstance(numbers[0], FlatNumber)
    assert skipped[0][0] == 2


@pytest.mark.parametrize("strategy", ["tree", "flat"])
def test_largest_pairwise_magnitude(strategy):
    result = largest_pairwise_magnitude(HOMEWORK, ReductionConfig(strategy=strategy))
    assert result.magnitude == HOMEWORK_LARGEST_PAIR
    assert (result.left_index, result.right_index) == (8, 0)
    assert result.total == (
        "[[[[7,8],[6,6]],[[6,0],[7,7]]],[[[7,8],[8,8]],[[7,9],[0,6]]]]"
    )


def test_largest_pairwise_requires_two_numbers():
    with pytest.raises(ValueError, match="at least two"):
        largest_pairwise_magnitude(["[1,2]"])


@pytest.mark.parametrize("strategy", ["tree", "flat"])
def test_largest_pairwise_never_pairs_equal_numbers(strategy):
    lines = ["[[9,9],[9,9]]", "[[9,9],[9,9]]", "[1,1]"]
    result = largest_pairwise_magnitude(lines, ReductionConfig(strategy=strategy))
    assert result.magnitude == 685
    assert (result.left_index, result.right_index) == (0, 2)
    assert result.total == "[[[9,9],[9,9]],[1,1]]"


def test_largest_pairwise_requires_two_distinct_numbers():
    with pytest.raises(ValueError, match="two distinct"):
        largest_pairwise_magnitude(["[1,2]", "[1,2]"])


def test_read_lines_keeps_numbering(tmp_path: Path):
    path = tmp_path / "input.txt"
    path.write_text("[1,2]\n\n  [3,4]  \n", encoding="utf-8")
    assert read_lines(path) == ["[1,2]", "", "[3,4]"]
