"""Bracket-notation parser for compound numbers.

Grammar:
  number := INT | "[" number "," number "]"

Whitespace between tokens is ignored and brackets nest at most
``MAX_NESTING`` deep. The parser is builder-agnostic: ``parse_with`` calls
*leaf* for every integer and *pair* for every closed bracket, so the tree and
the flattened representations share one grammar.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from snailfish.errors import NotationSyntaxError
from snailfish.number import Node, new_leaf, new_pair

T = TypeVar("T")

MAX_NESTING = 200


@dataclass(frozen=True)
class _Cursor:
    s: str
    i: int = 0

    def eof(self) -> bool:
        return self.i >= len(self.s)

    def peek(self) -> str:
        return "" if self.eof() else self.s[self.i]

    def skip_ws(self) -> _Cursor:
        i = self.i
        while i < len(self.s) and self.s[i].isspace():
            i += 1
        return _Cursor(self.s, i)

    def expect(self, ch: str) -> _Cursor:
        c = self.skip_ws()
        if c.eof() or c.s[c.i] != ch:
            got = "EOF" if c.eof() else repr(c.s[c.i])
            raise NotationSyntaxError(f"Expected {ch!r}, got {got}", c.i)
        return _Cursor(c.s, c.i + 1)


def parse_with(
    text: str,
    leaf: Callable[[int], T],
    pair: Callable[[T, T], T],
) -> T:
    """Parse *text* and build the result with the given callbacks."""
    c = _Cursor(text).skip_ws()
    if c.eof():
        raise NotationSyntaxError("Empty input", c.i)
    result, c = _parse_number(c, leaf, pair, 0)
    c = c.skip_ws()
    if not c.eof():
        raise NotationSyntaxError(f"Trailing junk {c.s[c.i :]!r}", c.i)
    return result


def parse_number(text: str) -> Node:
    """Parse bracket notation into a tree with parent links set."""
    return parse_with(text, new_leaf, new_pair)


def _parse_number(
    c: _Cursor,
    leaf: Callable[[int], T],
    pair: Callable[[T, T], T],
    depth: int,
) -> tuple[T, _Cursor]:
    c = c.skip_ws()
    if c.peek() == "[":
        if depth >= MAX_NESTING:
            raise NotationSyntaxError(
                f"Nesting deeper than {MAX_NESTING} brackets", c.i
            )
        left, c = _parse_number(c.expect("["), leaf, pair, depth + 1)
        c = c.expect(",")
        right, c = _parse_number(c, leaf, pair, depth + 1)
        c = c.expect("]")
        return pair(left, right), c

    start = c.i
    end = start
    while end < len(c.s) and c.s[end] in "0123456789":
        end += 1
    if end == start:
        got = "EOF" if c.eof() else repr(c.peek())
        raise NotationSyntaxError(f"Expected '[' or a digit, got {got}", start)
    return leaf(int(c.s[start:end])), _Cursor(c.s, end)
