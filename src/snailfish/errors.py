"""Exception hierarchy for compound-number parsing and reduction."""

from __future__ import annotations


class SnailfishError(Exception):
    """Base class for all compound-number errors."""


class NotationSyntaxError(SnailfishError, ValueError):
    """Bracket notation could not be parsed."""

    def __init__(self, message: str, position: int) -> None:
        super().__init__(f"{message} at pos {position}")
        self.position = position


class AlreadyAttachedError(SnailfishError, ValueError):
    """A node passed to ``new_pair`` is already owned by another branch."""


class StructuralInvariantViolation(SnailfishError, AssertionError):
    """Parent links or leaf records no longer describe a well-formed number."""


class ReductionLimitExceeded(SnailfishError, RuntimeError):
    """Reduction did not reach a fixpoint within the configured step budget."""

    def __init__(self, max_steps: int) -> None:
        super().__init__(f"reduction did not terminate within {max_steps} steps")
        self.max_steps = max_steps
