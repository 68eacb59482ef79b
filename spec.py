"""Domain types and the executable contract for the answer-range calculator.

The calculator takes an operation and two operand ranges and reports the
inclusive interval every possible answer falls into.  This module declares
WHAT must be true of that interval; ``calculator.py`` says HOW it is
computed and ``factory.py`` checks one against the other.

Layers
------
Operation           closed set of arithmetic operations
ProblemRange        operand bounds (min1..max1, min2..max2)
AnswerRange         result bounds (min..max)
RangeProperty       a guarantee about an AnswerRange, checked by brute force
BranchSpec          every decision point that white-box tests must cover
build_spec()        constructs the full RangeCalculatorSpec
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction
from typing import Callable


# ---------------------------------------------------------------------------
# Domain types
# ---------------------------------------------------------------------------

class Operation(str, Enum):
    ADDITION = "addition"
    SUBTRACTION = "subtraction"
    MULTIPLICATION = "multiplication"
    DIVISION = "division"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_SYMBOLS = {
    Operation.ADDITION: "+",
    Operation.SUBTRACTION: "-",
    Operation.MULTIPLICATION: "×",
    Operation.DIVISION: "÷",
}


class InvalidRangeError(ValueError):
    """Raised when an operand range has min > max."""


@dataclass(frozen=True)
class ProblemRange:
    """Inclusive bounds of the two operands.

    Construction does not validate ordering; the calculator assumes
    well-formed input.  Call ``check()`` where strictness is wanted.
    """

    min1: int
    max1: int
    min2: int
    max2: int

    @property
    def is_ordered(self) -> bool:
        return self.min1 <= self.max1 and self.min2 <= self.max2

    def check(self) -> None:
        if self.is_ordered:
            return
        if self.min1 > self.max1:
            raise InvalidRangeError(
                f"min1 ({self.min1}) must be <= max1 ({self.max1})"
            )
        raise InvalidRangeError(
            f"min2 ({self.min2}) must be <= max2 ({self.max2})"
        )

    def first_values(self) -> range:
        return range(self.min1, self.max1 + 1)

    def second_values(self) -> range:
        return range(self.min2, self.max2 + 1)

    @property
    def grid_size(self) -> int:
        """Number of operand pairs (0 for unordered ranges)."""
        if not self.is_ordered:
            return 0
        return (self.max1 - self.min1 + 1) * (self.max2 - self.min2 + 1)


@dataclass(frozen=True)
class AnswerRange:
    """Inclusive interval [min, max] covering every possible answer."""

    min: int
    max: int

    def contains(self, value: int | Fraction) -> bool:
        return self.min <= value <= self.max


FALLBACK_RANGE = AnswerRange(min=1, max=20)


# ---------------------------------------------------------------------------
# Spec building blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RangeProperty:
    """A guarantee about a computed AnswerRange.

    ``applies(range, allow_negatives)`` says whether the guarantee holds
    for that input at all.  ``check(range, answer_range, allow_negatives,
    answers)`` receives every brute-forced answer over the operand grid.
    """

    name: str
    description: str
    applies: Callable[[ProblemRange, bool], bool]
    check: Callable[..., bool]


@dataclass(frozen=True)
class OperationSpec:
    operation: Operation
    properties: list[RangeProperty] = field(default_factory=list)


@dataclass(frozen=True)
class BranchSpec:
    """A decision point in the implementation that must be exercised."""

    id: str
    description: str
    condition: str      # human-readable boolean expression
    operation: str      # which operation this belongs to


@dataclass(frozen=True)
class RangeCalculatorSpec:
    """Complete contract for the answer-range calculator."""

    operations: dict[Operation, OperationSpec]
    branches: list[BranchSpec]

    @property
    def all_properties(self) -> list[tuple[Operation, RangeProperty]]:
        out: list[tuple[Operation, RangeProperty]] = []
        for op, op_spec in self.operations.items():
            for prop in op_spec.properties:
                out.append((op, prop))
        return out

    def branch_ids(self) -> set[str]:
        return {b.id for b in self.branches}


# ---------------------------------------------------------------------------
# Helpers used inside the property predicates
# ---------------------------------------------------------------------------

def exact_answer(operation: Operation, a: int, b: int) -> int | Fraction | None:
    """The mathematically exact answer for one operand pair.

    Division returns a Fraction (or None for a zero divisor) so that
    predicates compare against the true quotient, not a rounded one.
    """
    if operation == Operation.ADDITION:
        return a + b
    if operation == Operation.SUBTRACTION:
        return a - b
    if operation == Operation.MULTIPLICATION:
        return a * b
    if b == 0:
        return None
    return Fraction(a, b)


def _non_negative(r: ProblemRange) -> bool:
    return r.min1 >= 0 and r.min2 >= 0


def _is_exact(ar: AnswerRange, answers: list) -> bool:
    return ar.min == min(answers) and ar.max == max(answers)


# ---------------------------------------------------------------------------
# Contract builder
# ---------------------------------------------------------------------------

def build_spec() -> RangeCalculatorSpec:
    """Construct the full answer-range contract."""

    add_spec = OperationSpec(
        operation=Operation.ADDITION,
        properties=[
            RangeProperty(
                "exact",
                "Range equals the true extrema: [min1+min2, max1+max2]",
                lambda r, neg: True,
                lambda r, ar, neg, answers: _is_exact(ar, answers),
            ),
        ],
    )

    sub_spec = OperationSpec(
        operation=Operation.SUBTRACTION,
        properties=[
            RangeProperty(
                "exact_when_negatives_allowed",
                "With negatives allowed the range equals the true extrema",
                lambda r, neg: neg,
                lambda r, ar, neg, answers: _is_exact(ar, answers),
            ),
            RangeProperty(
                "min_non_negative",
                "With negatives disallowed the lower bound is never below 0",
                lambda r, neg: not neg,
                lambda r, ar, neg, answers: ar.min >= 0,
            ),
            RangeProperty(
                "contains_non_negative_answers",
                "With negatives disallowed every answer >= 0 is in range",
                lambda r, neg: not neg,
                lambda r, ar, neg, answers: all(
                    ar.contains(x) for x in answers if x >= 0
                ),
            ),
            RangeProperty(
                "upper_bound_unclamped",
                "Upper bound is always max1 - min2, even when negative",
                lambda r, neg: True,
                lambda r, ar, neg, answers: ar.max == r.max1 - r.min2,
            ),
        ],
    )

    mul_spec = OperationSpec(
        operation=Operation.MULTIPLICATION,
        properties=[
            RangeProperty(
                "exact_when_negatives_allowed",
                "With negatives allowed the corner products give the true extrema",
                lambda r, neg: neg,
                lambda r, ar, neg, answers: _is_exact(ar, answers),
            ),
            RangeProperty(
                "exact_for_non_negative_operands",
                "For non-negative operands [min1*min2, max1*max2] is exact",
                lambda r, neg: _non_negative(r),
                lambda r, ar, neg, answers: _is_exact(ar, answers),
            ),
        ],
    )

    div_spec = OperationSpec(
        operation=Operation.DIVISION,
        properties=[
            RangeProperty(
                "contains_true_quotients",
                "For non-negative operands every a / b (b != 0) is in range",
                lambda r, neg: _non_negative(r),
                lambda r, ar, neg, answers: all(
                    ar.contains(q) for q in answers if q is not None
                ),
            ),
            RangeProperty(
                "floor_of_smallest_quotient",
                "Lower bound is floor(min1 / max2) whenever max2 != 0",
                lambda r, neg: r.max2 != 0,
                lambda r, ar, neg, answers: ar.min == r.min1 // r.max2,
            ),
        ],
    )

    branches = [
        BranchSpec("ADD", "Sum of the matching bounds", "operation == addition", "addition"),
        BranchSpec(
            "SUB-SIGNED",
            "True extrema, may be negative",
            "operation == subtraction and allow_negatives",
            "subtraction",
        ),
        BranchSpec(
            "SUB-CLAMPED",
            "Lower bound clamped to 0, upper bound left as is",
            "operation == subtraction and not allow_negatives",
            "subtraction",
        ),
        BranchSpec(
            "MUL-CORNERS",
            "Extrema over the four corner products",
            "operation == multiplication and allow_negatives",
            "multiplication",
        ),
        BranchSpec(
            "MUL-DIRECT",
            "min1*min2 .. max1*max2",
            "operation == multiplication and not allow_negatives",
            "multiplication",
        ),
        BranchSpec(
            "DIV-SAFE-DIVISOR",
            "Zero minimum divisor replaced by 1 for the upper bound",
            "operation == division and min2 == 0",
            "division",
        ),
        BranchSpec(
            "DIV-NORMAL",
            "floor(min1/max2) .. ceil(max1/min2)",
            "operation == division and min2 != 0",
            "division",
        ),
        BranchSpec(
            "FALLBACK",
            "Unrecognized operation returns [1, 20]",
            "operation not in Operation",
            "dispatch",
        ),
    ]

    return RangeCalculatorSpec(
        operations={
            Operation.ADDITION: add_spec,
            Operation.SUBTRACTION: sub_spec,
            Operation.MULTIPLICATION: mul_spec,
            Operation.DIVISION: div_spec,
        },
        branches=branches,
    )
