"""Answer-range calculator.

Given an operation and the two operand ranges, report the inclusive
interval of every answer a problem could have.  Decision branches are
annotated with their branch-IDs (see spec.py BranchSpec) so
white-box tests can trace coverage back to the contract.
"""
from __future__ import annotations

import random

from logs import SERVICE_NAME, get_named_logger
from spec import FALLBACK_RANGE, AnswerRange, Operation, ProblemRange

logger = get_named_logger(SERVICE_NAME, "calculator")


def _coerce_operation(operation: Operation | str) -> Operation | None:
    if isinstance(operation, Operation):
        return operation
    try:
        return Operation(operation)
    except ValueError:
        return None


def calculate_answer_range(
    operation: Operation | str,
    problem_range: ProblemRange,
    allow_negatives: bool = False,
) -> AnswerRange:
    """Return the tightest [min, max] containing every possible answer.

    ``operation`` may be a raw string when it arrives from outside the
    process; unknown values fall back to ``FALLBACK_RANGE``.

    Branches: ADD, SUB-SIGNED, SUB-CLAMPED, MUL-CORNERS, MUL-DIRECT,
              DIV-SAFE-DIVISOR, DIV-NORMAL, FALLBACK
    """
    r = problem_range
    op = _coerce_operation(operation)

    if op == Operation.ADDITION:                                  # ADD
        return AnswerRange(min=r.min1 + r.min2, max=r.max1 + r.max2)

    if op == Operation.SUBTRACTION:
        if allow_negatives:                                       # SUB-SIGNED
            return AnswerRange(min=r.min1 - r.max2, max=r.max1 - r.min2)
        # Only the lower bound is clamped.                        # SUB-CLAMPED
        return AnswerRange(min=max(0, r.min1 - r.max2), max=r.max1 - r.min2)

    if op == Operation.MULTIPLICATION:
        if allow_negatives:                                       # MUL-CORNERS
            products = [
                r.min1 * r.min2,
                r.min1 * r.max2,
                r.max1 * r.min2,
                r.max1 * r.max2,
            ]
            return AnswerRange(min=min(products), max=max(products))
        return AnswerRange(min=r.min1 * r.min2, max=r.max1 * r.max2)  # MUL-DIRECT

    if op == Operation.DIVISION:
        # A [0, 0] divisor range has no usable divisor; problems use 1.
        max_divisor = r.max2 or 1
        if r.min2 == 0:                                           # DIV-SAFE-DIVISOR
            min_divisor = 1
        else:                                                     # DIV-NORMAL
            min_divisor = r.min2
        return AnswerRange(
            min=r.min1 // max_divisor,
            max=-(-r.max1 // min_divisor),
        )

    logger.warning(                                               # FALLBACK
        "Unrecognized operation, using fallback range",
        extra={
            "operation": str(operation),
            "fallback_min": FALLBACK_RANGE.min,
            "fallback_max": FALLBACK_RANGE.max,
        },
    )
    return FALLBACK_RANGE


def generate_random_in_range(
    min_value: int,
    max_value: int,
    rng: random.Random | None = None,
) -> int:
    """Uniform random integer in [min_value, max_value] inclusive."""
    if min_value > max_value:
        raise ValueError(
            f"min ({min_value}) must be <= max ({max_value})"
        )
    source = rng if rng is not None else random
    return source.randint(min_value, max_value)
