"""Problem generation for timed arithmetic drills.

Operands are drawn uniformly from the configured ranges.  Division
problems are built backwards from the answer so every quotient is a
whole number.
"""
from __future__ import annotations

import random
from dataclasses import dataclass

from calculator import calculate_answer_range, generate_random_in_range
from spec import Operation, ProblemRange


@dataclass(frozen=True)
class Problem:
    num1: int
    num2: int
    operation: Operation
    answer: int

    @property
    def prompt(self) -> str:
        return f"{self.num1} {self.operation.symbol} {self.num2} = ?"


@dataclass(frozen=True)
class GameSettings:
    """Everything needed to generate problems for one game."""

    operation: Operation
    problem_range: ProblemRange
    timer_seconds: int = 60
    allow_negatives: bool = False
    focus_number: int | None = None


class ProblemGenerator:
    """Generate arithmetic problems for a given operation and range."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def _rand(self, lo: int, hi: int) -> int:
        return generate_random_in_range(lo, hi, self._rng)

    def _with_focus(
        self,
        operation: Operation,
        r: ProblemRange,
        allow_negatives: bool,
        focus: int,
    ) -> Problem:
        if operation == Operation.DIVISION:
            # The focus number is the divisor; the answer comes from range 1.
            if focus == 0:
                raise ValueError("focus number cannot be 0 for division")
            answer = self._rand(r.min1, r.max1)
            return Problem(focus * answer, focus, operation, answer)

        num1, num2 = focus, self._rand(r.min2, r.max2)
        return self._combine(operation, num1, num2, allow_negatives)

    def _combine(
        self, operation: Operation, num1: int, num2: int, allow_negatives: bool
    ) -> Problem:
        if operation == Operation.ADDITION:
            return Problem(num1, num2, operation, num1 + num2)
        if operation == Operation.SUBTRACTION:
            if not allow_negatives and num1 < num2:
                num1, num2 = num2, num1
            return Problem(num1, num2, operation, num1 - num2)
        return Problem(num1, num2, operation, num1 * num2)

    def generate(
        self,
        operation: Operation,
        problem_range: ProblemRange,
        allow_negatives: bool = False,
        focus_number: int | None = None,
    ) -> Problem:
        r = problem_range
        if focus_number is not None:
            return self._with_focus(operation, r, allow_negatives, focus_number)

        if operation == Operation.DIVISION:
            answer = self._rand(r.min1, r.max1)
            divisor = self._rand(r.min2, r.max2) or 1
            return Problem(answer * divisor, divisor, operation, answer)

        num1 = self._rand(r.min1, r.max1)
        num2 = self._rand(r.min2, r.max2)
        return self._combine(operation, num1, num2, allow_negatives)

    def generate_batch(self, settings: GameSettings, count: int) -> list[Problem]:
        if count <= 0:
            return []
        return [
            self.generate(
                settings.operation,
                settings.problem_range,
                settings.allow_negatives,
                settings.focus_number,
            )
            for _ in range(count)
        ]


# ---------------------------------------------------------------------------
# Typing warmup
# ---------------------------------------------------------------------------

def warmup_target(settings: GameSettings, rng: random.Random | None = None) -> str:
    """A number to type, drawn from the answers the real game would ask for."""
    answer_range = calculate_answer_range(
        settings.operation, settings.problem_range, settings.allow_negatives
    )
    return str(generate_random_in_range(answer_range.min, answer_range.max, rng))


def typing_time_per_problem(correct_count: int, time_limit: float) -> float:
    """Seconds spent typing each correct answer during the warmup."""
    if correct_count <= 0:
        return 0.0
    return time_limit / correct_count
