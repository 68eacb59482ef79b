"""
Range verification.

The verifier does NOT just compute an answer range - it *checks* it
against the answer-range contract before handing it out.

Flow:
  1. Caller asks for the answer range of an operation over a ProblemRange.
  2. Verifier computes it with the calculator.
  3. Verifier brute-forces the real answers over the operand grid and
     runs every applicable RangeProperty in the contract.
  4. If verification passes  -> return the range.
     If verification fails   -> raise, never hand out a broken range.
"""

from __future__ import annotations

import itertools
import random
from dataclasses import dataclass, field

from calculator import calculate_answer_range
from logs import SERVICE_NAME, get_named_logger
from spec import (
    AnswerRange,
    Operation,
    ProblemRange,
    RangeCalculatorSpec,
    RangeProperty,
    build_spec,
    exact_answer,
)

logger = get_named_logger(SERVICE_NAME, "factory")


@dataclass
class VerificationResult:
    """Outcome of verifying one property."""

    property_name: str
    passed: bool
    applicable: bool = True
    counterexample: tuple | None = None

    def __repr__(self) -> str:
        if not self.applicable:
            status = "SKIP"
        else:
            status = "PASS" if self.passed else "FAIL"
        ce = f"  counterexample={self.counterexample}" if self.counterexample else ""
        return f"[{status}] {self.property_name}{ce}"


@dataclass
class VerificationReport:
    """Aggregate result of verifying one answer range."""

    operation: Operation
    problem_range: ProblemRange
    allow_negatives: bool
    answer_range: AnswerRange
    pairs_checked: int = 0
    exhaustive: bool = True
    results: list[VerificationResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def failures(self) -> list[VerificationResult]:
        return [r for r in self.results if not r.passed]

    def summary(self) -> str:
        r = self.problem_range
        lines = [
            f"--- {self.operation.value} "
            f"[{r.min1}..{r.max1}] x [{r.min2}..{r.max2}] "
            f"negatives={self.allow_negatives} -> "
            f"[{self.answer_range.min}, {self.answer_range.max}] ---"
        ]
        for res in self.results:
            lines.append(f"  {res}")
        status = "ALL PASSED" if self.passed else "FAILED"
        lines.append(f"  => {status} ({self.pairs_checked} pairs)")
        return "\n".join(lines)


class VerificationError(Exception):
    """Raised when a computed answer range fails its spec."""

    def __init__(self, report: VerificationReport):
        self.report = report
        super().__init__(f"Verification failed:\n{report.summary()}")


# ---------------------------------------------------------------------------
# The verifier
# ---------------------------------------------------------------------------

class RangeVerifier:
    """
    Produces answer ranges that are checked against the contract.

    Small operand grids are verified *exhaustively*.  Larger grids fall
    back to the edge values of each operand plus random samples.
    """

    EXHAUSTIVE_THRESHOLD = 10_000  # max operand pairs for brute force
    SAMPLE_COUNT = 5_000

    _spec: RangeCalculatorSpec = build_spec()

    @classmethod
    def create(
        cls,
        operation: Operation,
        problem_range: ProblemRange,
        allow_negatives: bool = False,
    ) -> AnswerRange:
        """Compute, verify, and return an AnswerRange."""
        report = cls.verify(operation, problem_range, allow_negatives)
        if not report.passed:
            raise VerificationError(report)
        return report.answer_range

    @classmethod
    def verify(
        cls,
        operation: Operation,
        problem_range: ProblemRange,
        allow_negatives: bool = False,
        rng: random.Random | None = None,
    ) -> VerificationReport:
        problem_range.check()
        answer_range = calculate_answer_range(operation, problem_range, allow_negatives)

        exhaustive = problem_range.grid_size <= cls.EXHAUSTIVE_THRESHOLD
        if exhaustive:
            pairs = list(
                itertools.product(
                    problem_range.first_values(), problem_range.second_values()
                )
            )
        else:
            pairs = _sample_pairs(problem_range, cls.SAMPLE_COUNT, rng or random.Random())

        answers = [exact_answer(operation, a, b) for a, b in pairs]

        report = VerificationReport(
            operation=operation,
            problem_range=problem_range,
            allow_negatives=allow_negatives,
            answer_range=answer_range,
            pairs_checked=len(pairs),
            exhaustive=exhaustive,
        )
        for prop in cls._spec.operations[operation].properties:
            report.results.append(
                _verify_property(prop, problem_range, answer_range, allow_negatives, pairs, answers)
            )

        if not report.passed:
            logger.warning(
                "Answer range failed verification",
                extra={
                    "operation": operation.value,
                    "failures": [f.property_name for f in report.failures],
                },
            )
        return report


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _verify_property(
    prop: RangeProperty,
    problem_range: ProblemRange,
    answer_range: AnswerRange,
    allow_negatives: bool,
    pairs: list[tuple[int, int]],
    answers: list,
) -> VerificationResult:
    if not prop.applies(problem_range, allow_negatives):
        return VerificationResult(property_name=prop.name, passed=True, applicable=False)

    if prop.check(problem_range, answer_range, allow_negatives, answers):
        return VerificationResult(property_name=prop.name, passed=True)

    return VerificationResult(
        property_name=prop.name,
        passed=False,
        counterexample=_first_escaping_pair(answer_range, pairs, answers),
    )


def _first_escaping_pair(
    answer_range: AnswerRange,
    pairs: list[tuple[int, int]],
    answers: list,
) -> tuple | None:
    """The first operand pair whose answer lies outside the range, if any."""
    for pair, answer in zip(pairs, answers):
        if answer is not None and not answer_range.contains(answer):
            return pair
    return None


def _sample_pairs(
    problem_range: ProblemRange, count: int, rng: random.Random
) -> list[tuple[int, int]]:
    """Generate edge-case + random operand pairs."""
    r = problem_range

    def edges(lo: int, hi: int) -> list[int]:
        values = {lo, lo + 1, -1, 0, 1, hi - 1, hi}
        return sorted(v for v in values if lo <= v <= hi)

    pairs: list[tuple[int, int]] = list(
        itertools.product(edges(r.min1, r.max1), edges(r.min2, r.max2))
    )

    while len(pairs) < count:
        pairs.append((rng.randint(r.min1, r.max1), rng.randint(r.min2, r.max2)))

    return pairs
