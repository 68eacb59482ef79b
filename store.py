"""In-memory score store with leaderboard and goal tracking.

Provides a simple storage backend that can be swapped for a database later.
Scores are append-only; goal progress is upserted per
(profile, operation, range key).
"""

from __future__ import annotations

import math

from logs import SERVICE_NAME, get_named_logger
from models import (
    GOAL_LEVEL_ORDER,
    GoalLevel,
    GoalProgress,
    GoalUpdate,
    LeaderboardEntry,
    ScoreCreate,
    ScoreRecord,
    _new_id,
    _utcnow,
)
from spec import Operation, ProblemRange

logger = get_named_logger(SERVICE_NAME, "store")

DEFAULT_PAGE_SIZE = 25


class ScoreNotFoundError(Exception):
    """Raised when a score or goal lookup fails."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Not found: {key}")


class ScoreValidationError(ValueError):
    """Raised when a score cannot be saved."""


# ---------------------------------------------------------------------------
# Goal helpers
# ---------------------------------------------------------------------------

def get_goal_level(score: int) -> GoalLevel:
    if score >= 60:
        return GoalLevel.LEGEND
    if score >= 50:
        return GoalLevel.STAR
    if score >= 40:
        return GoalLevel.GOLD
    if score >= 30:
        return GoalLevel.SILVER
    if score >= 20:
        return GoalLevel.BRONZE
    return GoalLevel.LEARNING


def range_key(problem_range: ProblemRange, focus_number: int | None = None) -> str:
    """Goal key for a game: the focus number, or the first operand range."""
    if focus_number is not None:
        return str(focus_number)
    return f"{problem_range.min1}-{problem_range.max1}"


def _same_range(record: ScoreRecord, r: ProblemRange) -> bool:
    return record.range.to_range() == r


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class ScoreStore:
    """In-memory store for scores and goal progress."""

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.page_size = page_size
        self._scores: dict[str, ScoreRecord] = {}
        self._goals: dict[tuple[str, Operation, str], GoalProgress] = {}

    # -- scores --------------------------------------------------------------

    def save_score(self, payload: ScoreCreate) -> ScoreRecord:
        """Save a finished game.  Only positive scores are kept."""
        if payload.score <= 0:
            raise ScoreValidationError(f"score must be positive, got {payload.score}")

        record = ScoreRecord(**payload.model_dump(), id=_new_id(), date=_utcnow())
        self._scores[record.id] = record
        logger.info(
            "Score saved",
            extra={
                "user_id": record.user_id,
                "operation": record.operation.value,
                "score": record.score,
            },
        )
        return record

    def get(self, score_id: str) -> ScoreRecord:
        try:
            return self._scores[score_id]
        except KeyError:
            raise ScoreNotFoundError(score_id) from None

    def history(self, user_id: str) -> list[ScoreRecord]:
        """All scores of a user, newest first."""
        items = [s for s in self._scores.values() if s.user_id == user_id]
        items.sort(key=lambda s: s.date, reverse=True)
        return items

    def is_high_score(
        self,
        user_id: str,
        score: int,
        operation: Operation,
        problem_range: ProblemRange,
    ) -> bool:
        matching = [
            s.score
            for s in self.history(user_id)
            if s.operation == operation and _same_range(s, problem_range)
        ]
        if not matching:
            return True
        return score > max(matching)

    def count(self) -> int:
        return len(self._scores)

    def clear(self) -> None:
        """Remove everything (useful for testing)."""
        self._scores.clear()
        self._goals.clear()

    # -- leaderboard ---------------------------------------------------------

    def _ranked(
        self,
        operation: Operation,
        problem_range: ProblemRange,
        grade: str | None,
    ) -> list[ScoreRecord]:
        """Best record per user, best first; ties go to whoever got there first."""
        best: dict[str, ScoreRecord] = {}
        for s in self._scores.values():
            if s.operation != operation or not _same_range(s, problem_range):
                continue
            if grade is not None and s.grade != grade:
                continue
            current = best.get(s.user_id)
            if (
                current is None
                or s.score > current.score
                or (s.score == current.score and s.date < current.date)
            ):
                best[s.user_id] = s
        return sorted(best.values(), key=lambda s: (-s.score, s.date))

    def leaderboard(
        self,
        operation: Operation,
        problem_range: ProblemRange,
        grade: str | None = None,
        page: int = 1,
    ) -> list[LeaderboardEntry]:
        ranked = self._ranked(operation, problem_range, grade)
        start = (page - 1) * self.page_size
        r = problem_range
        return [
            LeaderboardEntry(
                rank=start + i + 1,
                user_id=s.user_id,
                name=s.name,
                grade=s.grade,
                best_score=s.score,
                operation=s.operation,
                min1=r.min1,
                max1=r.max1,
                min2=r.min2,
                max2=r.max2,
            )
            for i, s in enumerate(ranked[start : start + self.page_size])
        ]

    def leaderboard_count(
        self,
        operation: Operation,
        problem_range: ProblemRange,
        grade: str | None = None,
    ) -> int:
        return len(self._ranked(operation, problem_range, grade))

    def total_pages(self, total: int) -> int:
        return max(1, math.ceil(total / self.page_size))

    def user_rank(
        self,
        user_id: str,
        operation: Operation,
        problem_range: ProblemRange,
        grade: str | None = None,
    ) -> int | None:
        for i, s in enumerate(self._ranked(operation, problem_range, grade)):
            if s.user_id == user_id:
                return i + 1
        return None

    # -- goals ---------------------------------------------------------------

    def goals(self, profile_id: str) -> list[GoalProgress]:
        return [g for (pid, _, _), g in self._goals.items() if pid == profile_id]

    def get_goal(self, profile_id: str, operation: Operation, key: str) -> GoalProgress:
        try:
            return self._goals[(profile_id, operation, key)]
        except KeyError:
            raise ScoreNotFoundError(f"{profile_id}/{operation.value}/{key}") from None

    def update_goal(
        self,
        profile_id: str,
        operation: Operation,
        key: str,
        score: int,
    ) -> GoalUpdate:
        """Record an attempt and keep the best score for the goal."""
        existing = self._goals.get((profile_id, operation, key))
        now = _utcnow()

        if existing is None:
            best_score = score
            previous_level = GoalLevel.LEARNING
            attempts = 1
            last_level_up = None
        else:
            best_score = max(existing.best_score, score)
            previous_level = existing.level
            attempts = existing.attempts + 1
            last_level_up = existing.last_level_up

        level = get_goal_level(best_score)
        leveled_up = GOAL_LEVEL_ORDER.index(level) > GOAL_LEVEL_ORDER.index(previous_level)
        if leveled_up:
            last_level_up = now

        self._goals[(profile_id, operation, key)] = GoalProgress(
            profile_id=profile_id,
            operation=operation,
            range=key,
            best_score=best_score,
            level=level,
            attempts=attempts,
            last_attempt=now,
            last_level_up=last_level_up,
        )
        return GoalUpdate(updated=True, leveled_up=leveled_up, new_level=level)
