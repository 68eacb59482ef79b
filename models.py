"""Request/response models for the drill API.

Pydantic models describe what crosses the HTTP boundary.  The domain
types they convert to live in spec.py and problems.py.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from problems import GameSettings
from spec import Operation, ProblemRange


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------

class RangeIn(BaseModel):
    """Operand bounds as sent by clients.  Each pair must be ordered."""

    min1: int
    max1: int
    min2: int
    max2: int

    @model_validator(mode="after")
    def bounds_are_ordered(self) -> RangeIn:
        if self.min1 > self.max1:
            raise ValueError(f"min1 ({self.min1}) must be <= max1 ({self.max1})")
        if self.min2 > self.max2:
            raise ValueError(f"min2 ({self.min2}) must be <= max2 ({self.max2})")
        return self

    def to_range(self) -> ProblemRange:
        return ProblemRange(self.min1, self.max1, self.min2, self.max2)


class AnswerRangeRequest(BaseModel):
    # Left as a plain string: unknown operations get the fallback range.
    operation: str
    range: RangeIn
    allow_negatives: bool = False


class AnswerRangeResponse(BaseModel):
    min: int
    max: int
    fallback: bool = False


class RandomResponse(BaseModel):
    value: int


class VerifyRequest(BaseModel):
    operation: Operation
    range: RangeIn
    allow_negatives: bool = False


class VerificationResultOut(BaseModel):
    property_name: str
    passed: bool
    applicable: bool
    counterexample: list[int] | None = None


class VerificationReportOut(BaseModel):
    operation: Operation
    min: int
    max: int
    passed: bool
    exhaustive: bool
    pairs_checked: int
    results: list[VerificationResultOut]


# ---------------------------------------------------------------------------
# Problems
# ---------------------------------------------------------------------------

class SettingsIn(BaseModel):
    operation: Operation
    range: RangeIn
    timer_seconds: int | None = Field(default=None, ge=1, le=3600)
    allow_negatives: bool = False
    focus_number: int | None = None

    def to_settings(self, default_timer_seconds: int = 60) -> GameSettings:
        timer = self.timer_seconds if self.timer_seconds is not None else default_timer_seconds
        return GameSettings(
            operation=self.operation,
            problem_range=self.range.to_range(),
            timer_seconds=timer,
            allow_negatives=self.allow_negatives,
            focus_number=self.focus_number,
        )


class ProblemsRequest(BaseModel):
    settings: SettingsIn
    count: int = Field(default=10, ge=1, le=500)


class ProblemOut(BaseModel):
    num1: int
    num2: int
    operation: Operation
    answer: int
    prompt: str


class ProblemsResponse(BaseModel):
    problems: list[ProblemOut]
    timer_seconds: int


class WarmupRequest(BaseModel):
    settings: SettingsIn


class WarmupResponse(BaseModel):
    target: str


# ---------------------------------------------------------------------------
# Scores and leaderboard
# ---------------------------------------------------------------------------

class ScoreCreate(BaseModel):
    """Payload for saving a finished game."""

    user_id: str = Field(..., min_length=1, max_length=128)
    name: str = Field(default="", max_length=128)
    grade: str | None = Field(default=None, max_length=32)
    score: int
    operation: Operation
    range: RangeIn
    duration: int | None = Field(default=None, ge=1)
    focus_number: int | None = None
    allow_negatives: bool = False


class ScoreRecord(ScoreCreate):
    """A saved score as stored and returned by the API."""

    id: str = Field(default_factory=_new_id)
    date: datetime = Field(default_factory=_utcnow)


class HighScoreRequest(BaseModel):
    user_id: str
    score: int
    operation: Operation
    range: RangeIn


class HighScoreResponse(BaseModel):
    is_high_score: bool


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    name: str
    grade: str | None
    best_score: int
    operation: Operation
    min1: int
    max1: int
    min2: int
    max2: int


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntry]
    total: int
    total_pages: int
    page: int
    user_rank: int | None = None


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------

class GoalLevel(str, Enum):
    LEARNING = "learning"
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    STAR = "star"
    LEGEND = "legend"


GOAL_LEVEL_ORDER: list[GoalLevel] = list(GoalLevel)


class GoalProgress(BaseModel):
    profile_id: str
    operation: Operation
    range: str
    best_score: int
    level: GoalLevel
    attempts: int
    last_attempt: datetime | None = None
    last_level_up: datetime | None = None


class GoalUpdateRequest(BaseModel):
    profile_id: str = Field(..., min_length=1, max_length=128)
    operation: Operation
    range_key: str = Field(..., min_length=1, max_length=32)
    score: int = Field(..., ge=0)


class GoalUpdate(BaseModel):
    updated: bool
    leveled_up: bool
    new_level: GoalLevel
