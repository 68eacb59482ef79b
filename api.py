"""FastAPI REST endpoints for the drill service.

Routes
------
POST   /ranges/answer        Answer range for an operation and operand ranges
GET    /ranges/random        Uniform random integer in [min, max]
POST   /ranges/verify        Verify an answer range by brute force
POST   /problems             Generate a batch of problems
POST   /problems/warmup      Typing-warmup target number
POST   /scores               Save a finished game
GET    /scores/{user_id}     Score history, newest first
POST   /scores/high-score    Would this score be a personal best?
GET    /leaderboard          Best score per user for one operation and range
POST   /goals                Record a goal attempt
GET    /goals/{profile_id}   Goal progress for a profile
GET    /goals/{profile_id}/{operation}/{range_key}
                             One goal; 404 when never attempted
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from calculator import calculate_answer_range, generate_random_in_range
from config import AppConfig
from factory import RangeVerifier
from models import (
    AnswerRangeRequest,
    AnswerRangeResponse,
    GoalProgress,
    GoalUpdate,
    GoalUpdateRequest,
    HighScoreRequest,
    HighScoreResponse,
    LeaderboardResponse,
    ProblemOut,
    ProblemsRequest,
    ProblemsResponse,
    RandomResponse,
    ScoreCreate,
    ScoreRecord,
    VerificationReportOut,
    VerificationResultOut,
    VerifyRequest,
    WarmupRequest,
    WarmupResponse,
)
from problems import Problem, ProblemGenerator, warmup_target
from spec import Operation, ProblemRange
from store import ScoreNotFoundError, ScoreStore, ScoreValidationError

ranges_router = APIRouter(prefix="/ranges", tags=["ranges"])
problems_router = APIRouter(prefix="/problems", tags=["problems"])
scores_router = APIRouter(prefix="/scores", tags=["scores"])
leaderboard_router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])
goals_router = APIRouter(prefix="/goals", tags=["goals"])

# Module-level state injected by the app factory (see app.py).
_store: ScoreStore | None = None
_generator: ProblemGenerator | None = None
_config: AppConfig = AppConfig()


def configure(store: ScoreStore, generator: ProblemGenerator, config: AppConfig) -> None:
    """Inject the store, generator and config. Called once at app startup."""
    global _store, _generator, _config
    _store = store
    _generator = generator
    _config = config


def get_store() -> ScoreStore:
    assert _store is not None, "Store not initialized"
    return _store


def get_generator() -> ProblemGenerator:
    assert _generator is not None, "Generator not initialized"
    return _generator


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------

def _unprocessable(e: Exception) -> HTTPException:
    return HTTPException(status_code=422, detail=str(e))


def _problem_out(p: Problem) -> ProblemOut:
    return ProblemOut(
        num1=p.num1,
        num2=p.num2,
        operation=p.operation,
        answer=p.answer,
        prompt=p.prompt,
    )


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------

@ranges_router.post("/answer", response_model=AnswerRangeResponse)
def answer_range(payload: AnswerRangeRequest) -> AnswerRangeResponse:
    """Answer range for an operation; unknown operations get the fallback."""
    known = payload.operation in {op.value for op in Operation}
    result = calculate_answer_range(
        payload.operation, payload.range.to_range(), payload.allow_negatives
    )
    return AnswerRangeResponse(min=result.min, max=result.max, fallback=not known)


@ranges_router.get("/random", response_model=RandomResponse)
def random_in_range(
    min: int = Query(..., description="Inclusive lower bound"),
    max: int = Query(..., description="Inclusive upper bound"),
) -> RandomResponse:
    try:
        return RandomResponse(value=generate_random_in_range(min, max))
    except ValueError as e:
        raise _unprocessable(e) from e


@ranges_router.post("/verify", response_model=VerificationReportOut)
def verify_range(payload: VerifyRequest) -> VerificationReportOut:
    """Check a computed answer range against every real answer."""
    report = RangeVerifier.verify(
        payload.operation, payload.range.to_range(), payload.allow_negatives
    )
    return VerificationReportOut(
        operation=report.operation,
        min=report.answer_range.min,
        max=report.answer_range.max,
        passed=report.passed,
        exhaustive=report.exhaustive,
        pairs_checked=report.pairs_checked,
        results=[
            VerificationResultOut(
                property_name=r.property_name,
                passed=r.passed,
                applicable=r.applicable,
                counterexample=list(r.counterexample) if r.counterexample else None,
            )
            for r in report.results
        ],
    )


# ---------------------------------------------------------------------------
# Problems
# ---------------------------------------------------------------------------

@problems_router.post("", response_model=ProblemsResponse)
def generate_problems(payload: ProblemsRequest) -> ProblemsResponse:
    settings = payload.settings.to_settings(_config.game.default_timer_seconds)
    try:
        problems = get_generator().generate_batch(settings, payload.count)
    except ValueError as e:
        raise _unprocessable(e) from e
    return ProblemsResponse(
        problems=[_problem_out(p) for p in problems],
        timer_seconds=settings.timer_seconds,
    )


@problems_router.post("/warmup", response_model=WarmupResponse)
def warmup(payload: WarmupRequest) -> WarmupResponse:
    settings = payload.settings.to_settings(_config.game.default_timer_seconds)
    try:
        return WarmupResponse(target=warmup_target(settings))
    except ValueError as e:
        raise _unprocessable(e) from e


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------

@scores_router.post("", response_model=ScoreRecord, status_code=201)
def save_score(payload: ScoreCreate) -> ScoreRecord:
    try:
        return get_store().save_score(payload)
    except ScoreValidationError as e:
        raise _unprocessable(e) from e


@scores_router.get("/{user_id}", response_model=list[ScoreRecord])
def score_history(user_id: str) -> list[ScoreRecord]:
    return get_store().history(user_id)


@scores_router.post("/high-score", response_model=HighScoreResponse)
def high_score(payload: HighScoreRequest) -> HighScoreResponse:
    return HighScoreResponse(
        is_high_score=get_store().is_high_score(
            payload.user_id, payload.score, payload.operation, payload.range.to_range()
        )
    )


# ---------------------------------------------------------------------------
# Leaderboard
# ---------------------------------------------------------------------------

@leaderboard_router.get("", response_model=LeaderboardResponse)
def leaderboard(
    operation: Operation = Query(default=Operation.ADDITION),
    min1: int = Query(default=1),
    max1: int = Query(default=10),
    min2: int = Query(default=1),
    max2: int = Query(default=10),
    grade: str | None = Query(default=None, description="Filter by grade"),
    page: int = Query(default=1, ge=1),
    user_id: str | None = Query(default=None, description="Include this user's rank"),
) -> LeaderboardResponse:
    store = get_store()
    r = ProblemRange(min1, max1, min2, max2)
    total = store.leaderboard_count(operation, r, grade)
    return LeaderboardResponse(
        entries=store.leaderboard(operation, r, grade, page),
        total=total,
        total_pages=store.total_pages(total),
        page=page,
        user_rank=store.user_rank(user_id, operation, r, grade) if user_id else None,
    )


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------

@goals_router.post("", response_model=GoalUpdate)
def update_goal(payload: GoalUpdateRequest) -> GoalUpdate:
    return get_store().update_goal(
        payload.profile_id, payload.operation, payload.range_key, payload.score
    )


@goals_router.get("/{profile_id}", response_model=list[GoalProgress])
def goals(profile_id: str) -> list[GoalProgress]:
    return get_store().goals(profile_id)


@goals_router.get("/{profile_id}/{operation}/{range_key}", response_model=GoalProgress)
def get_goal(profile_id: str, operation: Operation, range_key: str) -> GoalProgress:
    try:
        return get_store().get_goal(profile_id, operation, range_key)
    except ScoreNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
