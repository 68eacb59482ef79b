"""Application factory and entry point.

Run with:
    uvicorn app:app --reload
"""

from __future__ import annotations

from fastapi import FastAPI

from api import (
    configure,
    goals_router,
    leaderboard_router,
    problems_router,
    ranges_router,
    scores_router,
)
from config import AppConfig, load_config
from logs import setup_logging
from problems import ProblemGenerator
from store import ScoreStore


def create_app(
    store: ScoreStore | None = None,
    config: AppConfig | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Accepts an optional store and config for testing; otherwise the config
    is loaded from config.yaml and a fresh store is created.
    """
    if config is None:
        config = load_config()
    if store is None:
        store = ScoreStore(page_size=config.game.leaderboard_page_size)

    setup_logging(
        config.logging.level,
        service_name=config.logging.service_name,
        json_output=config.logging.json_output,
    )
    configure(store, ProblemGenerator(seed=config.game.random_seed), config)

    app = FastAPI(
        title="Math Drill API",
        description=(
            "Timed arithmetic drills: answer ranges for operand ranges, "
            "problem generation, typing warmups, scores, leaderboards and "
            "goal progress."
        ),
        version="0.1.0",
    )
    app.include_router(ranges_router)
    app.include_router(problems_router)
    app.include_router(scores_router)
    app.include_router(leaderboard_router)
    app.include_router(goals_router)
    return app


# Default app instance for `uvicorn app:app`
app = create_app()
