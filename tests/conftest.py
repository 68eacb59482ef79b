"""Shared fixtures for drill tests."""
from __future__ import annotations

import logging

import pytest

from models import RangeIn, ScoreCreate
from problems import ProblemGenerator
from spec import Operation
from store import ScoreStore


@pytest.fixture(autouse=True)
def _reset_service_logger():
    """Undo setup_logging() so records reach pytest's caplog handler."""

    def _reset() -> None:
        logger = logging.getLogger("mathdrill")
        logger.handlers.clear()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)

    # Importing app.py configures logging as a side effect.
    _reset()
    yield
    _reset()


@pytest.fixture
def store() -> ScoreStore:
    return ScoreStore()


@pytest.fixture
def generator() -> ProblemGenerator:
    return ProblemGenerator(seed=1234)


@pytest.fixture
def tables_score() -> ScoreCreate:
    """A minimal valid score for 1-10 x 1-10 addition."""
    return ScoreCreate(
        user_id="alice",
        name="Alice",
        grade="3",
        score=25,
        operation=Operation.ADDITION,
        range=RangeIn(min1=1, max1=10, min2=1, max2=10),
        duration=60,
    )
