"""Tests for the FastAPI REST endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import AppConfig, GameConfig
from store import ScoreStore


@pytest.fixture
def score_store() -> ScoreStore:
    return ScoreStore(page_size=2)


@pytest.fixture
def client(score_store):
    config = AppConfig(game=GameConfig(default_timer_seconds=45, random_seed=99))
    app = create_app(store=score_store, config=config)
    return TestClient(app)


TABLES = {"min1": 1, "max1": 10, "min2": 1, "max2": 10}


def _settings(operation: str = "addition", **extra) -> dict:
    return {"operation": operation, "range": dict(TABLES), **extra}


def _score_payload(user_id: str, score: int, **extra) -> dict:
    return {
        "user_id": user_id,
        "name": user_id.title(),
        "score": score,
        "operation": "addition",
        "range": dict(TABLES),
        **extra,
    }


# ---------------------------------------------------------------------------
# /ranges
# ---------------------------------------------------------------------------

class TestAnswerRangeEndpoint:

    def test_multiplication_signed(self, client):
        resp = client.post("/ranges/answer", json={
            "operation": "multiplication",
            "range": {"min1": -3, "max1": 2, "min2": -4, "max2": 5},
            "allow_negatives": True,
        })
        assert resp.status_code == 200
        assert resp.json() == {"min": -15, "max": 12, "fallback": False}

    def test_division_zero_divisor(self, client):
        resp = client.post("/ranges/answer", json={
            "operation": "division",
            "range": {"min1": 10, "max1": 50, "min2": 0, "max2": 5},
        })
        assert resp.json() == {"min": 2, "max": 50, "fallback": False}

    def test_unknown_operation_uses_fallback(self, client):
        resp = client.post("/ranges/answer", json={
            "operation": "modulo",
            "range": dict(TABLES),
        })
        assert resp.status_code == 200
        assert resp.json() == {"min": 1, "max": 20, "fallback": True}

    def test_unordered_range_422(self, client):
        resp = client.post("/ranges/answer", json={
            "operation": "addition",
            "range": {"min1": 10, "max1": 1, "min2": 1, "max2": 10},
        })
        assert resp.status_code == 422


class TestRandomEndpoint:

    def test_single_value(self, client):
        resp = client.get("/ranges/random", params={"min": 5, "max": 5})
        assert resp.status_code == 200
        assert resp.json() == {"value": 5}

    def test_in_bounds(self, client):
        for _ in range(20):
            value = client.get("/ranges/random", params={"min": -3, "max": 3}).json()["value"]
            assert -3 <= value <= 3

    def test_inverted_bounds_422(self, client):
        resp = client.get("/ranges/random", params={"min": 9, "max": 1})
        assert resp.status_code == 422
        assert "must be <=" in resp.json()["detail"]

    def test_missing_param_422(self, client):
        assert client.get("/ranges/random", params={"min": 1}).status_code == 422


class TestVerifyEndpoint:

    def test_verify_passes(self, client):
        resp = client.post("/ranges/verify", json={
            "operation": "subtraction",
            "range": dict(TABLES),
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["passed"] is True
        assert data["exhaustive"] is True
        assert data["pairs_checked"] == 100
        assert (data["min"], data["max"]) == (0, 9)
        names = {r["property_name"] for r in data["results"]}
        assert "min_non_negative" in names

    def test_verify_huge_range_is_sampled(self, client):
        resp = client.post("/ranges/verify", json={
            "operation": "addition",
            "range": {"min1": 0, "max1": 10**20, "min2": 1, "max2": 5},
        })
        assert resp.status_code == 200
        assert resp.json()["exhaustive"] is False
        assert resp.json()["passed"] is True

    def test_verify_rejects_unknown_operation(self, client):
        resp = client.post("/ranges/verify", json={
            "operation": "modulo",
            "range": dict(TABLES),
        })
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# /problems
# ---------------------------------------------------------------------------

class TestProblemsEndpoint:

    def test_generates_count(self, client):
        resp = client.post("/problems", json={"settings": _settings("multiplication"), "count": 5})
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["problems"]) == 5
        for p in data["problems"]:
            assert p["answer"] == p["num1"] * p["num2"]
            assert p["prompt"].endswith("= ?")

    def test_default_timer_from_config(self, client):
        resp = client.post("/problems", json={"settings": _settings()})
        assert resp.json()["timer_seconds"] == 45
        assert len(resp.json()["problems"]) == 10

    def test_explicit_timer(self, client):
        resp = client.post("/problems", json={"settings": _settings(timer_seconds=120)})
        assert resp.json()["timer_seconds"] == 120

    def test_focus_number(self, client):
        resp = client.post("/problems", json={
            "settings": _settings("division", focus_number=4), "count": 3,
        })
        assert all(p["num2"] == 4 for p in resp.json()["problems"])

    def test_zero_focus_division_422(self, client):
        resp = client.post("/problems", json={"settings": _settings("division", focus_number=0)})
        assert resp.status_code == 422

    def test_unknown_operation_422(self, client):
        resp = client.post("/problems", json={"settings": _settings("modulo")})
        assert resp.status_code == 422


class TestWarmupEndpoint:

    def test_target_in_answer_range(self, client):
        resp = client.post("/problems/warmup", json={"settings": _settings("multiplication")})
        assert resp.status_code == 200
        assert 1 <= int(resp.json()["target"]) <= 100

    def test_empty_answer_range_422(self, client):
        resp = client.post("/problems/warmup", json={
            "settings": {
                "operation": "subtraction",
                "range": {"min1": 1, "max1": 3, "min2": 5, "max2": 8},
            },
        })
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# /scores
# ---------------------------------------------------------------------------

class TestScoresEndpoint:

    def test_save_returns_201(self, client):
        resp = client.post("/scores", json=_score_payload("alice", 12))
        assert resp.status_code == 201
        data = resp.json()
        assert data["id"]
        assert data["score"] == 12
        assert "date" in data

    def test_zero_score_422(self, client):
        resp = client.post("/scores", json=_score_payload("alice", 0))
        assert resp.status_code == 422

    def test_history(self, client):
        client.post("/scores", json=_score_payload("alice", 12))
        client.post("/scores", json=_score_payload("bob", 15))
        resp = client.get("/scores/alice")
        assert resp.status_code == 200
        assert [s["user_id"] for s in resp.json()] == ["alice"]

    def test_history_unknown_user_empty(self, client):
        assert client.get("/scores/ghost").json() == []

    def test_high_score(self, client):
        client.post("/scores", json=_score_payload("alice", 12))
        body = {"user_id": "alice", "score": 12, "operation": "addition", "range": dict(TABLES)}
        assert client.post("/scores/high-score", json=body).json() == {"is_high_score": False}
        body["score"] = 13
        assert client.post("/scores/high-score", json=body).json() == {"is_high_score": True}


# ---------------------------------------------------------------------------
# /leaderboard
# ---------------------------------------------------------------------------

class TestLeaderboardEndpoint:

    def test_defaults_to_addition_tables(self, client):
        client.post("/scores", json=_score_payload("alice", 12))
        client.post("/scores", json=_score_payload("bob", 20))
        resp = client.get("/leaderboard")
        assert resp.status_code == 200
        data = resp.json()
        assert [e["user_id"] for e in data["entries"]] == ["bob", "alice"]
        assert data["entries"][0]["rank"] == 1
        assert data["total"] == 2
        assert data["total_pages"] == 1
        assert data["user_rank"] is None

    def test_pagination_and_user_rank(self, client):
        for user, score in [("a", 50), ("b", 40), ("c", 30)]:
            client.post("/scores", json=_score_payload(user, score))
        resp = client.get("/leaderboard", params={"page": 2, "user_id": "c"})
        data = resp.json()
        assert [e["user_id"] for e in data["entries"]] == ["c"]
        assert data["entries"][0]["rank"] == 3
        assert data["total_pages"] == 2
        assert data["user_rank"] == 3

    def test_filter_by_range(self, client):
        client.post("/scores", json=_score_payload("alice", 12))
        resp = client.get("/leaderboard", params={"min1": 1, "max1": 12, "min2": 1, "max2": 12})
        assert resp.json()["entries"] == []

    def test_invalid_page_422(self, client):
        assert client.get("/leaderboard", params={"page": 0}).status_code == 422


# ---------------------------------------------------------------------------
# /goals
# ---------------------------------------------------------------------------

class TestGoalsEndpoint:

    def test_update_and_list(self, client):
        resp = client.post("/goals", json={
            "profile_id": "p1", "operation": "addition", "range_key": "1-5", "score": 42,
        })
        assert resp.status_code == 200
        assert resp.json() == {"updated": True, "leveled_up": True, "new_level": "gold"}

        goals = client.get("/goals/p1").json()
        assert len(goals) == 1
        assert goals[0]["best_score"] == 42
        assert goals[0]["range"] == "1-5"

    def test_unknown_profile_empty(self, client):
        assert client.get("/goals/nobody").json() == []

    def test_get_single_goal(self, client):
        client.post("/goals", json={
            "profile_id": "p1", "operation": "division", "range_key": "7", "score": 12,
        })
        resp = client.get("/goals/p1/division/7")
        assert resp.status_code == 200
        assert resp.json()["level"] == "learning"
        assert resp.json()["attempts"] == 1

    def test_missing_goal_404(self, client):
        resp = client.get("/goals/p1/addition/1-5")
        assert resp.status_code == 404
        assert "Not found" in resp.json()["detail"]
