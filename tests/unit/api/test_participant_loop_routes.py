"""Unit tests for the participant loop API routes.

Tests:
- Enrollment returns 201 with the week 1 state
- Domain errors map to RFC 7807 problem documents with their status
- Correlation ID propagation
- Tick and notification intent draining
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from founder_loop.api.main import app
from founder_loop.bootstrap.loop_engine import (
    reset_loop_engine_dependencies,
    set_loop_config,
    set_time_authority,
)
from founder_loop.config.loop_config import LoopConfig
from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.loop_builders import ACTION, EVIDENCE, NARRATIVE, PARTICIPANT_ID, wat

BASE = f"/v1/participants/{PARTICIPANT_ID}"


@pytest.fixture
def fake_clock() -> FakeTimeAuthority:
    return FakeTimeAuthority(frozen_at=wat(4, 12))


@pytest.fixture
def client(fake_clock: FakeTimeAuthority) -> Iterator[TestClient]:
    reset_loop_engine_dependencies()
    set_loop_config(LoopConfig())
    set_time_authority(fake_clock)
    with TestClient(app) as test_client:
        yield test_client
    reset_loop_engine_dependencies()


def _enroll(client: TestClient):
    return client.post(
        "/v1/participants",
        json={"participant_id": str(PARTICIPANT_ID), "baseline_revenue_30d": 1000},
    )


def _commit(client: TestClient, action: str = ACTION):
    return client.post(
        f"{BASE}/weeks/1/commit",
        json={
            "action_description": action,
            "target_revenue": 4000,
            "target_completion_date": "2026-01-09",
        },
    )


class TestHealth:
    """Tests for the health endpoint."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestEnrollment:
    """Tests for POST /v1/participants."""

    def test_enroll(self, client: TestClient) -> None:
        response = _enroll(client)
        assert response.status_code == 201
        body = response.json()
        assert body["week_number"] == 1
        assert body["next_action"] == "SUBMIT_COMMIT"
        assert len(body["steps"]) == 5

    def test_duplicate_enrollment_conflict(self, client: TestClient) -> None:
        _enroll(client)
        response = _enroll(client)
        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["code"] == "ParticipantAlreadyEnrolled"
        assert detail["instance"] == "/v1/participants"

    def test_negative_baseline_rejected_by_schema(self, client: TestClient) -> None:
        response = client.post(
            "/v1/participants",
            json={"participant_id": str(PARTICIPANT_ID), "baseline_revenue_30d": -5},
        )
        assert response.status_code == 422

    def test_past_cohort_start_rejected(
        self, client: TestClient, fake_clock: FakeTimeAuthority
    ) -> None:
        fake_clock.set_time(wat(21, 10))
        response = client.post(
            "/v1/participants",
            json={
                "participant_id": str(PARTICIPANT_ID),
                "baseline_revenue_30d": 1000,
                "cohort_start": "2026-01-05T00:00:00+01:00",
            },
        )
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "InvalidCohortStart"
        assert client.get(f"{BASE}/week").status_code == 404


class TestSubmissions:
    """Tests for the weekly submission endpoints."""

    def test_commit(self, client: TestClient, fake_clock: FakeTimeAuthority) -> None:
        _enroll(client)
        fake_clock.set_time(wat(5, 8))
        response = _commit(client)
        assert response.status_code == 200
        assert response.json()["next_action"] == "SUBMIT_REPORT"

    def test_vague_commit_problem_document(
        self, client: TestClient, fake_clock: FakeTimeAuthority
    ) -> None:
        _enroll(client)
        fake_clock.set_time(wat(5, 8))
        response = _commit(client, action="Maybe reach out to a few old clients")

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["code"] == "VagueLanguage"
        assert detail["status"] == 422
        assert detail["type"].startswith("urn:founder-loop:error:")
        assert detail["instance"] == f"{BASE}/weeks/1/commit"

    def test_report_before_commit_conflict(
        self, client: TestClient, fake_clock: FakeTimeAuthority
    ) -> None:
        _enroll(client)
        fake_clock.set_time(wat(5, 8))
        response = client.post(
            f"{BASE}/weeks/1/report",
            json={
                "revenue_generated": 3000,
                "hours_spent": 10,
                "narrative": NARRATIVE,
                "evidence_items": list(EVIDENCE),
            },
        )
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "ReportLocked"

    def test_unknown_participant(self, client: TestClient) -> None:
        response = client.get(f"{BASE}/week")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "NotFound"

    def test_locked_stage(self, client: TestClient) -> None:
        _enroll(client)
        response = client.get(f"{BASE}/stages/3")
        assert response.status_code == 403
        assert response.json()["detail"]["requested_stage"] == 3

    def test_submission_under_review_locked(
        self, client: TestClient, fake_clock: FakeTimeAuthority
    ) -> None:
        _enroll(client)
        fake_clock.set_time(wat(16, 18, 1))
        response = _commit(client)
        assert response.status_code == 423
        detail = response.json()["detail"]
        assert detail["code"] == "UnderReview"
        assert detail["missed_weeks"] == [1, 2]

    def test_review_lock_documented(self, client: TestClient) -> None:
        paths = client.get("/openapi.json").json()["paths"]
        commit = paths["/v1/participants/{participant_id}/weeks/{week_number}/commit"]
        assert "423" in commit["post"]["responses"]


class TestSweepAndIntents:
    """Tests for /v1/tick and intent draining."""

    def test_tick_then_drain(self, client: TestClient, fake_clock: FakeTimeAuthority) -> None:
        _enroll(client)
        fake_clock.set_time(wat(9, 18, 1))

        tick = client.post("/v1/tick")
        assert tick.status_code == 200
        assert tick.json()["transitions"] == 2

        escalation = client.get(f"{BASE}/escalation").json()
        assert escalation["consecutive_misses"] == 1

        drained = client.post("/v1/notification-intents/drain", params={"limit": 1})
        assert drained.status_code == 200
        intents = drained.json()["intents"]
        assert [i["kind"] for i in intents] == ["MentorNotifiedMissedCommit"]

        rest = client.post("/v1/notification-intents/drain").json()["intents"]
        assert [i["kind"] for i in rest] == ["MentorNotifiedMissedReport"]


class TestCorrelation:
    """Tests for correlation ID propagation."""

    def test_correlation_id_echoed(self, client: TestClient) -> None:
        response = client.get("/v1/health", headers={"X-Correlation-ID": "abc-123"})
        assert response.headers["X-Correlation-ID"] == "abc-123"

    def test_correlation_id_generated(self, client: TestClient) -> None:
        response = client.get("/v1/health")
        assert response.headers["X-Correlation-ID"]
