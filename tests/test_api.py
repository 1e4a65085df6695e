"""Tests for API endpoints."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest


def _in_hours(hours: float) -> str:
    return (datetime.now(UTC) + timedelta(hours=hours)).isoformat()


async def _submit(client, job_id=1, user_id=1, **fields) -> dict:
    response = await client.post(
        "/applications", json={"job_id": job_id, "user_id": user_id, **fields}
    )
    assert response.status_code == 201
    return response.json()


class TestHealth:
    """Tests for the health endpoint."""

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        """Test health check endpoint."""
        response = await client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["reminders"]["running"] is False
        assert data["notifications"] == {"enabled": False}


class TestEntryPoint:
    """Tests for the server entry point."""

    def test_run_serves_app(self):
        """Test that the entry point starts uvicorn with the configured address."""
        from app.core.config import settings
        from app.main import run

        with patch("uvicorn.run") as mock_run:
            run()

        mock_run.assert_called_once_with(
            "app.main:app",
            host=settings.host,
            port=settings.port,
            reload=settings.debug,
        )


class TestApplicationsAPI:
    """Tests for application endpoints."""

    @pytest.mark.asyncio
    async def test_submit_and_get(self, client):
        """Test submitting and reading an application."""
        created = await _submit(client, match_score=64)
        assert created["status"] == "applied"
        assert created["source"] == "job_portal"

        response = await client.get(f"/applications/{created['id']}")
        assert response.status_code == 200
        assert response.json()["match_score"] == 64

    @pytest.mark.asyncio
    async def test_duplicate_is_conflict(self, client):
        """Test that a duplicate submission returns 409."""
        await _submit(client)
        response = await client.post("/applications", json={"job_id": 1, "user_id": 1})
        assert response.status_code == 409
        assert response.json()["error"] == "DuplicateApplicationError"

    @pytest.mark.asyncio
    async def test_missing_is_not_found(self, client):
        """Test that unknown applications return 404."""
        response = await client.get("/applications/999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Application 999 not found"

    @pytest.mark.asyncio
    async def test_transition_and_history(self, client):
        """Test a transition and the resulting stage history."""
        created = await _submit(client)

        response = await client.post(
            f"/applications/{created['id']}/transition",
            json={"status": "screening", "notes": "Looks promising"},
            headers={"X-User-ID": "42"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "screening"

        history = (await client.get(f"/applications/{created['id']}/stages")).json()
        assert [s["stage_name"] for s in history] == ["applied", "screening"]
        assert history[1]["handled_by"] == 42

        current = (await client.get(f"/applications/{created['id']}/stages/current")).json()
        assert current["id"] == history[1]["id"]

    @pytest.mark.asyncio
    async def test_illegal_transition_is_conflict(self, client):
        """Test that an illegal edge returns 409."""
        created = await _submit(client)
        response = await client.post(
            f"/applications/{created['id']}/transition", json={"status": "hired"}
        )
        assert response.status_code == 409
        assert response.json()["error"] == "InvalidTransitionError"
        assert response.json()["retryable"] is False

    @pytest.mark.asyncio
    async def test_withdraw_requires_owner(self, client):
        """Test withdrawal authentication and ownership."""
        created = await _submit(client, user_id=7)
        url = f"/applications/{created['id']}/withdraw"

        assert (await client.post(url, json={})).status_code == 401
        assert (
            await client.post(url, json={}, headers={"X-User-ID": "8"})
        ).status_code == 403

        response = await client.post(
            url, json={"reason": "Accepted elsewhere"}, headers={"X-User-ID": "7"}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "withdrawn"

    @pytest.mark.asyncio
    async def test_list_with_filters(self, client):
        """Test listing by status and score."""
        first = await _submit(client, user_id=1, match_score=90)
        await _submit(client, user_id=2, match_score=20)
        await client.post(f"/applications/{first['id']}/reject", json={"reason": "Salary"})

        response = await client.get(
            "/applications", params={"status": "rejected", "min_score": 50}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["applications"][0]["id"] == first["id"]

    @pytest.mark.asyncio
    async def test_flags(self, client):
        """Test the viewed and bookmark endpoints."""
        created = await _submit(client)
        viewed = await client.post(f"/applications/{created['id']}/view")
        assert viewed.json()["viewed_by_employer"] is True
        bookmarked = await client.post(f"/applications/{created['id']}/bookmark")
        assert bookmarked.json()["is_bookmarked"] is True


class TestBulkAPI:
    """Tests for bulk endpoints."""

    @pytest.mark.asyncio
    async def test_bulk_status_reports_each_item(self, client):
        """Test a bulk transition with a failing item."""
        ids = [(await _submit(client, user_id=user))["id"] for user in (1, 2, 3)]
        await client.post(f"/applications/{ids[1]}/reject", json={})

        response = await client.post(
            "/applications/bulk/status",
            json={"application_ids": ids, "status": "screening"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success_count"] == 2
        assert data["error_count"] == 1
        assert data["results"][1]["error"] == "InvalidTransitionError"

    @pytest.mark.asyncio
    async def test_bulk_requires_ids(self, client):
        """Test that an empty batch is rejected by the schema."""
        response = await client.post("/applications/bulk/reject", json={"application_ids": []})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_bulk_move_to_terminal_stage(self, client):
        """Test that bulk moves reject non-pipeline targets."""
        created = await _submit(client)
        response = await client.post(
            "/applications/bulk/move",
            json={"application_ids": [created["id"]], "status": "withdrawn"},
        )
        assert response.status_code == 422
        assert response.json()["error"] == "ValidationError"

    @pytest.mark.asyncio
    async def test_bulk_delete(self, client):
        """Test hard deletion."""
        created = await _submit(client)
        response = await client.post(
            "/applications/bulk/delete", json={"application_ids": [created["id"]]}
        )
        assert response.json() == {"deleted": 1}
        assert (await client.get(f"/applications/{created['id']}")).status_code == 404


class TestStageAdminAPI:
    """Tests for administrative stage endpoints."""

    @pytest.mark.asyncio
    async def test_complete_twice(self, client):
        """Test completing a stage manually."""
        created = await _submit(client)
        stage = (await client.get(f"/applications/{created['id']}/stages/current")).json()

        first = await client.post(f"/applications/stages/{stage['id']}/complete", json={})
        assert first.status_code == 200
        assert first.json()["completed_at"] is not None

        second = await client.post(f"/applications/stages/{stage['id']}/complete", json={})
        assert second.status_code == 409

    @pytest.mark.asyncio
    async def test_delete_stage(self, client):
        """Test deleting a stage."""
        created = await _submit(client)
        stage = (await client.get(f"/applications/{created['id']}/stages/current")).json()

        response = await client.delete(f"/applications/stages/{stage['id']}")
        assert response.status_code == 204
        history = (await client.get(f"/applications/{created['id']}/stages")).json()
        assert history == []


class TestInterviewsAPI:
    """Tests for interview endpoints."""

    @pytest.mark.asyncio
    async def test_schedule_and_complete(self, client):
        """Test the interview round trip through the API."""
        created = await _submit(client)
        response = await client.post(
            "/interviews",
            json={"application_id": created["id"], "scheduled_at": _in_hours(2)},
        )
        assert response.status_code == 201
        interview = response.json()
        assert interview["status"] == "scheduled"

        completed = await client.post(
            f"/interviews/{interview['id']}/complete",
            json={
                "technical_score": 80,
                "communication_score": 90,
                "overall_score": 100,
            },
        )
        assert completed.status_code == 200
        assert completed.json()["average_score"] == 85.0
        assert completed.json()["has_scores"] is True

    @pytest.mark.asyncio
    async def test_past_time_is_invalid(self, client):
        """Test that scheduling in the past returns 422."""
        created = await _submit(client)
        response = await client.post(
            "/interviews",
            json={"application_id": created["id"], "scheduled_at": _in_hours(-5)},
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_score_out_of_range(self, client):
        """Test that out-of-range scores return 422."""
        created = await _submit(client)
        interview = (
            await client.post(
                "/interviews",
                json={"application_id": created["id"], "scheduled_at": _in_hours(2)},
            )
        ).json()

        response = await client.post(
            f"/interviews/{interview['id']}/complete", json={"technical_score": 150}
        )
        assert response.status_code == 422


class TestNotesAPI:
    """Tests for note endpoints."""

    @pytest.mark.asyncio
    async def test_note_lifecycle(self, client):
        """Test creating, pinning and deleting a note."""
        created = await _submit(client)
        payload = {"application_id": created["id"], "note_text": "Great portfolio"}

        assert (await client.post("/notes", json=payload)).status_code == 401

        response = await client.post("/notes", json=payload, headers={"X-User-ID": "5"})
        assert response.status_code == 201
        note = response.json()
        assert note["author_id"] == 5

        pinned = await client.post(f"/notes/{note['id']}/pin")
        assert pinned.json()["is_pinned"] is True

        listed = (await client.get(f"/notes/application/{created['id']}/pinned")).json()
        assert [n["id"] for n in listed] == [note["id"]]

        forbidden = await client.delete(f"/notes/{note['id']}", headers={"X-User-ID": "6"})
        assert forbidden.status_code == 403
        deleted = await client.delete(f"/notes/{note['id']}", headers={"X-User-ID": "5"})
        assert deleted.status_code == 204


class TestDocumentsAPI:
    """Tests for document endpoints."""

    @pytest.mark.asyncio
    async def test_upload_and_verify(self, client):
        """Test uploading and verifying a document."""
        created = await _submit(client, user_id=3)
        response = await client.post(
            f"/documents/application/{created['id']}",
            json={"file_url": "https://files.local/cv.pdf", "file_name": "cv.pdf"},
            headers={"X-User-ID": "3"},
        )
        assert response.status_code == 201
        document = response.json()

        queue = (await client.get("/documents/unverified")).json()
        assert queue["total"] == 1

        verified = await client.post(
            f"/documents/{document['id']}/verify", headers={"X-User-ID": "90"}
        )
        assert verified.json()["is_verified"] is True
        assert (await client.get("/documents/unverified")).json()["total"] == 0


class TestAnalyticsAPI:
    """Tests for analytics endpoints."""

    @pytest.mark.asyncio
    async def test_funnel(self, client):
        """Test the funnel endpoint."""
        created = await _submit(client, job_id=4)
        await client.post(
            f"/applications/{created['id']}/transition", json={"status": "screening"}
        )
        await _submit(client, job_id=4, user_id=2)

        funnel = (await client.get("/analytics/jobs/4/funnel")).json()
        assert funnel["total_applications"] == 2
        assert funnel["conversion_rates"]["screening"] == 50.0

    @pytest.mark.asyncio
    async def test_trend_range_validation(self, client):
        """Test that a reversed trend range returns 422."""
        response = await client.get(
            "/analytics/jobs/4/trend",
            params={"start_date": "2026-03-02", "end_date": "2026-03-01"},
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_application_stats(self, client):
        """Test the per-application statistics endpoint."""
        created = await _submit(client)
        stats = (await client.get(f"/analytics/applications/{created['id']}")).json()
        assert stats["stage_count"] == 1
        assert stats["current_stage"] == "applied"

    @pytest.mark.asyncio
    async def test_overall_trend(self, client):
        """Test the trend across jobs, with and without a company."""
        await _submit(client, job_id=1, company_id=3)
        await _submit(client, job_id=2, company_id=4)
        today = datetime.now(UTC).date().isoformat()

        overall = await client.get(
            "/analytics/trend", params={"start_date": today, "end_date": today}
        )
        assert overall.status_code == 200
        assert overall.json()["job_id"] is None
        assert overall.json()["points"][0]["total_applications"] == 2

        company = await client.get(
            "/analytics/trend",
            params={"start_date": today, "end_date": today, "company_id": 3},
        )
        assert company.json()["company_id"] == 3
        assert company.json()["points"][0]["total_applications"] == 1

    @pytest.mark.asyncio
    async def test_application_timeline(self, client):
        """Test the timeline endpoint."""
        created = await _submit(client)
        await client.post(
            f"/applications/{created['id']}/transition", json={"status": "screening"}
        )

        response = await client.get(f"/analytics/applications/{created['id']}/timeline")

        assert response.status_code == 200
        timeline = response.json()
        assert [e["event_type"] for e in timeline["events"]] == [
            "application_submitted",
            "stage_change",
        ]
        assert [p["status"] for p in timeline["stage_progress"]] == [
            "completed",
            "in_progress",
        ]

    @pytest.mark.asyncio
    async def test_user_stats(self, client):
        """Test the per-user statistics endpoint."""
        await _submit(client, job_id=1, user_id=21)
        await _submit(client, job_id=2, user_id=21)

        stats = (await client.get("/analytics/users/21")).json()

        assert stats["total_applications"] == 2
        assert stats["by_status"]["applied"] == 2
        assert stats["success_rate"] == 0.0
