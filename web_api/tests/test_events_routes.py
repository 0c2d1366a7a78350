"""Tests for the event endpoints."""

from unittest.mock import AsyncMock, patch

import pytest

from core.errors import (
    AlreadyAssignedError,
    DeadlineNotPassedError,
    EventHasDependentsError,
    MeetingCreationFailedError,
    NoRegistrantsError,
    NotFoundError,
    TransactionFailedError,
)
from core.pool_assignment import PoolAssignment
from core.zoom import MeetingData


class TestAssignPoolsEndpoint:
    def test_success(self, client, auth_headers):
        assignment = PoolAssignment(
            pool={"pool_id": 5, "pool_name": "Main Pool", "capacity": 100},
            meeting=MeetingData(shared_url="https://zoom.us/j/111", meeting_id="111"),
            attendee_count=3,
            notifications={"sent": 3, "failed": 0, "skipped": 0},
        )

        with patch("web_api.routes.events.assign_pools",
                   AsyncMock(return_value=assignment)) as mock_assign:
            response = client.post("/api/events/1/assign-pools", headers=auth_headers)

        assert response.status_code == 200
        mock_assign.assert_awaited_once_with(1)
        data = response.json()
        assert data["pool"]["pool_id"] == 5
        assert data["attendees"] == 3
        assert data["meeting_id"] == "111"
        assert data["notifications"]["sent"] == 3

    @pytest.mark.parametrize(
        "error,status,kind",
        [
            (NotFoundError("Event 1 not found"), 404, "not_found"),
            (DeadlineNotPassedError("open"), 400, "deadline_not_passed"),
            (NoRegistrantsError("none"), 400, "no_registrants"),
            (AlreadyAssignedError("done"), 409, "already_assigned"),
            (MeetingCreationFailedError("zoom"), 502, "meeting_creation_failed"),
            (TransactionFailedError("rollback"), 500, "transaction_failed"),
        ],
    )
    def test_error_status(self, client, auth_headers, error, status, kind):
        with patch("web_api.routes.events.assign_pools", AsyncMock(side_effect=error)):
            response = client.post("/api/events/1/assign-pools", headers=auth_headers)

        assert response.status_code == status
        assert response.json()["detail"] == {"error": kind, "message": error.message}


class TestAddTrainersEndpoint:
    def test_passes_trainer_ids(self, client, auth_headers):
        result = {
            "event_id": 1,
            "linked": [21],
            "added_to_meeting": [21],
            "notified": [21],
            "errors": [],
        }

        with patch("web_api.routes.events.add_event_trainers",
                   AsyncMock(return_value=result)) as mock_add:
            response = client.post(
                "/api/events/1/trainers", json={"trainer_ids": [21]}, headers=auth_headers
            )

        assert response.status_code == 200
        assert response.json() == result
        mock_add.assert_awaited_once_with(1, [21])

    def test_unknown_event(self, client, auth_headers):
        with patch("web_api.routes.events.add_event_trainers",
                   AsyncMock(side_effect=NotFoundError("Event 1 not found"))):
            response = client.post(
                "/api/events/1/trainers", json={"trainer_ids": [21]}, headers=auth_headers
            )

        assert response.status_code == 404

    def test_unknown_trainer(self, client, auth_headers):
        with patch("web_api.routes.events.add_event_trainers",
                   AsyncMock(side_effect=ValueError("Unknown trainer ids: [99]"))):
            response = client.post(
                "/api/events/1/trainers", json={"trainer_ids": [99]}, headers=auth_headers
            )

        assert response.status_code == 400
        assert "99" in response.json()["detail"]

    def test_invalid_body(self, client, auth_headers):
        response = client.post(
            "/api/events/1/trainers", json={"trainer_ids": "21"}, headers=auth_headers
        )

        assert response.status_code == 422


class TestDeleteEventEndpoint:
    def test_deleted(self, client, auth_headers):
        with patch("web_api.routes.events.delete_event", AsyncMock(return_value=True)):
            response = client.delete("/api/events/3", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"status": "deleted", "event_id": 3}

    def test_has_dependents(self, client, auth_headers):
        with patch("web_api.routes.events.delete_event",
                   AsyncMock(side_effect=EventHasDependentsError("Event 3 has 2 registrations"))):
            response = client.delete("/api/events/3", headers=auth_headers)

        assert response.status_code == 409

    def test_not_found(self, client, auth_headers):
        with patch("web_api.routes.events.delete_event", AsyncMock(return_value=False)):
            response = client.delete("/api/events/3", headers=auth_headers)

        assert response.status_code == 404
