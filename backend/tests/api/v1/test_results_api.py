"""
Tests for results lookup, magic-link requests and the results page.
"""
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

from app.core.auth import MagicLinkTokenService
from app.models import Lead

OWNER_EMAIL = "clinician@example.com"


@pytest.fixture
def mock_send_email():
    with patch(
        "app.api.v1.results.send_results_link_email", new_callable=MagicMock
    ) as mock_send:
        yield mock_send


def tamper(token):
    header, payload, signature = token.split(".")
    middle = len(signature) // 2
    replacement = "A" if signature[middle] != "A" else "B"
    return ".".join(
        [header, payload, signature[:middle] + replacement + signature[middle + 1:]]
    )


class TestLookup:
    def test_found(self, client, stored_response):
        earlier = datetime.now(timezone.utc) - timedelta(days=2)
        stored_response(yes_count=10, completed_at=earlier)
        latest = stored_response(yes_count=22)

        response = client.get(
            "/v1/results/lookup", params={"email": "Clinician@Example.com"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "found": True,
            "results_token": latest.results_token,
            "message": None,
        }

    def test_no_lead(self, client, db_session):
        data = client.get("/v1/results/lookup", params={"email": "new@example.com"}).json()

        assert data["found"] is False
        assert data["results_token"] is None
        assert "Would you like to take the survey?" in data["message"]

    def test_lead_without_response(self, client, db_session):
        db_session.add(Lead(email="started@example.com"))
        db_session.commit()

        data = client.get("/v1/results/lookup", params={"email": "started@example.com"}).json()

        assert data["found"] is False
        assert data["message"] == "No completed survey found for this email."

    def test_test_traffic_hidden(self, client, stored_response):
        stored_response(email="qa@example.com", is_test=True)
        data = client.get("/v1/results/lookup", params={"email": "qa@example.com"}).json()
        assert data["found"] is False

    def test_invalid_email(self, client):
        response = client.get("/v1/results/lookup", params={"email": "nope"})

        assert response.status_code == 422
        assert response.json()["error"] == {
            "code": "VALIDATION_ERROR",
            "message": "Please enter a valid email address.",
        }

    def test_missing_email(self, client):
        response = client.get("/v1/results/lookup")
        assert response.status_code == 422


class TestMagicLinkRequest:
    def test_existing_results(self, client, stored_response, token_service, mock_send_email):
        stored = stored_response()

        response = client.post("/v1/results/magic-link", json={"email": OWNER_EMAIL})

        assert response.status_code == 200
        mock_send_email.assert_called_once()
        email, results_url, _ = mock_send_email.call_args[0]
        assert email == OWNER_EMAIL
        token = results_url.rsplit("/", 1)[-1]
        assert token_service.verify(token).results_token == stored.results_token

    def test_same_body_without_results(self, client, stored_response, mock_send_email):
        stored_response()
        with_results = client.post("/v1/results/magic-link", json={"email": OWNER_EMAIL})
        mock_send_email.reset_mock()

        without_results = client.post(
            "/v1/results/magic-link", json={"email": "stranger@example.com"}
        )

        assert without_results.status_code == 200
        assert without_results.json() == with_results.json()
        mock_send_email.assert_not_called()

    def test_invalid_email(self, client, mock_send_email):
        response = client.post("/v1/results/magic-link", json={"email": "bad"})
        assert response.status_code == 422
        mock_send_email.assert_not_called()


class TestGetResults:
    def test_by_magic_link(self, client, stored_response, token_service):
        stored = stored_response(yes_count=20)
        token = token_service.create(OWNER_EMAIL, stored.results_token)

        response = client.get(f"/v1/results/{token}")

        assert response.status_code == 200
        data = response.json()
        assert data["results_token"] == stored.results_token
        assert data["name"] == "Jordan Avery"
        assert data["summary"]["total"] == 20
        assert len(data["gaps"]) == 7
        assert {gap["category_id"] for gap in data["gaps"]} == {
            "caregiver_guidance",
            "supervision",
        }
        assert set(data["gaps_by_category"]) == {
            "daily_sessions",
            "treatment_fidelity",
            "data_analysis",
            "caregiver_guidance",
            "supervision",
        }
        assert data["gaps_by_category"]["daily_sessions"] == []
        assert len(data["gaps_by_category"]["supervision"]) == 4

    def test_perfect_score_has_no_gaps(self, client, stored_response, token_service):
        stored = stored_response(yes_count=27)
        token = token_service.create(OWNER_EMAIL, stored.results_token)

        data = client.get(f"/v1/results/{token}").json()

        assert data["gaps"] == []
        assert data["summary"]["level"] == "strong"

    def test_by_results_handle(self, client, stored_response):
        stored = stored_response()
        response = client.get(f"/v1/results/{stored.results_token}")
        assert response.status_code == 200
        assert response.json()["results_token"] == stored.results_token

    def test_unknown_handle(self, client, db_session):
        response = client.get(f"/v1/results/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"] == {
            "code": "NOT_FOUND",
            "message": "Survey results not found.",
        }

    def test_malformed_identifier(self, client, db_session):
        response = client.get("/v1/results/not-a-token")
        assert response.status_code == 422
        assert response.json()["error"]["message"] == "Invalid results token."

    def test_expired_link(self, client, stored_response, token_service):
        stored = stored_response()
        issued = datetime.now(timezone.utc) - timedelta(days=30)
        with patch("app.core.auth.magic_link.utc_now", return_value=issued):
            token = token_service.create(OWNER_EMAIL, stored.results_token, ttl="1d")

        response = client.get(f"/v1/results/{token}")

        assert response.status_code == 401
        assert response.json()["error"] == {
            "code": "INVALID_TOKEN",
            "message": "Invalid or expired results link.",
        }

    def test_tampered_link(self, client, stored_response, token_service):
        stored = stored_response()
        token = token_service.create(OWNER_EMAIL, stored.results_token)

        response = client.get(f"/v1/results/{tamper(token)}")

        assert response.status_code == 401

    def test_link_signed_with_other_secret(self, client, stored_response):
        stored = stored_response()
        forger = MagicLinkTokenService(secret_key="some-other-secret-0123456789abcdef")
        token = forger.create(OWNER_EMAIL, stored.results_token)

        response = client.get(f"/v1/results/{token}")

        assert response.status_code == 401

    def test_link_for_missing_results(self, client, db_session, token_service):
        token = token_service.create(OWNER_EMAIL, str(uuid.uuid4()))

        response = client.get(f"/v1/results/{token}")

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid or expired results link."

    def test_link_for_another_email(self, client, stored_response, token_service):
        stored = stored_response()
        token = token_service.create("intruder@example.com", stored.results_token)

        response = client.get(f"/v1/results/{token}")

        assert response.status_code == 401

    def test_request_id_header(self, client, stored_response):
        stored = stored_response()
        response = client.get(
            f"/v1/results/{stored.results_token}", headers={"X-Request-ID": "req-42"}
        )
        assert response.headers["X-Request-ID"] == "req-42"
