"""
Tests for storing and finding survey results.
"""
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
import uuid

import pytest
from sqlalchemy.exc import OperationalError

from libs.domain_types import AgencySize, PrimarySetting, UserRole

from app.core.exceptions import ResultsStoreError
from app.core.questions import SURVEY_1_0
from app.core.scoring import calculate_scores
from app.models import Lead, SurveyResponse
from app.services.results_service import (
    find_latest_response_for_email,
    find_lead_by_email,
    get_response_by_results_token,
    save_submission,
)


def make_answers(yes_count):
    ids = SURVEY_1_0.version.question_ids
    return {qid: index < yes_count for index, qid in enumerate(ids)}


def _save(db, email="BCBA@Clinic.Example ", yes_count=20, **kwargs):
    answers = make_answers(yes_count)
    return save_submission(
        db,
        email=email,
        survey_version="1.0",
        answers=answers,
        scores=calculate_scores(answers, SURVEY_1_0),
        **kwargs,
    )


class TestSaveSubmission:
    def test_creates_lead_and_response(self, db_session):
        response = _save(db_session, name="Sam", role=UserRole.BCBA)

        assert response.id is not None
        assert response.total_score == 20
        assert response.percentage == 74
        assert uuid.UUID(response.results_token)
        assert response.lead.email == "bcba@clinic.example"
        assert response.lead.role == UserRole.BCBA
        assert response.is_test is False

    def test_returning_respondent_reuses_lead(self, db_session):
        first = _save(db_session, name="Sam")
        second = _save(db_session, email="bcba@clinic.example", yes_count=25)

        assert first.lead_id == second.lead_id
        assert first.results_token != second.results_token
        assert db_session.query(Lead).count() == 1
        assert second.lead.name == "Sam"

    def test_marketing_consent_is_sticky(self, db_session):
        _save(db_session, marketing_consent=True)
        response = _save(db_session, marketing_consent=False)
        assert response.lead.marketing_consent is True

    def test_test_email_flagged(self, db_session):
        response = _save(db_session, email="e2e-run42@clinic.example")
        assert response.is_test is True
        assert response.lead.is_test is True

    def test_records_segmenting_fields(self, db_session):
        response = _save(
            db_session,
            role=UserRole.CLINICAL_DIRECTOR,
            agency_size=AgencySize.MEDIUM,
            primary_setting=PrimarySetting.CLINIC,
            state="CA",
        )

        assert response.agency_size == AgencySize.MEDIUM
        assert response.role == UserRole.CLINICAL_DIRECTOR
        assert response.primary_setting == PrimarySetting.CLINIC
        assert response.state == "CA"
        assert response.lead.agency_size == AgencySize.MEDIUM
        assert response.lead.primary_setting == PrimarySetting.CLINIC
        assert response.lead.state == "CA"

    def test_response_keeps_fields_as_submitted(self, db_session):
        first = _save(db_session, agency_size=AgencySize.LARGE, state="TX")
        second = _save(db_session)

        assert first.agency_size == AgencySize.LARGE
        assert second.agency_size is None
        assert second.state is None
        assert second.lead.agency_size == AgencySize.LARGE
        assert second.lead.state == "TX"

    def test_agency_email_domain_recorded(self, db_session):
        response = _save(db_session)
        assert response.lead.email_domain == "clinic.example"

    def test_personal_email_domain_not_recorded(self, db_session):
        response = _save(db_session, email="sam.bcba@Gmail.com")
        assert response.lead.email_domain is None

    def test_store_failure(self):
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(ResultsStoreError):
            _save(db)
        db.rollback.assert_called_once()


class TestFindResults:
    def test_latest_response(self, db_session, stored_response):
        now = datetime.now(timezone.utc)
        stored_response(yes_count=10, completed_at=now - timedelta(days=3))
        latest = stored_response(yes_count=22, completed_at=now)

        found = find_latest_response_for_email(db_session, "Clinician@Example.com")

        assert found.id == latest.id

    def test_test_responses_excluded(self, db_session, stored_response):
        stored_response(email="qa@clinic.example", is_test=True)
        assert find_latest_response_for_email(db_session, "qa@clinic.example") is None
        assert find_lead_by_email(db_session, "qa@clinic.example") is None

    def test_unknown_email(self, db_session):
        assert find_latest_response_for_email(db_session, "nobody@x.example") is None
        assert find_lead_by_email(db_session, "nobody@x.example") is None

    def test_by_results_token(self, db_session, stored_response):
        response = stored_response()
        found = get_response_by_results_token(db_session, response.results_token)
        assert found.id == response.id
        assert get_response_by_results_token(db_session, str(uuid.uuid4())) is None

    def test_lookup_failure(self):
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("down"))
        with pytest.raises(ResultsStoreError):
            get_response_by_results_token(db, "x")

    def test_response_count(self, db_session, stored_response):
        stored_response()
        stored_response()
        assert db_session.query(SurveyResponse).count() == 2
