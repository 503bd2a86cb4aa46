"""
Pytest configuration and shared fixtures for testing.
"""
import os
import sys
from pathlib import Path

# Add project root to path so libs/ is importable (matches CI PYTHONPATH config)
# This must happen before importing from app/ which may import from libs/
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Use SQLite for tests; path is relative to this file so the .db lands inside
# tests/ regardless of the working directory. Set before app.models creates
# its engine.
_TEST_DB = Path(__file__).parent / "test.db"
SQLALCHEMY_DATABASE_URL = f"sqlite:///{_TEST_DB}"
os.environ.setdefault("DATABASE_URL", SQLALCHEMY_DATABASE_URL)
os.environ.setdefault("DEBUG", "False")

from contextlib import asynccontextmanager  # noqa: E402
from datetime import datetime, timezone  # noqa: E402
from typing import Any, Callable, Dict, Generator, Iterable, Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from app.api.v1.stats import get_distribution_source  # noqa: E402
from app.core.auth import MagicLinkTokenService  # noqa: E402
from app.core.auth.dependencies import get_magic_link_service  # noqa: E402
from app.core.questions import SURVEY_1_0  # noqa: E402
from app.main import app  # noqa: E402
from app.models import (  # noqa: E402
    Base,
    Lead,
    ScoreDistribution,
    SurveyResponse,
    SurveyStats,
    get_db,
)

TEST_SECRET = "test-secret-key-for-magic-links-0123456789"


@asynccontextmanager
async def _test_lifespan(app):
    """No-op lifespan for tests."""
    yield


# Neutralize the production lifespan on the singleton app
app.router.lifespan_context = _test_lifespan


engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    The aggregate views are created as plain tables so tests can fill them
    directly.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def token_service() -> MagicLinkTokenService:
    """Token service with a fixed test secret."""
    return MagicLinkTokenService(secret_key=TEST_SECRET)


@pytest.fixture(scope="function")
def client(db_session, token_service) -> Generator[TestClient, None, None]:
    """
    Create a test client with database and token service overrides.
    """

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_magic_link_service] = lambda: token_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def override_distribution_source() -> Generator[Callable[[Any], None], None, None]:
    """
    Install a distribution source for the stats endpoints.

    Usage:
        override_distribution_source(StaticDistributionSource({...}))
    """

    def _install(source: Any) -> None:
        app.dependency_overrides[get_distribution_source] = lambda: source

    yield _install
    app.dependency_overrides.pop(get_distribution_source, None)


def make_answers(yes_count: int, survey=SURVEY_1_0) -> Dict[str, bool]:
    """Answers with the first yes_count questions answered "Yes"."""
    return {
        qid: index < yes_count
        for index, qid in enumerate(survey.version.question_ids)
    }


@pytest.fixture
def answers_factory() -> Callable[[int], Dict[str, bool]]:
    return make_answers


@pytest.fixture
def stored_response(db_session) -> Callable[..., SurveyResponse]:
    """
    Factory storing a lead and a survey response directly in the database.
    """

    def _create(
        email: str = "clinician@example.com",
        yes_count: int = 20,
        is_test: bool = False,
        completed_at: Optional[datetime] = None,
        name: Optional[str] = "Jordan Avery",
    ) -> SurveyResponse:
        lead = db_session.query(Lead).filter(Lead.email == email).first()
        if lead is None:
            lead = Lead(email=email, name=name, is_test=is_test)
            db_session.add(lead)
        answers = make_answers(yes_count)
        response = SurveyResponse(
            lead=lead,
            survey_version="1.0",
            answers=answers,
            total_score=yes_count,
            percentage=(200 * yes_count + 27) // 54,
            is_test=is_test,
            completed_at=completed_at or datetime.now(timezone.utc),
        )
        db_session.add(response)
        db_session.commit()
        db_session.refresh(response)
        return response

    return _create


@pytest.fixture
def seed_histogram(db_session) -> Callable[..., None]:
    """
    Fill the score_distribution and survey_stats views for a version.
    """

    def _seed(
        pairs: Iterable[tuple],
        version: str = "1.0",
        last_updated: Optional[datetime] = None,
    ) -> None:
        pairs = list(pairs)
        for score, frequency in pairs:
            db_session.add(
                ScoreDistribution(
                    survey_version=version, total_score=score, frequency=frequency
                )
            )
        db_session.add(
            SurveyStats(
                survey_version=version,
                total_responses=sum(f or 0 for _, f in pairs),
                last_updated=last_updated,
            )
        )
        db_session.commit()

    return _seed


@pytest.fixture
def testing_session_local():
    """Expose TestingSessionLocal for tests that need raw session access."""
    return TestingSessionLocal
