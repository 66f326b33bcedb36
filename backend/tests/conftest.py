"""
SVCM KPI - Test Configuration
================================
pytest fixtures and configuration for backend tests
Uses in-memory SQLite (StaticPool) so every test gets an isolated schema
"""

import os
from typing import AsyncGenerator, Callable, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from dotenv import load_dotenv

load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), "..", ".env"))

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_TARGET_MODE"] = "direct"
os.environ["SENTRY_DSN"] = ""

# Now import app modules
from svcm_kpi.main import app
from svcm_kpi.database import get_db, Base
from svcm_kpi.models import Profile, UserRole, Department


test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Drop all tables after each test for isolation
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def make_profile(db_session) -> Callable[..., Profile]:
    """Factory fixture that persists a profile with the given role/department."""
    counter = {"n": 0}

    def _make(role: UserRole = UserRole.EMPLOYEE, department: Optional[Department] = None) -> Profile:
        counter["n"] += 1
        profile = Profile(
            full_name=f"Test User {counter['n']}",
            email=f"user{counter['n']}@svcm.test",
            role=role.value,
            department=department.value if department else None,
        )
        db_session.add(profile)
        db_session.commit()
        db_session.refresh(profile)
        return profile

    return _make


@pytest.fixture
def admin_profile(make_profile) -> Profile:
    return make_profile(UserRole.ADMIN, Department.QUALITY_ASSURANCE)


@pytest.fixture
def leader_profile(make_profile) -> Profile:
    return make_profile(UserRole.QUALITY_CIRCLE_LEADER, Department.PRODUCTION)


@pytest.fixture
def employee_profile(make_profile) -> Profile:
    return make_profile(UserRole.EMPLOYEE, Department.PRODUCTION)


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# Test data fixtures
@pytest.fixture
def sample_submission_data():
    """Scenario: 1000 produced, 2.5% target, 30 defects."""
    return {
        "total_production": "1000",
        "expected_defects": "2.5",
        "actual_defects": "30",
        "reason_for_defects": "Mold wear on line 2",
        "corrective_action": "Replaced mold insert",
        "responsible_officer": "J. Park",
    }
