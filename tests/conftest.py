import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from case_manager.database import get_db
from case_manager.models.base import Base
from case_manager.config import settings
from case_manager.models.role import Role
from case_manager.models.principal import Principal
from case_manager.models.centre import Centre
# Import FastAPI app AFTER model imports (the entity registry imports every model)
from case_manager.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(
    username: str = "test-user",
    role: Role | int = Role.ORG_ADMIN,
    center_id=None,
    expired: bool = False,
) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        username: Username embedded in 'sub' and 'username' claims
        role: Role code for the 'user_type' claim
        center_id: Centre claim (left as given, may be malformed on purpose)
        expired: If True, create expired token

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {
        "sub": username,
        "username": username,
        "user_type": int(role),
        "center_id": center_id,
        "exp": exp,
        "iat": datetime.now(UTC),
    }

    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def headers_for(username: str, role: Role, center_id=None) -> dict:
    """Authorization headers for a user with the given role and centre"""
    token = create_test_token(username=username, role=role, center_id=center_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def centres(db_session):
    """Three centres: A, B and C"""
    centre_a = Centre(organisation_name="Centre A")
    centre_b = Centre(organisation_name="Centre B")
    centre_c = Centre(organisation_name="Centre C")
    db_session.add_all([centre_a, centre_b, centre_c])
    db_session.commit()
    return {"A": centre_a.id, "B": centre_b.id, "C": centre_c.id}


@pytest.fixture
def principals(centres):
    """One principal per role, centre-bound roles in centre A, plus peers in centre B"""
    return {
        "app_admin": Principal(role=Role.APP_ADMIN, home_tenant=None, username="root"),
        "hq_a": Principal(role=Role.HQ, home_tenant=centres["A"], username="hq.a"),
        "org_admin_a": Principal(role=Role.ORG_ADMIN, home_tenant=centres["A"], username="admin.a"),
        "org_admin_b": Principal(role=Role.ORG_ADMIN, home_tenant=centres["B"], username="admin.b"),
        "executive_a": Principal(role=Role.ORG_EXECUTIVE, home_tenant=centres["A"], username="exec.a"),
        "caseworker_a": Principal(role=Role.CASEWORKER, home_tenant=centres["A"], username="case.a"),
        "caseworker_b": Principal(role=Role.CASEWORKER, home_tenant=centres["B"], username="case.b"),
    }


@pytest.fixture
def app_admin_headers(centres):
    return headers_for("root", Role.APP_ADMIN)


@pytest.fixture
def hq_a_headers(centres):
    return headers_for("hq.a", Role.HQ, centres["A"])


@pytest.fixture
def org_admin_a_headers(centres):
    return headers_for("admin.a", Role.ORG_ADMIN, centres["A"])


@pytest.fixture
def org_admin_b_headers(centres):
    return headers_for("admin.b", Role.ORG_ADMIN, centres["B"])


@pytest.fixture
def executive_a_headers(centres):
    return headers_for("exec.a", Role.ORG_EXECUTIVE, centres["A"])


@pytest.fixture
def caseworker_a_headers(centres):
    return headers_for("case.a", Role.CASEWORKER, centres["A"])
