"""Shared fixtures: a throwaway SQLite database and a client bound to it."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import tenderdesk.app as app_module
from tenderdesk.agents.extraction_agent import _run_extraction_agent_cached
from tenderdesk.storage.database import get_db, init_db, make_engine
from tenderdesk.storage.tables import Base

OWNER = "user-owner"
TEAMMATE = "user-teammate"
OUTSIDER = "user-outsider"


@pytest.fixture
def test_db(tmp_path):
    """Create a fresh SQLite database for each test."""
    engine = make_engine(f"sqlite:///{tmp_path / 'test_tenderdesk.db'}")
    init_db(engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    yield engine, TestingSessionLocal

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(test_db):
    _, TestingSessionLocal = test_db
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(test_db, monkeypatch):
    """Test client with the db dependency pointed at the test database."""
    engine, TestingSessionLocal = test_db

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    monkeypatch.setattr(app_module, "init_db", lambda bind=None: init_db(engine))
    app_module.app.dependency_overrides[get_db] = override_get_db
    with TestClient(app_module.app) as test_client:
        yield test_client
    app_module.app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clear_extraction_cache():
    _run_extraction_agent_cached.cache_clear()
    yield
    _run_extraction_agent_cached.cache_clear()


def auth(user_id: str = OWNER) -> dict:
    return {"X-User-Id": user_id}


@pytest.fixture
def sample_tender(client):
    """Create a tender owned by OWNER and return its JSON body."""
    response = client.post(
        "/tenders",
        json={
            "title": "Municipal Website Redesign",
            "client_name": "City of Springfield",
            "deadline": "2030-03-15",
            "requirements": "- Responsive design\n- WCAG 2.1 AA accessibility\n- Analytics dashboard is nice to have",
            "goals": "Modernise the public website",
        },
        headers=auth(),
    )
    assert response.status_code == 201
    return response.json()
