import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
os.environ.setdefault("TESTING", "true")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from examcore.core.clock import ManualClock
from examcore.core.database import Base, build_engine, get_db
from examcore.utils import deps as deps_utils
import examcore.models  # noqa: F401
import main
from tests.helpers.factories import T0

@pytest.fixture(scope="function")
def database_engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()

@pytest.fixture(scope="function")
def session_factory(database_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=database_engine)

@pytest.fixture(scope="function")
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.rollback()
        db.close()

@pytest.fixture
def clock():
    return ManualClock(T0)

@pytest.fixture(scope="function")
def client(db_session, clock):
    main.app.dependency_overrides[get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_transactional_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_clock] = lambda: clock
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()

@pytest.fixture
def instructor_headers():
    return {"X-User-Id": "100", "X-User-Role": "instructor"}

@pytest.fixture
def student_headers():
    def _headers(student_id: int = 1):
        return {"X-User-Id": str(student_id), "X-User-Role": "student"}
    return _headers
