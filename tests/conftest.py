import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from portal.config import settings
from portal.database import get_db, init_db
from portal.entities import Identity
from portal.main import app
from portal.models.enums import Role
from portal.services.analytics_service import AnalyticsAggregator
from portal.services.document_service import DocumentService
from portal.services.notification_service import NotificationDispatcher
from portal.services.review_service import ReviewWorkflow
from portal.store.memory import MemoryRecordStore


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def tmp_data(tmp_path):
    data_path = tmp_path / "PortalData"
    data_path.mkdir()
    return data_path


@pytest.fixture
def session_factory(tmp_data):
    db_path = tmp_data / "db.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    init_db(db_path)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture
def test_db(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield session_factory
    app.dependency_overrides.clear()


@pytest.fixture
def client(tmp_data, test_db):
    original_data_path = settings.data_path
    settings.data_path = tmp_data
    c = TestClient(app)
    yield c
    settings.data_path = original_data_path


@pytest.fixture
def memory_store():
    return MemoryRecordStore()


@pytest.fixture
def student():
    return Identity(id="stu-1", name="Asha Rao", role=Role.STUDENT, email="asha@example.edu", roll_number="CS-042")


@pytest.fixture
def other_student():
    return Identity(id="stu-2", name="Ben Okafor", role=Role.STUDENT)


@pytest.fixture
def professor():
    return Identity(id="prof-1", name="Dr. Iyer", role=Role.PROFESSOR)


@pytest.fixture
def services(memory_store):
    dispatcher = NotificationDispatcher(memory_store)
    return {
        "store": memory_store,
        "dispatcher": dispatcher,
        "documents": DocumentService(memory_store, dispatcher, reviewer_ids=[]),
        "workflow": ReviewWorkflow(memory_store, dispatcher),
        "analytics": AnalyticsAggregator(memory_store, window_days=30),
    }


@pytest.fixture
def make_document(services, student):
    """Record a document through the service with sensible defaults."""

    def _make(uploader=None, **overrides):
        fields = {
            "title": "Sorting Algorithms",
            "description": "Merge sort and quicksort compared",
            "subject": "Algorithms",
            "document_type": "assignment",
            "year": "2",
            "branch": "CSE",
            "file_name": "sorting.pdf",
            "file_type": "application/pdf",
            "file_size": 2048,
            "file_location": "uploads/test/sorting.pdf",
        }
        fields.update(overrides)
        return services["documents"].upload(uploader or student, **fields)

    return _make
