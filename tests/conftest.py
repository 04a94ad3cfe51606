import os
import pytest
from mongomock import MongoClient as MockClient

# Keep the real DB out of tests
os.environ.setdefault("MONGODB_URI", "")
os.environ.setdefault("MONGO_DB", "event_registration_test")
os.environ.setdefault("FLASK_ENV", "testing")

from eventreg import create_app  # noqa: E402
from eventreg.storage.registrations import RegistrationStore  # noqa: E402

ADMIN = {"admin-auth": "true"}


@pytest.fixture
def mock_db():
    client = MockClient()
    return client["event_registration_test"]


@pytest.fixture
def store(mock_db):
    s = RegistrationStore(mock_db["registrations"])
    s.ensure_indexes()
    return s


@pytest.fixture
def upload_dir(tmp_path):
    return str(tmp_path / "uploads")


@pytest.fixture
def app(store, upload_dir):
    return create_app(testing=True, store=store, UPLOAD_DIR=upload_dir)


@pytest.fixture
def app_client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def admin_headers():
    return dict(ADMIN)


@pytest.fixture
def valid_payload():
    return {
        "name": "A",
        "email": "a@b.com",
        "contact": "9876543210",
        "college": "X",
        "course": "Y",
        "sem": "1",
        "selectedEvents": ["quiz"],
    }
