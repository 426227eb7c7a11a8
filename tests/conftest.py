import pytest
from fastapi.testclient import TestClient
import os
import sys

# Add the app directory to the Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from app.main import create_app
from app.repositories.registration import RegistrationRepository
from app.services.migration import RegistrationMigrationService


class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, db, path):
        self._db = db
        self.path = path
        self.id = path[-1]

    def collection(self, name):
        return FakeCollection(self._db, self.path + (name,))

    def get(self):
        self._db._check("get")
        return FakeSnapshot(self, self._db.docs.get(self.path))

    def set(self, data):
        self._db._check("set")
        self._db.docs[self.path] = dict(data)

    def delete(self):
        self._db._check("delete")
        self._db.docs.pop(self.path, None)


class FakeCollection:
    def __init__(self, db, path):
        self._db = db
        self.path = path

    def document(self, doc_id):
        return FakeDocument(self._db, self.path + (doc_id,))

    def stream(self):
        self._db._check("stream")
        depth = len(self.path) + 1
        for path, data in list(self._db.docs.items()):
            if len(path) == depth and path[:-1] == self.path:
                yield FakeSnapshot(FakeDocument(self._db, path), data)


class FakeFirestore:
    """In-memory stand-in for the subset of firestore.Client used by the repository"""

    def __init__(self):
        self.docs = {}
        self.failures = {}
        self.calls = []
        self.closed = False

    def _check(self, op):
        self.calls.append(op)
        error = self.failures.get(op)
        if error is not None:
            raise error

    def collection(self, name):
        return FakeCollection(self, (name,))

    def close(self):
        self.closed = True

    # helpers for tests
    def add_user(self, user_id, **data):
        self.docs[("users", user_id)] = data or {"name": user_id}

    def add_registration(self, user_id, registration_id, **data):
        if ("users", user_id) not in self.docs:
            self.add_user(user_id)
        self.docs[("users", user_id, "registrations", registration_id)] = data

    def legacy(self, user_id, registration_id):
        return self.docs.get(("users", user_id, "registrations", registration_id))

    def migrated(self, event_id, user_id):
        return self.docs.get(("events", event_id, "registrations", user_id))


class FakeStore:
    """Replacement for FirestoreClient wrapping a FakeFirestore"""

    def __init__(self, db):
        self._db = db
        self.opened = False
        self.closed = False

    @property
    def db(self):
        return self._db

    @property
    def is_open(self):
        return self.opened and not self.closed

    def open(self):
        self.opened = True
        return self._db

    def close(self):
        self.closed = True


@pytest.fixture
def fake_db():
    """Empty in-memory Firestore"""
    return FakeFirestore()


@pytest.fixture
def repository(fake_db):
    return RegistrationRepository(fake_db)


@pytest.fixture
def migration_service(repository):
    return RegistrationMigrationService(repository)


@pytest.fixture
def fake_store(fake_db):
    return FakeStore(fake_db)


@pytest.fixture
def client(fake_store):
    """Create test client with the lifespan running on the fake store"""
    app = create_app(store_factory=lambda _settings: fake_store)
    with TestClient(app) as test_client:
        yield test_client
