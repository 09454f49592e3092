"""
Shared fixtures for the MindMapper test suite.
"""

import pytest

from mindmapper.config import EditorSettings
from mindmapper.database import Database
from mindmapper.models import Document, Node, Position
from mindmapper.session import EditorSession
from mindmapper.store import DocumentStore, MapCatalog


class FakeClock:
    """Virtual monotonic clock for the history debounce lock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def temp_db_path(tmp_path):
    """Provide a path for a temporary database file."""
    return tmp_path / "mindmapper_test.db"


@pytest.fixture
def db(temp_db_path):
    database = Database(temp_db_path)
    yield database
    database.close()


@pytest.fixture
def store(db):
    return DocumentStore(db)


@pytest.fixture
def catalog(db):
    return MapCatalog(db)


@pytest.fixture
def root_document():
    """A map holding only the root node "1" at (100, 100)."""
    return Document(name="Test Map", nodes=[Node(id="1", position=Position(100, 100), label="Root")])


@pytest.fixture
def session(store, catalog, clock):
    return EditorSession(store, catalog, EditorSettings(), clock=clock)


@pytest.fixture
def opened(session, catalog, root_document):
    """A session with ``root_document`` open."""
    document_id = catalog.create(root_document)
    session.open_document(document_id)
    return session
