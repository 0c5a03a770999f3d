import pytest
from google.auth.credentials import AnonymousCredentials
from google.cloud.firestore_v1.base_document import DocumentSnapshot

from firestore_snapshot import FirestoreDB, init_firestore_snapshot

from .models import ALL_MODELS


@pytest.fixture
def firestore_db():
    """
    FirestoreDB backed by a real AsyncClient with anonymous credentials.

    Building references and queries is purely local, so no test using this
    fixture reaches the network unless it awaits a store call.
    """
    db = FirestoreDB(project_id="test-project", credentials=AnonymousCredentials())
    init_firestore_snapshot(db, ALL_MODELS)
    return db


@pytest.fixture
def make_document():
    """Build a raw DocumentSnapshot the way the client returns it from a read."""

    def _make(reference, data, exists=True):
        return DocumentSnapshot(reference, data, exists, None, None, None)

    return _make
