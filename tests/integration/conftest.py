"""
Fixtures for integration tests against the Firestore emulator.

Set ``FIRESTORE_EMULATOR_HOST=localhost:8080`` (and optionally
``GOOGLE_CLOUD_PROJECT`` / ``DATABASE``) to run them; without an emulator
host the whole directory is skipped.
"""

import logging
import os

import httpx
import pytest
import pytest_asyncio
from google.auth.credentials import AnonymousCredentials

from firestore_snapshot import FirestoreDB, init_firestore_snapshot

from ..models import ALL_MODELS

logger = logging.getLogger(__name__)

# ── Environment detection ────────────────────────────────────────────────────

EMULATOR_HOST = os.environ.get("FIRESTORE_EMULATOR_HOST", "").strip()
DATABASE = os.environ.get("DATABASE", None) or None
# ``or`` so an empty string still falls through to the fallback.
PROJECT_ID = os.environ.get("GOOGLE_CLOUD_PROJECT") or "test-project"


def pytest_collection_modifyitems(config, items):
    if EMULATOR_HOST:
        return
    skip = pytest.mark.skip(reason="FIRESTORE_EMULATOR_HOST is not set")
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(skip)


# ── Per-test fixtures ────────────────────────────────────────────────────────


@pytest.fixture()
def firestore_db():
    """FirestoreDB pointing to the emulator.

    Function-scoped so each test gets a fresh AsyncClient bound to the
    current event loop (avoids 'Event loop is closed' with gRPC).
    """
    db = FirestoreDB(
        project_id=PROJECT_ID,
        database=DATABASE,
        credentials=AnonymousCredentials(),
        emulator_host=EMULATOR_HOST,
    )
    init_firestore_snapshot(db, ALL_MODELS)
    return db


@pytest_asyncio.fixture(autouse=True)
async def clean_firestore():
    """Wipe all emulator data BEFORE and AFTER each test for complete isolation."""
    await _perform_cleanup()

    yield  # ← test runs here

    await _perform_cleanup()


async def _perform_cleanup():
    db_name = DATABASE or "(default)"
    url = (
        f"http://{EMULATOR_HOST}/emulator/v1/projects/"
        f"{PROJECT_ID}/databases/{db_name}/documents"
    )
    async with httpx.AsyncClient() as client:
        response = await client.delete(url)
    logger.debug(f"Emulator cleanup: {response.status_code}")
