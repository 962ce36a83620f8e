"""Shared test fixtures."""
import pytest

from storage.backend import Backend
from storage.config import Settings
from storage.document_store import DocumentStore
from storage.notifications import MemoryBackend, NotificationStore


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a temp dir, with cheap password hashing."""
    return Settings(
        data_dir=tmp_path,
        password_iterations=1_000,
        demo_mode=True,
    )


@pytest.fixture
def backend(settings):
    """Fully wired backend with in-memory notification persistence."""
    with Backend(settings, notification_backend=MemoryBackend()) as b:
        yield b


@pytest.fixture
def store() -> DocumentStore:
    return DocumentStore()


@pytest.fixture
def notifications() -> NotificationStore:
    return NotificationStore(MemoryBackend())
