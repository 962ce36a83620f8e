"""
storage/backend.py

Wiring for the MedBook core.

Data scope is the process.  ``SharedState`` holds everything that must be
the same for every user of one running app:

    SharedState(settings)
      ├── store                 DocumentStore
      ├── registry              IdentityRegistry      (listens on store "users")
      ├── seeds                 SeedTable
      └── notification_backend  one notifications file (or memory in tests)

A ``Backend`` is one UI session on top of it: its own session pointer and
the repositories that serve that session.

    Backend(shared=...)
      ├── auth           AuthSessionService     (current session of this UI session)
      ├── notifications  NotificationStore      (shared backend, unread count for this session)
      ├── doctors        DoctorsRepository      (store + seed table)
      ├── appointments   AppointmentsRepository (store + notifications)
      ├── records        MedicalRecordsRepository
      └── patients       PatientsRepository

Everything is injected at construction; nothing lives in module globals.
``Backend(settings)`` without ``shared`` builds a private ``SharedState``
and closes it with itself.  Use either as a context manager or ``close()``
it at the end.
"""

from __future__ import annotations

import logging

from repositories.appointments import AppointmentsRepository
from repositories.doctors import DoctorsRepository
from repositories.medical_records import MedicalRecordsRepository
from repositories.patients import PatientsRepository
from repositories.seed import SeedTable
from storage.auth import AuthSessionService, IdentityRegistry
from storage.config import Settings
from storage.document_store import DocumentStore
from storage.errors import DuplicateIdentity
from storage.notifications import (
    EncryptedJsonFileBackend,
    JsonFileBackend,
    NotificationBackend,
    NotificationStore,
)

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "demo1234"
DEMO_ACCOUNTS = (
    ("patient@demo.com", "مريض تجريبي", "patient"),
    ("doctor@demo.com", "طبيب تجريبي", "doctor"),
)


def notification_backend_for(settings: Settings) -> NotificationBackend:
    if settings.encrypt_notifications:
        return EncryptedJsonFileBackend(settings.notifications_path, settings.data_key)
    logger.warning(
        "APP_DATA_KEY is not set; notifications are stored unencrypted at %s",
        settings.notifications_path,
    )
    return JsonFileBackend(settings.notifications_path)


class SharedState:
    def __init__(
        self,
        settings: Settings | None = None,
        notification_backend: NotificationBackend | None = None,
        seeds: SeedTable | None = None,
    ):
        self.settings = settings or Settings.from_env()
        self.store = DocumentStore(latency_ms=self.settings.store_latency_ms)
        self.registry = IdentityRegistry(self.store, password_iterations=self.settings.password_iterations)
        self.seeds = seeds or SeedTable()
        self.notification_backend = notification_backend or notification_backend_for(self.settings)
        logger.info("Shared state initialised (demo_mode=%s)", self.settings.demo_mode)

    def close(self) -> None:
        self.registry.close()

    def __enter__(self) -> "SharedState":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class Backend:
    def __init__(
        self,
        settings: Settings | None = None,
        notification_backend: NotificationBackend | None = None,
        seeds: SeedTable | None = None,
        shared: SharedState | None = None,
    ):
        self._owns_shared = shared is None
        self.shared = shared or SharedState(settings, notification_backend, seeds)
        self.settings = self.shared.settings
        self.store = self.shared.store
        self.seeds = self.shared.seeds
        self.auth = AuthSessionService(
            self.store,
            password_iterations=self.settings.password_iterations,
            registry=self.shared.registry,
        )
        self.notifications = NotificationStore(self.shared.notification_backend)
        self.notifications.bind_session(self.auth)
        self.doctors = DoctorsRepository(self.store, self.seeds)
        self.appointments = AppointmentsRepository(self.store, self.notifications)
        self.records = MedicalRecordsRepository(self.store)
        self.patients = PatientsRepository(self.store)
        logger.debug("Backend session opened")

    async def seed_demo_accounts(self) -> None:
        """Register the demo patient and doctor, without signing anyone in."""
        if not self.settings.demo_mode:
            return
        for email, name, role in DEMO_ACCOUNTS:
            try:
                await self.auth.create_identity(email, DEMO_PASSWORD, name, role, sign_in=False)
            except DuplicateIdentity:
                logger.debug("Demo account %s already registered", email)

    def close(self) -> None:
        self.notifications.close()
        self.auth.close()
        if self._owns_shared:
            self.shared.close()
        logger.debug("Backend session closed")

    def __enter__(self) -> "Backend":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
