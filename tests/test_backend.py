"""Tests for configuration and backend wiring."""
import pytest

from storage.backend import DEMO_ACCOUNTS, DEMO_PASSWORD, Backend, SharedState, notification_backend_for
from storage.config import Settings
from storage.crypto import generate_key
from storage.notifications import EncryptedJsonFileBackend, JsonFileBackend, MemoryBackend


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("MEDBOOK_DATA_DIR", "MEDBOOK_NOTIFICATIONS_FILE", "APP_DATA_KEY", "MEDBOOK_DEMO_MODE"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings.from_env()
        assert settings.demo_mode is True
        assert settings.encrypt_notifications is False
        assert settings.notifications_path.name == "notifications.json"

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.delenv("MEDBOOK_NOTIFICATIONS_FILE", raising=False)
        monkeypatch.setenv("MEDBOOK_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("MEDBOOK_DEMO_MODE", "false")
        monkeypatch.setenv("MEDBOOK_STORE_LATENCY_MS", "5")
        monkeypatch.setenv("MEDBOOK_LOG_LEVEL", "debug")
        monkeypatch.setenv("APP_DATA_KEY", "not-a-real-fernet-key")

        settings = Settings.from_env()
        assert settings.notifications_path == tmp_path / "notifications.json"
        assert settings.demo_mode is False
        assert settings.store_latency_ms == 5
        assert settings.log_level == "DEBUG"
        assert settings.encrypt_notifications is True
        assert "not-a-real-fernet-key" not in repr(settings)


def test_notification_backend_selection(tmp_path):
    plain = notification_backend_for(Settings(data_dir=tmp_path))
    encrypted = notification_backend_for(Settings(data_dir=tmp_path, data_key=generate_key()))
    assert type(plain) is JsonFileBackend
    assert isinstance(encrypted, EncryptedJsonFileBackend)


class TestBackend:
    @pytest.mark.asyncio
    async def test_seed_demo_accounts(self, backend):
        await backend.seed_demo_accounts()
        await backend.seed_demo_accounts()
        assert backend.auth.current_session is None

        for email, name, role in DEMO_ACCOUNTS:
            session = await backend.auth.authenticate(email, DEMO_PASSWORD)
            assert session.role == role
            assert session.display_name == name

    @pytest.mark.asyncio
    async def test_demo_mode_off(self, settings):
        settings = settings.model_copy(update={"demo_mode": False})
        with Backend(settings, notification_backend=MemoryBackend()) as b:
            await b.seed_demo_accounts()
            assert await b.store.list_docs("users") == []

    @pytest.mark.asyncio
    async def test_unread_count_is_wired_to_auth(self, backend):
        session = await backend.auth.create_identity("p@x.com", "pw", "P", "patient")
        appointment = await backend.appointments.create_appointment(
            {"doctor_id": "d1", "patient_id": session.uid, "date": "2024-03-01", "time": "09:00"}
        )
        await backend.appointments.confirm_appointment(appointment.id, actor_name="D")
        assert backend.notifications.unread_count == 1

    def test_instances_are_isolated(self, settings):
        with Backend(settings, notification_backend=MemoryBackend()) as a, \
                Backend(settings, notification_backend=MemoryBackend()) as b:
            assert a.store is not b.store
            assert a.seeds is not b.seeds


class TestSharedState:
    @pytest.fixture
    def shared(self, settings):
        with SharedState(settings, notification_backend=MemoryBackend()) as s:
            yield s

    @pytest.mark.asyncio
    async def test_sessions_see_the_same_data(self, shared):
        with Backend(shared=shared) as patient_ui, Backend(shared=shared) as doctor_ui:
            doctor = await doctor_ui.auth.create_identity("d@x.com", "pw", "Dr. D", "doctor")
            patient = await patient_ui.auth.create_identity("p@x.com", "pw", "Pat", "patient")

            booked = await patient_ui.appointments.create_appointment(
                {"doctor_id": doctor.uid, "patient_id": patient.uid, "date": "2024-05-02", "time": "10:00"}
            )
            listed = await doctor_ui.appointments.list_appointments_for_user(doctor.uid, "doctor")
            assert [a.id for a in listed] == [booked.id]

            await patient_ui.appointments.delete_appointment(booked.id, cancelled_by="patient", actor_name="Pat")
            assert doctor_ui.notifications.unread_count == 1
            assert patient_ui.notifications.unread_count == 0

    @pytest.mark.asyncio
    async def test_each_session_keeps_its_own_pointer(self, shared):
        with Backend(shared=shared) as a, Backend(shared=shared) as b:
            await a.auth.create_identity("a@x.com", "pw", "A", "patient")
            assert b.auth.current_session is None

            session = await b.auth.authenticate("a@x.com", "pw")
            assert session.uid == a.auth.current_session.uid

            await a.auth.end_session()
            assert b.auth.current_session is not None

    @pytest.mark.asyncio
    async def test_profile_edit_reaches_every_signed_in_session(self, shared):
        with Backend(shared=shared) as a, Backend(shared=shared) as b, Backend(shared=shared) as other:
            created = await a.auth.create_identity("d@x.com", "pw", "D", "doctor")
            await b.auth.authenticate("d@x.com", "pw")
            await other.auth.create_identity("o@x.com", "pw", "O", "patient")

            await a.doctors.update_doctor_profile(created.uid, {"name": "Dr. D"})

            assert a.auth.current_session.display_name == "Dr. D"
            assert b.auth.current_session.display_name == "Dr. D"
            assert other.auth.current_session.display_name == "O"

    @pytest.mark.asyncio
    async def test_closing_a_session_leaves_shared_state_usable(self, shared):
        with Backend(shared=shared) as first:
            await first.seed_demo_accounts()

        with Backend(shared=shared) as second:
            session = await second.auth.authenticate("doctor@demo.com", DEMO_PASSWORD)
            assert session.role == "doctor"
