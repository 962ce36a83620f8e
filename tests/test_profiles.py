"""Tests for patient profiles and medical records."""
import pytest

from repositories.medical_records import MedicalRecordsRepository
from repositories.patients import PatientsRepository
from storage.errors import InvalidRole, MissingField


@pytest.fixture
def patients(store) -> PatientsRepository:
    return PatientsRepository(store)


@pytest.fixture
def records(store) -> MedicalRecordsRepository:
    return MedicalRecordsRepository(store)


class TestPatients:
    @pytest.mark.asyncio
    async def test_get_patient(self, patients, store):
        await store.set_doc("users/p1", {"name": "Pat", "role": "patient"})
        await store.set_doc("users/d1", {"name": "Doc", "role": "doctor"})

        patient = await patients.get_patient("p1")
        assert patient.id == "p1"
        assert patient.name == "Pat"
        assert await patients.get_patient("d1") is None
        assert await patients.get_patient("nobody") is None

    @pytest.mark.asyncio
    async def test_update_merges_editable_fields(self, patients, store):
        await store.set_doc("users/p1", {"name": "Pat", "email": "p@x.com", "role": "patient"})

        updated = await patients.update_patient_profile(
            "p1", {"phone_number": "0550", "name": None, "role": "doctor", "notes": "x"}
        )

        assert updated.name == "Pat"
        assert updated.phone_number == "0550"
        assert updated.role == "patient"
        assert "notes" not in (await store.get_doc("users/p1")).data()

    @pytest.mark.asyncio
    async def test_refuses_doctor_profile(self, patients, store):
        await store.set_doc("users/d1", {"name": "Doc", "role": "doctor"})
        with pytest.raises(InvalidRole):
            await patients.update_patient_profile("d1", {"name": "Pat"})
        assert (await store.get_doc("users/d1")).data()["role"] == "doctor"

    @pytest.mark.asyncio
    async def test_name_change_reaches_session(self, backend):
        session = await backend.auth.create_identity("p@x.com", "pw", "Pat", "patient")
        await backend.patients.update_patient_profile(session.uid, {"name": "Patricia"})
        assert backend.auth.current_session.display_name == "Patricia"


class TestMedicalRecords:
    @pytest.mark.asyncio
    async def test_absent_record(self, records):
        assert await records.get_medical_record("p1") is None

    @pytest.mark.asyncio
    async def test_save_and_merge(self, records):
        await records.save_medical_record("p1", {"blood_type": "O+", "allergies": "pollen"})
        saved = await records.save_medical_record("p1", {"medications": "none", "unknown": 1})

        assert saved.patient_id == "p1"
        assert saved.blood_type == "O+"
        assert saved.allergies == "pollen"
        assert saved.medications == "none"
        assert saved.updated_at is not None

    @pytest.mark.asyncio
    async def test_requires_patient_id(self, records):
        with pytest.raises(MissingField):
            await records.save_medical_record("", {"blood_type": "A-"})
