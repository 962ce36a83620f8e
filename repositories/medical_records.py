"""
repositories/medical_records.py

One medical record per patient, at ``medicalRecords/{patient_id}``.
No record yet is a normal state: ``get_medical_record`` returns ``None``.
"""

from __future__ import annotations

import logging
from typing import Any

from storage.document_store import DocumentStore
from storage.errors import MissingField
from storage.models import MedicalRecord, utc_now

logger = logging.getLogger(__name__)

MEDICAL_RECORDS = "medicalRecords"

_FIELDS = ("blood_type", "allergies", "chronic_diseases", "medications", "medical_history_notes")


class MedicalRecordsRepository:
    def __init__(self, store: DocumentStore):
        self._store = store

    async def get_medical_record(self, patient_id: str) -> MedicalRecord | None:
        doc = await self._store.get_doc(f"{MEDICAL_RECORDS}/{patient_id}")
        if not doc.exists:
            return None
        return MedicalRecord.model_validate({**doc.data(), "patient_id": patient_id})

    async def save_medical_record(self, patient_id: str, data: dict[str, Any]) -> MedicalRecord:
        if not patient_id:
            raise MissingField("patient_id")

        changes = {k: v for k, v in data.items() if k in _FIELDS}
        changes["patient_id"] = patient_id
        changes["updated_at"] = utc_now()
        await self._store.set_doc(f"{MEDICAL_RECORDS}/{patient_id}", changes)
        logger.info("Saved medical record for patient=%s", patient_id)
        return await self.get_medical_record(patient_id)
