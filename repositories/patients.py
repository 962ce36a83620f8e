"""
repositories/patients.py

Patient profiles share the ``users/{uid}`` path with doctors; the role
decides how a document is read.
"""

from __future__ import annotations

import logging
from typing import Any

from storage.document_store import DocumentStore
from storage.errors import InvalidRole
from storage.models import PatientProfile, UserRole, utc_now

logger = logging.getLogger(__name__)

USERS = "users"

_EDITABLE = ("name", "email", "photo_url", "phone_number", "date_of_birth")


class PatientsRepository:
    def __init__(self, store: DocumentStore):
        self._store = store

    async def get_patient(self, uid: str) -> PatientProfile | None:
        doc = await self._store.get_doc(f"{USERS}/{uid}")
        if not doc.exists:
            return None
        data = doc.data()
        if data.get("role") != UserRole.patient.value:
            return None
        return PatientProfile.model_validate({**data, "id": uid})

    async def update_patient_profile(self, uid: str, data: dict[str, Any]) -> PatientProfile | None:
        path = f"{USERS}/{uid}"
        existing = await self._store.get_doc(path)
        if existing.exists and existing.data().get("role") not in (None, UserRole.patient.value):
            raise InvalidRole(f"User '{uid}' is not a patient.")

        changes = {k: v for k, v in data.items() if k in _EDITABLE and v is not None}
        changes["role"] = UserRole.patient.value
        changes["updated_at"] = utc_now()
        await self._store.set_doc(path, changes)
        logger.info("Updated patient profile uid=%s", uid)
        return await self.get_patient(uid)
