"""
repositories/doctors.py

Doctor directory over the document store.

A doctor is any ``users/{uid}`` document with ``role == "doctor"``, merged
with its seed record (if any) via :func:`repositories.seed.merge_profile`.
Seed doctors that have no stored document yet are listed too, after the
stored ones, so the directory is never empty before anyone onboards.
"""

from __future__ import annotations

import logging
from typing import Any

from repositories.catalog import (
    ALGERIAN_WILAYAS,
    KNOWN_COORDINATES,
    PREDEFINED_SPECIALTIES,
    arabic_sorted,
)
from repositories.seed import DOCTOR_DEFAULTS, PLACEHOLDERS, SeedTable, merge_profile
from storage.document_store import DocumentStore
from storage.models import Doctor, UserRole, utc_now

logger = logging.getLogger(__name__)

USERS = "users"


def _image_fallback(doc_id: str) -> str:
    return f"https://picsum.photos/seed/{doc_id[:10]}/400/250"


def _to_doctor(doc_id: str, stored: dict[str, Any] | None, seed: dict[str, Any] | None) -> Doctor:
    merged = merge_profile(stored, seed, DOCTOR_DEFAULTS)
    merged["id"] = doc_id
    merged["role"] = UserRole.doctor.value
    if not merged.get("coordinates"):
        merged["coordinates"] = KNOWN_COORDINATES.get(merged.get("location", ""))
    if not merged.get("image_url"):
        merged["image_url"] = merged.get("photo_url") or _image_fallback(doc_id)
    if merged.get("rating") is not None:
        merged["rating"] = float(merged["rating"])
    return Doctor.model_validate(merged)


class DoctorsRepository:
    def __init__(self, store: DocumentStore, seeds: SeedTable):
        self._store = store
        self._seeds = seeds

    async def list_doctors(self) -> list[Doctor]:
        """
        Stored doctors first (store order), then seed doctors not yet in
        storage (seed order).
        """
        docs = await self._store.list_docs(USERS)
        stored_ids = set()
        doctors: list[Doctor] = []

        for doc in docs:
            stored_ids.add(doc.id)
            data = doc.data()
            if data.get("role") != UserRole.doctor.value:
                continue
            doctors.append(_to_doctor(doc.id, data, self._seeds.get(doc.id)))

        for seed_id in self._seeds.ids():
            if seed_id not in stored_ids:
                doctors.append(_to_doctor(seed_id, None, self._seeds.get(seed_id)))

        return doctors

    async def get_doctor(self, doctor_id: str) -> Doctor | None:
        doc = await self._store.get_doc(f"{USERS}/{doctor_id}")
        seed = self._seeds.get(doctor_id)

        if doc.exists:
            data = doc.data()
            if data.get("role") != UserRole.doctor.value:
                logger.debug("get_doctor: %s exists but is not a doctor", doctor_id)
                return None
            return _to_doctor(doctor_id, data, seed)

        if seed is not None:
            return _to_doctor(doctor_id, None, seed)
        return None

    async def update_doctor_profile(self, uid: str, data: dict[str, Any]) -> Doctor:
        """
        Merge *data* onto the stored profile (new values win), force the
        doctor role and stamp ``updated_at``.

        ``name`` / ``email`` passed as ``None`` are left untouched.
        """
        changes = dict(data)
        for key in ("name", "email"):
            if changes.get(key) is None:
                changes.pop(key, None)
        changes.pop("id", None)
        changes["role"] = UserRole.doctor.value
        changes["updated_at"] = utc_now()

        path = f"{USERS}/{uid}"
        existing = await self._store.get_doc(path)
        await self._store.set_doc(path, {**(existing.data() or {}), **changes})
        if self._seeds.sync(uid, changes):
            logger.debug("Seed record %s synchronised with profile update", uid)

        logger.info("Updated doctor profile uid=%s (%s)", uid, ", ".join(sorted(changes)))
        return await self.get_doctor(uid)

    # -------------------------
    # Enumerations
    # -------------------------
    async def list_specialties(self) -> list[str]:
        doctors = await self.list_doctors()
        dynamic = [d.specialty for d in doctors if d.specialty not in PLACEHOLDERS]
        return arabic_sorted([*PREDEFINED_SPECIALTIES, *dynamic])

    async def list_wilayas(self) -> list[str]:
        doctors = await self.list_doctors()
        dynamic = [d.wilaya for d in doctors if d.wilaya not in PLACEHOLDERS]
        return arabic_sorted([*ALGERIAN_WILAYAS, *dynamic])
