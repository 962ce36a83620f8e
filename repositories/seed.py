"""
repositories/seed.py

Seed doctors and the stored-over-seed precedence rule.

Two tiers feed every doctor lookup:

    stored   document under ``users/{id}`` (profile edits land here)
    seed     predefined record for doctors who have not onboarded yet

``merge_profile`` combines them per field: a stored value wins whenever it
is present (not ``None`` / not an empty string), otherwise the seed value is
used, otherwise the display default.
"""

from __future__ import annotations

import copy
from typing import Any, Iterable, Mapping

PLACEHOLDER_NAME = "اسم غير معروف"
PLACEHOLDER_SPECIALTY = "تخصص غير محدد"
PLACEHOLDER_LOCATION = "موقع غير محدد"
PLACEHOLDER_WILAYA = "ولاية غير محددة"
PLACEHOLDER_BIO = "لا توجد نبذة تعريفية."
PLACEHOLDER_UNSPECIFIED = "غير محدد"

DEFAULT_SLOTS = ["09:00 ص", "10:00 ص", "11:00 ص", "02:00 م", "03:00 م"]

DOCTOR_DEFAULTS: dict[str, Any] = {
    "name": PLACEHOLDER_NAME,
    "specialty": PLACEHOLDER_SPECIALTY,
    "location": PLACEHOLDER_LOCATION,
    "wilaya": PLACEHOLDER_WILAYA,
    "bio": PLACEHOLDER_BIO,
    "available_slots": DEFAULT_SLOTS,
    "experience": PLACEHOLDER_UNSPECIFIED,
    "skills": PLACEHOLDER_UNSPECIFIED,
    "equipment": PLACEHOLDER_UNSPECIFIED,
}

PLACEHOLDERS = frozenset(
    v for v in DOCTOR_DEFAULTS.values() if isinstance(v, str)
)

SEED_DOCTORS: tuple[dict[str, Any], ...] = (
    {
        "id": "seed-doctor-01",
        "name": "د. أمينة بن علي",
        "role": "doctor",
        "specialty": "أمراض القلب والشرايين",
        "location": "Alger, Centre",
        "wilaya": "Alger",
        "bio": "أخصائية في أمراض القلب بخبرة في تخطيط صدى القلب.",
        "phone_number": "+213 21 00 00 01",
        "experience": "12 سنة",
        "skills": "تخطيط صدى القلب, اختبار الجهد",
        "equipment": "جهاز إيكو, تخطيط القلب",
        "rating": 4.8,
    },
    {
        "id": "seed-doctor-02",
        "name": "د. كريم مرابط",
        "role": "doctor",
        "specialty": "طب الأطفال وحديثي الولادة",
        "location": "Oran, Sidi El Houari",
        "wilaya": "Oran",
        "bio": "طبيب أطفال، متابعة النمو والتطعيمات.",
        "experience": "8 سنوات",
        "rating": 4.5,
    },
    {
        "id": "seed-doctor-03",
        "name": "د. سارة بوزيد",
        "role": "doctor",
        "specialty": "طب وجراحة العيون",
        "location": "Constantine, Kasbah",
        "wilaya": "Constantine",
        "bio": "جراحة الساد وتصحيح النظر.",
        "equipment": "ليزر إكسيمر",
        "rating": 4.6,
    },
    {
        "id": "seed-doctor-04",
        "name": "د. يوسف حداد",
        "role": "doctor",
        "specialty": "طب الأسنان",
        "location": "Tizi Ouzou, Centre-ville",
        "wilaya": "Tizi Ouzou",
        "rating": 4.2,
    },
)


def _present(value: Any) -> bool:
    return value is not None and value != ""


def merge_profile(
    stored: Mapping[str, Any] | None,
    seed: Mapping[str, Any] | None,
    defaults: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Combine the three tiers field by field: stored > seed > defaults.

    Pure function; inputs are not modified.
    """
    merged: dict[str, Any] = copy.deepcopy(dict(defaults or {}))
    for tier in (seed or {}, stored or {}):
        for key, value in tier.items():
            if _present(value):
                merged[key] = copy.deepcopy(value)
            else:
                merged.setdefault(key, value)
    return merged


class SeedTable:
    """Per-process copy of the seed doctors; kept in step with profile edits."""

    def __init__(self, records: Iterable[Mapping[str, Any]] = SEED_DOCTORS):
        self._records: dict[str, dict[str, Any]] = {
            r["id"]: copy.deepcopy(dict(r)) for r in records
        }

    def ids(self) -> list[str]:
        return list(self._records)

    def get(self, doc_id: str) -> dict[str, Any] | None:
        record = self._records.get(doc_id)
        return copy.deepcopy(record) if record is not None else None

    def __contains__(self, doc_id: str) -> bool:
        return doc_id in self._records

    def sync(self, doc_id: str, data: Mapping[str, Any]) -> bool:
        """Apply *data* onto an existing seed record.  Returns ``False`` if unknown."""
        record = self._records.get(doc_id)
        if record is None:
            return False
        record.update({k: copy.deepcopy(v) for k, v in data.items() if v is not None})
        return True
