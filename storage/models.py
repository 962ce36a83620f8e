"""
storage/models.py

Pydantic v2 data models for the MedBook core.

These describe the records kept in the document store (users, doctor and
patient profiles, medical records, appointments) and in the notification
store.  They are NOT persistence models: the document store holds plain
dicts, and repositories validate into these models on the way out.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


def utc_now() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(tz=timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class UserRole(str, Enum):
    """The two roles an identity can hold.  Fixed at signup."""
    patient = "patient"
    doctor = "doctor"


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"


class NotificationType(str, Enum):
    success = "success"
    error = "error"
    info = "info"
    warning = "warning"


# ---------------------------------------------------------------------------
# Identity / session
# ---------------------------------------------------------------------------


class Session(BaseModel):
    """The active identity as seen by the UI (profile values win)."""
    uid: str
    email: str
    display_name: str | None = None
    role: UserRole
    photo_url: str | None = None

    class Config:
        use_enum_values = True
        frozen = True

    @property
    def authenticated(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class Coordinates(BaseModel):
    lat: float
    lng: float


class Doctor(BaseModel):
    """
    A doctor as listed in the directory.

    ``id`` is always the owning identity's uid (or a seed id for doctors
    that have not onboarded yet).
    """
    id: str
    name: str
    email: str | None = None
    role: UserRole = UserRole.doctor
    specialty: str
    location: str
    wilaya: str
    coordinates: Coordinates | None = None
    image_url: str | None = None
    bio: str | None = None
    available_slots: list[str] = Field(default_factory=list)
    phone_number: str | None = None
    experience: str | None = None
    skills: str | None = None
    equipment: str | None = None
    rating: float | None = Field(default=None, ge=0, le=5)
    created_at: str | None = None
    updated_at: str | None = None

    class Config:
        use_enum_values = True


class PatientProfile(BaseModel):
    id: str
    name: str | None = None
    email: str | None = None
    role: UserRole = UserRole.patient
    photo_url: str | None = None
    phone_number: str | None = None
    date_of_birth: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    class Config:
        use_enum_values = True


class MedicalRecord(BaseModel):
    """One record per patient, stored at ``medicalRecords/{patient_id}``."""
    patient_id: str
    blood_type: str | None = None
    allergies: str | None = None
    chronic_diseases: str | None = None
    medications: str | None = None
    medical_history_notes: str | None = None
    updated_at: str | None = None


# ---------------------------------------------------------------------------
# Appointments / notifications
# ---------------------------------------------------------------------------


class Appointment(BaseModel):
    id: str
    doctor_id: str
    patient_id: str
    patient_name: str | None = None
    date: str = Field(description="yyyy-mm-dd")
    time: str
    status: AppointmentStatus = AppointmentStatus.pending
    notes: str = ""
    created_at: str | None = None
    updated_at: str | None = None

    class Config:
        use_enum_values = True


class Notification(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    message: str
    read: bool = False
    timestamp: str = Field(default_factory=utc_now)
    link: str | None = None
    type: NotificationType = NotificationType.info
    recipient_id: str

    class Config:
        use_enum_values = True
