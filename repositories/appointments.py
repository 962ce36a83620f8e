"""
repositories/appointments.py

Appointment lifecycle over the document store.

    create   patient books            -> status pending
    confirm  doctor confirms          -> status confirmed, patient notified
    delete   patient or doctor cancels -> hard removal, counterpart notified

Appointments live at ``appointments/{id}``.  There is no tombstone: a
cancelled-and-deleted appointment simply disappears from every listing.
"""

from __future__ import annotations

import logging
from datetime import date as _date
from typing import Any

from babel.dates import format_date

from storage.document_store import DocumentStore
from storage.errors import MissingField, NotFound
from storage.models import Appointment, AppointmentStatus, NotificationType, UserRole, utc_now
from storage.notifications import NotificationStore

logger = logging.getLogger(__name__)

APPOINTMENTS = "appointments"

_REQUIRED = ("doctor_id", "patient_id", "date", "time")

PATIENT_APPOINTMENTS_LINK = "/patient/appointments"
DOCTOR_APPOINTMENTS_LINK = "/doctor/appointments"


def format_day(value: str) -> str:
    """Long Arabic date for notification text; raw value if unparseable."""
    try:
        return format_date(_date.fromisoformat(value), format="long", locale="ar")
    except ValueError:
        return value


class AppointmentsRepository:
    def __init__(self, store: DocumentStore, notifications: NotificationStore):
        self._store = store
        self._notifications = notifications

    @staticmethod
    def _from_doc(doc_id: str, data: dict[str, Any]) -> Appointment:
        return Appointment.model_validate({**data, "id": doc_id})

    async def create_appointment(self, data: dict[str, Any]) -> Appointment:
        """
        Book a new appointment.  Status always starts as ``pending``.

        Raises:
            MissingField: If doctor_id, patient_id, date or time is empty.
        """
        for field in _REQUIRED:
            if not data.get(field):
                raise MissingField(field)

        now = utc_now()
        record = {
            "doctor_id": data["doctor_id"],
            "patient_id": data["patient_id"],
            "patient_name": data.get("patient_name"),
            "date": data["date"],
            "time": data["time"],
            "notes": data.get("notes") or "",
            "status": AppointmentStatus.pending.value,
            "created_at": now,
            "updated_at": now,
        }
        doc = await self._store.add_doc(APPOINTMENTS, record)
        logger.info(
            "Created appointment %s doctor=%s patient=%s on %s %s",
            doc.id, record["doctor_id"], record["patient_id"], record["date"], record["time"],
        )
        return self._from_doc(doc.id, record)

    async def list_appointments(self) -> list[Appointment]:
        docs = await self._store.list_docs(APPOINTMENTS)
        return [self._from_doc(d.id, d.data()) for d in docs]

    async def list_appointments_for_user(self, user_id: str, role: str) -> list[Appointment]:
        """Appointments where the user is the doctor (or patient), by date then time."""
        field = "doctor_id" if getattr(role, "value", role) == UserRole.doctor.value else "patient_id"
        mine = [a for a in await self.list_appointments() if getattr(a, field) == user_id]
        return sorted(mine, key=lambda a: (a.date, a.time))

    async def get_appointment(self, appointment_id: str) -> Appointment | None:
        doc = await self._store.get_doc(f"{APPOINTMENTS}/{appointment_id}")
        if not doc.exists:
            return None
        return self._from_doc(doc.id, doc.data())

    async def update_appointment_status(
        self, appointment_id: str, status: AppointmentStatus | str
    ) -> Appointment:
        """
        Raises:
            NotFound:   If the appointment does not exist.
            ValueError: If *status* is not a known status.
        """
        status = AppointmentStatus(status)
        path = f"{APPOINTMENTS}/{appointment_id}"
        doc = await self._store.get_doc(path)
        if not doc.exists:
            raise NotFound(f"Appointment '{appointment_id}' not found.")

        await self._store.set_doc(path, {"status": status.value, "updated_at": utc_now()})
        logger.info("Appointment %s -> %s", appointment_id, status.value)
        return await self.get_appointment(appointment_id)

    async def confirm_appointment(self, appointment_id: str, actor_name: str | None = None) -> Appointment:
        """Doctor-side confirmation; the patient is notified."""
        appointment = await self.update_appointment_status(appointment_id, AppointmentStatus.confirmed)
        await self._notifications.add(
            recipient_id=appointment.patient_id,
            message=(
                f"تم تأكيد موعدك مع د. {actor_name or 'الطبيب'} "
                f"ليوم {format_day(appointment.date)} الساعة {appointment.time}."
            ),
            type=NotificationType.success,
            link=PATIENT_APPOINTMENTS_LINK,
        )
        return appointment

    async def delete_appointment(
        self,
        appointment_id: str,
        cancelled_by: UserRole | str = UserRole.patient,
        actor_name: str | None = None,
    ) -> Appointment:
        """
        Cancel by hard removal and notify the other party.

        A patient cancellation notifies the doctor; a doctor cancellation
        notifies the patient.  Returns the removed appointment.

        Raises:
            NotFound: If the appointment does not exist.
        """
        appointment = await self.get_appointment(appointment_id)
        if appointment is None:
            raise NotFound(f"Appointment '{appointment_id}' not found.")

        await self._store.delete_doc(f"{APPOINTMENTS}/{appointment_id}")
        logger.info("Deleted appointment %s (cancelled by %s)", appointment_id, getattr(cancelled_by, "value", cancelled_by))

        day = format_day(appointment.date)
        if UserRole(cancelled_by) == UserRole.doctor:
            await self._notifications.add(
                recipient_id=appointment.patient_id,
                message=f"لقد قام د. {actor_name or 'الطبيب'} بإلغاء موعدك ليوم {day} الساعة {appointment.time}.",
                type=NotificationType.warning,
                link=PATIENT_APPOINTMENTS_LINK,
            )
        else:
            await self._notifications.add(
                recipient_id=appointment.doctor_id,
                message=f"قام المريض {actor_name or 'مجهول'} بإلغاء موعده معك ليوم {day} الساعة {appointment.time}.",
                type=NotificationType.warning,
                link=DOCTOR_APPOINTMENTS_LINK,
            )
        return appointment
