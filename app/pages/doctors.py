"""
app/pages/doctors.py

Doctor directory: filter by specialty / wilaya / name, then book a slot.
Booking requires a signed-in patient.
"""

from __future__ import annotations

import html
from datetime import date

import streamlit as st

from app.ui import card_close, card_open, current_session, get_backend, inject_theme, run
from storage.errors import MissingField
from storage.models import Doctor

_ALL = "الكل"


def _esc(x) -> str:
    return html.escape(str(x or ""), quote=True)


def _matches(doctor: Doctor, specialty: str, wilaya: str, query: str) -> bool:
    if specialty != _ALL and doctor.specialty != specialty:
        return False
    if wilaya != _ALL and doctor.wilaya != wilaya:
        return False
    if query and query.lower() not in doctor.name.lower():
        return False
    return True


def _booking_form(doctor: Doctor) -> None:
    backend = get_backend()
    session = current_session()
    if session is None or session.role != "patient":
        st.caption("سجّل الدخول كمريض لتتمكن من الحجز.")
        return

    with st.form(f"book_{doctor.id}"):
        patient_name = st.text_input("اسم المريض", value=session.display_name or "")
        day = st.date_input("التاريخ", value=date.today(), min_value=date.today())
        slot = st.selectbox("الوقت", options=doctor.available_slots)
        notes = st.text_area("ملاحظات (اختياري)")
        submitted = st.form_submit_button("تأكيد الحجز", type="primary")

    if submitted:
        try:
            appointment = run(
                backend.appointments.create_appointment(
                    {
                        "doctor_id": doctor.id,
                        "patient_id": session.uid,
                        "patient_name": patient_name,
                        "date": day.isoformat(),
                        "time": slot,
                        "notes": notes,
                    }
                )
            )
        except MissingField as exc:
            st.error(f"الحقل مطلوب: {exc.field}")
        else:
            st.success(f"تم الحجز بنجاح! رقم الموعد: {appointment.id[:6]}")


def render() -> None:
    inject_theme()
    backend = get_backend()
    st.title("ابحث عن طبيب")

    doctors = run(backend.doctors.list_doctors())
    specialties = run(backend.doctors.list_specialties())
    wilayas = run(backend.doctors.list_wilayas())

    c1, c2, c3 = st.columns(3, gap="small")
    with c1:
        specialty = st.selectbox("التخصص", options=[_ALL, *specialties])
    with c2:
        wilaya = st.selectbox("الولاية", options=[_ALL, *wilayas])
    with c3:
        query = st.text_input("اسم الطبيب")

    shown = [d for d in doctors if _matches(d, specialty, wilaya, query.strip())]
    st.caption(f"{len(shown)} طبيب")

    for doctor in shown:
        card_open(doctor.name, f"{doctor.specialty} · {doctor.wilaya}")
        left, right = st.columns([1, 3], gap="small")
        with left:
            if doctor.image_url:
                st.image(doctor.image_url, use_container_width=True)
        with right:
            st.markdown(
                f"<div class='mc-sub'>📍 {_esc(doctor.location)}</div>"
                f"<div style='margin-top:6px;'>{_esc(doctor.bio)}</div>",
                unsafe_allow_html=True,
            )
            if doctor.rating is not None:
                st.caption(f"⭐ {doctor.rating:.1f} / 5")
            with st.expander("حجز موعد"):
                _booking_form(doctor)
        card_close()
