"""
app/pages/doctor_profile.py

Doctor's professional profile.  Saved through DoctorsRepository so the
directory (and the seed copy, for seeded doctors) reflects it right away.
"""

from __future__ import annotations

import streamlit as st

from app.ui import current_session, get_backend, go, inject_theme, run
from repositories.seed import PLACEHOLDERS


def _value(text: str | None) -> str:
    return "" if not text or text in PLACEHOLDERS else text


def render() -> None:
    inject_theme()
    st.title("ملفي المهني")

    session = current_session()
    if session is None or session.role != "doctor":
        st.warning("يرجى تسجيل الدخول كطبيب.")
        go("auth")
        return

    backend = get_backend()
    doctor = run(backend.doctors.get_doctor(session.uid))
    specialties = run(backend.doctors.list_specialties())
    wilayas = run(backend.doctors.list_wilayas())

    current_specialty = _value(doctor.specialty if doctor else None)
    current_wilaya = _value(doctor.wilaya if doctor else None)

    with st.form("doctor_profile"):
        name = st.text_input("الاسم", value=_value(doctor.name if doctor else session.display_name))
        specialty = st.selectbox(
            "التخصص",
            options=specialties,
            index=specialties.index(current_specialty) if current_specialty in specialties else 0,
        )
        wilaya = st.selectbox(
            "الولاية",
            options=wilayas,
            index=wilayas.index(current_wilaya) if current_wilaya in wilayas else 0,
        )
        location = st.text_input("عنوان العيادة", value=_value(doctor.location if doctor else None))
        phone = st.text_input("رقم الهاتف", value=(doctor.phone_number if doctor else "") or "")
        bio = st.text_area("نبذة تعريفية", value=_value(doctor.bio if doctor else None))
        experience = st.text_input("الخبرة", value=_value(doctor.experience if doctor else None))
        skills = st.text_input("المهارات", value=_value(doctor.skills if doctor else None))
        equipment = st.text_input("المعدات", value=_value(doctor.equipment if doctor else None))
        submitted = st.form_submit_button("حفظ", type="primary")

    if submitted:
        run(
            backend.doctors.update_doctor_profile(
                session.uid,
                {
                    "name": name.strip() or None,
                    "email": session.email,
                    "specialty": specialty,
                    "wilaya": wilaya,
                    "location": location.strip(),
                    "phone_number": phone.strip(),
                    "bio": bio.strip(),
                    "experience": experience.strip(),
                    "skills": skills.strip(),
                    "equipment": equipment.strip(),
                },
            )
        )
        st.success("تم حفظ الملف المهني.")
        st.rerun()
