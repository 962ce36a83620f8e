"""
app/pages/patient_profile.py

Patient profile form.  Saving the name updates the sidebar immediately
(the store write re-broadcasts the active session).
"""

from __future__ import annotations

from datetime import date

import streamlit as st

from app.ui import current_session, get_backend, go, inject_theme, run


def render() -> None:
    inject_theme()
    st.title("ملفي الشخصي")

    session = current_session()
    if session is None or session.role != "patient":
        st.warning("يرجى تسجيل الدخول كمريض.")
        go("auth")
        return

    backend = get_backend()
    profile = run(backend.patients.get_patient(session.uid))

    dob_value = None
    if profile and profile.date_of_birth:
        try:
            dob_value = date.fromisoformat(profile.date_of_birth)
        except ValueError:
            dob_value = None

    with st.form("patient_profile"):
        name = st.text_input("الاسم الكامل", value=(profile.name if profile else session.display_name) or "")
        phone = st.text_input("رقم الهاتف", value=(profile.phone_number if profile else "") or "")
        dob = st.date_input("تاريخ الميلاد", value=dob_value, min_value=date(1900, 1, 1), max_value=date.today())
        submitted = st.form_submit_button("حفظ", type="primary")

    if submitted:
        run(
            backend.patients.update_patient_profile(
                session.uid,
                {
                    "name": name.strip() or None,
                    "phone_number": phone.strip(),
                    "date_of_birth": dob.isoformat() if dob else None,
                },
            )
        )
        st.success("تم حفظ الملف الشخصي.")
        st.rerun()
