"""
app/pages/medical_record.py

The patient's own medical record (one per patient).
"""

from __future__ import annotations

import streamlit as st

from app.ui import current_session, get_backend, go, inject_theme, run

_BLOOD_TYPES = ["", "A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"]


def render() -> None:
    inject_theme()
    st.title("ملفي الصحي")
    st.caption("تنبيه: هذا عرض تجريبي، لا تدخل بيانات صحية حقيقية.")

    session = current_session()
    if session is None or session.role != "patient":
        st.warning("يرجى تسجيل الدخول كمريض.")
        go("auth")
        return

    backend = get_backend()
    record = run(backend.records.get_medical_record(session.uid))
    if record is None:
        st.info("لا يوجد ملف صحي بعد. املأ النموذج لإنشائه.")

    current_blood = (record.blood_type if record else "") or ""
    with st.form("medical_record"):
        blood_type = st.selectbox(
            "فصيلة الدم",
            options=_BLOOD_TYPES,
            index=_BLOOD_TYPES.index(current_blood) if current_blood in _BLOOD_TYPES else 0,
        )
        allergies = st.text_area("الحساسية", value=(record.allergies if record else "") or "")
        chronic = st.text_area("الأمراض المزمنة", value=(record.chronic_diseases if record else "") or "")
        medications = st.text_area("الأدوية الحالية", value=(record.medications if record else "") or "")
        notes = st.text_area("ملاحظات التاريخ الطبي", value=(record.medical_history_notes if record else "") or "")
        submitted = st.form_submit_button("حفظ", type="primary")

    if submitted:
        run(
            backend.records.save_medical_record(
                session.uid,
                {
                    "blood_type": blood_type or None,
                    "allergies": allergies,
                    "chronic_diseases": chronic,
                    "medications": medications,
                    "medical_history_notes": notes,
                },
            )
        )
        st.success("تم حفظ بيانات ملفك الصحي.")
        st.rerun()
