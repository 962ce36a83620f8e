"""
app/pages/doctor.py

Doctor dashboard: clinic appointments with confirm / cancel (both notify the
patient), plus a read-only view of each patient's profile and medical record.
"""

from __future__ import annotations

import html

import streamlit as st

from app.ui import card_close, card_open, current_session, get_backend, go, inject_theme, metric_card, run, status_badge
from storage.errors import NotFound
from storage.models import Appointment


def _esc(x) -> str:
    return html.escape(str(x or ""), quote=True)


def _patient_details(appt: Appointment) -> None:
    backend = get_backend()
    profile = run(backend.patients.get_patient(appt.patient_id))
    record = run(backend.records.get_medical_record(appt.patient_id))

    if profile is None:
        st.caption("لا يوجد ملف شخصي لهذا المريض.")
    else:
        st.markdown(f"**{profile.name or appt.patient_name or '—'}** · {profile.email or ''}")
        st.caption(f"الهاتف: {profile.phone_number or '—'} · تاريخ الميلاد: {profile.date_of_birth or '—'}")

    if record is None:
        st.caption("لم يقم المريض بإنشاء ملف صحي بعد.")
        return
    st.markdown(
        f"- فصيلة الدم: {record.blood_type or '—'}\n"
        f"- الحساسية: {record.allergies or '—'}\n"
        f"- الأمراض المزمنة: {record.chronic_diseases or '—'}\n"
        f"- الأدوية: {record.medications or '—'}\n"
        f"- ملاحظات: {record.medical_history_notes or '—'}"
    )


def render() -> None:
    inject_theme()
    st.title("مواعيد العيادة")

    session = current_session()
    if session is None or session.role != "doctor":
        st.warning("يرجى تسجيل الدخول كطبيب.")
        go("auth")
        return

    backend = get_backend()
    appointments = run(backend.appointments.list_appointments_for_user(session.uid, "doctor"))

    c1, c2 = st.columns(2, gap="large")
    with c1:
        metric_card("قيد الانتظار", str(sum(1 for a in appointments if a.status == "pending")))
    with c2:
        metric_card("مؤكدة", str(sum(1 for a in appointments if a.status == "confirmed")))

    card_open("المواعيد")
    if not appointments:
        st.caption("لا توجد مواعيد.")

    for appt in appointments:
        st.markdown(
            f"""
<div style="display:flex; justify-content:space-between; gap:10px; padding:12px 0; border-top:1px solid rgba(15,23,42,0.06);">
  <div>
    <div style="font-weight:800;">{_esc(appt.patient_name or appt.patient_id)}</div>
    <div class="mc-sub">{_esc(appt.date)} · {_esc(appt.time)}</div>
    <div class="mc-sub">{_esc(appt.notes)}</div>
  </div>
  <div>{status_badge(appt.status)}</div>
</div>
            """,
            unsafe_allow_html=True,
        )
        cA, cB, cC = st.columns([1, 1, 2], gap="small")
        with cA:
            if appt.status == "pending" and st.button("تأكيد", key=f"confirm_{appt.id}", type="primary"):
                try:
                    run(backend.appointments.confirm_appointment(appt.id, actor_name=session.display_name))
                except NotFound:
                    st.error("الموعد غير موجود.")
                else:
                    st.rerun()
        with cB:
            if st.button("إلغاء", key=f"cancel_{appt.id}"):
                try:
                    run(
                        backend.appointments.delete_appointment(
                            appt.id, cancelled_by="doctor", actor_name=session.display_name
                        )
                    )
                except NotFound:
                    st.error("الموعد غير موجود.")
                else:
                    st.rerun()
        with cC:
            with st.expander("ملف المريض"):
                _patient_details(appt)
    card_close()
