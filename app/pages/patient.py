"""
app/pages/patient.py

Patient portal: upcoming appointments with status, cancel (which notifies
the doctor), and quick metrics.
"""

from __future__ import annotations

import html

import streamlit as st

from app.ui import card_close, card_open, current_session, get_backend, go, inject_theme, metric_card, run, status_badge
from storage.errors import NotFound


def _esc(x) -> str:
    return html.escape(str(x or ""), quote=True)


def render() -> None:
    inject_theme()
    st.title("مواعيدي")

    session = current_session()
    if session is None or session.role != "patient":
        st.warning("يرجى تسجيل الدخول كمريض.")
        go("auth")
        return

    backend = get_backend()
    appointments = run(backend.appointments.list_appointments_for_user(session.uid, "patient"))

    pending = sum(1 for a in appointments if a.status == "pending")
    confirmed = sum(1 for a in appointments if a.status == "confirmed")

    c1, c2, c3 = st.columns(3, gap="large")
    with c1:
        metric_card("كل المواعيد", str(len(appointments)))
    with c2:
        metric_card("قيد الانتظار", str(pending))
    with c3:
        metric_card("مؤكدة", str(confirmed))

    card_open("المواعيد", "يمكنك إلغاء أي موعد، وسيتم إشعار الطبيب.")
    if not appointments:
        st.caption("لا توجد مواعيد بعد.")
        if st.button("احجز موعداً →", type="primary"):
            go("doctors")

    for appt in appointments:
        doctor = run(backend.doctors.get_doctor(appt.doctor_id))
        doctor_name = doctor.name if doctor else "طبيب غير معروف"
        specialty = doctor.specialty if doctor else "تخصص غير معروف"

        cA, cB = st.columns([4, 1], gap="small")
        with cA:
            st.markdown(
                f"""
<div style="display:flex; justify-content:space-between; gap:10px; padding:12px 0; border-top:1px solid rgba(15,23,42,0.06);">
  <div>
    <div style="font-weight:800;">{_esc(doctor_name)}</div>
    <div class="mc-sub">{_esc(specialty)} · {_esc(appt.date)} · {_esc(appt.time)}</div>
  </div>
  <div>{status_badge(appt.status)}</div>
</div>
                """,
                unsafe_allow_html=True,
            )
        with cB:
            if st.button("إلغاء", key=f"cancel_{appt.id}", use_container_width=True):
                try:
                    run(
                        backend.appointments.delete_appointment(
                            appt.id, cancelled_by="patient", actor_name=session.display_name
                        )
                    )
                except NotFound:
                    st.error("الموعد غير موجود.")
                else:
                    st.success("تم إلغاء الموعد.")
                    st.rerun()
    card_close()
