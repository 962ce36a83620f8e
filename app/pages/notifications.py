"""
app/pages/notifications.py

The signed-in user's notifications, newest first.
"""

from __future__ import annotations

import streamlit as st

from app.ui import card_close, card_open, current_session, get_backend, go, inject_theme, run

_ICONS = {"success": "✅", "error": "⛔", "info": "ℹ️", "warning": "⚠️"}


def render() -> None:
    inject_theme()
    st.title("الإشعارات")

    session = current_session()
    if session is None:
        go("auth")
        return

    backend = get_backend()
    items = run(backend.notifications.list_for(session.uid))

    cA, cB = st.columns(2, gap="small")
    with cA:
        if st.button("تحديد الكل كمقروء", use_container_width=True, disabled=not items):
            run(backend.notifications.mark_all_read(session.uid))
            st.rerun()
    with cB:
        if st.button("مسح الكل", use_container_width=True, disabled=not items):
            run(backend.notifications.clear(session.uid))
            st.rerun()

    card_open("الوارد", f"{backend.notifications.unread_count} غير مقروءة")
    if not items:
        st.caption("لا توجد إشعارات.")
    for n in items:
        c1, c2 = st.columns([5, 1], gap="small")
        with c1:
            prefix = "" if n.read else "**●** "
            st.markdown(f"{prefix}{_ICONS.get(n.type, '')} {n.message}")
            st.caption(n.timestamp[:16].replace("T", " "))
        with c2:
            if not n.read and st.button("مقروء", key=f"read_{n.id}"):
                run(backend.notifications.mark_read(n.id))
                st.rerun()
    card_close()
