"""
app/main.py

MedBook, Streamlit entry point.
- Logging setup from Settings
- Sidebar: session summary, unread notifications, sign out
- Role-based navigation, every page checked by storage.guard before render
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from storage.config import Settings  # noqa: E402
from storage.guard import LOGIN_PATH, resolve_route  # noqa: E402

logging.basicConfig(
    level=Settings.from_env().log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

from app.ui import current_session, get_backend, inject_theme, run  # noqa: E402

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="MedBook",
    page_icon="🩺",
    layout="wide",
    initial_sidebar_state="expanded",
)

# page key -> (label, route path)
PAGES: dict[str, tuple[str, str]] = {
    "auth": ("تسجيل الدخول", LOGIN_PATH),
    "doctors": ("الأطباء وحجز موعد", "/appointments"),
    "patient": ("مواعيدي", "/patient/appointments"),
    "patient_profile": ("ملفي الشخصي", "/patient/profile"),
    "medical_record": ("ملفي الصحي", "/patient/medical-record"),
    "doctor": ("مواعيد العيادة", "/doctor/appointments"),
    "doctor_profile": ("ملفي المهني", "/doctor/profile"),
    "notifications": ("الإشعارات", "/notifications"),
}

_REDIRECT_PAGES = {
    LOGIN_PATH: "auth",
    "/patient/dashboard": "patient",
    "/doctor/dashboard": "doctor",
    "/": "doctors",
}

if "current_page" not in st.session_state:
    st.session_state["current_page"] = "doctors"

inject_theme()
backend = get_backend()
session = current_session()


def _page_for_redirect(redirect: str) -> str:
    return _REDIRECT_PAGES.get(redirect.split("?", 1)[0], "auth")


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.title("🩺 MedBook")
st.sidebar.markdown("احجز موعدك مع طبيبك بسهولة.")
st.sidebar.divider()

if session is not None:
    role_label = "طبيب" if session.role == "doctor" else "مريض"
    st.sidebar.success(f"**{session.display_name or session.email}**\n\n{role_label}")
    unread = backend.notifications.unread_count
    if unread:
        st.sidebar.warning(f"🔔 {unread} إشعارات غير مقروءة")
    if st.sidebar.button("↩️ تسجيل الخروج"):
        run(backend.auth.end_session())
        st.session_state["current_page"] = "doctors"
        st.rerun()
else:
    st.sidebar.info("غير مسجل الدخول")

st.sidebar.divider()

# ---------------------------------------------------------------------------
# Navigation options (role-based)
# ---------------------------------------------------------------------------
nav_keys = ["doctors"]
if session is None:
    nav_keys.append("auth")
elif session.role == "patient":
    nav_keys.extend(["patient", "patient_profile", "medical_record", "notifications"])
elif session.role == "doctor":
    nav_keys.extend(["doctor", "doctor_profile", "notifications"])

if st.session_state["current_page"] not in nav_keys:
    st.session_state["current_page"] = nav_keys[0]

labels = [PAGES[k][0] for k in nav_keys]
choice = st.sidebar.radio(
    "التنقل",
    options=labels,
    index=nav_keys.index(st.session_state["current_page"]),
)
page_key = nav_keys[labels.index(choice)]
st.session_state["current_page"] = page_key

# ---------------------------------------------------------------------------
# Guard + routing
# ---------------------------------------------------------------------------
decision = resolve_route(PAGES[page_key][1], session)
if not decision.allowed:
    logger.info("Route %s denied, redirecting to %s", PAGES[page_key][1], decision.redirect)
    if decision.message:
        st.warning(decision.message)
    page_key = _page_for_redirect(decision.redirect or LOGIN_PATH)
    st.session_state["current_page"] = page_key

module = __import__(f"app.pages.{page_key}", fromlist=["render"])
module.render()
