"""
app/ui.py

Shared Streamlit helpers for the MedBook shell:
- theme injection (light canvas, navy sidebar, teal accent, RTL content)
- card / badge / metric helpers (HTML-escaped)
- the process-wide SharedState (st.cache_resource), one Backend per browser
  session over it, and a sync bridge for the async core
"""

from __future__ import annotations

import asyncio
import html
from typing import Any, Awaitable, TypeVar

import streamlit as st

from storage.backend import Backend, SharedState
from storage.config import Settings
from storage.models import Session

T = TypeVar("T")


def run(coro: Awaitable[T]) -> T:
    """Drive one core coroutine to completion from a Streamlit callback."""
    return asyncio.run(coro)


@st.cache_resource
def shared_state() -> SharedState:
    """Process-wide data: documents, identities, seed doctors, notifications file."""
    shared = SharedState(Settings.from_env())
    with Backend(shared=shared) as bootstrap:
        run(bootstrap.seed_demo_accounts())
    return shared


def get_backend() -> Backend:
    """
    One Backend per browser session over the shared data: a booking made in
    one browser shows up on the doctor's pages in another, while each
    browser keeps its own signed-in session.
    """
    if "backend" not in st.session_state:
        st.session_state["backend"] = Backend(shared=shared_state())
    return st.session_state["backend"]


def current_session() -> Session | None:
    return get_backend().auth.current_session


def go(page: str) -> None:
    st.session_state["current_page"] = page
    st.rerun()


def inject_theme() -> None:
    st.markdown(
        """
<style>
[data-testid="stSidebarNav"] { display: none !important; }

:root{
  --primary: 212 72% 20%;
  --primary-2: 212 72% 16%;
  --accent: 177 60% 38%;
  --sidebar-text: 210 40% 92%;

  --canvas: #F6F8FB;
  --card: #FFFFFF;
  --border: rgba(15,23,42,0.10);
  --muted: rgba(15,23,42,0.55);
  --text: rgba(15,23,42,0.92);

  --st-pending: 38 92% 45%;
  --st-pending-bg: 38 92% 95%;
  --st-confirmed: 142 70% 33%;
  --st-confirmed-bg: 142 70% 95%;
  --st-cancelled: 0 72% 45%;
  --st-cancelled-bg: 0 72% 95%;
}

.stApp { background: var(--canvas); }
div.block-container { padding-top: 2.2rem; padding-bottom: 2.2rem; direction: rtl; text-align: right; }

.stApp, .stMarkdown, .stMarkdown p, .stCaption, .stText, .stAlert, label,
h1, h2, h3, h4, h5, h6, div[data-testid="stMarkdownContainer"] {
  color: var(--text) !important;
}

div[data-testid="stTextInput"] input,
div[data-testid="stTextArea"] textarea {
  background: #FFFFFF !important;
  color: var(--text) !important;
  border: 1px solid var(--border) !important;
  border-radius: 12px !important;
}

section[data-testid="stSidebar"]{
  background: linear-gradient(180deg, hsl(var(--primary)), hsl(var(--primary-2)));
}
section[data-testid="stSidebar"] *{ color: hsl(var(--sidebar-text)) !important; }

.mc-card{
  background: var(--card);
  border: 1px solid var(--border);
  border-radius: 16px;
  padding: 18px 18px;
  margin-bottom: 12px;
}
.mc-title{ font-weight: 900; font-size: 16px; color: var(--text); }
.mc-sub{ color: var(--muted); font-size: 13px; margin-top: 2px; }
.mc-metric-label{ color: var(--muted); font-size: 12px; font-weight: 700; }
.mc-metric-value{ font-weight: 1000; font-size: 28px; color: var(--text); }
.mc-metric-foot{ margin-top: 6px; color: var(--muted); font-size: 12px; }

.st-badge{
  display:inline-block;
  padding: 6px 10px;
  border-radius: 999px;
  font-size: 12px;
  font-weight: 800;
  border: 1px solid rgba(15,23,42,0.08);
}
.st-pending{ background: hsl(var(--st-pending-bg)); color: hsl(var(--st-pending)); }
.st-confirmed, .st-completed{ background: hsl(var(--st-confirmed-bg)); color: hsl(var(--st-confirmed)); }
.st-cancelled{ background: hsl(var(--st-cancelled-bg)); color: hsl(var(--st-cancelled)); }

.mc-portal{
  display:flex; gap:14px; align-items:center;
  padding:16px;
  border-radius:16px;
  border:1px solid var(--border);
  background:#FFFFFF;
}
.mc-portal-ico{
  width:42px; height:42px; border-radius:12px;
  background: hsla(var(--accent),0.12);
  display:flex; align-items:center; justify-content:center;
  color: hsl(var(--accent));
}
.mc-portal-title{ font-weight: 900; color: var(--text); }
.mc-portal-sub{ color: var(--muted); font-size: 13px; }
</style>
        """,
        unsafe_allow_html=True,
    )


def _esc(x: Any) -> str:
    """Escape any user/DB-provided strings before injecting into HTML."""
    return html.escape(str(x or ""), quote=True)


def card_open(title: str, subtitle: str = "") -> None:
    sub = f'<div class="mc-sub">{_esc(subtitle)}</div>' if subtitle else ""
    st.markdown(
        f'<div class="mc-card"><div class="mc-title">{_esc(title)}</div>{sub}',
        unsafe_allow_html=True,
    )


def card_close() -> None:
    st.markdown("</div>", unsafe_allow_html=True)


_STATUS_LABELS = {
    "pending": "قيد الانتظار",
    "confirmed": "مؤكد",
    "completed": "مكتمل",
    "cancelled": "ملغى",
}


def status_badge(status: str) -> str:
    key = (status or "pending").lower()
    return f'<span class="st-badge st-{_esc(key)}">{_esc(_STATUS_LABELS.get(key, key))}</span>'


def metric_card(label: str, value: str, foot: str | None = None) -> None:
    """Plain text only (escaped); render badges outside the card."""
    foot_html = f'<div class="mc-metric-foot">{_esc(foot)}</div>' if foot else ""
    st.markdown(
        f"""
<div class="mc-card">
  <div class="mc-metric-label">{_esc(label)}</div>
  <div class="mc-metric-value">{_esc(value)}</div>
  {foot_html}
</div>
        """,
        unsafe_allow_html=True,
    )


def portal_choice(title: str, subtitle: str, icon_text: str = "•") -> None:
    st.markdown(
        f"""
<div class="mc-portal">
  <div class="mc-portal-ico">{_esc(icon_text)}</div>
  <div>
    <div class="mc-portal-title">{_esc(title)}</div>
    <div class="mc-portal-sub">{_esc(subtitle)}</div>
  </div>
</div>
        """,
        unsafe_allow_html=True,
    )
