"""
app/pages/auth.py

Sign in / sign up, plus one-click demo portals (patient / doctor).
"""

from __future__ import annotations

import streamlit as st

from app.ui import card_close, card_open, get_backend, go, inject_theme, portal_choice, run
from storage.backend import DEMO_ACCOUNTS, DEMO_PASSWORD
from storage.errors import DuplicateIdentity, InvalidCredentials, InvalidRole, MissingField

_ROLE_LABELS = {"patient": "مريض", "doctor": "طبيب"}


def _landing(role: str) -> None:
    go("doctor" if role == "doctor" else "patient")


def render() -> None:
    inject_theme()
    backend = get_backend()
    st.title("مرحباً بك في MedBook")

    login_tab, signup_tab = st.tabs(["تسجيل الدخول", "إنشاء حساب"])

    with login_tab:
        with st.form("login_form"):
            email = st.text_input("البريد الإلكتروني")
            password = st.text_input("كلمة المرور", type="password")
            submitted = st.form_submit_button("دخول", type="primary", use_container_width=True)
        if submitted:
            try:
                session = run(backend.auth.authenticate(email, password))
            except MissingField:
                st.error("يرجى إدخال البريد الإلكتروني وكلمة المرور.")
            except InvalidCredentials:
                st.error("بيانات الدخول غير صحيحة.")
            else:
                _landing(session.role)

    with signup_tab:
        with st.form("signup_form"):
            name = st.text_input("الاسم الكامل")
            email = st.text_input("البريد الإلكتروني", key="signup_email")
            password = st.text_input("كلمة المرور", type="password", key="signup_password")
            role = st.radio(
                "نوع الحساب",
                options=list(_ROLE_LABELS),
                format_func=_ROLE_LABELS.get,
                horizontal=True,
            )
            submitted = st.form_submit_button("إنشاء الحساب", type="primary", use_container_width=True)
        if submitted:
            try:
                session = run(backend.auth.create_identity(email, password, name, role))
            except MissingField as exc:
                st.error(f"الحقل مطلوب: {exc.field}")
            except DuplicateIdentity:
                st.error("هذا البريد الإلكتروني مستخدم بالفعل.")
            except InvalidRole:
                st.error("نوع الحساب غير صالح.")
            else:
                _landing(session.role)

    if backend.settings.demo_mode:
        st.markdown("<br>", unsafe_allow_html=True)
        card_open("حسابات تجريبية", "للتجربة فقط، لا تدخل بيانات صحية حقيقية.")
        for email, name, role in DEMO_ACCOUNTS:
            portal_choice(name, email, icon_text="🩺" if role == "doctor" else "👤")
            if st.button(f"المتابعة كـ{_ROLE_LABELS[role]}", key=f"demo_{role}", use_container_width=True):
                session = run(backend.auth.authenticate(email, DEMO_PASSWORD))
                _landing(session.role)
        card_close()
