"""Tests for role-based route decisions."""
from urllib.parse import parse_qs, urlsplit

import pytest

from storage.guard import (
    MSG_DOCTORS_ONLY,
    MSG_LOGIN_REQUIRED,
    MSG_PATIENTS_ONLY,
    dashboard_for,
    resolve_route,
    session_cookies,
)
from storage.models import Session


def _session(role: str) -> Session:
    return Session(uid="u1", email="a@x.com", display_name="A", role=role)


def _query(redirect: str) -> dict:
    parts = urlsplit(redirect)
    assert parts.path == "/auth/login"
    return {k: v[0] for k, v in parse_qs(parts.query).items()}


def test_anonymous_is_sent_to_login_with_return_path():
    decision = resolve_route("/doctor/dashboard", None)
    assert decision.allowed is False
    query = _query(decision.redirect)
    assert query["redirect"] == "/doctor/dashboard"
    assert query["message"] == MSG_LOGIN_REQUIRED


@pytest.mark.parametrize(
    "path,role,message",
    [
        ("/patient/dashboard", "doctor", MSG_PATIENTS_ONLY),
        ("/doctor/appointments", "patient", MSG_DOCTORS_ONLY),
    ],
)
def test_wrong_role_is_denied(path, role, message):
    decision = resolve_route(path, _session(role))
    assert decision.allowed is False
    assert decision.message == message
    assert "redirect" not in _query(decision.redirect)


@pytest.mark.parametrize("path,role", [("/patient/profile", "patient"), ("/doctor/dashboard", "doctor")])
def test_owner_role_is_allowed(path, role):
    assert resolve_route(path, _session(role)).allowed is True


@pytest.mark.parametrize("path", ["/auth/login", "/auth/signup"])
def test_signed_in_user_skips_auth_pages(path):
    decision = resolve_route(path, _session("doctor"))
    assert decision.allowed is False
    assert decision.redirect == "/doctor/dashboard"


@pytest.mark.parametrize("path", ["/", "/appointments", "/auth/login"])
def test_public_paths(path):
    assert resolve_route(path, None).allowed is True


def test_dashboard_for_unknown_role():
    assert dashboard_for("patient") == "/patient/dashboard"
    assert dashboard_for(None) == "/"


def test_session_cookies():
    assert session_cookies(_session("patient")) == {"auth_token": "true", "user_role": "patient"}
    assert session_cookies(None) == {"auth_token": "", "user_role": ""}
