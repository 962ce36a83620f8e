"""
storage/guard.py

Role-based route access decisions.

The UI shell asks :func:`resolve_route` before rendering a page.  Rules:

- ``/patient...`` and ``/doctor...`` need a session; otherwise redirect to
  the login page, carrying the requested path.
- A session whose role does not own the area is sent to the login page with
  an access-denied message.
- A signed-in user opening the login/signup pages is sent to their own
  dashboard.

:func:`session_cookies` exposes the authenticated-flag / role pair the UI
keeps alongside the session.
"""

from __future__ import annotations

from urllib.parse import urlencode

from pydantic import BaseModel

from storage.models import Session, UserRole

LOGIN_PATH = "/auth/login"
SIGNUP_PATH = "/auth/signup"

_DASHBOARDS = {
    UserRole.patient.value: "/patient/dashboard",
    UserRole.doctor.value: "/doctor/dashboard",
}

MSG_LOGIN_REQUIRED = "يرجى تسجيل الدخول للمتابعة."
MSG_PATIENTS_ONLY = "الوصول مرفوض. هذه الصفحة مخصصة للمرضى."
MSG_DOCTORS_ONLY = "الوصول مرفوض. هذه الصفحة مخصصة للأطباء."


class RouteDecision(BaseModel):
    allowed: bool
    redirect: str | None = None
    message: str | None = None


def dashboard_for(role: str | None) -> str:
    return _DASHBOARDS.get(getattr(role, "value", role), "/")


def _login_redirect(message: str, requested: str | None = None) -> RouteDecision:
    params = {"redirect": requested} if requested else {}
    params["message"] = message
    return RouteDecision(
        allowed=False,
        redirect=f"{LOGIN_PATH}?{urlencode(params)}",
        message=message,
    )


def resolve_route(path: str, session: Session | None) -> RouteDecision:
    protected_patient = path.startswith("/patient")
    protected_doctor = path.startswith("/doctor")

    if (protected_patient or protected_doctor) and session is None:
        return _login_redirect(MSG_LOGIN_REQUIRED, requested=path)

    if session is not None:
        if protected_patient and session.role != UserRole.patient.value:
            return _login_redirect(MSG_PATIENTS_ONLY)
        if protected_doctor and session.role != UserRole.doctor.value:
            return _login_redirect(MSG_DOCTORS_ONLY)
        if path.startswith(LOGIN_PATH) or path.startswith(SIGNUP_PATH):
            return RouteDecision(allowed=False, redirect=dashboard_for(session.role))

    return RouteDecision(allowed=True)


def session_cookies(session: Session | None) -> dict[str, str]:
    """The ``auth_token`` / ``user_role`` pair; empty strings when cleared."""
    if session is None:
        return {"auth_token": "", "user_role": ""}
    return {"auth_token": "true", "user_role": session.role}
