"""
storage/auth.py

Mock auth for MedBook.

Responsibilities
----------------
- ``IdentityRegistry``: in-memory credential registry (email -> identity),
  passwords hashed with PBKDF2-HMAC-SHA256.  One per process, shared by
  every UI session.
- ``AuthSessionService``: the "current session" pointer of one UI session,
  broadcast to subscribers on every change.  It writes the profile stub to
  ``users/{uid}`` on signup and prefers the stored profile over
  registration values on sign-in.

Password storage
----------------
Each identity keeps ``"<hex_salt>:<hex_hash>"`` (16-byte random salt).
Verification uses ``hmac.compare_digest``.

Profile propagation
-------------------
The registry registers a write listener on the ``users`` collection.  When a
profile document of a known identity is written, the identity's role, name
and photo are refreshed and every session service is told the uid; a
service whose signed-in identity it is notifies its subscribers before the
write returns to its caller.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Callable
from uuid import uuid4

from storage.document_store import DocumentStore
from storage.errors import DuplicateIdentity, InvalidCredentials, InvalidRole, MissingField
from storage.models import Session, UserRole, utc_now

logger = logging.getLogger(__name__)

USERS = "users"

SessionListener = Callable[[Session | None], None]

_HASH_ALG = "sha256"


def default_photo_url(uid: str) -> str:
    return f"https://picsum.photos/seed/{uid[:10]}/200/200"


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(password: str, iterations: int, salt: bytes | None = None) -> str:
    """Return a ``"<hex_salt>:<hex_hash>"`` blob for *password*."""
    if salt is None:
        salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac(_HASH_ALG, password.encode("utf-8"), salt, iterations)
    return f"{salt.hex()}:{dk.hex()}"


def verify_password(password: str, blob: str, iterations: int) -> bool:
    try:
        hex_salt, hex_hash = blob.split(":", 1)
    except ValueError:
        return False
    salt = bytes.fromhex(hex_salt)
    dk = hashlib.pbkdf2_hmac(_HASH_ALG, password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(dk.hex(), hex_hash)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass
class _Identity:
    uid: str
    email: str
    password_blob: str
    display_name: str
    role: str
    photo_url: str | None = None

    def to_session(self) -> Session:
        return Session(
            uid=self.uid,
            email=self.email,
            display_name=self.display_name,
            role=self.role,
            photo_url=self.photo_url,
        )


# ---------------------------------------------------------------------------
# Identity registry (shared)
# ---------------------------------------------------------------------------


class IdentityRegistry:
    """
    Registered identities (email -> credentials and profile summary).

    One registry serves every session of a process.  It listens on the
    ``users`` collection and tells its watchers which uid changed, so each
    session service can refresh itself when its own profile is written.
    """

    def __init__(self, store: DocumentStore, password_iterations: int = 260_000):
        self.password_iterations = password_iterations
        self._identities: dict[str, _Identity] = {}    # uid -> identity
        self._by_email: dict[str, str] = {}              # normalized email -> uid
        self._watchers: list[Callable[[str], None]] = []
        self._lock = threading.Lock()
        self._detach = store.add_write_listener(USERS, self._on_profile_written)

    def close(self) -> None:
        self._detach()
        self._watchers.clear()

    def watch(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Call *callback(uid)* after a known identity's profile is written."""
        self._watchers.append(callback)

        def _unwatch() -> None:
            if callback in self._watchers:
                self._watchers.remove(callback)

        return _unwatch

    def _on_profile_written(self, uid: str, data: dict[str, Any]) -> None:
        identity = self._identities.get(uid)
        if identity is None:
            return

        if data.get("role") in (UserRole.patient.value, UserRole.doctor.value):
            identity.role = data["role"]
        if data.get("name"):
            identity.display_name = data["name"]
        if "photo_url" in data:
            identity.photo_url = data["photo_url"]

        for watcher in list(self._watchers):
            watcher(uid)

    def get(self, uid: str) -> _Identity | None:
        return self._identities.get(uid)

    def register(self, email: str, password: str, name: str, role: str) -> _Identity:
        """
        Raises:
            DuplicateIdentity: If *email* is already registered.
        """
        key = _normalize_email(email)
        with self._lock:
            if key in self._by_email:
                raise DuplicateIdentity(f"Email '{email}' is already registered.")
            uid = str(uuid4())
            identity = _Identity(
                uid=uid,
                email=email.strip(),
                password_blob=hash_password(password, self.password_iterations),
                display_name=name.strip(),
                role=role,
                photo_url=default_photo_url(uid),
            )
            self._identities[uid] = identity
            self._by_email[key] = uid
        return identity

    def verify(self, email: str, password: str) -> _Identity | None:
        uid = self._by_email.get(_normalize_email(email))
        identity = self._identities.get(uid) if uid else None
        if identity is None or not verify_password(password, identity.password_blob, self.password_iterations):
            return None
        return identity


# ---------------------------------------------------------------------------
# Session service (one per UI session)
# ---------------------------------------------------------------------------


class AuthSessionService:
    def __init__(
        self,
        store: DocumentStore,
        password_iterations: int = 260_000,
        registry: IdentityRegistry | None = None,
    ):
        self._store = store
        self._owns_registry = registry is None
        self._registry = registry or IdentityRegistry(store, password_iterations)
        self._current: Session | None = None
        self._listeners: list[SessionListener] = []
        self._unwatch = self._registry.watch(self._on_identity_changed)

    @property
    def current_session(self) -> Session | None:
        return self._current

    def close(self) -> None:
        self._unwatch()
        if self._owns_registry:
            self._registry.close()
        self._listeners.clear()

    # -------------------------
    # Subscribers
    # -------------------------
    def subscribe(self, callback: SessionListener) -> Callable[[], None]:
        """
        Call *callback* now with the current session, then on every change.

        Returns a function that removes the subscription.
        """
        self._listeners.append(callback)
        callback(self._current)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    def _broadcast(self) -> None:
        for listener in list(self._listeners):
            listener(self._current)

    def _set_current(self, session: Session | None) -> None:
        self._current = session
        self._broadcast()

    # -------------------------
    # Store propagation
    # -------------------------
    def _on_identity_changed(self, uid: str) -> None:
        if self._current is None or self._current.uid != uid:
            return
        logger.debug("Profile write for active session uid=%s, re-broadcasting", uid)
        self._set_current(self._registry.get(uid).to_session())

    # -------------------------
    # Public auth API
    # -------------------------
    async def create_identity(
        self,
        email: str,
        password: str,
        name: str,
        role: str,
        *,
        sign_in: bool = True,
    ) -> Session:
        """
        Register a new identity, write its profile stub and (by default)
        sign it in.

        Raises:
            MissingField:      If any argument is empty.
            InvalidRole:       If *role* is not ``'patient'`` or ``'doctor'``.
            DuplicateIdentity: If *email* is already registered.
        """
        for field, value in (("email", email), ("password", password), ("name", name), ("role", role)):
            if not value or not str(value).strip():
                raise MissingField(field)

        role = getattr(role, "value", role)
        if role not in (UserRole.patient.value, UserRole.doctor.value):
            raise InvalidRole(f"Invalid role '{role}'. Must be 'patient' or 'doctor'.")

        identity = self._registry.register(email, password, name, role)
        uid = identity.uid

        await self._store.set_doc(
            f"{USERS}/{uid}",
            {
                "uid": uid,
                "email": identity.email,
                "name": identity.display_name,
                "role": role,
                "photo_url": identity.photo_url,
                "created_at": utc_now(),
            },
        )
        logger.info("Created identity uid=%s role=%s", uid, role)

        session = identity.to_session()
        if sign_in:
            self._set_current(session)
        return session

    async def authenticate(self, email: str, password: str) -> Session:
        """
        Verify credentials and make the identity the active session.

        Raises:
            MissingField:       If *email* or *password* is empty.
            InvalidCredentials: If they do not match.  The session is untouched.
        """
        if not email:
            raise MissingField("email")
        if not password:
            raise MissingField("password")

        identity = self._registry.verify(email, password)
        if identity is None:
            logger.debug("authenticate: rejected credentials for '%s'", email)
            raise InvalidCredentials("Invalid credentials.")
        uid = identity.uid

        profile = await self._store.get_doc(f"{USERS}/{uid}")
        if profile.exists:
            data = profile.data()
            identity.role = data.get("role") or identity.role
            identity.display_name = data.get("name") or identity.display_name
            identity.photo_url = data.get("photo_url") or identity.photo_url
        else:
            logger.warning("No profile document for uid=%s, recreating it", uid)
            await self._store.set_doc(
                f"{USERS}/{uid}",
                {
                    "uid": uid,
                    "email": identity.email,
                    "name": identity.display_name,
                    "role": identity.role,
                    "photo_url": identity.photo_url,
                    "created_at": utc_now(),
                },
            )

        logger.info("Signed in uid=%s role=%s", uid, identity.role)
        self._set_current(identity.to_session())
        return self._current

    async def end_session(self) -> None:
        """Clear the active session.  Safe to call when nobody is signed in."""
        if self._current is not None:
            logger.info("Signed out uid=%s", self._current.uid)
        self._set_current(None)

    async def fetch_role(self, uid: str) -> str | None:
        """Role stored in the profile document, or ``None``."""
        doc = await self._store.get_doc(f"{USERS}/{uid}")
        if not doc.exists:
            return None
        return doc.data().get("role")
