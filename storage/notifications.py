"""
storage/notifications.py

Notification store for MedBook.

The store is independent of the document store: the list lives behind a
``NotificationBackend`` and is kept newest first.  Several stores (one per
UI session) may share one backend, so the store keeps no cached copy: every
read loads the list, and every mutation is load, change, save under the
backend's lock.

Cap policy
----------
The list is capped at ``NOTIFICATION_CAP`` (50) entries in total, across all
recipients.  ``add`` prepends and silently drops whatever falls off the end.

Unread count
------------
``unread_count`` is derived, never stored: unread entries whose recipient is
the uid of the current session.  Bind the store to an ``AuthSessionService``
with :meth:`NotificationStore.bind_session`; subscribers registered with
:meth:`NotificationStore.subscribe` receive the recomputed count whenever
the session changes or this store changes the list.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Protocol

from cryptography.fernet import InvalidToken
from pydantic import ValidationError

from storage.crypto import decrypt_json, encrypt_json
from storage.config import NOTIFICATION_CAP
from storage.models import Notification, NotificationType, Session

logger = logging.getLogger(__name__)

CountListener = Callable[[int], None]
Mutation = Callable[[list[Notification]], list[Notification]]


# ---------------------------------------------------------------------------
# Persistence port
# ---------------------------------------------------------------------------


class NotificationBackend(Protocol):
    lock: threading.Lock

    def load(self) -> list[dict[str, Any]]: ...

    def save(self, items: list[dict[str, Any]]) -> None: ...


class MemoryBackend:
    """Keeps the serialized list in memory.  Survives store re-creation only."""

    def __init__(self, items: list[dict[str, Any]] | None = None):
        self.items: list[dict[str, Any]] = list(items or [])
        self.lock = threading.Lock()

    def load(self) -> list[dict[str, Any]]:
        return [dict(i) for i in self.items]

    def save(self, items: list[dict[str, Any]]) -> None:
        self.items = [dict(i) for i in items]


_path_locks: dict[Path, threading.Lock] = {}
_path_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    """One lock per file, shared by every backend pointing at it."""
    key = Path(path).resolve()
    with _path_locks_guard:
        return _path_locks.setdefault(key, threading.Lock())


def _atomic_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f"{path.name}.{os.getpid()}.tmp")
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(path)


class JsonFileBackend:
    """Plain JSON file, written atomically."""

    def __init__(self, path: Path):
        self.path = path
        self.lock = _lock_for(path)

    def _decode(self, text: str) -> Any:
        return json.loads(text)

    def _encode(self, items: list[dict[str, Any]]) -> str:
        return json.dumps(items, indent=2, ensure_ascii=False, default=str)

    def load(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            raw = self._decode(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError, InvalidToken) as exc:
            logger.error("Failed to load notifications from %s: %s", self.path, exc)
            return []
        if not isinstance(raw, list):
            logger.error("Notifications file %s does not hold a list, ignoring it", self.path)
            return []
        return raw

    def save(self, items: list[dict[str, Any]]) -> None:
        try:
            _atomic_write_text(self.path, self._encode(items))
        except OSError:
            logger.error("Failed to save notifications to %s", self.path)
            raise


class EncryptedJsonFileBackend(JsonFileBackend):
    """Same file layout, but the content is a single Fernet token."""

    def __init__(self, path: Path, key: str):
        super().__init__(path)
        self._key = key

    def _decode(self, text: str) -> Any:
        return decrypt_json(text.strip(), self._key)

    def _encode(self, items: list[dict[str, Any]]) -> str:
        return encrypt_json(items, self._key)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class NotificationStore:
    def __init__(self, backend: NotificationBackend):
        self._backend = backend
        self._current_uid: str | None = None
        self._listeners: list[CountListener] = []
        self._unbind: Callable[[], None] | None = None

    def _load(self) -> list[Notification]:
        items: list[Notification] = []
        for raw in self._backend.load():
            try:
                items.append(Notification(**raw))
            except (TypeError, ValidationError) as exc:
                logger.warning("Skipping malformed stored notification: %s", exc)
        return items[:NOTIFICATION_CAP]

    def _update(self, mutate: Mutation) -> list[Notification]:
        """Load the latest list, apply *mutate*, save; one writer per backend at a time."""
        with self._backend.lock:
            items = mutate(self._load())[:NOTIFICATION_CAP]
            self._backend.save([n.model_dump(mode="json") for n in items])
        self._emit(items)
        return items

    # -------------------------
    # Session binding / derived count
    # -------------------------
    def bind_session(self, auth) -> None:
        """Track the current session of *auth* for ``unread_count``."""
        if self._unbind is not None:
            self._unbind()
        self._unbind = auth.subscribe(self._on_session)

    def _on_session(self, session: Session | None) -> None:
        self._current_uid = session.uid if session else None
        self._emit()

    def _count_unread(self, items: list[Notification]) -> int:
        if self._current_uid is None:
            return 0
        return sum(1 for n in items if n.recipient_id == self._current_uid and not n.read)

    @property
    def unread_count(self) -> int:
        if self._current_uid is None:
            return 0
        return self._count_unread(self._load())

    def subscribe(self, callback: CountListener) -> Callable[[], None]:
        """Call *callback(unread_count)* now and whenever it may have changed."""
        self._listeners.append(callback)
        callback(self.unread_count)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    def _emit(self, items: list[Notification] | None = None) -> None:
        if not self._listeners:
            return
        count = self.unread_count if items is None else self._count_unread(items)
        for listener in list(self._listeners):
            listener(count)

    def close(self) -> None:
        if self._unbind is not None:
            self._unbind()
            self._unbind = None
        self._listeners.clear()

    # -------------------------
    # Operations
    # -------------------------
    @property
    def notifications(self) -> list[Notification]:
        return self._load()

    async def add(
        self,
        recipient_id: str,
        message: str,
        type: NotificationType | str = NotificationType.info,
        link: str | None = None,
    ) -> Notification:
        notification = Notification(
            recipient_id=recipient_id,
            message=message,
            type=type,
            link=link,
        )
        self._update(lambda items: [notification, *items])
        logger.debug("Notification %s queued for recipient=%s", notification.id, recipient_id)
        return notification

    async def mark_read(self, notification_id: str) -> None:
        self._update(
            lambda items: [
                n.model_copy(update={"read": True}) if n.id == notification_id else n
                for n in items
            ]
        )

    async def mark_all_read(self, recipient_id: str) -> None:
        self._update(
            lambda items: [
                n.model_copy(update={"read": True}) if n.recipient_id == recipient_id else n
                for n in items
            ]
        )

    async def clear(self, recipient_id: str) -> None:
        self._update(lambda items: [n for n in items if n.recipient_id != recipient_id])

    async def list_for(self, recipient_id: str) -> list[Notification]:
        """The recipient's notifications, newest first."""
        mine = [n for n in self._load() if n.recipient_id == recipient_id]
        return sorted(mine, key=lambda n: n.timestamp, reverse=True)
