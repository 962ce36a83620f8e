"""
storage/document_store.py

In-memory, path-addressed document store for MedBook.

Documents live in a single process-scoped table keyed by collection, then by
id.  Paths are ``"<collection>/<id>"``.

Semantics
---------
- ``set_doc`` merges shallowly onto any existing document (fields accumulate).
- ``get_doc`` on an unknown id returns a ``DocResult`` with ``exists=False``.
- Malformed paths are logged and treated as not-found (``get_doc``) or as a
  no-op (``set_doc``, ``add_doc``, ``delete_doc``).
- Write listeners registered for a collection run synchronously after each
  write, before the awaiting caller resumes.  The auth service uses this to
  keep the active session in step with profile edits.

Nothing here is durable.  Each public operation awaits the optional artificial
latency first and then touches the tables under a lock, without yielding, so
one store can serve several UI sessions on separate threads.  Listeners run
after the lock is released.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import threading
from typing import Any, Callable
from uuid import uuid4

from storage.errors import InvalidPath

logger = logging.getLogger(__name__)

WriteListener = Callable[[str, dict[str, Any]], None]


class DocResult:
    """Snapshot returned by ``get_doc`` (mirrors a document snapshot)."""

    __slots__ = ("id", "exists", "_data")

    def __init__(self, doc_id: str | None, data: dict[str, Any] | None):
        self.id = doc_id
        self.exists = data is not None
        self._data = copy.deepcopy(data) if data is not None else None

    def data(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._data) if self._data is not None else None

    def __repr__(self) -> str:
        return f"DocResult(id={self.id!r}, exists={self.exists})"


def parse_path(path: str) -> tuple[str, str]:
    """
    Split ``"<collection>/<id>"`` into its two segments.

    Raises:
        InvalidPath: If *path* has no id segment, an empty segment, or
                     more than two segments.
    """
    parts = (path or "").split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise InvalidPath(f"Malformed document path '{path}'.")
    return parts[0], parts[1]


class DocumentStore:
    def __init__(self, latency_ms: int = 0):
        self._tables: dict[str, dict[str, dict[str, Any]]] = {}
        self._listeners: dict[str, list[WriteListener]] = {}
        self._latency = latency_ms / 1000.0
        self._lock = threading.Lock()

    async def _delay(self) -> None:
        if self._latency:
            await asyncio.sleep(self._latency)

    # -------------------------
    # Listeners
    # -------------------------
    def add_write_listener(self, collection: str, listener: WriteListener) -> Callable[[], None]:
        """Register *listener(doc_id, merged_data)* for writes to *collection*."""
        self._listeners.setdefault(collection, []).append(listener)

        def _remove() -> None:
            listeners = self._listeners.get(collection, [])
            if listener in listeners:
                listeners.remove(listener)

        return _remove

    def _fire(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        for listener in list(self._listeners.get(collection, [])):
            listener(doc_id, copy.deepcopy(data))

    # -------------------------
    # Document operations
    # -------------------------
    async def get_doc(self, path: str) -> DocResult:
        await self._delay()
        try:
            collection, doc_id = parse_path(path)
        except InvalidPath as exc:
            logger.warning("get_doc: %s", exc)
            return DocResult(None, None)

        with self._lock:
            result = DocResult(doc_id, self._tables.get(collection, {}).get(doc_id))
        if not result.exists:
            logger.debug("Document not found at %s", path)
        return result

    async def set_doc(self, path: str, data: dict[str, Any]) -> None:
        await self._delay()
        try:
            collection, doc_id = parse_path(path)
        except InvalidPath as exc:
            logger.warning("set_doc ignored: %s", exc)
            return

        with self._lock:
            table = self._tables.setdefault(collection, {})
            merged = {**table.get(doc_id, {}), **copy.deepcopy(data)}
            table[doc_id] = merged
            snapshot = copy.deepcopy(merged)
        logger.debug("Document set at %s (%d fields)", path, len(snapshot))
        self._fire(collection, doc_id, snapshot)

    async def add_doc(self, collection: str, data: dict[str, Any]) -> DocResult:
        """
        Store *data* under a freshly generated id and return its snapshot.

        A malformed collection name is logged and nothing is stored; the
        returned snapshot has ``exists=False``.
        """
        await self._delay()
        if not collection or "/" in collection:
            logger.warning("add_doc ignored: Malformed collection name '%s'.", collection)
            return DocResult(None, None)

        doc_id = str(uuid4())
        with self._lock:
            table = self._tables.setdefault(collection, {})
            table[doc_id] = copy.deepcopy(data)
            result = DocResult(doc_id, table[doc_id])
        logger.debug("Document added at %s/%s", collection, doc_id)
        self._fire(collection, doc_id, result.data())
        return result

    async def delete_doc(self, path: str) -> bool:
        """Hard-delete a document.  Returns ``False`` if nothing was removed."""
        await self._delay()
        try:
            collection, doc_id = parse_path(path)
        except InvalidPath as exc:
            logger.warning("delete_doc ignored: %s", exc)
            return False

        with self._lock:
            removed = self._tables.get(collection, {}).pop(doc_id, None)
        return removed is not None

    async def list_docs(self, collection: str) -> list[DocResult]:
        """All documents in *collection*, in insertion order."""
        await self._delay()
        with self._lock:
            table = self._tables.get(collection, {})
            return [DocResult(doc_id, data) for doc_id, data in table.items()]
