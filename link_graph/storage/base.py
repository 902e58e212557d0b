"""Abstract base class for Link Graph document collections."""

from __future__ import annotations

import copy
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, TypeVar

from link_graph.core.models import Document
from link_graph.storage.matching import (
    apply_modifier,
    matches,
    slice_documents,
    sort_documents,
)

LOG = logging.getLogger(__name__)

T = TypeVar("T")

CompletionCallback = Callable[[Optional[BaseException], Any], None]
InsertHook = Callable[[Optional[str], Document], None]
UpdateHook = Callable[[Optional[str], Document, Document], None]
RemoveHook = Callable[[Optional[str], Document], None]


def _generate_id() -> str:
    return str(uuid.uuid4())


class Cursor:
    """Materialized result of a ``find``. Yields copies of the stored documents."""

    def __init__(self, documents: List[Document]) -> None:
        self._documents = documents

    def __iter__(self) -> Iterator[Document]:
        for document in self._documents:
            yield copy.deepcopy(document)

    def __len__(self) -> int:
        return len(self._documents)

    def count(self) -> int:
        return len(self._documents)

    def fetch(self) -> List[Document]:
        return list(self)

    def each(self, fn: Callable[[Document], None]) -> None:
        for document in self:
            fn(document)

    def map(self, fn: Callable[[Document], T]) -> List[T]:
        return [fn(document) for document in self]


class CollectionHooks:
    """Registry of after-mutation hooks, exposed as ``collection.after``.

    Hook signatures:
        insert: ``fn(user_id, doc)``
        update: ``fn(user_id, doc, previous)``
        remove: ``fn(user_id, doc)``
    """

    def __init__(self) -> None:
        self._hooks: Dict[str, List[Callable[..., None]]] = {
            "insert": [],
            "update": [],
            "remove": [],
        }

    def insert(self, fn: InsertHook) -> InsertHook:
        self._hooks["insert"].append(fn)
        return fn

    def update(self, fn: UpdateHook) -> UpdateHook:
        self._hooks["update"].append(fn)
        return fn

    def remove(self, fn: RemoveHook) -> RemoveHook:
        self._hooks["remove"].append(fn)
        return fn

    def count(self, kind: str) -> int:
        return len(self._hooks[kind])

    def fire(self, kind: str, *args: Any) -> None:
        # Each hook gets its own copies so one hook cannot alter what the next sees.
        for fn in list(self._hooks[kind]):
            fn(*copy.deepcopy(args))


class BaseCollection(ABC):
    """A collection of schemaless documents keyed by ``_id``.

    Subclasses provide the four storage primitives; selector matching,
    modifiers, cursors, hooks and the completion-callback convention live here.

    Every mutating method accepts an optional ``callback``. When given, it is
    called as ``callback(error, result)``; a failure is passed through
    unchanged as ``error`` and the method returns None. Without a callback
    the result is returned and failures raise.
    """

    def __init__(self) -> None:
        self.after = CollectionHooks()

    # ── Storage primitives ───────────────────────────────────────────

    @abstractmethod
    def _all_documents(self) -> List[Document]:
        """Return every stored document in insertion order."""

    @abstractmethod
    def _store(self, document: Document) -> None:
        """Persist a new document. Raise ``KeyError`` if its ``_id`` exists."""

    @abstractmethod
    def _replace(self, document: Document) -> None:
        """Overwrite the stored document with the same ``_id``."""

    @abstractmethod
    def _delete(self, document_id: Any) -> None:
        """Delete the document with ``document_id``."""

    # ── Public API ───────────────────────────────────────────────────

    def insert(
        self,
        document: Mapping[str, Any],
        callback: Optional[CompletionCallback] = None,
        user_id: Optional[str] = None,
    ) -> Any:
        """Insert a document and return its ``_id``.

        A given ``_id`` is kept as is; a string id is generated when absent.
        """

        def _insert(events: List[tuple]) -> Any:
            stored: Document = copy.deepcopy(dict(document))
            if stored.get("_id") is None:
                stored["_id"] = _generate_id()
            self._store(stored)
            LOG.debug("Inserted document %r", stored["_id"])
            events.append(("insert", user_id, stored))
            return stored["_id"]

        return self._complete(_insert, callback)

    def update(
        self,
        selector: Optional[Mapping[str, Any]],
        modifier: Mapping[str, Any],
        callback: Optional[CompletionCallback] = None,
        multi: bool = False,
        user_id: Optional[str] = None,
    ) -> Optional[int]:
        """Apply ``modifier`` to the first (or every, if ``multi``) match.

        Returns the number of affected documents.
        """

        def _update(events: List[tuple]) -> int:
            targets = self._matching(selector)
            if not multi:
                targets = targets[:1]
            for previous in targets:
                updated = apply_modifier(previous, modifier)
                self._replace(updated)
                events.append(("update", user_id, updated, previous))
            LOG.debug("Updated %d document(s)", len(targets))
            return len(targets)

        return self._complete(_update, callback)

    def remove(
        self,
        selector: Optional[Mapping[str, Any]],
        callback: Optional[CompletionCallback] = None,
        user_id: Optional[str] = None,
    ) -> Optional[int]:
        """Remove every matching document. Returns the number removed."""

        def _remove(events: List[tuple]) -> int:
            targets = self._matching(selector)
            for document in targets:
                self._delete(document["_id"])
                events.append(("remove", user_id, document))
            LOG.debug("Removed %d document(s)", len(targets))
            return len(targets)

        return self._complete(_remove, callback)

    def find(
        self,
        selector: Optional[Mapping[str, Any]] = None,
        sort: Optional[Mapping[str, int]] = None,
        skip: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Cursor:
        """Return a cursor over matching documents, sorted then sliced."""
        documents = sort_documents(self._matching(selector), sort)
        return Cursor(slice_documents(documents, skip, limit))

    def find_one(
        self, selector: Optional[Mapping[str, Any]] = None
    ) -> Optional[Document]:
        documents = self.find(selector, limit=1).fetch()
        return documents[0] if documents else None

    # ── Internals ────────────────────────────────────────────────────

    def _matching(self, selector: Optional[Mapping[str, Any]]) -> List[Document]:
        return [d for d in self._all_documents() if matches(d, selector)]

    def _complete(
        self,
        operation: Callable[[List[tuple]], T],
        callback: Optional[CompletionCallback],
    ) -> Optional[T]:
        # Hooks run only after the mutation is stored and the callback has
        # seen its outcome; a raising hook propagates to the caller.
        events: List[tuple] = []
        try:
            result = operation(events)
        except Exception as exc:
            if callback is None:
                self._fire(events)
                raise
            LOG.debug("Collection operation failed: %s", exc)
            callback(exc, None)
            self._fire(events)
            return None
        if callback is not None:
            callback(None, result)
        self._fire(events)
        return result

    def _fire(self, events: List[tuple]) -> None:
        for kind, *args in events:
            self.after.fire(kind, *args)
