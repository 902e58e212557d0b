"""Link adapter storing graph links as documents of a collection.

Example::

    from link_graph import CollectionGraph
    from link_graph.storage import MemoryCollection

    graph = CollectionGraph(
        MemoryCollection(), {"id": "_id", "source": "from", "target": "to"}
    )
    link_id = graph.insert({"source": "a", "target": "b"})  # stores {"from": "a", "to": "b"}
    graph.fetch(link_id)  # [{"id": link_id, "source": "a", "target": "b"}]
"""

from __future__ import annotations

import logging
from numbers import Real
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar, Union

from link_graph.core.events import hook_kinds
from link_graph.core.graph import BaseGraph, LinkCallback, Selector, SelectOptions
from link_graph.core.models import (
    ChangeContext,
    Document,
    FieldMapping,
    InvalidSelector,
    Link,
)
from link_graph.storage.base import BaseCollection, Cursor

LOG = logging.getLogger(__name__)

T = TypeVar("T")


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


class CollectionGraph(BaseGraph):
    """Graph whose links live in a document collection.

    Args:
        collection: Backing collection (``MemoryCollection``, ``SQLiteCollection``
            or any other ``BaseCollection``).
        fields: Logical link field -> physical document field. Fields missing
            from the mapping are dropped on write and never read back.

    Raises:
        ValueError: If ``collection`` is None or ``fields`` is empty.
    """

    def __init__(
        self,
        collection: BaseCollection,
        fields: Union[FieldMapping, Mapping[str, str]],
    ) -> None:
        if collection is None:
            raise ValueError("CollectionGraph requires a collection")
        if not fields:
            raise ValueError("CollectionGraph requires a non-empty field mapping")
        self.collection = collection
        self.fields = fields if isinstance(fields, FieldMapping) else FieldMapping.from_dict(fields)
        self._subscriptions: Dict[str, List[LinkCallback]] = {}

    # ── Write operations ─────────────────────────────────────────────

    def insert(
        self,
        link: Link,
        callback: Optional[Callable[[Optional[BaseException], Any], None]] = None,
        user_id: Optional[str] = None,
    ) -> Any:
        """Insert a link. Returns its id; also passed as ``callback(error, id)``."""
        document: Document = {}
        for logical, physical in self.fields:
            if logical in link:
                document[physical] = link[logical]
        LOG.debug("insert %r", document)
        return self.collection.insert(document, callback=callback, user_id=user_id)

    def update(
        self,
        selector: Selector,
        modifier: Link,
        callback: Optional[Callable[[Optional[BaseException], Optional[int]], None]] = None,
        user_id: Optional[str] = None,
    ) -> Optional[int]:
        """Update matching links. Fields set to None are unset; absent ones kept.

        Returns the affected count; also passed as ``callback(error, count)``.
        """
        query = self.query(selector)
        to_set: Document = {}
        to_unset: Dict[str, str] = {}
        for logical, physical in self.fields:
            if logical not in modifier:
                continue
            if modifier[logical] is None:
                to_unset[physical] = ""
            else:
                to_set[physical] = modifier[logical]

        physical_modifier: Dict[str, Any] = {}
        if to_set:
            physical_modifier["$set"] = to_set
        if to_unset:
            physical_modifier["$unset"] = to_unset
        if not physical_modifier:
            LOG.debug("update %r: nothing to change", query)
            if callback is not None:
                callback(None, 0)
            return 0

        LOG.debug("update %r with %r", query, physical_modifier)
        return self.collection.update(
            query, physical_modifier, callback=callback, multi=True, user_id=user_id
        )

    def remove(
        self,
        selector: Selector,
        callback: Optional[Callable[[Optional[BaseException]], None]] = None,
        user_id: Optional[str] = None,
    ) -> None:
        """Remove matching links. ``callback(error)`` is called when done."""
        query = self.query(selector)
        LOG.debug("remove %r", query)
        done = None
        if callback is not None:
            def done(error: Optional[BaseException], _count: Any) -> None:
                callback(error)
        self.collection.remove(query, callback=done, user_id=user_id)

    # ── Translation ──────────────────────────────────────────────────

    def query(self, selector: Selector) -> Dict[str, Any]:
        """Translate an id or a link selector into a collection selector.

        A field set to None in the selector matches links without that field.

        Raises:
            InvalidSelector: If ``selector`` is neither a str/number nor a
                mapping, or is a scalar and the mapping has no ``id`` field.
        """
        if isinstance(selector, str) or _is_number(selector):
            id_field = self.fields.physical("id")
            if id_field is None:
                raise InvalidSelector("Field mapping has no 'id' field for scalar selectors")
            return {id_field: selector}
        if isinstance(selector, Mapping):
            query: Dict[str, Any] = {}
            for logical, physical in self.fields:
                if logical not in selector:
                    continue
                if selector[logical] is None:
                    query[physical] = {"$exists": False}
                else:
                    query[physical] = selector[logical]
            return query
        raise InvalidSelector(
            f"Selector must be an id or a mapping, got {type(selector).__name__}"
        )

    def options(self, options: Optional[SelectOptions]) -> Dict[str, Any]:
        """Translate ``{sort, skip, limit}`` into collection find options.

        ``sort`` maps link fields to a truthy (ascending) or falsy
        (descending) flag. The input is never modified.
        """
        result: Dict[str, Any] = {}
        if not options:
            return result
        sort = options.get("sort")
        if sort:
            physical_sort: Dict[str, int] = {}
            for logical, ascending in sort.items():
                physical = self.fields.physical(logical)
                if physical is not None:
                    physical_sort[physical] = 1 if ascending else -1
            result["sort"] = physical_sort
        if _is_number(options.get("skip")):
            result["skip"] = options["skip"]
        if _is_number(options.get("limit")):
            result["limit"] = options["limit"]
        return result

    def _generate_link(self, document: Optional[Mapping[str, Any]]) -> Optional[Link]:
        if document is None:
            return None
        return {
            logical: document[physical]
            for logical, physical in self.fields
            if physical in document
        }

    # ── Read operations ──────────────────────────────────────────────

    def _find(self, selector: Selector, options: Optional[SelectOptions]) -> Cursor:
        query = self.query(selector)
        find_options = self.options(options)
        LOG.debug("find %r %r", query, find_options)
        return self.collection.find(query, **find_options)

    def fetch(
        self,
        selector: Selector,
        options: Optional[SelectOptions] = None,
        callback: Optional[Callable[[Optional[BaseException], List[Link]], None]] = None,
    ) -> List[Link]:
        """Return every matching link, in query order."""
        links = self._find(selector, options).map(self._generate_link)
        if callback is not None:
            callback(None, links)
        return links

    def each(
        self,
        selector: Selector,
        options: Optional[SelectOptions],
        callback: Callable[[Link], None],
    ) -> None:
        self._find(selector, options).each(
            lambda document: callback(self._generate_link(document))
        )

    def map(
        self,
        selector: Selector,
        options: Optional[SelectOptions],
        callback: Callable[[Link], T],
    ) -> List[T]:
        return self._find(selector, options).map(
            lambda document: callback(self._generate_link(document))
        )

    # ── Events ───────────────────────────────────────────────────────

    def on(self, event: str, callback: LinkCallback) -> None:
        """Subscribe ``callback(old_link, new_link, context)`` to ``event``.

        Events: ``insert``, ``update``, ``remove``, ``link`` (insert or
        update) and ``unlink`` (update or remove). Subscribing twice delivers
        every notification twice.

        Raises:
            ValueError: If ``event`` is unknown.
        """
        for kind in hook_kinds(event):
            if kind not in self._subscriptions:
                self._subscriptions[kind] = []
                self._attach(kind)
            self._subscriptions[kind].append(callback)
        LOG.debug("subscribed to %s", event)

    def subscriber_count(self, kind: str) -> int:
        """Number of callbacks receiving collection ``kind`` notifications."""
        return len(self._subscriptions.get(kind, []))

    def _attach(self, kind: str) -> None:
        # One collection hook per kind; it fans out to every subscriber.
        if kind == "insert":
            def on_insert(user_id: Optional[str], document: Document) -> None:
                self._dispatch(kind, None, self._generate_link(document), user_id)
            self.collection.after.insert(on_insert)
        elif kind == "update":
            def on_update(
                user_id: Optional[str], document: Document, previous: Document
            ) -> None:
                self._dispatch(
                    kind,
                    self._generate_link(previous),
                    self._generate_link(document),
                    user_id,
                )
            self.collection.after.update(on_update)
        elif kind == "remove":
            def on_remove(user_id: Optional[str], document: Document) -> None:
                self._dispatch(kind, self._generate_link(document), None, user_id)
            self.collection.after.remove(on_remove)

    def _dispatch(
        self,
        kind: str,
        old_link: Optional[Link],
        new_link: Optional[Link],
        user_id: Optional[str],
    ) -> None:
        context = ChangeContext(user_id=user_id)
        for callback in list(self._subscriptions[kind]):
            callback(
                dict(old_link) if old_link is not None else None,
                dict(new_link) if new_link is not None else None,
                context,
            )
