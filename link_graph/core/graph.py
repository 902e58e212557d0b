"""Abstract graph interface. Every link storage adapter implements it."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Mapping, Optional, TypeVar, Union

from link_graph.core.models import ChangeContext, Link

T = TypeVar("T")

Selector = Union[str, int, float, Mapping[str, Any]]
SelectOptions = Mapping[str, Any]
LinkCallback = Callable[[Optional[Link], Optional[Link], ChangeContext], None]


class BaseGraph(ABC):
    """Operations for controlling the links of a graph.

    Generic code should rely on completion callbacks rather than return
    values, since not every store can answer synchronously. Leaving any
    method unimplemented makes the subclass fail at construction with
    ``TypeError``.
    """

    @abstractmethod
    def insert(
        self,
        link: Link,
        callback: Optional[Callable[[Optional[BaseException], Any], None]] = None,
    ) -> Any:
        """Insert a new link. Returns (and passes to ``callback``) its id."""

    @abstractmethod
    def update(
        self,
        selector: Selector,
        modifier: Link,
        callback: Optional[Callable[[Optional[BaseException], Optional[int]], None]] = None,
    ) -> Optional[int]:
        """Update links matching ``selector``. Returns the affected count.

        A modifier field set to None is removed from the link.
        """

    @abstractmethod
    def remove(
        self,
        selector: Selector,
        callback: Optional[Callable[[Optional[BaseException]], None]] = None,
    ) -> None:
        """Remove links matching ``selector``."""

    @abstractmethod
    def query(self, selector: Selector) -> Any:
        """Build a store-native query from an id or a link selector."""

    @abstractmethod
    def options(self, options: Optional[SelectOptions]) -> Any:
        """Build store-native options from ``{sort, skip, limit}``."""

    @abstractmethod
    def fetch(
        self,
        selector: Selector,
        options: Optional[SelectOptions] = None,
        callback: Optional[Callable[[Optional[BaseException], List[Link]], None]] = None,
    ) -> List[Link]:
        """Return all matching links as a list."""

    @abstractmethod
    def each(
        self,
        selector: Selector,
        options: Optional[SelectOptions],
        callback: Callable[[Link], None],
    ) -> None:
        """Call ``callback`` once per matching link, sequentially."""

    @abstractmethod
    def map(
        self,
        selector: Selector,
        options: Optional[SelectOptions],
        callback: Callable[[Link], T],
    ) -> List[T]:
        """Map ``callback`` over all matching links."""

    @abstractmethod
    def on(self, event: str, callback: LinkCallback) -> None:
        """Subscribe to ``link``, ``unlink``, ``insert``, ``update`` or ``remove``.

        ``callback(old_link, new_link, context)``: ``old_link`` is None on
        insert, ``new_link`` is None on remove.
        """
