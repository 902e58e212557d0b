from link_graph.storage.base import BaseCollection, Cursor
from link_graph.storage.memory import MemoryCollection
from link_graph.storage.sqlite import SQLiteCollection

__all__ = ["BaseCollection", "Cursor", "MemoryCollection", "SQLiteCollection"]
