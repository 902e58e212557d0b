from link_graph.core.adapter import CollectionGraph
from link_graph.core.events import EventKind
from link_graph.core.graph import BaseGraph
from link_graph.core.models import ChangeContext, FieldMapping, InvalidSelector

__all__ = [
    "BaseGraph",
    "ChangeContext",
    "CollectionGraph",
    "EventKind",
    "FieldMapping",
    "InvalidSelector",
]
