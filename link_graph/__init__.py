"""Link Graph: graph links stored as documents of a collection."""

__version__ = "0.1.0"

from link_graph.core.models import ChangeContext, FieldMapping, InvalidSelector
from link_graph.core.adapter import CollectionGraph

__all__ = [
    "ChangeContext",
    "CollectionGraph",
    "FieldMapping",
    "InvalidSelector",
    "__version__",
]
