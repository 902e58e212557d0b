"""In-memory document collection."""

from __future__ import annotations

import copy
from typing import Any, Dict, List

from link_graph.core.models import Document
from link_graph.storage.base import BaseCollection


class MemoryCollection(BaseCollection):
    """Document collection backed by an insertion-ordered dict.

    Suitable for development and testing. All data is lost when the
    process exits.
    """

    def __init__(self) -> None:
        super().__init__()
        self._documents: Dict[Any, Document] = {}

    def _all_documents(self) -> List[Document]:
        return [copy.deepcopy(d) for d in self._documents.values()]

    def _store(self, document: Document) -> None:
        if document["_id"] in self._documents:
            raise KeyError(f"Duplicate _id '{document['_id']}'")
        self._documents[document["_id"]] = copy.deepcopy(document)

    def _replace(self, document: Document) -> None:
        self._documents[document["_id"]] = copy.deepcopy(document)

    def _delete(self, document_id: Any) -> None:
        self._documents.pop(document_id, None)

    def __len__(self) -> int:
        return len(self._documents)
