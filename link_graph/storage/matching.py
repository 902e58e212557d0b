"""Selector matching, modifier application and sorting for document collections.

Supported selector forms::

    {"from": "a"}                      # equality
    {"to": {"$exists": False}}         # presence
    {"from": {"$ne": "a"}}             # inequality
    {"_id": {"$in": ["x", "y"]}}       # membership

Supported modifiers are ``$set``, ``$unset`` or a whole replacement document.
"""

from __future__ import annotations

import copy
from numbers import Real
from typing import Any, List, Mapping, Optional

from link_graph.core.models import Document

_SELECTOR_OPERATORS = frozenset({"$exists", "$ne", "$in"})
_MODIFIER_OPERATORS = frozenset({"$set", "$unset"})


def _is_operator_clause(value: Any) -> bool:
    return (
        isinstance(value, Mapping)
        and bool(value)
        and all(isinstance(k, str) and k.startswith("$") for k in value)
    )


def _match_clause(document: Document, field: str, clause: Any) -> bool:
    present = field in document
    if not _is_operator_clause(clause):
        return present and document[field] == clause

    for op, operand in clause.items():
        if op not in _SELECTOR_OPERATORS:
            raise ValueError(f"Unsupported selector operator '{op}'")
        if op == "$exists":
            if present != bool(operand):
                return False
        elif op == "$ne":
            if present and document[field] == operand:
                return False
        elif op == "$in":
            if not present or document[field] not in operand:
                return False
    return True


def matches(document: Document, selector: Optional[Mapping[str, Any]]) -> bool:
    """Return True if ``document`` satisfies every clause of ``selector``.

    An empty or None selector matches every document.
    """
    if not selector:
        return True
    return all(
        _match_clause(document, field, clause) for field, clause in selector.items()
    )


def apply_modifier(document: Document, modifier: Mapping[str, Any]) -> Document:
    """Return a new document with ``modifier`` applied. ``_id`` is never changed.

    Raises:
        ValueError: If operators and plain fields are mixed, or an operator
            is unknown.
    """
    keys = list(modifier)
    operator_keys = [k for k in keys if k.startswith("$")]

    if not operator_keys:
        replaced = copy.deepcopy(dict(modifier))
        replaced.pop("_id", None)
        result: Document = {"_id": document["_id"]}
        result.update(replaced)
        return result

    if len(operator_keys) != len(keys):
        raise ValueError("Modifier cannot mix update operators and plain fields")

    result = copy.deepcopy(document)
    for op in operator_keys:
        if op not in _MODIFIER_OPERATORS:
            raise ValueError(f"Unsupported modifier operator '{op}'")
        for field, value in modifier[op].items():
            if field == "_id":
                raise ValueError("Modifier cannot change '_id'")
            if op == "$set":
                result[field] = copy.deepcopy(value)
            else:
                result.pop(field, None)
    return result


def _sort_key(document: Document, field: str) -> tuple:
    # Missing fields and None sort first. Numbers of any type share one
    # group; other values are grouped by type name so comparison never raises.
    if field not in document or document[field] is None:
        return (0, "", None)
    value = document[field]
    if isinstance(value, Real) and not isinstance(value, bool):
        return (1, "", value)
    return (1, type(value).__name__, value)


def sort_documents(
    documents: List[Document], sort: Optional[Mapping[str, int]]
) -> List[Document]:
    """Sort documents by ``sort`` (field -> 1 ascending / -1 descending).

    Earlier keys take precedence. The sort is stable.
    """
    if not sort:
        return list(documents)
    ordered = list(documents)
    # Apply keys from least to most significant; Python's sort is stable.
    for field, direction in reversed(list(sort.items())):
        ordered.sort(key=lambda d: _sort_key(d, field), reverse=direction < 0)
    return ordered


def slice_documents(
    documents: List[Document], skip: Optional[int] = None, limit: Optional[int] = None
) -> List[Document]:
    start = int(skip) if skip else 0
    if limit:
        return documents[start : start + int(limit)]
    return documents[start:]
