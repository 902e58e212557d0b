"""Core data models for Link Graph."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

# A link is a plain dict keyed by logical field names.
Link = Dict[str, Any]

# A document is a plain dict keyed by physical field names.
Document = Dict[str, Any]


class InvalidSelector(ValueError):
    """Raised when a selector is neither a scalar identifier nor a mapping."""


@dataclass(frozen=True)
class FieldMapping:
    """Ordered pairing of logical link fields with physical document fields.

    Attributes:
        pairs: ``(logical, physical)`` tuples in declaration order.

    Example::

        fields = FieldMapping.from_dict({"id": "_id", "source": "from", "target": "to"})
        fields.physical("source")  # "from"
    """

    pairs: Tuple[Tuple[str, str], ...]

    def __post_init__(self) -> None:
        if not self.pairs:
            raise ValueError("FieldMapping must not be empty")
        logical_seen: set[str] = set()
        physical_seen: set[str] = set()
        for logical, physical in self.pairs:
            if not logical or not physical:
                raise ValueError("FieldMapping field names must not be empty")
            if logical in logical_seen:
                raise ValueError(f"Logical field '{logical}' is mapped twice")
            if physical in physical_seen:
                raise ValueError(f"Physical field '{physical}' is mapped twice")
            logical_seen.add(logical)
            physical_seen.add(physical)

    @classmethod
    def from_dict(cls, fields: Mapping[str, str]) -> "FieldMapping":
        return cls(pairs=tuple((str(k), str(v)) for k, v in fields.items()))

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)

    def __contains__(self, logical: object) -> bool:
        return any(logical == name for name, _ in self.pairs)

    def physical(self, logical: str) -> Optional[str]:
        """Return the physical name of ``logical``, or None if unmapped."""
        for name, physical in self.pairs:
            if name == logical:
                return physical
        return None

    def to_dict(self) -> Dict[str, str]:
        return dict(self.pairs)


@dataclass(frozen=True)
class ChangeContext:
    """Metadata passed along with every change notification.

    Attributes:
        user_id: Identity of the actor responsible for the mutation, if known.
    """

    user_id: Optional[str] = None
