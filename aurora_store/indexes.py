"""Secondary index descriptors.

An :class:`Index` binds one secondary field to everything the store needs
to know about it: how to pick the value out of an item, how to encode it as
a bound parameter, what column type ``setup`` declares, and which filter
comparators queries may use on it. Writes, schema creation and filtering all
read from the same descriptor so the column set cannot drift between them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional

from aurora_store.errors import InvalidFilter, InvalidIdentifier, UnsupportedComparator
from aurora_store.filters import Clause, ClauseFactory, exact_filters, ord_filters
from aurora_store.sql import quote_identifier
from aurora_store.values import Codec, Parameter, parameter

# Column and parameter names used by the store itself
RESERVED_NAMES = frozenset({"key", "item", "cursor"})


@dataclass(frozen=True)
class Index:
    name: str
    pick: Callable[[Any], Any]
    codec: Codec
    column_type: str
    filters: Mapping[str, ClauseFactory] = field(default_factory=dict)

    @property
    def column(self) -> str:
        return quote_identifier(self.name)

    def encode(self, item: Any) -> Parameter:
        """Bound parameter carrying this index's value for ``item``."""
        return parameter(self.name, self.codec(self.pick(item)), self.codec.type_hint)

    def declaration(self) -> str:
        return f"{self.column} {self.column_type}"

    def filter_clauses(self, conditions: Mapping[str, Any]) -> List[Clause]:
        """Resolve ``{comparator: value}`` into clauses.

        Comparators whose value is ``None`` are treated as not given.
        """
        clauses: List[Clause] = []
        for comparator, value in conditions.items():
            if value is None:
                continue
            factory = self.filters.get(comparator)
            if factory is None:
                raise UnsupportedComparator(
                    f"field '{self.name}' does not support '{comparator}'",
                    {"field": self.name, "comparator": comparator, "supported": sorted(self.filters)},
                )
            clauses.append(factory(value))
        return clauses


def exact_index(
    name: str,
    pick: Callable[[Any], Any],
    codec: Codec,
    column_type: str,
    *,
    filter_codec: Optional[Codec] = None,
) -> Index:
    """Index filterable with ``eq``, ``ne`` and ``in``."""

    return Index(name, pick, codec, column_type, exact_filters(name, filter_codec or codec))


def ordered_index(
    name: str,
    pick: Callable[[Any], Any],
    codec: Codec,
    column_type: str,
    *,
    filter_codec: Optional[Codec] = None,
) -> Index:
    """Index filterable with ``eq``, ``lt``, ``lte``, ``gt`` and ``gte``."""

    return Index(name, pick, codec, column_type, ord_filters(name, filter_codec or codec))


def custom_index(
    name: str,
    pick: Callable[[Any], Any],
    codec: Codec,
    column_type: str,
    filters: Optional[Mapping[str, ClauseFactory]] = None,
) -> Index:
    """Index with a caller supplied comparator map (empty means write-only)."""

    return Index(name, pick, codec, column_type, dict(filters or {}))


class IndexSet:
    """Ordered, validated collection of the indexes declared for one table."""

    def __init__(self, indexes: Iterable[Index] = ()) -> None:
        self._indexes: Dict[str, Index] = {}
        for index in indexes:
            quote_identifier(index.name)
            if index.name in RESERVED_NAMES:
                raise InvalidIdentifier(
                    f"index name '{index.name}' is reserved", {"identifier": index.name}
                )
            if index.name in self._indexes:
                raise InvalidIdentifier(
                    f"index '{index.name}' declared twice", {"identifier": index.name}
                )
            self._indexes[index.name] = index

    def __iter__(self) -> Iterator[Index]:
        return iter(self._indexes.values())

    def __len__(self) -> int:
        return len(self._indexes)

    def __contains__(self, name: object) -> bool:
        return name in self._indexes

    def get(self, name: str) -> Optional[Index]:
        return self._indexes.get(name)

    @property
    def columns(self) -> List[str]:
        return [index.column for index in self]

    def parameters(self, item: Any) -> List[Parameter]:
        return [index.encode(item) for index in self]

    def declarations(self) -> List[str]:
        return [index.declaration() for index in self]

    def filter_clauses(self, query_filter: Mapping[str, Any]) -> List[Clause]:
        """Clauses for every declared field present in ``query_filter``.

        Fields without a declared index are ignored, as are ``None`` entries.
        """
        clauses: List[Clause] = []
        for name, conditions in query_filter.items():
            index = self._indexes.get(name)
            if index is None or conditions is None:
                continue
            if not isinstance(conditions, Mapping):
                raise InvalidFilter(
                    f"filter for '{name}' must map comparators to values",
                    {"field": name},
                )
            clauses.extend(index.filter_clauses(conditions))
        return clauses


__all__ = [
    "Index",
    "IndexSet",
    "RESERVED_NAMES",
    "custom_index",
    "exact_index",
    "ordered_index",
]
