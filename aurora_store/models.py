from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Protocol, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

I = TypeVar("I")


class Query(BaseModel):
    """Keyset-paginated scan request.

    ``filter`` maps a field name to ``{comparator: value}``. Fields that have
    no declared index are ignored by the store, whatever their value, and a
    ``None`` filter or field entry adds no condition.
    """

    cursor: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1)
    filter: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @field_validator("filter", mode="before")
    @classmethod
    def _default_filter(cls, value: Any) -> Any:
        return {} if value is None else value


@dataclass
class Edge(Generic[I]):
    cursor: str
    node: I


@dataclass
class QueryResult(Generic[I]):
    """One page of a scan.

    ``cursor`` is ``None`` when no further page exists, otherwise it is the
    key of the last item on this page.
    """

    cursor: Optional[str]
    items: List[I] = field(default_factory=list)
    edges: List[Edge[I]] = field(default_factory=list)


class ItemStore(Protocol[I]):
    """Storage-agnostic queryable item store."""

    async def get(self, key: str) -> Optional[I]: ...

    async def get_many(self, keys: Sequence[str]) -> List[Optional[I]]: ...

    async def create(self, item: I) -> None: ...

    async def update(self, item: I) -> None: ...

    async def put(self, item: I) -> None: ...

    async def find(self, query: Any) -> QueryResult[I]: ...

    async def setup(self) -> None: ...

    async def teardown(self) -> None: ...

    async def clear(self) -> None: ...


__all__ = ["Edge", "ItemStore", "Query", "QueryResult"]
