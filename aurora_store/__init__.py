from aurora_store.indexes import Index, IndexSet, custom_index, exact_index, ordered_index
from aurora_store.models import Edge, ItemStore, Query, QueryResult
from aurora_store.store import AuroraPostgresStore

__all__ = [
    "AuroraPostgresStore",
    "Edge",
    "Index",
    "IndexSet",
    "ItemStore",
    "Query",
    "QueryResult",
    "custom_index",
    "exact_index",
    "ordered_index",
]
