from __future__ import annotations

import json
from typing import Any, Callable, Dict, Generic, Iterable, List, Mapping, Optional, Sequence, TypeVar, Union

import structlog
from pydantic import BaseModel

from aurora_store.config import Settings, get_settings
from aurora_store.errors import MalformedRecord
from aurora_store.executor import DataApiExecutor, StatementExecutor, build_executor
from aurora_store.filters import Clause, combine
from aurora_store.indexes import Index, IndexSet
from aurora_store.logging import get_logger
from aurora_store.models import Edge, Query, QueryResult
from aurora_store.sql import quote_identifier
from aurora_store.values import Parameter, WireField, parameter, string_value

I = TypeVar("I")

KEY_COLUMN = quote_identifier("key")
ITEM_COLUMN = quote_identifier("item")


class AuroraPostgresStore(Generic[I]):
    """Queryable item store persisted in one Aurora Postgres table.

    Each item is stored as a JSONB blob next to its string key, plus one
    column per declared :class:`~aurora_store.indexes.Index` so that scans
    can filter on secondary fields. Every operation is a single statement
    sent through the configured executor.
    """

    def __init__(
        self,
        *,
        table: str,
        database: str,
        resource_arn: Optional[str],
        secret_arn: Optional[str],
        get_item_key: Callable[[I], str],
        indexes: Union[IndexSet, Iterable[Index]] = (),
        executor: Optional[StatementExecutor] = None,
        key_length: int = 64,
        item_model: Optional[type[BaseModel]] = None,
    ) -> None:
        self.table = table
        self._table = quote_identifier(table)
        self.database = database
        self.resource_arn = resource_arn
        self.secret_arn = secret_arn
        self.get_item_key = get_item_key
        self.indexes = indexes if isinstance(indexes, IndexSet) else IndexSet(indexes)
        self.executor = executor if executor is not None else DataApiExecutor()
        self.key_length = key_length
        self.item_model = item_model
        self.logger = get_logger(__name__)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        *,
        table: str,
        get_item_key: Callable[[I], str],
        indexes: Union[IndexSet, Iterable[Index]] = (),
        executor: Optional[StatementExecutor] = None,
        item_model: Optional[type[BaseModel]] = None,
    ) -> "AuroraPostgresStore[I]":
        """Build a store from ``settings``, or from the environment when omitted."""
        if settings is None:
            settings = get_settings()
        return cls(
            table=table,
            database=settings.database,
            resource_arn=settings.resource_arn,
            secret_arn=settings.secret_arn,
            get_item_key=get_item_key,
            indexes=indexes,
            executor=executor if executor is not None else build_executor(settings),
            key_length=settings.key_length,
            item_model=item_model,
        )

    async def _execute(
        self,
        operation: str,
        sql: str,
        parameters: Optional[List[Parameter]] = None,
    ) -> List[List[WireField]]:
        request: Dict[str, Any] = {
            "sql": sql,
            "resourceArn": self.resource_arn,
            "secretArn": self.secret_arn,
            "database": self.database,
        }
        if parameters is not None:
            request["parameters"] = parameters
        with structlog.contextvars.bound_contextvars(table=self.table, operation=operation):
            response = await self.executor.execute(request)
            records = list(response.get("records") or [])
            self.logger.debug("statement_executed", rows=len(records))
        return records

    # item encoding
    def _dump_item(self, item: I) -> str:
        data = item.model_dump(mode="json") if self.item_model is not None else item
        return json.dumps(data, separators=(",", ":"))

    def _load_item(self, field: WireField) -> I:
        text = self._string_field(field, "item")
        data = json.loads(text)
        if self.item_model is not None:
            return self.item_model.model_validate(data)
        return data

    @staticmethod
    def _string_field(field: WireField, column: str) -> str:
        if "stringValue" not in field:
            raise MalformedRecord(
                f"expected a string value in column '{column}'",
                {"column": column, "kinds": sorted(field)},
            )
        return field["stringValue"]

    def _key_parameter(self, key: str, name: str = "key") -> Parameter:
        return parameter(name, string_value(key))

    def _write_parameters(self, item: I) -> List[Parameter]:
        return [
            self._key_parameter(self.get_item_key(item)),
            parameter("item", string_value(self._dump_item(item))),
            *self.indexes.parameters(item),
        ]

    # reads
    async def get(self, key: str) -> Optional[I]:
        records = await self._execute(
            "get",
            f"SELECT {ITEM_COLUMN} FROM {self._table} WHERE {KEY_COLUMN} = :key",
            [self._key_parameter(key)],
        )
        if not records:
            return None
        return self._load_item(records[0][0])

    async def get_many(self, keys: Sequence[str]) -> List[Optional[I]]:
        """Fetch several keys in one statement, aligned with ``keys``.

        Missing keys yield ``None`` at their position.
        """
        keys = list(keys)
        if not keys:
            return []
        params = [self._key_parameter(key, f"key_{position}") for position, key in enumerate(keys)]
        placeholders = ", ".join(f":{param['name']}" for param in params)
        records = await self._execute(
            "get_many",
            f"SELECT {KEY_COLUMN}, {ITEM_COLUMN} FROM {self._table} "
            f"WHERE {KEY_COLUMN} IN ({placeholders})",
            params,
        )
        # rows come back in no particular order
        found: Dict[str, I] = {}
        for record in records:
            found[self._string_field(record[0], "key")] = self._load_item(record[1])
        return [found.get(key) for key in keys]

    async def find(self, query: Union[Query, Mapping[str, Any], None] = None) -> QueryResult[I]:
        """Scan the table in key order, one page at a time.

        A ``limit`` fetches one extra row to learn whether another page
        exists; the extra row is never returned.
        """
        if not isinstance(query, Query):
            query = Query.model_validate(dict(query or {}))

        clauses: List[Clause] = []
        if query.cursor is not None:
            clauses.append(
                Clause(f"{KEY_COLUMN} > :cursor", [self._key_parameter(query.cursor, "cursor")])
            )
        clauses.extend(self.indexes.filter_clauses(query.filter))
        where = combine(clauses)

        sql = f"SELECT {KEY_COLUMN}, {ITEM_COLUMN} FROM {self._table}"
        if clauses:
            sql += f" WHERE {where.where}"
        sql += f" ORDER BY {KEY_COLUMN}"
        if query.limit is not None:
            sql += f" LIMIT {query.limit + 1}"

        records = await self._execute("find", sql, where.parameters)

        cursor: Optional[str] = None
        if query.limit is not None and len(records) > query.limit:
            records = records[: query.limit]
            cursor = self._string_field(records[-1][0], "key")

        edges = [
            Edge(self._string_field(record[0], "key"), self._load_item(record[1]))
            for record in records
        ]
        return QueryResult(cursor=cursor, items=[edge.node for edge in edges], edges=edges)

    # writes
    async def create(self, item: I) -> None:
        """Insert ``item``; an existing key fails with the executor's error."""
        columns = ", ".join([KEY_COLUMN, ITEM_COLUMN, *self.indexes.columns])
        values = ", ".join([":key", ":item::jsonb", *(f":{index.name}" for index in self.indexes)])
        await self._execute(
            "create",
            f"INSERT INTO {self._table} ({columns}) VALUES ({values})",
            self._write_parameters(item),
        )

    async def update(self, item: I) -> None:
        """Overwrite the row for ``item``'s key; no row is inserted if it is missing."""
        assignments = ", ".join(
            [f"{ITEM_COLUMN} = :item::jsonb"]
            + [f"{index.column} = :{index.name}" for index in self.indexes]
        )
        await self._execute(
            "update",
            f"UPDATE {self._table} SET {assignments} WHERE {KEY_COLUMN} = :key",
            self._write_parameters(item),
        )

    async def put(self, item: I) -> None:
        """Insert ``item`` or overwrite the existing row in one statement."""
        columns = ", ".join([KEY_COLUMN, ITEM_COLUMN, *self.indexes.columns])
        values = ", ".join([":key", ":item::jsonb", *(f":{index.name}" for index in self.indexes)])
        assignments = ", ".join(
            f"{column} = EXCLUDED.{column}" for column in [ITEM_COLUMN, *self.indexes.columns]
        )
        await self._execute(
            "put",
            f"INSERT INTO {self._table} ({columns}) VALUES ({values}) "
            f"ON CONFLICT ({KEY_COLUMN}) DO UPDATE SET {assignments}",
            self._write_parameters(item),
        )

    # schema
    async def setup(self) -> None:
        declarations = ", ".join(
            [
                f"{KEY_COLUMN} varchar({int(self.key_length)}) PRIMARY KEY",
                f"{ITEM_COLUMN} jsonb",
                *self.indexes.declarations(),
            ]
        )
        await self._execute("setup", f"CREATE TABLE {self._table} ({declarations})")
        self.logger.info("table_created", table=self.table, indexes=[index.name for index in self.indexes])

    async def teardown(self) -> None:
        await self._execute("teardown", f"DROP TABLE {self._table}")
        self.logger.info("table_dropped", table=self.table)

    async def clear(self) -> None:
        await self._execute("clear", f"DELETE FROM {self._table}")


__all__ = ["AuroraPostgresStore"]
