"""Statement executors.

The store never talks to a database directly. It hands one request shaped
like a Data API ``ExecuteStatement`` call (``sql``, ``parameters``,
``resourceArn``, ``secretArn``, ``database``) to an executor and reads the
``records`` of the response. Retries, timeouts and credentials belong to the
executor; failures propagate to the caller untouched.
"""

from __future__ import annotations

import asyncio
import json
import re
import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

import boto3
import psycopg
from psycopg.types.json import Jsonb
from psycopg.types.string import TextLoader

from aurora_store.config import ExecutorKind, Settings
from aurora_store.logging import get_logger
from aurora_store.values import Parameter, from_field, to_field

logger = get_logger(__name__)


class StatementExecutor(Protocol):
    async def execute(self, request: Mapping[str, Any]) -> Mapping[str, Any]: ...


class DataApiExecutor:
    """Executes statements through the RDS Data API (``rds-data``)."""

    def __init__(
        self,
        client: Any = None,
        *,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ) -> None:
        if client is None:
            client_kwargs: Dict[str, Any] = {"service_name": "rds-data"}
            if region_name:
                client_kwargs["region_name"] = region_name
            if endpoint_url:
                client_kwargs["endpoint_url"] = endpoint_url
            client = boto3.client(**client_kwargs)
            logger.info("data_api_client_initialized", region=region_name, endpoint=endpoint_url)
        self.client = client

    async def execute(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        # boto3 is blocking; keep the event loop free while the call is in flight
        return await asyncio.to_thread(self.client.execute_statement, **request)


# :name placeholders, but not the ::type casts
_PLACEHOLDER = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")

_HINT_CONVERTERS: Dict[str, Callable[[Any], Any]] = {
    "DATE": date.fromisoformat,
    "TIME": time.fromisoformat,
    "TIMESTAMP": datetime.fromisoformat,
    "DECIMAL": Decimal,
    "UUID": uuid.UUID,
    "JSON": lambda text: Jsonb(json.loads(text)),
}


def to_psycopg_sql(sql: str) -> str:
    """Rewrite Data API ``:name`` placeholders into psycopg ``%(name)s`` form."""

    return _PLACEHOLDER.sub(r"%(\1)s", sql.replace("%", "%%"))


def bind_value(param: Parameter) -> Any:
    value = from_field(param["value"])
    hint = param.get("typeHint")
    if value is None or hint is None:
        return value
    return _HINT_CONVERTERS[hint](value)


class PostgresExecutor:
    """Executes statements against a plain Postgres server with psycopg.

    Each call opens its own autocommit connection and closes it afterwards,
    matching the stateless request model of the Data API.
    """

    def __init__(self, dsn: str) -> None:
        self.dsn = dsn

    async def execute(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        parameters = request.get("parameters") or []
        if parameters:
            sql = to_psycopg_sql(request["sql"])
            params: Optional[Dict[str, Any]] = {
                param["name"]: bind_value(param) for param in parameters
            }
        else:
            sql, params = request["sql"], None

        async with await psycopg.AsyncConnection.connect(self.dsn, autocommit=True) as conn:
            # item blobs go back to the store as their JSON text, like the Data API returns them
            conn.adapters.register_loader("json", TextLoader)
            conn.adapters.register_loader("jsonb", TextLoader)
            cur = await conn.execute(sql, params)
            rows = await cur.fetchall() if cur.description else []
            updated = cur.rowcount if cur.rowcount >= 0 else 0

        records: List[List[Dict[str, Any]]] = [[to_field(value) for value in row] for row in rows]
        return {"records": records, "numberOfRecordsUpdated": 0 if rows else updated}


def build_executor(settings: Settings) -> StatementExecutor:
    """Create the executor selected by ``settings.executor``."""

    if settings.executor == ExecutorKind.POSTGRES:
        return PostgresExecutor(settings.database_url)
    settings.require_data_api()
    return DataApiExecutor(region_name=settings.region, endpoint_url=settings.endpoint_url)


__all__ = [
    "DataApiExecutor",
    "PostgresExecutor",
    "StatementExecutor",
    "bind_value",
    "build_executor",
    "to_psycopg_sql",
]
