"""Shared fakes for store tests."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional

COMMON_REQUEST = {
    "resourceArn": "cluster-123",
    "secretArn": "secret-123",
    "database": "product",
}

USER1 = {"id": "u1", "name": "Trevor", "age": 47, "createdAt": "yesterday"}
USER2 = {"id": "u2", "name": "Whatever", "age": 15, "createdAt": "today"}
USER3 = {"id": "u3", "name": "Eternal", "age": None, "createdAt": "now"}


def dumps(item: Any) -> str:
    return json.dumps(item, separators=(",", ":"))


def row(key: str, item: Any) -> List[Dict[str, Any]]:
    return [{"stringValue": key}, {"stringValue": json.dumps(item)}]


class RecordingExecutor:
    """Statement executor that records requests and replays canned responses."""

    def __init__(self) -> None:
        self.requests: List[Dict[str, Any]] = []
        self.responses: List[Mapping[str, Any]] = []
        self.error: Optional[Exception] = None

    def respond(self, *records: List[List[Dict[str, Any]]]) -> None:
        self.responses.extend({"records": rows} for rows in records)

    async def execute(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        self.requests.append(dict(request))
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return {"records": []}

    @property
    def last(self) -> Dict[str, Any]:
        return self.requests[-1]
