from __future__ import annotations

import re

from aurora_store.errors import InvalidIdentifier

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def quote_identifier(name: str) -> str:
    """Validate ``name`` and return it double-quoted for use in SQL text.

    Identifiers are interpolated into statements, so anything outside the
    plain ``[A-Za-z_][A-Za-z0-9_]*`` alphabet is rejected outright.
    """

    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise InvalidIdentifier("invalid SQL identifier", {"identifier": name})
    return f'"{name}"'


__all__ = ["quote_identifier"]
