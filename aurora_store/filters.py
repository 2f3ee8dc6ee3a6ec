"""Filter clause factories.

Each factory is bound to one column and codec and turns a filter value into
a :class:`Clause`: a SQL fragment plus the named parameters it references.
Parameter names are derived from the column and comparator (``age__gt``,
``name__in_0``) so a single statement can carry filters on many fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Sequence

from aurora_store.errors import InvalidFilter
from aurora_store.sql import quote_identifier
from aurora_store.values import Codec, Parameter, parameter

ClauseFactory = Callable[[Any], "Clause"]


@dataclass(frozen=True)
class Clause:
    where: str
    parameters: List[Parameter] = field(default_factory=list)


def combine(clauses: Iterable[Clause]) -> Clause:
    """AND clauses together, keeping their parameters in clause order."""

    clauses = list(clauses)
    params: List[Parameter] = []
    for clause in clauses:
        params.extend(clause.parameters)
    return Clause(" AND ".join(clause.where for clause in clauses), params)


def _comparison(operator: str, suffix: str) -> Callable[[str, Codec], ClauseFactory]:
    def factory(column: str, codec: Codec) -> ClauseFactory:
        quoted = quote_identifier(column)
        param_name = f"{column}__{suffix}"

        def build(value: Any) -> Clause:
            return Clause(
                f"{quoted} {operator} :{param_name}",
                [parameter(param_name, codec(value), codec.type_hint)],
            )

        return build

    factory.__name__ = f"{suffix}_filter"
    return factory


eq_filter = _comparison("=", "eq")
ne_filter = _comparison("<>", "ne")
gt_filter = _comparison(">", "gt")
gte_filter = _comparison(">=", "gte")
lt_filter = _comparison("<", "lt")
lte_filter = _comparison("<=", "lte")


def in_filter(column: str, codec: Codec) -> ClauseFactory:
    quoted = quote_identifier(column)

    def build(values: Sequence[Any]) -> Clause:
        if isinstance(values, (str, bytes)):
            raise InvalidFilter(
                f"'in' on '{column}' takes a sequence of values", {"field": column}
            )
        params = [
            parameter(f"{column}__in_{position}", codec(value), codec.type_hint)
            for position, value in enumerate(values)
        ]
        if not params:
            # IN () is not valid SQL; an empty set matches nothing
            return Clause("FALSE")
        placeholders = ", ".join(f":{param['name']}" for param in params)
        return Clause(f"{quoted} IN ({placeholders})", params)

    return build


def exact_filters(column: str, codec: Codec) -> Dict[str, ClauseFactory]:
    """Comparators for fields matched by identity."""

    return {
        "eq": eq_filter(column, codec),
        "ne": ne_filter(column, codec),
        "in": in_filter(column, codec),
    }


def ord_filters(column: str, codec: Codec) -> Dict[str, ClauseFactory]:
    """Comparators for fields with a meaningful ordering."""

    return {
        "eq": eq_filter(column, codec),
        "lt": lt_filter(column, codec),
        "lte": lte_filter(column, codec),
        "gt": gt_filter(column, codec),
        "gte": gte_filter(column, codec),
    }


__all__ = [
    "Clause",
    "ClauseFactory",
    "combine",
    "eq_filter",
    "exact_filters",
    "gt_filter",
    "gte_filter",
    "in_filter",
    "lt_filter",
    "lte_filter",
    "ne_filter",
    "ord_filters",
]
