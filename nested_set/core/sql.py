"""
SQL expression objects used by the query translator and the store.

Predicates and assignment expressions are plain value objects holding a SQL
fragment and its parameters. They are composed with ``&`` / ``|`` and
compiled by the store; nothing here touches a connection.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_identifier(name: str) -> bool:
    """Return True if name is a plain SQL identifier."""
    return bool(name) and bool(IDENTIFIER_RE.match(name))


def quote_identifier(name: str) -> str:
    """
    Quote a table or column name.

    Args:
        name: Plain identifier

    Returns:
        Double-quoted identifier

    Raises:
        ValueError: If name is not a plain identifier
    """
    if not is_identifier(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return f'"{name}"'


@dataclass(frozen=True)
class Raw:
    """Literal SQL fragment with positional parameters."""

    sql: str
    params: Tuple[Any, ...] = ()

    def compile(self) -> Tuple[str, Tuple[Any, ...]]:
        return self.sql, self.params


@dataclass(frozen=True)
class Predicate:
    """Boolean SQL condition."""

    sql: str
    params: Tuple[Any, ...] = ()

    def compile(self) -> Tuple[str, Tuple[Any, ...]]:
        return self.sql, self.params

    def __and__(self, other: "Predicate") -> "Predicate":
        return and_(self, other)

    def __or__(self, other: "Predicate") -> "Predicate":
        return or_(self, other)


ALWAYS = Predicate("1 = 1")


def _combine(operator: str, predicates: Sequence[Predicate]) -> Predicate:
    parts = [p for p in predicates if p is not None and p is not ALWAYS]
    if not parts:
        return ALWAYS
    if len(parts) == 1:
        return parts[0]
    sql = f" {operator} ".join(f"({p.sql})" for p in parts)
    params: Tuple[Any, ...] = tuple(v for p in parts for v in p.params)
    return Predicate(sql, params)


def and_(*predicates: Predicate) -> Predicate:
    """Conjunction of predicates; ``ALWAYS`` operands are dropped."""
    return _combine("AND", predicates)


def or_(*predicates: Predicate) -> Predicate:
    """Disjunction of predicates."""
    return _combine("OR", predicates)


def compare(column: str, operator: str, value: Any) -> Predicate:
    """
    Compare a column against a bound value.

    ``None`` compared with ``=`` or ``!=`` becomes ``IS NULL`` /
    ``IS NOT NULL``.

    Args:
        column: Column name
        operator: One of =, !=, <, <=, >, >=
        value: Value to bind

    Returns:
        Predicate
    """
    if operator not in ("=", "!=", "<", "<=", ">", ">="):
        raise ValueError(f"Unsupported operator: {operator}")
    col = quote_identifier(column)
    if value is None:
        if operator == "=":
            return Predicate(f"{col} IS NULL")
        if operator == "!=":
            return Predicate(f"{col} IS NOT NULL")
        raise ValueError(f"Cannot compare {column} {operator} NULL")
    return Predicate(f"{col} {operator} ?", (value,))


def eq(column: str, value: Any) -> Predicate:
    return compare(column, "=", value)


def ne(column: str, value: Any) -> Predicate:
    return compare(column, "!=", value)


def gt(column: str, value: Any) -> Predicate:
    return compare(column, ">", value)


def ge(column: str, value: Any) -> Predicate:
    return compare(column, ">=", value)


def lt(column: str, value: Any) -> Predicate:
    return compare(column, "<", value)


def le(column: str, value: Any) -> Predicate:
    return compare(column, "<=", value)


def is_null(column: str) -> Predicate:
    return Predicate(f"{quote_identifier(column)} IS NULL")


def between(column: str, low: int, high: int) -> Predicate:
    """Inclusive range test."""
    return Predicate(f"{quote_identifier(column)} BETWEEN ? AND ?", (low, high))


def column_difference(minuend: str, subtrahend: str, value: int) -> Predicate:
    """``minuend - subtrahend = value`` over two columns of the same row."""
    return Predicate(
        f"{quote_identifier(minuend)} - {quote_identifier(subtrahend)} = ?",
        (value,),
    )


def plus(column: str, amount: int) -> Raw:
    """Column value shifted by a bound amount."""
    return Raw(f"{quote_identifier(column)} + ?", (amount,))


def column_ref(column: str) -> Raw:
    return Raw(quote_identifier(column))


class Case:
    """``CASE WHEN ... THEN ... ELSE ... END`` assignment expression.

    Branch results may be plain values (bound as parameters) or ``Raw``
    fragments. The store evaluates the whole expression per row, so several
    ``Case`` assignments in one UPDATE all see the pre-update column values.
    """

    def __init__(self, default: Any = None) -> None:
        self.branches: List[Tuple[Predicate, Any]] = []
        self.default = default

    def when(self, condition: Predicate, result: Any) -> "Case":
        self.branches.append((condition, result))
        return self

    def compile(self) -> Tuple[str, Tuple[Any, ...]]:
        if not self.branches:
            raise ValueError("CASE expression needs at least one WHEN branch")
        sql_parts = ["CASE"]
        params: List[Any] = []
        for condition, result in self.branches:
            result_sql, result_params = compile_value(result)
            sql_parts.append(f"WHEN {condition.sql} THEN {result_sql}")
            params.extend(condition.params)
            params.extend(result_params)
        default_sql, default_params = compile_value(self.default)
        sql_parts.append(f"ELSE {default_sql} END")
        params.extend(default_params)
        return " ".join(sql_parts), tuple(params)


def compile_value(value: Any) -> Tuple[str, Tuple[Any, ...]]:
    """Compile an assignment value: expressions inline, plain values bound."""
    if isinstance(value, (Raw, Predicate, Case)):
        return value.compile()
    return "?", (value,)
