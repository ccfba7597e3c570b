"""Column expressions and aggregates evaluated over dictionary rows.

Null is ``None``; it propagates through arithmetic and comparisons the way
SQL nulls do. Struct values are dictionaries.
"""

from __future__ import annotations

import math
import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, Mapping

Row = Mapping[str, Any]


class Expr(ABC):
    """An expression computing one value from a row."""

    @abstractmethod
    def evaluate(self, row: Row) -> Any:
        """Compute the value of this expression for ``row``."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Output column name of this expression."""

    def alias(self, name: str) -> Expr:
        return _Alias(self, name)

    def field(self, name: str) -> Expr:
        return _Field(self, name)

    def eq(self, other: Any) -> Expr:
        return _Binary(self, _as_expr(other), operator.eq, "=")

    def not_eq(self, other: Any) -> Expr:
        return _Binary(self, _as_expr(other), operator.ne, "!=")

    def gt(self, other: Any) -> Expr:
        return _Binary(self, _as_expr(other), operator.gt, ">")

    def gt_eq(self, other: Any) -> Expr:
        return _Binary(self, _as_expr(other), operator.ge, ">=")

    def lt(self, other: Any) -> Expr:
        return _Binary(self, _as_expr(other), operator.lt, "<")

    def lt_eq(self, other: Any) -> Expr:
        return _Binary(self, _as_expr(other), operator.le, "<=")

    def or_(self, other: Any) -> Expr:
        return _Or(self, _as_expr(other))

    def is_null(self) -> Expr:
        return _NullCheck(self, expect_null=True)

    def is_not_null(self) -> Expr:
        return _NullCheck(self, expect_null=False)

    def __or__(self, other: Any) -> Expr:
        return self.or_(other)

    def __add__(self, other: Any) -> Expr:
        return _Binary(self, _as_expr(other), operator.add, "+")

    def __radd__(self, other: Any) -> Expr:
        return _Binary(_as_expr(other), self, operator.add, "+")

    def __sub__(self, other: Any) -> Expr:
        return _Binary(self, _as_expr(other), operator.sub, "-")

    def __rsub__(self, other: Any) -> Expr:
        return _Binary(_as_expr(other), self, operator.sub, "-")

    def __mul__(self, other: Any) -> Expr:
        return _Binary(self, _as_expr(other), operator.mul, "*")

    def __rmul__(self, other: Any) -> Expr:
        return _Binary(_as_expr(other), self, operator.mul, "*")

    def __truediv__(self, other: Any) -> Expr:
        return _Binary(self, _as_expr(other), _divide, "/")

    def __rtruediv__(self, other: Any) -> Expr:
        return _Binary(_as_expr(other), self, _divide, "/")


def _as_expr(value: Any) -> Expr:
    return value if isinstance(value, Expr) else _Literal(value)


def _divide(left: Any, right: Any) -> Any:
    """Integer division truncates toward zero; float division follows IEEE 754."""
    if isinstance(left, int) and isinstance(right, int):
        if right == 0:
            raise ZeroDivisionError("integer division by zero")
        quotient = abs(left) // abs(right)
        return quotient if (left < 0) == (right < 0) else -quotient
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


@dataclass(frozen=True)
class _Column(Expr):
    column: str

    def evaluate(self, row: Row) -> Any:
        try:
            return row[self.column]
        except KeyError:
            raise KeyError(f"no column named {self.column!r}") from None

    @property
    def name(self) -> str:
        return self.column


@dataclass(frozen=True)
class _Literal(Expr):
    value: Any

    def evaluate(self, row: Row) -> Any:
        return self.value

    @property
    def name(self) -> str:
        return repr(self.value)


@dataclass(frozen=True)
class _Alias(Expr):
    inner: Expr
    alias_name: str

    def evaluate(self, row: Row) -> Any:
        return self.inner.evaluate(row)

    @property
    def name(self) -> str:
        return self.alias_name


@dataclass(frozen=True)
class _Field(Expr):
    base: Expr
    field_name: str

    def evaluate(self, row: Row) -> Any:
        struct = self.base.evaluate(row)
        if struct is None:
            return None
        if not isinstance(struct, Mapping):
            raise TypeError(f"{self.base.name} is not a struct")
        if self.field_name not in struct:
            raise KeyError(f"struct {self.base.name} has no field {self.field_name!r}")
        return struct[self.field_name]

    @property
    def name(self) -> str:
        return f"{self.base.name}[{self.field_name}]"


@dataclass(frozen=True)
class _Binary(Expr):
    left: Expr
    right: Expr
    function: Callable[[Any, Any], Any]
    symbol: str

    def evaluate(self, row: Row) -> Any:
        left = self.left.evaluate(row)
        right = self.right.evaluate(row)
        if left is None or right is None:
            return None
        return self.function(left, right)

    @property
    def name(self) -> str:
        return f"{self.left.name} {self.symbol} {self.right.name}"


@dataclass(frozen=True)
class _Or(Expr):
    left: Expr
    right: Expr

    def evaluate(self, row: Row) -> Any:
        left = self.left.evaluate(row)
        right = self.right.evaluate(row)
        if left is True or right is True:
            return True
        if left is None or right is None:
            return None
        return bool(left) or bool(right)

    @property
    def name(self) -> str:
        return f"{self.left.name} OR {self.right.name}"


@dataclass(frozen=True)
class _NullCheck(Expr):
    inner: Expr
    expect_null: bool

    def evaluate(self, row: Row) -> Any:
        return (self.inner.evaluate(row) is None) == self.expect_null

    @property
    def name(self) -> str:
        suffix = "IS NULL" if self.expect_null else "IS NOT NULL"
        return f"{self.inner.name} {suffix}"


@dataclass(frozen=True)
class _Case(Expr):
    condition: Expr
    then: Expr
    otherwise: Expr

    def evaluate(self, row: Row) -> Any:
        if self.condition.evaluate(row):
            return self.then.evaluate(row)
        return self.otherwise.evaluate(row)

    @property
    def name(self) -> str:
        return (
            f"CASE WHEN {self.condition.name} THEN {self.then.name} "
            f"ELSE {self.otherwise.name} END"
        )


@dataclass(frozen=True)
class _NamedStruct(Expr):
    fields: tuple[tuple[str, Expr], ...]

    def evaluate(self, row: Row) -> Any:
        return {key: value.evaluate(row) for key, value in self.fields}

    @property
    def name(self) -> str:
        inner = ", ".join(f"{key}: {value.name}" for key, value in self.fields)
        return f"named_struct({inner})"


@dataclass(frozen=True)
class When:
    """A conditional waiting for its fallback value."""

    condition: Expr
    value: Expr

    def otherwise(self, value: Any) -> Expr:
        return _Case(self.condition, self.value, _as_expr(value))


@dataclass(frozen=True)
class Aggregate:
    """Reduces the non-null values of an expression over a group of rows."""

    function: Callable[[list[Any]], Any]
    expr: Expr
    label: str

    @property
    def name(self) -> str:
        return self.label

    def evaluate(self, rows: Iterable[Row]) -> Any:
        values = [self.expr.evaluate(row) for row in rows]
        return self.function([value for value in values if value is not None])

    def alias(self, name: str) -> Aggregate:
        return replace(self, label=name)


def col(name: str) -> Expr:
    """Reference to the column ``name``."""
    return _Column(name)


def lit(value: Any) -> Expr:
    """A constant value."""
    return _Literal(value)


def when(condition: Expr, value: Any) -> When:
    """Start a conditional: ``value`` where ``condition`` holds."""
    if not isinstance(condition, Expr):
        raise TypeError("condition must be an expression")
    return When(condition, _as_expr(value))


def named_struct(*args: Any) -> Expr:
    """Build a struct from alternating field names and value expressions."""
    if not args or len(args) % 2:
        raise ValueError("named_struct requires a non-empty list of name/value pairs")
    fields: list[tuple[str, Expr]] = []
    for key, value in zip(args[::2], args[1::2]):
        if isinstance(key, _Literal):
            key = key.value
        if not isinstance(key, str):
            raise TypeError("named_struct field names must be string literals")
        if any(key == existing for existing, _ in fields):
            raise ValueError(f"duplicate field name {key!r} in named_struct")
        fields.append((key, _as_expr(value)))
    return _NamedStruct(tuple(fields))


def _sum(values: list[Any]) -> Any:
    if not values:
        return None
    total = values[0]
    for value in values[1:]:
        total = total + value
    return total


def sum_(expr: Expr) -> Aggregate:
    """Sum of the non-null values; null for an empty group."""
    return Aggregate(_sum, expr, f"sum({expr.name})")


def max_(expr: Expr) -> Aggregate:
    """Largest non-null value; null for an empty group."""
    return Aggregate(lambda values: max(values) if values else None, expr, f"max({expr.name})")


def min_(expr: Expr) -> Aggregate:
    """Smallest non-null value; null for an empty group."""
    return Aggregate(lambda values: min(values) if values else None, expr, f"min({expr.name})")


def count(expr: Expr) -> Aggregate:
    """Number of non-null values."""
    return Aggregate(len, expr, f"count({expr.name})")