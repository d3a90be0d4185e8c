"""
PuppetDB query expressions.

Goal
Describe the small slice of the PuppetDB AST query language we need:
equality on a field, and boolean combinators over expressions.

Expressions render to the list form PuppetDB expects in the query parameter.
Example
["or", ["=", "name", "osfamily"], ["=", "name", "hardwaremodel"]]

build_facts_query is the fact query builder. It always asks for the mandatory
facts plus any custom fact names the caller configured.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol, Union

from puppetdb_inventory.core.errors import QueryBuildError
from puppetdb_inventory.core.types import MANDATORY_FACT_NAMES

FACT_NAME_FIELD = "name"

Field = Union[str, tuple[str, ...]]


class Expression(Protocol):
    """Anything that renders to a PuppetDB AST query."""

    def to_ast(self) -> list[Any]:
        """Return the AST list for this expression."""


def _field_ast(field: Field) -> Any:
    if isinstance(field, tuple):
        return list(field)
    return field


@dataclass(frozen=True)
class Equals:
    """
    Equality predicate.

    field is a field name, or a tuple path such as ("node", "active").
    value must be a non empty string, a number, or a bool.
    """

    field: Field
    value: Any

    def __post_init__(self) -> None:
        if not self.field:
            raise QueryBuildError("equality predicate requires a field")
        if isinstance(self.value, str):
            if not self.value:
                raise QueryBuildError(f"empty value for field {self.field!r}")
        elif not isinstance(self.value, (bool, int, float)):
            raise QueryBuildError(
                f"unsupported value type {type(self.value).__name__} for field {self.field!r}"
            )

    def to_ast(self) -> list[Any]:
        return ["=", _field_ast(self.field), self.value]


@dataclass(frozen=True)
class _Combinator:
    operands: tuple[Expression, ...]

    operator = ""

    def __post_init__(self) -> None:
        if not self.operands:
            raise QueryBuildError(f"{self.operator} requires at least one operand")
        for operand in self.operands:
            if not callable(getattr(operand, "to_ast", None)):
                raise QueryBuildError(f"{self.operator} operand is not an expression: {operand!r}")

    def predicates(self) -> frozenset[Expression]:
        """Return operands as an unordered set."""
        return frozenset(self.operands)

    def to_ast(self) -> list[Any]:
        return [self.operator, *(operand.to_ast() for operand in self.operands)]


@dataclass(frozen=True)
class Or(_Combinator):
    """Logical OR over one or more expressions."""

    operator = "or"


@dataclass(frozen=True)
class And(_Combinator):
    """Logical AND over one or more expressions."""

    operator = "and"


def or_(*operands: Expression) -> Or:
    return Or(operands=tuple(operands))


def and_(*operands: Expression) -> And:
    return And(operands=tuple(operands))


def to_json(expr: Expression) -> str:
    """Render an expression as the string sent in the query parameter."""
    return json.dumps(expr.to_ast())


def fact_names_to_query(custom_fact_names: Iterable[str] | None = None) -> frozenset[str]:
    """Union of mandatory and custom fact names."""
    names = set(MANDATORY_FACT_NAMES)
    if custom_fact_names is not None:
        names.update(custom_fact_names)
    return frozenset(names)


def build_facts_query(custom_fact_names: Iterable[str] | None = None) -> Or:
    """
    Build the fact query.

    One equality predicate per distinct fact name, combined with OR.
    Operand order follows set iteration and is not stable.
    """
    names = fact_names_to_query(custom_fact_names)
    return or_(*(Equals(FACT_NAME_FIELD, name) for name in names))
