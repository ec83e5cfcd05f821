"""Filter condition nodes.

Each supported operator is its own node type. ``parse_condition`` turns a
raw filter entry into a node; the compiler dispatches on the node type.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Mapping

from pgdocstore.core.exceptions import UnsupportedOperatorError


class Operator(str, Enum):
    """Filter operators, written with or without the leading '$'."""

    EQ = "eq"
    NE = "ne"
    IN = "in"
    CONTAINS_ANY = "containsAny"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    REGEX = "regex"

    @classmethod
    def from_key(cls, key: Any) -> "Operator | None":
        if not isinstance(key, str):
            return None
        try:
            return cls(key[1:] if key.startswith("$") else key)
        except ValueError:
            return None


@dataclass(frozen=True)
class Condition:
    """Base class for all condition nodes."""

    field: str
    value: Any
    operator: ClassVar[Operator]


@dataclass(frozen=True)
class Eq(Condition):
    operator: ClassVar[Operator] = Operator.EQ


@dataclass(frozen=True)
class Ne(Condition):
    operator: ClassVar[Operator] = Operator.NE


@dataclass(frozen=True)
class In(Condition):
    operator: ClassVar[Operator] = Operator.IN


@dataclass(frozen=True)
class ContainsAny(Condition):
    operator: ClassVar[Operator] = Operator.CONTAINS_ANY


@dataclass(frozen=True)
class Lt(Condition):
    operator: ClassVar[Operator] = Operator.LT


@dataclass(frozen=True)
class Lte(Condition):
    operator: ClassVar[Operator] = Operator.LTE


@dataclass(frozen=True)
class Gt(Condition):
    operator: ClassVar[Operator] = Operator.GT


@dataclass(frozen=True)
class Gte(Condition):
    operator: ClassVar[Operator] = Operator.GTE


@dataclass(frozen=True)
class Regex(Condition):
    """Case-insensitive substring match; ``value`` is the pattern source."""

    operator: ClassVar[Operator] = Operator.REGEX


NODE_TYPES: dict[Operator, type[Condition]] = {
    Operator.EQ: Eq,
    Operator.NE: Ne,
    Operator.IN: In,
    Operator.CONTAINS_ANY: ContainsAny,
    Operator.LT: Lt,
    Operator.LTE: Lte,
    Operator.GT: Gt,
    Operator.GTE: Gte,
    Operator.REGEX: Regex,
}


def parse_condition(field: str, raw: Any) -> Condition:
    """Turn a raw filter entry into a condition node.

    Args:
        field: The filter key.
        raw: A bare scalar (equality), a compiled regular expression, or a
            mapping with exactly one operator key.

    Raises:
        UnsupportedOperatorError: If the mapping is empty, has several keys,
            or its key is not a known operator.
    """
    if isinstance(raw, re.Pattern):
        return Regex(field, raw.pattern)

    if isinstance(raw, Mapping):
        keys = list(raw.keys())
        if len(keys) != 1:
            raise UnsupportedOperatorError(
                ", ".join(map(str, keys)) if keys else "<empty>", field
            )
        operator = Operator.from_key(keys[0])
        if operator is None:
            raise UnsupportedOperatorError(str(keys[0]), field)
        value = raw[keys[0]]
        if operator is Operator.REGEX and isinstance(value, re.Pattern):
            value = value.pattern
        return NODE_TYPES[operator](field, value)

    return Eq(field, raw)


def parse_filter(query: Mapping[str, Any] | None) -> list[Condition]:
    """Parse every entry of a filter, keeping the filter's own order."""
    if not query:
        return []
    return [parse_condition(field, raw) for field, raw in query.items()]
