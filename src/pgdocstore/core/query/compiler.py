"""Query compiler for document-style operations.

Compiles filters, query options, update documents and insert rows to
PostgreSQL statements with positional ``$n`` parameters. Identifiers are
always quoted; values are always bound, never written into the SQL text.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pgdocstore.core.exceptions import InvalidQueryError, UnsupportedOperatorError
from pgdocstore.core.query.conditions import (
    Condition,
    ContainsAny,
    Eq,
    Gt,
    Gte,
    In,
    Lt,
    Lte,
    Ne,
    Regex,
    parse_condition,
    parse_filter,
)
from pgdocstore.core.query.options import ASCENDING, QueryOptions
from pgdocstore.core.query.values import encode_json, to_datetime_text, to_epoch_seconds, to_timestamp
from pgdocstore.domain.entities import (
    INTERNAL_FIELDS,
    JSON_FIELD_TYPES,
    TIMESTAMP_INTERNAL_FIELDS,
    FieldSchema,
    FieldType,
    is_reference_key,
)

DEFAULT_SORT_FIELD = "_createdAt"
HISTORY_FIELD = "_history"

# Recognized update operators, with or without the leading '$'
SET_OPERATOR = "set"
INC_OPERATOR = "inc"


def quote_identifier(name: str) -> str:
    """Quote a table or column name.

    Raises:
        InvalidQueryError: If the name is empty or contains a NUL character.
    """
    if not isinstance(name, str) or not name:
        raise InvalidQueryError("Identifiers must be non-empty strings")
    if "\x00" in name:
        raise InvalidQueryError("Identifiers must not contain NUL characters")
    return '"' + name.replace('"', '""') + '"'


def strip_anchors(pattern: str) -> str:
    if pattern.startswith("^"):
        pattern = pattern[1:]
    if pattern.endswith("$") and not pattern.endswith("\\$"):
        pattern = pattern[:-1]
    return pattern


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so the text only matches literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass(frozen=True)
class CompiledStatement:
    """SQL text plus its positional parameters (``$1`` is ``params[0]``)."""

    sql: str
    params: tuple[Any, ...] = field(default_factory=tuple)


class QueryCompiler:
    """Compiles document operations to parameterized SQL."""

    def __init__(self, schema: FieldSchema | Mapping[str, Any] | None = None):
        self.schema = FieldSchema.from_mapping(schema)

    # Filters

    def compile_condition(self, condition: Condition, index: int) -> tuple[str, Any]:
        """Compile one condition to a fragment and its bound value.

        Operands compared against TIMESTAMP columns are coerced the same way
        as written values: internal timestamps bind a datetime, DateTime
        fields bind text cast server-side.

        Args:
            condition: The condition node.
            index: 1-based position of the parameter.

        Raises:
            UnsupportedOperatorError: If the node type has no fragment.
        """
        field = condition.field
        key = quote_identifier(field)

        if isinstance(condition, Regex):
            pattern = escape_like(strip_anchors(str(condition.value)))
            return f"{key} ILIKE ${index}", f"%{pattern}%"
        if isinstance(condition, (In, ContainsAny)):
            values = [self._filter_value(field, v) for v in self._list_value(condition.value)]
            return f"{key} = ANY({self._filter_placeholder(field, index, many=True)})", values

        param = self._filter_placeholder(field, index)
        value = self._filter_value(field, condition.value)

        if isinstance(condition, Eq):
            return f"{key} = {param}", value
        if isinstance(condition, Ne):
            return f"{key} <> {param}", value
        if isinstance(condition, Lt):
            return f"{key} < {param}", value
        if isinstance(condition, Lte):
            return f"{key} <= {param}", value
        if isinstance(condition, Gt):
            return f"{key} > {param}", value
        if isinstance(condition, Gte):
            return f"{key} >= {param}", value

        raise UnsupportedOperatorError(type(condition).__name__, field)

    def _is_datetime_field(self, column: str) -> bool:
        definition = self._definition(column)
        return definition is not None and definition.field_type is FieldType.DATETIME

    def _filter_placeholder(self, column: str, index: int, many: bool = False) -> str:
        if column in TIMESTAMP_INTERNAL_FIELDS:
            return f"${index}::timestamp[]" if many else f"${index}"
        if self._is_datetime_field(column):
            return f"${index}::text[]::timestamp[]" if many else f"${index}::text::timestamp"
        return f"${index}"

    def _filter_value(self, column: str, value: Any) -> Any:
        if column in TIMESTAMP_INTERNAL_FIELDS:
            return to_timestamp(value)
        if self._is_datetime_field(column):
            return to_datetime_text(value)
        return value

    @staticmethod
    def _list_value(value: Any) -> list[Any]:
        if isinstance(value, (list, tuple, set, frozenset)):
            return list(value)
        return [value]

    def compile_where(
        self, conditions: list[Condition], start: int = 1
    ) -> tuple[str, list[Any]]:
        """Join conditions with AND; parameters are numbered from ``start``."""
        if not conditions:
            return "", []

        fragments = []
        params = []
        for offset, condition in enumerate(conditions):
            fragment, value = self.compile_condition(condition, start + offset)
            fragments.append(fragment)
            params.append(value)
        return " WHERE " + " AND ".join(fragments), params

    def compile_equality_where(
        self, query: Mapping[str, Any] | None, start: int = 1
    ) -> tuple[str, list[Any]]:
        """WHERE clause for update and delete, equality only."""
        conditions = []
        for condition in parse_filter(query):
            if not isinstance(condition, Eq):
                raise UnsupportedOperatorError(condition.operator.value, condition.field)
            conditions.append(condition)
        return self.compile_where(conditions, start)

    # Find

    @staticmethod
    def default_sort(conditions: list[Condition]) -> dict[str, int]:
        """Ascending by every filter field, or by _createdAt for an empty filter."""
        if not conditions:
            return {DEFAULT_SORT_FIELD: ASCENDING}
        return {condition.field: ASCENDING for condition in conditions}

    def compile_order_by(self, sort: Mapping[str, Any]) -> str:
        clauses = [
            f"{quote_identifier(key)} {'ASC' if direction == ASCENDING else 'DESC'}"
            for key, direction in sort.items()
        ]
        return " ORDER BY " + ", ".join(clauses)

    @staticmethod
    def compile_projection(fields: list[str] | None) -> str:
        if not fields:
            return "*"
        columns = ["_id"] + [f for f in fields if f != "_id"]
        return ", ".join(quote_identifier(column) for column in columns)

    def compile_find(
        self,
        collection: str,
        query: Mapping[str, Any] | None = None,
        options: QueryOptions | Mapping[str, Any] | None = None,
    ) -> CompiledStatement:
        """Compile a SELECT for a filter and query options."""
        options = QueryOptions.from_mapping(options)
        conditions = parse_filter(query)

        where, params = self.compile_where(conditions)
        sort = options.sort or self.default_sort(conditions)

        sql = f"SELECT {self.compile_projection(options.fields)} FROM {quote_identifier(collection)}"
        sql += where
        sql += self.compile_order_by(sort)

        if options.limit is not None:
            params.append(options.limit)
            sql += f" LIMIT ${len(params)}"
        if options.skip is not None:
            params.append(options.skip)
            sql += f" OFFSET ${len(params)}"

        return CompiledStatement(sql, tuple(params))

    def compile_count(
        self, collection: str, query: Mapping[str, Any] | None = None
    ) -> CompiledStatement:
        """Compile a COUNT(*) over the rows matched by a filter."""
        where, params = self.compile_where(parse_filter(query))
        sql = f"SELECT COUNT(*) AS count FROM {quote_identifier(collection)}{where}"
        return CompiledStatement(sql, tuple(params))

    # Writes

    def _definition(self, column: str):
        if column in INTERNAL_FIELDS:
            return None
        return self.schema.get(column)

    def _placeholder(self, column: str, index: int) -> str:
        if self._is_datetime_field(column):
            return f"${index}::text::timestamp"
        return f"${index}"

    def _column_value(self, column: str, value: Any) -> Any:
        if column == HISTORY_FIELD:
            return encode_json(value)
        definition = self._definition(column)
        if definition is None:
            return value
        if definition.field_type in JSON_FIELD_TYPES:
            return encode_json(value)
        if definition.field_type is FieldType.DATETIME:
            return to_datetime_text(value)
        return value

    def compile_insert(self, collection: str, values: Mapping[str, Any]) -> CompiledStatement:
        """Compile an INSERT ... RETURNING * for one document.

        Internal timestamps must already be coerced. JSON columns (``_history``,
        Mixed, Object) are encoded here and DateTime fields are cast from text.

        Args:
            collection: Table name.
            values: Ordered column to value mapping, ``_id`` last.
        """
        if not values:
            raise InvalidQueryError("Nothing to insert")

        columns = list(values.keys())
        placeholders = [self._placeholder(column, i) for i, column in enumerate(columns, start=1)]
        column_list = ", ".join(quote_identifier(column) for column in columns)
        sql = (
            f"INSERT INTO {quote_identifier(collection)}({column_list}) "
            f"VALUES({', '.join(placeholders)}) RETURNING *"
        )
        params = tuple(self._column_value(column, value) for column, value in values.items())
        return CompiledStatement(sql, params)

    @staticmethod
    def _update_operator(key: Any) -> str:
        name = key[1:] if isinstance(key, str) and key.startswith("$") else key
        if name not in (SET_OPERATOR, INC_OPERATOR):
            raise UnsupportedOperatorError(str(key))
        return name

    def compile_update(
        self,
        collection: str,
        query: Mapping[str, Any] | None,
        update: Mapping[str, Any],
    ) -> CompiledStatement:
        """Compile an UPDATE ... RETURNING * from ``set``/``inc`` operators.

        When a field is both set and incremented, the set value is applied
        first: ``"k" = $a + $b``.
        """
        if not isinstance(update, Mapping):
            raise InvalidQueryError("update must be a mapping of operators")

        # target -> (set value present, set value, inc deltas)
        targets: dict[str, tuple[bool, Any, list[Any]]] = {}
        for key, entries in update.items():
            operator = self._update_operator(key)
            if not isinstance(entries, Mapping):
                raise InvalidQueryError(f"'{key}' must map fields to values")
            for target, value in entries.items():
                if is_reference_key(target) or target == "_id":
                    continue
                has_set, set_value, deltas = targets.get(target, (False, None, []))
                if operator == SET_OPERATOR:
                    targets[target] = (True, value, deltas)
                else:
                    targets[target] = (has_set, set_value, deltas + [value])

        if not targets:
            raise InvalidQueryError("Update has no fields to modify")

        assignments = []
        params: list[Any] = []
        for target, (has_set, set_value, deltas) in targets.items():
            key = quote_identifier(target)
            if has_set:
                params.append(self._set_value(target, set_value))
                base = self._set_expression(target, len(params))
            else:
                base = key
            for delta in deltas:
                params.append(delta)
                base += f" + ${len(params)}"
            assignments.append(f"{key} = {base}")

        where, where_params = self.compile_equality_where(query, start=len(params) + 1)
        params.extend(where_params)

        sql = (
            f"UPDATE {quote_identifier(collection)} SET {', '.join(assignments)}"
            f"{where} RETURNING *"
        )
        return CompiledStatement(sql, tuple(params))

    def _set_expression(self, target: str, index: int) -> str:
        if target in TIMESTAMP_INTERNAL_FIELDS:
            return f"to_timestamp(${index})"
        return self._placeholder(target, index)

    def _set_value(self, target: str, value: Any) -> Any:
        if target in TIMESTAMP_INTERNAL_FIELDS:
            return to_epoch_seconds(value)
        return self._column_value(target, value)

    def compile_delete(
        self, collection: str, query: Mapping[str, Any] | None = None
    ) -> CompiledStatement:
        """Compile a DELETE ... RETURNING * with an equality filter."""
        where, params = self.compile_equality_where(query)
        sql = f"DELETE FROM {quote_identifier(collection)}{where} RETURNING *"
        return CompiledStatement(sql, tuple(params))


def compile_find(
    collection: str,
    query: Mapping[str, Any] | None = None,
    options: QueryOptions | Mapping[str, Any] | None = None,
    schema: FieldSchema | Mapping[str, Any] | None = None,
) -> CompiledStatement:
    """Convenience function to compile a find without keeping a compiler."""
    return QueryCompiler(schema).compile_find(collection, query, options)


__all__ = [
    "CompiledStatement",
    "QueryCompiler",
    "compile_find",
    "parse_condition",
    "quote_identifier",
]
