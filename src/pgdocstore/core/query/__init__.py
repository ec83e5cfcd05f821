"""Query compilation for document operations."""

from pgdocstore.core.query.compiler import CompiledStatement, QueryCompiler, compile_find, quote_identifier
from pgdocstore.core.query.conditions import Condition, Operator, parse_condition, parse_filter
from pgdocstore.core.query.options import ASCENDING, DESCENDING, QueryOptions

__all__ = [
    "ASCENDING",
    "CompiledStatement",
    "Condition",
    "DESCENDING",
    "Operator",
    "QueryCompiler",
    "QueryOptions",
    "compile_find",
    "parse_condition",
    "parse_filter",
    "quote_identifier",
]
