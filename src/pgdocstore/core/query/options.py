"""Query options: sort, projection and pagination."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pgdocstore.core.exceptions import InvalidQueryError

ASCENDING = 1
DESCENDING = -1


def _non_negative_int(name: str, value: Any) -> int | None:
    """Validate limit/skip. Negative values are ignored, not rejected."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidQueryError(f"{name} must be an integer")
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        value = int(value)
    if not isinstance(value, int):
        raise InvalidQueryError(f"{name} must be an integer")
    return value if value >= 0 else None


@dataclass
class QueryOptions:
    """Options for a find.

    Attributes:
        sort: Ordered mapping of field to direction (1 ascending, anything
            else descending). None means the default sort applies.
        fields: Field names to return in addition to ``_id``. None or an
            empty list returns every column.
        limit: Maximum number of rows.
        skip: Number of rows to skip.
        page: Page number, only reported in metadata.
    """

    sort: dict[str, Any] | None = None
    fields: list[str] | None = None
    limit: int | None = None
    skip: int | None = None
    page: int | None = None

    @classmethod
    def from_mapping(cls, options: "Mapping[str, Any] | QueryOptions | None") -> "QueryOptions":
        """Build options from a caller mapping such as ``{"sort": {"title": 1}}``."""
        if options is None:
            return cls()
        if isinstance(options, QueryOptions):
            return options

        sort = options.get("sort")
        if sort is not None and not isinstance(sort, Mapping):
            raise InvalidQueryError("sort must be a mapping of field to direction")

        return cls(
            sort=dict(sort) if sort else None,
            fields=cls._parse_fields(options.get("fields")),
            limit=_non_negative_int("limit", options.get("limit")),
            skip=_non_negative_int("skip", options.get("skip")),
            page=_non_negative_int("page", options.get("page")),
        )

    @staticmethod
    def _parse_fields(fields: Any) -> list[str] | None:
        if not fields:
            return None
        if isinstance(fields, str):
            return [fields]
        if isinstance(fields, Mapping):
            return list(fields.keys())
        if isinstance(fields, Sequence):
            return list(fields)
        raise InvalidQueryError("fields must be a mapping or a list of field names")

    def to_dict(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in (
                ("sort", self.sort),
                ("fields", self.fields),
                ("limit", self.limit),
                ("skip", self.skip),
                ("page", self.page),
            )
            if value is not None
        }
