"""Value coercion for bound parameters.

asyncpg encodes parameters strictly by the type PostgreSQL infers for each
placeholder, so timestamps and JSON values are normalized here before binding.
"""

import json
from datetime import date, datetime, timezone
from typing import Any

from pgdocstore.core.exceptions import InvalidQueryError


def _parse_datetime(value: str) -> datetime:
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise InvalidQueryError(f"Cannot interpret '{value}' as a timestamp") from e


def to_timestamp(value: Any) -> datetime | None:
    """Coerce a value to a naive UTC datetime for a TIMESTAMP column.

    Numbers are epoch milliseconds. Strings must be ISO 8601.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidQueryError("Booleans cannot be used as timestamps")
    if isinstance(value, (int, float)):
        result = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        result = _parse_datetime(value)
    else:
        raise InvalidQueryError(f"Cannot interpret {type(value).__name__} as a timestamp")

    if result.tzinfo is not None:
        result = result.astimezone(timezone.utc).replace(tzinfo=None)
    return result


def to_epoch_seconds(value: Any) -> float | None:
    """Convert a value to epoch seconds for ``to_timestamp()``."""
    moment = to_timestamp(value)
    if moment is None:
        return None
    return moment.replace(tzinfo=timezone.utc).timestamp()


def to_datetime_text(value: Any) -> str | None:
    """String form of a DateTime field value, cast server-side."""
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return f"{value}"


def encode_json(value: Any) -> str | None:
    if value is None:
        return None
    return json.dumps(value, default=str)


def decode_json(value: Any) -> Any:
    """Decode a JSON column value returned as text; other values pass through."""
    if isinstance(value, (str, bytes)):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value
