from datetime import date, datetime, timedelta, timezone

import pytest

from pgdocstore.core.exceptions import InvalidQueryError
from pgdocstore.core.query.values import (
    decode_json,
    encode_json,
    to_datetime_text,
    to_epoch_seconds,
    to_timestamp,
)


def test_to_timestamp_from_epoch_milliseconds():
    assert to_timestamp(0) == datetime(1970, 1, 1)
    assert to_timestamp(1500) == datetime(1970, 1, 1, 0, 0, 1, 500000)


def test_to_timestamp_from_iso_string_with_z():
    assert to_timestamp("2024-03-01T12:30:00Z") == datetime(2024, 3, 1, 12, 30)


def test_to_timestamp_converts_aware_to_naive_utc():
    aware = datetime(2024, 3, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    assert to_timestamp(aware) == datetime(2024, 3, 1, 12, 0)


def test_to_timestamp_from_date():
    assert to_timestamp(date(2011, 4, 26)) == datetime(2011, 4, 26)


def test_to_timestamp_rejects_garbage():
    with pytest.raises(InvalidQueryError):
        to_timestamp("not a date")
    with pytest.raises(InvalidQueryError):
        to_timestamp(True)


def test_to_timestamp_none():
    assert to_timestamp(None) is None


def test_to_epoch_seconds():
    assert to_epoch_seconds(1700000000000) == 1700000000.0
    assert to_epoch_seconds("1970-01-01T00:01:00") == 60.0


def test_to_datetime_text():
    assert to_datetime_text(datetime(2011, 4, 26, 9, 0)) == "2011-04-26T09:00:00"
    assert to_datetime_text("26 April 2011") == "26 April 2011"
    assert to_datetime_text(None) is None


def test_json_helpers():
    assert encode_json({"a": [1, 2]}) == '{"a": [1, 2]}'
    assert encode_json(None) is None
    assert decode_json('{"a": 1}') == {"a": 1}
    assert decode_json({"a": 1}) == {"a": 1}
    assert decode_json("not json") == "not json"
