import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest

from aurora_store.errors import MalformedRecord
from aurora_store.values import (
    boolean_value,
    date_value,
    decimal_value,
    double_value,
    from_field,
    json_value,
    long_value,
    nullable,
    parameter,
    string_value,
    time_value,
    timestamp_value,
    to_field,
    uuid_value,
)


def test_primitive_codecs():
    assert string_value("abc") == {"stringValue": "abc"}
    assert long_value(47) == {"longValue": 47}
    assert double_value(1.5) == {"doubleValue": 1.5}
    assert boolean_value(False) == {"booleanValue": False}
    assert string_value.type_hint is None


def test_nullable_wraps_none_and_delegates_otherwise():
    codec = nullable(long_value)
    assert codec(None) == {"isNull": True}
    assert codec(15) == {"longValue": 15}


def test_nullable_keeps_type_hint():
    codec = nullable(date_value)
    assert codec.type_hint == "DATE"
    assert codec(date(2024, 2, 29)) == {"stringValue": "2024-02-29"}


def test_hinted_codecs():
    assert decimal_value(Decimal("12.50")) == {"stringValue": "12.50"}
    assert decimal_value.type_hint == "DECIMAL"
    ident = uuid.UUID("12345678-1234-5678-1234-567812345678")
    assert uuid_value(ident) == {"stringValue": "12345678-1234-5678-1234-567812345678"}
    assert json_value({"a": [1, 2]}) == {"stringValue": '{"a":[1,2]}'}
    assert json_value.type_hint == "JSON"


def test_timestamp_codec_normalises_to_utc():
    aware = datetime(2024, 1, 1, 12, 30, tzinfo=timezone(timedelta(hours=2)))
    assert timestamp_value(aware) == {"stringValue": "2024-01-01 10:30:00"}
    naive = datetime(2024, 1, 1, 8, 0, 0, 250000)
    assert timestamp_value(naive) == {"stringValue": "2024-01-01 08:00:00.250000"}
    assert timestamp_value.type_hint == "TIMESTAMP"


def test_time_codec():
    assert time_value(time(9, 5)) == {"stringValue": "09:05:00"}
    assert time_value.type_hint == "TIME"


def test_parameter_omits_missing_type_hint():
    assert parameter("key", {"stringValue": "u1"}) == {
        "name": "key",
        "value": {"stringValue": "u1"},
    }
    assert parameter("day", {"stringValue": "2024-01-01"}, "DATE") == {
        "name": "day",
        "value": {"stringValue": "2024-01-01"},
        "typeHint": "DATE",
    }


@pytest.mark.parametrize(
    "value,field",
    [
        (None, {"isNull": True}),
        (True, {"booleanValue": True}),
        (3, {"longValue": 3}),
        (2.5, {"doubleValue": 2.5}),
        ("x", {"stringValue": "x"}),
        (b"\x00\x01", {"blobValue": b"\x00\x01"}),
        (date(2020, 5, 1), {"stringValue": "2020-05-01"}),
        (time(13, 45, 30), {"stringValue": "13:45:30"}),
        ({"id": "u1"}, {"stringValue": '{"id":"u1"}'}),
    ],
)
def test_to_field(value, field):
    assert to_field(value) == field


def test_to_field_rejects_unknown_types():
    with pytest.raises(TypeError):
        to_field(object())


def test_from_field():
    assert from_field({"isNull": True}) is None
    assert from_field({"longValue": 7}) == 7
    assert from_field({"booleanValue": False}) is False
    with pytest.raises(MalformedRecord):
        from_field({"arrayValue": {"longValues": [1]}})
