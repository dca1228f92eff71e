import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest

from tdsvalues.types import (
    decimal_type_info,
    decode_date,
    decode_datetimeoffset,
    decode_decimal,
    decode_json,
    decode_naive_datetime,
    decode_time,
    decode_uuid,
    encode_date,
    encode_datetime2,
    encode_datetimeoffset,
    encode_decimal,
    encode_json,
    encode_time,
    encode_uuid,
)
from tdsvalues.value import DecodeError, SqlType, TypeInfo, Value


def _decimal_round_trip(text):
    number = Decimal(text)
    info = decimal_type_info(number)
    return decode_decimal(Value(info, encode_decimal(number)))


@pytest.mark.parametrize(
    "text",
    ["123456789.987654321", "-1", "-12345678901234567890.012345678901234", "0.5678"],
)
def test_decimal_round_trip(text):
    assert _decimal_round_trip(text) == Decimal(text)


def test_decimal_wire_layout():
    encoded = encode_decimal(Decimal("1.5"))
    assert encoded == b"\x01" + (15).to_bytes(16, "little")
    assert decimal_type_info(Decimal("1.5")).scale == 1
    assert encode_decimal(Decimal("-1.5"))[0] == 0


def test_decimal_positive_exponent_expands_mantissa():
    number = Decimal("1E+2")
    assert decimal_type_info(number).scale == 0
    assert encode_decimal(number)[1:] == (100).to_bytes(16, "little")


def test_decimal_rejects_non_finite():
    with pytest.raises(ValueError):
        encode_decimal(Decimal("NaN"))


def test_money_decodes_exactly():
    high = (0x7FFFFFFF).to_bytes(4, "little", signed=True)
    low = (0xFFFFFFFF).to_bytes(4, "little")
    value = Value(TypeInfo.MONEY, high + low)
    assert decode_decimal(value) == Decimal("922337203685477.5807")


def test_smallmoney_decodes_exactly():
    value = Value(TypeInfo.MONEY, (-(2**31)).to_bytes(4, "little", signed=True))
    assert decode_decimal(value) == Decimal("-214748.3648")


def test_decimal_rejects_non_numeric_type():
    with pytest.raises(DecodeError):
        decode_decimal(Value(TypeInfo.INT, b"\x01\x00\x00\x00"))


def test_decimal_rejects_null():
    with pytest.raises(DecodeError):
        decode_decimal(Value.null(TypeInfo.DECIMAL))


def test_uuid_round_trip_and_nil():
    identifier = uuid.UUID("6F9619FF-8B86-D011-B42D-00C04FC964FF")
    encoded = encode_uuid(identifier)
    assert encoded[:4] == bytes.fromhex("FF19966F")
    assert decode_uuid(Value(TypeInfo.UNIQUEIDENTIFIER, encoded)) == identifier
    assert decode_uuid(Value(TypeInfo.UNIQUEIDENTIFIER, bytes(16))) == uuid.UUID(int=0)


def test_uuid_rejects_wrong_length():
    with pytest.raises(DecodeError):
        decode_uuid(Value(TypeInfo.UNIQUEIDENTIFIER, bytes(15)))


def test_json_from_varchar():
    assert decode_json(Value(TypeInfo.VARCHAR, b"123")) == 123


def test_json_round_trip():
    obj = {"a": [1, 2, {"b": None}], "c": "text"}
    assert decode_json(Value(TypeInfo.VARBINARY, encode_json(obj))) == obj


def test_json_invalid():
    with pytest.raises(DecodeError):
        decode_json(Value(TypeInfo.VARCHAR, b"{not json"))


def test_date_epoch_bytes():
    assert encode_date(date(1, 1, 1)) == b"\x00\x00\x00"
    assert decode_date(Value(TypeInfo.DATE, b"\x00\x00\x00")) == date(1, 1, 1)


@pytest.mark.parametrize("day", [date(1789, 7, 14), date(9999, 12, 31), date(2016, 10, 23)])
def test_date_round_trip(day):
    assert decode_date(Value(TypeInfo.DATE, encode_date(day))) == day


def test_date_invalid_offset():
    with pytest.raises(DecodeError):
        decode_date(Value(TypeInfo.DATE, b"\xff\xff\xff"))


def test_time_round_trip():
    moment = time(23, 59, 59, 999_900)
    assert decode_time(Value(TypeInfo.TIME, encode_time(moment))) == moment
    assert encode_time(time(0, 0)) == bytes(5)


def test_time_with_lower_scale():
    info = TypeInfo(SqlType.TIME, 5, 3)
    value = Value(info, (1234).to_bytes(3, "little"))
    assert decode_time(value) == time(0, 0, 1, 234_000)


def test_time_out_of_range():
    data = (86_400 * 10_000_000).to_bytes(5, "little")
    with pytest.raises(DecodeError):
        decode_time(Value(TypeInfo.TIME, data))


def test_datetime2_round_trip():
    moment = datetime(2016, 10, 23, 12, 45, 37, 123_456)
    encoded = encode_datetime2(moment)
    assert len(encoded) == 8
    assert decode_naive_datetime(Value(TypeInfo.DATETIME2, encoded)) == moment


def test_legacy_datetime_decodes():
    days = (date(1901, 5, 8) - date(1900, 1, 1)).days
    ticks = (23 * 3600 + 58 * 60 + 59) * 300
    data = days.to_bytes(4, "little", signed=True) + ticks.to_bytes(4, "little")
    value = Value(TypeInfo.DATETIME, data)
    assert decode_naive_datetime(value) == datetime(1901, 5, 8, 23, 58, 59)
    assert decode_datetimeoffset(value).utcoffset() == timedelta(0)


def test_smalldatetime_decodes():
    days = (date(2000, 1, 2) - date(1900, 1, 1)).days
    minutes = 10 * 60 + 30
    data = days.to_bytes(2, "little") + minutes.to_bytes(2, "little")
    value = Value(TypeInfo.DATETIME, data)
    assert decode_datetimeoffset(value) == datetime(2000, 1, 2, 10, 30, tzinfo=timezone.utc)


def test_datetimeoffset_round_trip_keeps_local_time():
    tz = timezone(timedelta(hours=2))
    moment = datetime(2016, 10, 23, 12, 45, 37, 123_456, tzinfo=tz)
    value = Value(TypeInfo.DATETIMEOFFSET, encode_datetimeoffset(moment))
    decoded = decode_datetimeoffset(value)
    assert decoded == moment
    assert decoded.utcoffset() == timedelta(hours=2)
    assert decode_naive_datetime(value) == datetime(2016, 10, 23, 12, 45, 37, 123_456)


def test_datetimeoffset_stores_utc_and_offset():
    tz = timezone(timedelta(hours=2))
    moment = datetime(2016, 10, 23, 12, 45, 37, tzinfo=tz)
    encoded = encode_datetimeoffset(moment)
    assert encoded[:8] == encode_datetime2(datetime(2016, 10, 23, 10, 45, 37))
    assert int.from_bytes(encoded[8:], "little", signed=True) == 120


def test_datetimeoffset_rejects_naive():
    with pytest.raises(ValueError):
        encode_datetimeoffset(datetime(2020, 1, 1))


def test_datetimeoffset_rejects_bad_offset():
    data = encode_datetime2(datetime(2020, 1, 1)) + (2000).to_bytes(2, "little", signed=True)
    with pytest.raises(DecodeError):
        decode_datetimeoffset(Value(TypeInfo.DATETIMEOFFSET, data))


def test_datetimeoffset_rejects_unsupported_type():
    with pytest.raises(DecodeError):
        decode_datetimeoffset(Value(TypeInfo.DATE, b"\x00\x00\x00"))