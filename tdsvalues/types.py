"""Encoding and decoding of decimal, UUID, JSON and date/time SQL Server values."""

from __future__ import annotations

import json
import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any

from tdsvalues.value import (
    DecodeError,
    SqlType,
    TypeInfo,
    Value,
    decode_money_bytes,
    decode_numeric_bytes,
)

__all__ = [
    "decimal_type_info",
    "encode_decimal",
    "decode_decimal",
    "encode_uuid",
    "decode_uuid",
    "encode_json",
    "decode_json",
    "encode_date",
    "decode_date",
    "encode_time",
    "decode_time",
    "encode_datetime2",
    "decode_naive_datetime",
    "encode_datetimeoffset",
    "decode_datetimeoffset",
]

_U8_MAX = 0xFF
_I16_MIN = -(2**15)
_I16_MAX = 2**15 - 1
_DATETIME_EPOCH = datetime(1900, 1, 1)
_MAX_OFFSET_MINUTES = 24 * 60


def _require_bytes(value: Value, target: str) -> bytes:
    if value.data is None:
        raise DecodeError(f"cannot decode SQL Server NULL as {target}")
    return value.data


# --- decimal -----------------------------------------------------------------


def _decimal_parts(number: Decimal) -> tuple[bool, int, int]:
    """Return (negative, unsigned coefficient, scale) of a finite decimal."""
    if not number.is_finite():
        raise ValueError(f"cannot encode non-finite decimal {number}")
    sign, digits, exponent = number.as_tuple()
    coefficient = int("".join(map(str, digits))) if digits else 0
    return bool(sign) and coefficient != 0, coefficient, -int(exponent)


def decimal_type_info(number: Decimal) -> TypeInfo:
    """DECIMAL parameter type carrying the scale of the given number."""
    _, _, scale = _decimal_parts(number)
    return TypeInfo.decimal_with_scale(scale if 0 <= scale <= _U8_MAX else 0)


def encode_decimal(number: Decimal) -> bytes:
    """Encode a decimal as a sign byte followed by a 16-byte mantissa."""
    negative, coefficient, scale = _decimal_parts(number)
    if scale < 0:
        coefficient *= 10 ** (-scale)
    mantissa = bytes(16)
    if scale <= _U8_MAX and coefficient.bit_length() <= 128:
        mantissa = coefficient.to_bytes(16, "little")
    return (b"\x00" if negative else b"\x01") + mantissa


def _decimal_from(numerator: int, scale: int) -> Decimal:
    digits = tuple(int(d) for d in str(abs(numerator)))
    return Decimal((1 if numerator < 0 else 0, digits, -scale))


def decode_decimal(value: Value) -> Decimal:
    """Decode a DECIMAL/NUMERIC or MONEY value exactly."""
    data = _require_bytes(value, "Decimal")
    kind = value.type_info.kind
    if kind is SqlType.DECIMAL:
        sign, numerator = decode_numeric_bytes(data)
        return _decimal_from(sign * numerator, value.type_info.scale)
    if kind is SqlType.MONEY:
        return _decimal_from(decode_money_bytes(data), 4)
    raise DecodeError(f"expected SQL Server numeric type, got {kind.name}")


# --- uuid --------------------------------------------------------------------


def encode_uuid(identifier: uuid.UUID) -> bytes:
    """Encode a UUID in the mixed-endian UNIQUEIDENTIFIER layout."""
    return identifier.bytes_le


def decode_uuid(value: Value) -> uuid.UUID:
    data = _require_bytes(value, "Uuid")
    if len(data) != 16:
        raise DecodeError(f"cannot decode {len(data)}-byte value as Uuid")
    return uuid.UUID(bytes_le=data)


# --- json --------------------------------------------------------------------


def encode_json(obj: Any) -> bytes:
    """Serialize an object as compact UTF-8 JSON."""
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def decode_json(value: Value) -> Any:
    data = _require_bytes(value, "Json")
    try:
        return json.loads(data)
    except (ValueError, UnicodeDecodeError) as exc:
        raise DecodeError(f"invalid JSON: {exc}") from exc


# --- date and time helpers ---------------------------------------------------


def _read_i24_le(data: bytes) -> int:
    if len(data) != 3:
        raise DecodeError(f"expected 3 date bytes, got {len(data)}")
    return int.from_bytes(data, "little", signed=True)


def _write_i24_le(number: int) -> bytes:
    return (number & 0xFFFFFF).to_bytes(3, "little")


def encode_date(day: date) -> bytes:
    """Encode a date as days since 0001-01-01 in three little-endian bytes."""
    return _write_i24_le(day.toordinal() - 1)


def _decode_date_bytes(data: bytes) -> date:
    days = _read_i24_le(data)
    try:
        return date.fromordinal(days + 1)
    except (ValueError, OverflowError) as exc:
        raise DecodeError(f"invalid days offset in date: {days}") from exc


def decode_date(value: Value) -> date:
    return _decode_date_bytes(_require_bytes(value, "NaiveDate"))


def encode_time(moment: time) -> bytes:
    """Encode a time of day as 100-nanosecond ticks in five bytes."""
    seconds = moment.hour * 3600 + moment.minute * 60 + moment.second
    total = seconds * 10_000_000 + moment.microsecond * 10
    return total.to_bytes(5, "little")


def _decode_time_bytes(scale: int, data: bytes) -> time:
    if not 0 <= scale <= 9:
        raise DecodeError(f"invalid time scale {scale}")
    total = int.from_bytes(data, "little") * 10 ** (9 - scale)
    seconds, nanos = divmod(total, 1_000_000_000)
    if seconds >= 86_400:
        raise DecodeError(f"invalid time: seconds={seconds} nanoseconds={nanos}")
    hour, rest = divmod(seconds, 3600)
    minute, second = divmod(rest, 60)
    return time(hour, minute, second, nanos // 1000)


def decode_time(value: Value) -> time:
    return _decode_time_bytes(value.type_info.scale, _require_bytes(value, "NaiveTime"))


def encode_datetime2(moment: datetime) -> bytes:
    """Encode a naive date and time as five time bytes then three date bytes."""
    return encode_time(moment.time()) + encode_date(moment.date())


def _decode_datetime2_bytes(scale: int, data: bytes) -> datetime:
    if len(data) < 3:
        raise DecodeError(f"datetime2 value too short: {len(data)} bytes")
    time_size = len(data) - 3
    day = _decode_date_bytes(data[time_size:])
    return datetime.combine(day, _decode_time_bytes(scale, data[:time_size]))


def _decode_datetime_bytes(data: bytes) -> datetime:
    days = int.from_bytes(data[:4], "little", signed=True)
    ticks = int.from_bytes(data[4:], "little", signed=False)
    try:
        moment = _DATETIME_EPOCH + timedelta(days=days, milliseconds=ticks * 1000 // 300)
    except OverflowError as exc:
        raise DecodeError(f"datetime out of range: days={days}") from exc
    return moment.replace(tzinfo=timezone.utc)


def _decode_smalldatetime_bytes(data: bytes) -> datetime:
    days = int.from_bytes(data[:2], "little")
    minutes = int.from_bytes(data[2:], "little")
    moment = _DATETIME_EPOCH + timedelta(days=days, minutes=minutes)
    return moment.replace(tzinfo=timezone.utc)


def _decode_datetimeoffset_bytes(scale: int, data: bytes) -> datetime:
    if len(data) < 5:
        raise DecodeError(f"datetimeoffset value too short: {len(data)} bytes")
    naive_utc = _decode_datetime2_bytes(scale, data[:-2])
    offset_minutes = int.from_bytes(data[-2:], "little", signed=True)
    if abs(offset_minutes) >= _MAX_OFFSET_MINUTES:
        raise DecodeError(f"invalid offset {offset_minutes} in DateTimeOffset")
    tz = timezone(timedelta(minutes=offset_minutes))
    try:
        return naive_utc.replace(tzinfo=timezone.utc).astimezone(tz)
    except OverflowError as exc:
        raise DecodeError("datetimeoffset out of range") from exc


def decode_datetimeoffset(value: Value) -> datetime:
    """Decode DATETIME, SMALLDATETIME or DATETIMEOFFSET into an aware datetime."""
    data = _require_bytes(value, "DateTime<FixedOffset>")
    kind = value.type_info.kind
    if kind is SqlType.DATETIME and len(data) == 4:
        return _decode_smalldatetime_bytes(data)
    if kind is SqlType.DATETIME and len(data) == 8:
        return _decode_datetime_bytes(data)
    if kind is SqlType.DATETIMEOFFSET:
        return _decode_datetimeoffset_bytes(value.type_info.scale, data)
    raise DecodeError(f"unsupported SQL Server datetime type {kind.name}")


def decode_naive_datetime(value: Value) -> datetime:
    """Decode a date-time column into a naive datetime in its local time."""
    data = _require_bytes(value, "NaiveDateTime")
    if value.type_info.kind is SqlType.DATETIME2:
        return _decode_datetime2_bytes(value.type_info.scale, data)
    return decode_datetimeoffset(value).replace(tzinfo=None)


def encode_datetimeoffset(moment: datetime) -> bytes:
    """Encode an aware datetime as its UTC datetime2 followed by the offset in minutes."""
    offset = moment.utcoffset()
    if offset is None:
        raise ValueError("cannot encode a naive datetime as datetimeoffset")
    naive_utc = (moment - offset).replace(tzinfo=None)
    offset_minutes = int(offset.total_seconds() / 60)
    if not _I16_MIN <= offset_minutes <= _I16_MAX:
        raise ValueError(f"offset {offset_minutes} minutes is out of range")
    return encode_datetime2(naive_utc) + offset_minutes.to_bytes(2, "little", signed=True)