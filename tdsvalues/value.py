"""SQL Server value representation and scalar encoding/decoding."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional

__all__ = [
    "DecodeError",
    "SqlType",
    "TypeInfo",
    "Value",
    "IntegerType",
    "is_integer_compatible",
    "decode_numeric_bytes",
    "decode_money_bytes",
    "encode_bool",
    "decode_bool",
    "float_compatible",
    "encode_float32",
    "decode_float32",
    "encode_float64",
    "decode_float64",
    "str_type_info",
    "encode_str",
    "decode_str",
    "bytes_type_info",
    "encode_bytes",
    "decode_bytes",
]

_MAX_SIZE = 0xFFFF
_I64_MAX = 2**63 - 1


class DecodeError(ValueError):
    """Raised when a SQL Server value cannot be decoded into a Python value."""


class SqlType(Enum):
    """SQL Server column type families."""

    TINYINT = "tinyint"
    SMALLINT = "smallint"
    INT = "int"
    BIGINT = "bigint"
    BIT = "bit"
    REAL = "real"
    FLOAT = "float"
    DECIMAL = "decimal"
    MONEY = "money"
    NVARCHAR = "nvarchar"
    VARCHAR = "varchar"
    VARBINARY = "varbinary"
    UNIQUEIDENTIFIER = "uniqueidentifier"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    DATETIME2 = "datetime2"
    DATETIMEOFFSET = "datetimeoffset"


@dataclass(frozen=True)
class TypeInfo:
    """Type of a SQL Server value: its family, byte size and decimal scale."""

    kind: SqlType
    size: int = 0
    scale: int = 0

    TINYINT: ClassVar["TypeInfo"]
    SMALLINT: ClassVar["TypeInfo"]
    INT: ClassVar["TypeInfo"]
    BIGINT: ClassVar["TypeInfo"]
    BIT: ClassVar["TypeInfo"]
    REAL: ClassVar["TypeInfo"]
    FLOAT: ClassVar["TypeInfo"]
    DECIMAL: ClassVar["TypeInfo"]
    MONEY: ClassVar["TypeInfo"]
    NVARCHAR: ClassVar["TypeInfo"]
    VARCHAR: ClassVar["TypeInfo"]
    VARBINARY: ClassVar["TypeInfo"]
    UNIQUEIDENTIFIER: ClassVar["TypeInfo"]
    DATE: ClassVar["TypeInfo"]
    TIME: ClassVar["TypeInfo"]
    DATETIME: ClassVar["TypeInfo"]
    DATETIME2: ClassVar["TypeInfo"]
    DATETIMEOFFSET: ClassVar["TypeInfo"]

    @classmethod
    def with_size(cls, kind: SqlType, size: int) -> "TypeInfo":
        """Type info of the given family with an explicit byte size."""
        return cls(kind, size)

    @classmethod
    def decimal_with_scale(cls, scale: int) -> "TypeInfo":
        """Decimal type info carrying the given scale."""
        return cls(SqlType.DECIMAL, 17, scale)


TypeInfo.TINYINT = TypeInfo(SqlType.TINYINT, 1)
TypeInfo.SMALLINT = TypeInfo(SqlType.SMALLINT, 2)
TypeInfo.INT = TypeInfo(SqlType.INT, 4)
TypeInfo.BIGINT = TypeInfo(SqlType.BIGINT, 8)
TypeInfo.BIT = TypeInfo(SqlType.BIT, 1)
TypeInfo.REAL = TypeInfo(SqlType.REAL, 4)
TypeInfo.FLOAT = TypeInfo(SqlType.FLOAT, 8)
TypeInfo.DECIMAL = TypeInfo(SqlType.DECIMAL, 17, 0)
TypeInfo.MONEY = TypeInfo(SqlType.MONEY, 8)
TypeInfo.NVARCHAR = TypeInfo(SqlType.NVARCHAR, 8000)
TypeInfo.VARCHAR = TypeInfo(SqlType.VARCHAR, 8000)
TypeInfo.VARBINARY = TypeInfo(SqlType.VARBINARY, 8000)
TypeInfo.UNIQUEIDENTIFIER = TypeInfo(SqlType.UNIQUEIDENTIFIER, 16)
TypeInfo.DATE = TypeInfo(SqlType.DATE, 3)
TypeInfo.TIME = TypeInfo(SqlType.TIME, 5, 7)
TypeInfo.DATETIME = TypeInfo(SqlType.DATETIME, 8)
TypeInfo.DATETIME2 = TypeInfo(SqlType.DATETIME2, 8, 7)
TypeInfo.DATETIMEOFFSET = TypeInfo(SqlType.DATETIMEOFFSET, 10, 7)


@dataclass(frozen=True)
class Value:
    """A SQL Server value: type information plus raw little-endian TDS bytes."""

    type_info: TypeInfo
    data: Optional[bytes] = None

    @classmethod
    def null(cls, type_info: TypeInfo) -> "Value":
        """A NULL value of the given type."""
        return cls(type_info, None)

    def is_null(self) -> bool:
        return self.data is None


def _require_bytes(value: Value, target: str) -> bytes:
    if value.data is None:
        raise DecodeError(f"cannot decode SQL Server NULL as {target}")
    return value.data


def decode_numeric_bytes(data: bytes) -> tuple[int, int]:
    """Split NUMERIC/DECIMAL wire bytes into (sign, unsigned numerator)."""
    if len(data) < 1:
        raise DecodeError("numeric value is missing its sign byte")
    mantissa = data[1:]
    if len(mantissa) not in (4, 8, 12, 16):
        raise DecodeError(f"invalid numeric mantissa length {len(mantissa)}")
    sign = -1 if data[0] == 0 else 1
    return sign, int.from_bytes(mantissa, "little", signed=False)


def decode_money_bytes(data: bytes) -> int:
    """Decode MONEY (8 bytes) or SMALLMONEY (4 bytes) into ten-thousandths."""
    if len(data) == 4:
        return int.from_bytes(data, "little", signed=True)
    if len(data) == 8:
        high = int.from_bytes(data[:4], "little", signed=True)
        low = int.from_bytes(data[4:], "little", signed=False)
        return (high << 32) | low
    raise DecodeError(f"invalid money value length {len(data)}")


def is_integer_compatible(type_info: TypeInfo) -> bool:
    return type_info.kind in (
        SqlType.TINYINT,
        SqlType.SMALLINT,
        SqlType.INT,
        SqlType.BIGINT,
        SqlType.DECIMAL,
    )


def _strip_scale(numerator: int, scale: int) -> tuple[int, int]:
    while numerator % 10 == 0 and scale > 0:
        numerator //= 10
        scale -= 1
    return numerator, scale


def _decode_numeric_integer(data: bytes, scale: int) -> int:
    sign, numerator = decode_numeric_bytes(data)
    numerator, scale = _strip_scale(numerator, scale)
    if scale > 0:
        numerator //= 10**scale
    if numerator > _I64_MAX:
        raise DecodeError(f"numeric value {numerator} does not fit in a 64-bit integer")
    return numerator * sign


def _decode_integer(value: Value, target: str) -> int:
    data = _require_bytes(value, target)
    if value.type_info.kind is SqlType.DECIMAL:
        return _decode_numeric_integer(data, value.type_info.scale)
    if len(data) == 1:
        return data[0]
    if len(data) in (2, 4, 8):
        return int.from_bytes(data, "little", signed=True)
    raise DecodeError(f"cannot decode {len(data)}-byte SQL Server integer as {target}")


_INTEGER_TYPE_INFO = {
    SqlType.TINYINT: TypeInfo.TINYINT,
    SqlType.SMALLINT: TypeInfo.SMALLINT,
    SqlType.INT: TypeInfo.INT,
    SqlType.BIGINT: TypeInfo.BIGINT,
}


class IntegerType(Enum):
    """Fixed-width integer types and their SQL Server parameter mapping."""

    I8 = ("i8", -(2**7), 2**7 - 1, SqlType.SMALLINT, 2)
    U8 = ("u8", 0, 2**8 - 1, SqlType.TINYINT, 1)
    I16 = ("i16", -(2**15), 2**15 - 1, SqlType.SMALLINT, 2)
    U16 = ("u16", 0, 2**16 - 1, SqlType.INT, 4)
    I32 = ("i32", -(2**31), 2**31 - 1, SqlType.INT, 4)
    U32 = ("u32", 0, 2**32 - 1, SqlType.BIGINT, 8)
    I64 = ("i64", -(2**63), 2**63 - 1, SqlType.BIGINT, 8)
    U64 = ("u64", 0, 2**64 - 1, SqlType.BIGINT, 8)

    def __init__(self, label: str, minimum: int, maximum: int, kind: SqlType, width: int):
        self.label = label
        self.minimum = minimum
        self.maximum = maximum
        self.kind = kind
        self.width = width

    def type_info(self) -> TypeInfo:
        """Parameter type used when sending this integer to the server."""
        return _INTEGER_TYPE_INFO[self.kind]

    def compatible(self, type_info: TypeInfo) -> bool:
        return is_integer_compatible(type_info)

    def encode(self, number: int) -> bytes:
        """Encode the integer in its lossless wire representation."""
        if not self.minimum <= number <= self.maximum:
            raise ValueError(f"{number} is out of range for {self.label}")
        signed = self is not IntegerType.U8
        if signed and number > _I64_MAX:
            raise ValueError(f"{number} does not fit in a SQL Server bigint")
        return number.to_bytes(self.width, "little", signed=signed)

    def decode(self, value: Value) -> int:
        number = _decode_integer(value, self.label)
        if not self.minimum <= number <= self.maximum:
            raise DecodeError(f"{number} is out of range for {self.label}")
        return number


def encode_bool(flag: bool) -> bytes:
    """Encode a boolean as a one-byte SQL Server bit."""
    return struct.pack("<B", int(bool(flag)))


def decode_bool(value: Value) -> bool:
    data = _require_bytes(value, "bool")
    if data == b"\x00":
        return False
    if data == b"\x01":
        return True
    raise DecodeError("cannot decode SQL Server bit as bool")


def float_compatible(type_info: TypeInfo) -> bool:
    return type_info.kind in (SqlType.REAL, SqlType.FLOAT, SqlType.DECIMAL, SqlType.MONEY)


def _to_float32(number: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", number))[0]
    except OverflowError:
        return math.copysign(math.inf, number)


def encode_float32(number: float) -> bytes:
    return struct.pack("<f", number)


def decode_float32(value: Value) -> float:
    """Decode a real, or any float-compatible value rounded to single precision."""
    if value.type_info.kind is not SqlType.REAL:
        return _to_float32(decode_float64(value))
    data = _require_bytes(value, "f32")
    if len(data) != 4:
        raise DecodeError("cannot decode SQL Server real as f32")
    return struct.unpack("<f", data)[0]


def encode_float64(number: float) -> bytes:
    return struct.pack("<d", number)


def _split_fraction(magnitude: int, denominator: int) -> float:
    whole, remainder = divmod(magnitude, denominator)
    return float(whole) + float(remainder) / float(denominator)


def _decode_numeric_float(data: bytes, scale: int) -> float:
    sign, numerator = decode_numeric_bytes(data)
    numerator, scale = _strip_scale(numerator, scale)
    absolute = _split_fraction(numerator, 10**scale)
    return absolute if sign == 1 else -absolute


def _decode_money_float(data: bytes) -> float:
    numerator = decode_money_bytes(data)
    denominator = 10_000
    whole, remainder = divmod(abs(numerator), denominator)
    sign = -1 if numerator < 0 else 1
    return float(sign * whole) + float(sign * remainder) / float(denominator)


def decode_float64(value: Value) -> float:
    kind = value.type_info.kind
    if kind is SqlType.DECIMAL:
        return _decode_numeric_float(_require_bytes(value, "f64"), value.type_info.scale)
    if kind is SqlType.MONEY:
        return _decode_money_float(_require_bytes(value, "f64"))
    data = _require_bytes(value, "f64")
    if len(data) == 4:
        return struct.unpack("<f", data)[0]
    if len(data) == 8:
        return struct.unpack("<d", data)[0]
    raise DecodeError("cannot decode SQL Server float as f64")


def _nvarchar_parameter_size(text: str) -> int:
    size = len(text.encode("utf-16-le"))
    if size > 8000:
        return _MAX_SIZE
    return max(2, size)


def _varbinary_parameter_size(length: int) -> int:
    if length > 8000:
        return _MAX_SIZE
    return max(1, length)


def str_type_info(text: str) -> TypeInfo:
    """NVARCHAR parameter type sized for the given text."""
    return TypeInfo.with_size(SqlType.NVARCHAR, _nvarchar_parameter_size(text))


def encode_str(text: str) -> bytes:
    return text.encode("utf-16-le")


def decode_str(value: Value) -> str:
    """Decode VARCHAR as UTF-8 and anything else as UTF-16LE."""
    data = _require_bytes(value, "String")
    if value.type_info.kind is SqlType.VARCHAR:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(str(exc)) from exc
    if len(data) % 2:
        raise DecodeError("cannot decode odd-length SQL Server UTF-16 text")
    try:
        return data.decode("utf-16-le")
    except UnicodeDecodeError as exc:
        raise DecodeError(str(exc)) from exc


def bytes_type_info(data: bytes) -> TypeInfo:
    """VARBINARY parameter type sized for the given data."""
    return TypeInfo.with_size(SqlType.VARBINARY, _varbinary_parameter_size(len(data)))


def encode_bytes(data: bytes) -> bytes:
    return bytes(data)


def decode_bytes(value: Value) -> bytes:
    return _require_bytes(value, "bytes")