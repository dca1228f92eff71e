# tdsvalues

Convert between the raw little-endian bytes that Microsoft SQL Server uses on the
wire (TDS) and ordinary Python values. Each SQL Server value is described by a
`TypeInfo` (a `SqlType` kind, a size and a scale). A `Value` pairs that type
information with its bytes, or with no bytes at all when the value is `NULL`
(`Value.null(type_info)`, checked with `Value.is_null()`).

The package has no runtime dependencies.

## Installing

```
pip install tdsvalues
```

## Scalars: `tdsvalues.value`

```python
from tdsvalues.value import (
    IntegerType, TypeInfo, Value, DecodeError,
    encode_str, decode_str, str_type_info,
    encode_bool, decode_bool,
)

# Integers are range-checked when they are encoded and when they are decoded.
data = IntegerType.U16.encode(65535)               # sent as a 4-byte INT
IntegerType.U16.decode(Value(TypeInfo.INT, data))  # -> 65535
IntegerType.U16.type_info()                        # -> TypeInfo.INT

# Text parameters are sent as UTF-16LE NVARCHAR. VARCHAR columns are read as UTF-8.
str_type_info("hello")                             # NVARCHAR with size 10
decode_str(Value(TypeInfo.NVARCHAR, encode_str("hello")))  # -> "hello"

# A NULL cannot be decoded into a plain Python value.
try:
    decode_bool(Value.null(TypeInfo.BIT))
except DecodeError as exc:
    print(exc)
```

What the module offers:

- `IntegerType` members `I8`, `U8`, `I16`, `U16`, `I32`, `U32`, `I64`, `U64`,
  each with `type_info()`, `compatible(type_info)`, `encode(number)` and
  `decode(value)`. Each is sent as the smallest SQL Server integer type that holds
  its whole range (`I8` as `SMALLINT`, `U32` and `U64` as `BIGINT`, and so on).
  Integers can be decoded from `TINYINT`, `SMALLINT`, `INT`, `BIGINT` and
  `DECIMAL` values; a decimal with a fractional part is truncated toward zero.
- `encode_bool` / `decode_bool` for `BIT`.
- `encode_float32` / `decode_float32` and `encode_float64` / `decode_float64` for
  `REAL` and `FLOAT`. Floats can also be decoded from `DECIMAL` and `MONEY`
  values; `decode_float32` rounds those to single precision.
- `encode_str` / `decode_str` / `str_type_info` for `NVARCHAR` and `VARCHAR`.
- `encode_bytes` / `decode_bytes` / `bytes_type_info` for `VARBINARY`.
  Text and binary parameters longer than 8000 bytes get size `0xFFFF` (MAX).
- `decode_numeric_bytes` and `decode_money_bytes` give the raw sign and magnitude
  of `DECIMAL` and `MONEY` / `SMALLMONEY` bytes.
- `is_integer_compatible` and `float_compatible` tell which column types each
  Python type can be read from.

## Decimals, UUIDs, JSON, dates and times: `tdsvalues.types`

- `encode_decimal` / `decode_decimal` and `decimal_type_info` for `decimal.Decimal`,
  decoded exactly from `DECIMAL` and `MONEY` values;
- `encode_uuid` / `decode_uuid` for `UNIQUEIDENTIFIER` (mixed-endian GUID layout);
- `encode_json` / `decode_json`, which write compact UTF-8 JSON and parse JSON from
  a value's bytes;
- `encode_date` / `decode_date` for `DATE`;
- `encode_time` / `decode_time` for `TIME`, honouring the value's scale;
- `encode_datetime2` / `decode_naive_datetime` for naive `datetime` values.
  `decode_naive_datetime` reads `DATETIME2` directly, and otherwise gives the local
  time of a `DATETIMEOFFSET`, `DATETIME` or `SMALLDATETIME` value;
- `encode_datetimeoffset` / `decode_datetimeoffset` for aware `datetime` values.
  `decode_datetimeoffset` also reads the legacy `DATETIME` (8 bytes) and
  `SMALLDATETIME` (4 bytes) layouts, returning them in UTC.

```python
import datetime
from tdsvalues.types import encode_date, decode_date
from tdsvalues.value import TypeInfo, Value

raw = encode_date(datetime.date(1789, 7, 14))
decode_date(Value(TypeInfo.DATE, raw))        # -> datetime.date(1789, 7, 14)
```

Every decoding problem (a `NULL`, a wrong length, an out-of-range number or an
incompatible column type) raises `DecodeError`, a subclass of `ValueError`.
Encoding a value that does not fit raises `ValueError`.

## What this package does not do

It only converts values. It does not connect to a server, speak the TDS protocol,
run queries, manage transactions or run migrations; those are left to whatever
client carries the bytes.

## Running the tests

```
pip install -e .[test]
pytest
```