"""
Value codecs.

A codec turns one type of value into the text stored in Redis and back.
Primitives are stored as plain text so they stay compatible with INCR,
INCRBYFLOAT and with other clients reading the same keys. Structured
values go through JSON.

Usage:
    from radcache.codecs import INT, JSON

    cache.set_value("hits", 10, INT)
    cache.get_value("hits", INT)  # -> 10
"""

import json
import math
import re
import struct
from typing import Any, Generic, Protocol, TypeVar, Union

from radcache.errors import DeserializationError, SerializationError, TypeMismatchError

T = TypeVar("T")

Raw = Union[bytes, str]

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# strconv.ParseBool vocabulary, so keys written by Go services decode here
_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


class Codec(Protocol[T]):
    """Encode/decode contract for one value type."""

    name: str

    def encode(self, value: T) -> str:
        ...

    def decode(self, raw: Raw) -> T:
        ...


def _to_text(raw: Raw) -> str:
    if isinstance(raw, bytes):
        return raw.decode("utf-8")
    return raw


class JsonCodec:
    """JSON codec for arbitrary structured values."""

    name = "json"

    def encode(self, value: Any) -> str:
        try:
            return json.dumps(value, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"cannot encode value as JSON: {e}") from e

    def decode(self, raw: Raw) -> Any:
        try:
            return json.loads(_to_text(raw))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DeserializationError(f"cannot decode JSON: {e}") from e


class _PrimitiveCodec(Generic[T]):
    """Base for plain-text primitive codecs.

    Subclasses implement _encode/_parse and raise ValueError or TypeError
    on bad input; the base maps those onto the error taxonomy.
    """

    name = "primitive"

    def encode(self, value: T) -> str:
        try:
            return self._encode(value)
        except (TypeError, ValueError, OverflowError) as e:
            raise SerializationError(f"cannot encode {value!r} as {self.name}: {e}") from e

    def decode(self, raw: Raw) -> T:
        try:
            return self._parse(_to_text(raw))
        except (TypeError, ValueError, OverflowError) as e:
            raise TypeMismatchError(f"cannot decode {raw!r} as {self.name}: {e}") from e

    def _encode(self, value: T) -> str:
        raise NotImplementedError

    def _parse(self, text: str) -> T:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class StringCodec(_PrimitiveCodec[str]):
    name = "string"

    def _encode(self, value: str) -> str:
        if not isinstance(value, str):
            raise TypeError(f"expected str, got {type(value).__name__}")
        return value

    def _parse(self, text: str) -> str:
        return text


class IntCodec(_PrimitiveCodec[int]):
    name = "int"

    def _encode(self, value: int) -> str:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"expected int, got {type(value).__name__}")
        return str(value)

    def _parse(self, text: str) -> int:
        if not _INT_PATTERN.fullmatch(text):
            raise ValueError(f"invalid integer {text!r}")
        return int(text, 10)


class Int64Codec(IntCodec):
    """Integer codec bounded to the signed 64-bit range."""

    name = "int64"

    def _encode(self, value: int) -> str:
        self._check_range(value)
        return super()._encode(value)

    def _parse(self, text: str) -> int:
        value = super()._parse(text)
        self._check_range(value)
        return value

    @staticmethod
    def _check_range(value: int) -> None:
        if isinstance(value, int) and not INT64_MIN <= value <= INT64_MAX:
            raise OverflowError(f"{value} out of int64 range")


class BoolCodec(_PrimitiveCodec[bool]):
    name = "bool"

    def _encode(self, value: bool) -> str:
        if not isinstance(value, bool):
            raise TypeError(f"expected bool, got {type(value).__name__}")
        return "1" if value else "0"

    def _parse(self, text: str) -> bool:
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise ValueError(f"invalid boolean {text!r}")


class Float64Codec(_PrimitiveCodec[float]):
    name = "float64"

    def _encode(self, value: float) -> str:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"expected float, got {type(value).__name__}")
        return repr(float(value))

    def _parse(self, text: str) -> float:
        # float() tolerates surrounding whitespace and digit separators
        if "_" in text or text != text.strip():
            raise ValueError(f"invalid float {text!r}")
        return float(text)


class Float32Codec(Float64Codec):
    """Single-precision float codec.

    Values are rounded to the nearest float32 on both sides; 9 significant
    digits round-trip every float32 exactly.
    """

    name = "float32"

    def _encode(self, value: float) -> str:
        super()._encode(value)
        return format(to_float32(value), ".9g")

    def _parse(self, text: str) -> float:
        return to_float32(super()._parse(text))


def to_float32(value: float) -> float:
    """Round value to the nearest float32. Raises OverflowError when out of range."""
    if math.isnan(value) or math.isinf(value):
        return float(value)
    return struct.unpack("f", struct.pack("f", value))[0]


JSON = JsonCodec()
STRING = StringCodec()
INT = IntCodec()
INT64 = Int64Codec()
BOOL = BoolCodec()
FLOAT32 = Float32Codec()
FLOAT64 = Float64Codec()


__all__ = [
    "Codec",
    "JsonCodec",
    "StringCodec",
    "IntCodec",
    "Int64Codec",
    "BoolCodec",
    "Float32Codec",
    "Float64Codec",
    "to_float32",
    "JSON",
    "STRING",
    "INT",
    "INT64",
    "BOOL",
    "FLOAT32",
    "FLOAT64",
]
