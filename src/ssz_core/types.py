"""SSZ leaf types: serialization, deserialization and hash_tree_root.

Every type exposes the same small interface:

- is_variable_size() / fixed_size()
- coerce(value): validate and normalize a Python value (lists become tuples)
- serialize(value) / deserialize(data)
- hash_tree_root(value)
- to_json(value) / from_json(obj)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ssz_core.aggregate import decode_parts, encode_parts
from ssz_core.errors import InvalidValue, MalformedOffsets, TrailingBytes, TruncatedInput
from ssz_core.hashing import get_tree_depth, merkleize, mix_in_length, pack
from ssz_core.protocol import (
    BITS_PER_BYTE,
    BITS_PER_CHUNK,
    BYTES_PER_CHUNK,
    BYTES_PER_LENGTH_OFFSET,
    MAX_TREE_DEPTH,
    UINT_BITS,
)


def _expect_len(data: bytes, n: int, what: str) -> None:
    if len(data) < n:
        raise TruncatedInput(f"{what}: expected {n} bytes, got {len(data)}")
    if len(data) > n:
        raise TrailingBytes(f"{what}: expected {n} bytes, got {len(data)}")


def _hex(b: bytes) -> str:
    return "0x" + b.hex()


def _unhex(obj: Any, what: str) -> bytes:
    if not isinstance(obj, str):
        raise InvalidValue(f"{what}: expected hex string, got {type(obj).__name__}")
    s = obj[2:] if obj.startswith("0x") else obj
    try:
        return bytes.fromhex(s)
    except ValueError as e:
        raise InvalidValue(f"{what}: {e}") from e


def _bits_to_bytes(bits: tuple[bool, ...], size: int) -> bytes:
    out = bytearray(size)
    for i, bit in enumerate(bits):
        if bit:
            out[i // BITS_PER_BYTE] |= 1 << (i % BITS_PER_BYTE)
    return bytes(out)


def _bits_from_bytes(data: bytes, count: int) -> tuple[bool, ...]:
    return tuple(bool((data[i // BITS_PER_BYTE] >> (i % BITS_PER_BYTE)) & 1) for i in range(count))


def _check_tree_limit(t: SSZType, chunk_limit: int) -> None:
    if get_tree_depth(chunk_limit) > MAX_TREE_DEPTH:
        raise ValueError(f"{t.type_name()}: tree depth exceeds {MAX_TREE_DEPTH}")


class SSZType:
    """Base for all SSZ types."""

    def is_variable_size(self) -> bool:
        return False

    def is_basic(self) -> bool:
        return False

    def fixed_size(self) -> int:
        raise TypeError(f"{self.type_name()} is variable-size")

    def type_name(self) -> str:
        raise NotImplementedError

    def coerce(self, value: Any) -> Any:
        raise NotImplementedError

    def serialize(self, value: Any) -> bytes:
        raise NotImplementedError

    def deserialize(self, data: bytes) -> Any:
        raise NotImplementedError

    def hash_tree_root(self, value: Any) -> bytes:
        raise NotImplementedError

    def to_json(self, value: Any) -> Any:
        return value

    def from_json(self, obj: Any) -> Any:
        return self.coerce(obj)

    def __str__(self) -> str:
        return self.type_name()


@dataclass(frozen=True)
class Uint(SSZType):
    bits: int

    def __post_init__(self):
        if self.bits not in UINT_BITS:
            raise ValueError(f"Unsupported uint width {self.bits}")

    def is_basic(self) -> bool:
        return True

    def fixed_size(self) -> int:
        return self.bits // BITS_PER_BYTE

    def type_name(self) -> str:
        return f"uint{self.bits}"

    def coerce(self, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidValue(f"{self.type_name()}: expected int, got {type(value).__name__}")
        if not 0 <= value < (1 << self.bits):
            raise InvalidValue(f"{self.type_name()}: {value} out of range")
        return value

    def serialize(self, value: Any) -> bytes:
        return self.coerce(value).to_bytes(self.fixed_size(), "little")

    def deserialize(self, data: bytes) -> int:
        _expect_len(data, self.fixed_size(), self.type_name())
        return int.from_bytes(data, "little")

    def hash_tree_root(self, value: Any) -> bytes:
        return merkleize(pack(self.serialize(value)))


@dataclass(frozen=True)
class Boolean(SSZType):
    def is_basic(self) -> bool:
        return True

    def fixed_size(self) -> int:
        return 1

    def type_name(self) -> str:
        return "boolean"

    def coerce(self, value: Any) -> bool:
        if not isinstance(value, bool):
            raise InvalidValue(f"boolean: expected bool, got {type(value).__name__}")
        return value

    def serialize(self, value: Any) -> bytes:
        return b"\x01" if self.coerce(value) else b"\x00"

    def deserialize(self, data: bytes) -> bool:
        _expect_len(data, 1, "boolean")
        if data[0] > 1:
            raise InvalidValue(f"boolean: byte {data[0]:#04x}")
        return data[0] == 1

    def hash_tree_root(self, value: Any) -> bytes:
        return merkleize(pack(self.serialize(value)))


@dataclass(frozen=True)
class ByteVector(SSZType):
    length: int

    def __post_init__(self):
        if self.length <= 0:
            raise ValueError("ByteVector length must be positive")

    def fixed_size(self) -> int:
        return self.length

    def type_name(self) -> str:
        return f"ByteVector[{self.length}]"

    def coerce(self, value: Any) -> bytes:
        if not isinstance(value, (bytes, bytearray)):
            raise InvalidValue(f"{self.type_name()}: expected bytes, got {type(value).__name__}")
        if len(value) != self.length:
            raise InvalidValue(f"{self.type_name()}: got {len(value)} bytes")
        return bytes(value)

    def serialize(self, value: Any) -> bytes:
        return self.coerce(value)

    def deserialize(self, data: bytes) -> bytes:
        _expect_len(data, self.length, self.type_name())
        return bytes(data)

    def hash_tree_root(self, value: Any) -> bytes:
        return merkleize(pack(self.coerce(value)))

    def to_json(self, value: Any) -> str:
        return _hex(value)

    def from_json(self, obj: Any) -> bytes:
        return self.coerce(_unhex(obj, self.type_name()))


@dataclass(frozen=True)
class ByteList(SSZType):
    limit: int

    def __post_init__(self):
        if self.limit < 0:
            raise ValueError("ByteList limit must be non-negative")
        _check_tree_limit(self, (self.limit + BYTES_PER_CHUNK - 1) // BYTES_PER_CHUNK)

    def is_variable_size(self) -> bool:
        return True

    def type_name(self) -> str:
        return f"ByteList[{self.limit}]"

    def coerce(self, value: Any) -> bytes:
        if not isinstance(value, (bytes, bytearray)):
            raise InvalidValue(f"{self.type_name()}: expected bytes, got {type(value).__name__}")
        if len(value) > self.limit:
            raise InvalidValue(f"{self.type_name()}: length {len(value)} > limit")
        return bytes(value)

    def serialize(self, value: Any) -> bytes:
        return self.coerce(value)

    def deserialize(self, data: bytes) -> bytes:
        return self.coerce(bytes(data))

    def hash_tree_root(self, value: Any) -> bytes:
        value = self.coerce(value)
        chunk_limit = (self.limit + BYTES_PER_CHUNK - 1) // BYTES_PER_CHUNK
        return mix_in_length(merkleize(pack(value), limit=chunk_limit), len(value))

    def to_json(self, value: Any) -> str:
        return _hex(value)

    def from_json(self, obj: Any) -> bytes:
        return self.coerce(_unhex(obj, self.type_name()))


@dataclass(frozen=True)
class Bitvector(SSZType):
    length: int

    def __post_init__(self):
        if self.length <= 0:
            raise ValueError("Bitvector length must be positive")

    def fixed_size(self) -> int:
        return (self.length + BITS_PER_BYTE - 1) // BITS_PER_BYTE

    def type_name(self) -> str:
        return f"Bitvector[{self.length}]"

    def coerce(self, value: Any) -> tuple[bool, ...]:
        bits = tuple(value)
        if len(bits) != self.length:
            raise InvalidValue(f"{self.type_name()}: got {len(bits)} bits")
        if not all(isinstance(b, bool) for b in bits):
            raise InvalidValue(f"{self.type_name()}: bits must be bool")
        return bits

    def serialize(self, value: Any) -> bytes:
        return _bits_to_bytes(self.coerce(value), self.fixed_size())

    def deserialize(self, data: bytes) -> tuple[bool, ...]:
        _expect_len(data, self.fixed_size(), self.type_name())
        if self.length % BITS_PER_BYTE and data[-1] >> (self.length % BITS_PER_BYTE):
            raise InvalidValue(f"{self.type_name()}: padding bits set")
        return _bits_from_bytes(data, self.length)

    def hash_tree_root(self, value: Any) -> bytes:
        chunk_limit = (self.length + BITS_PER_CHUNK - 1) // BITS_PER_CHUNK
        return merkleize(pack(self.serialize(value)), limit=chunk_limit)

    def to_json(self, value: Any) -> list[bool]:
        return list(value)


@dataclass(frozen=True)
class Bitlist(SSZType):
    limit: int

    def __post_init__(self):
        if self.limit < 0:
            raise ValueError("Bitlist limit must be non-negative")
        _check_tree_limit(self, (self.limit + BITS_PER_CHUNK - 1) // BITS_PER_CHUNK)

    def is_variable_size(self) -> bool:
        return True

    def type_name(self) -> str:
        return f"Bitlist[{self.limit}]"

    def coerce(self, value: Any) -> tuple[bool, ...]:
        bits = tuple(value)
        if len(bits) > self.limit:
            raise InvalidValue(f"{self.type_name()}: {len(bits)} bits > limit")
        if not all(isinstance(b, bool) for b in bits):
            raise InvalidValue(f"{self.type_name()}: bits must be bool")
        return bits

    def serialize(self, value: Any) -> bytes:
        bits = self.coerce(value)
        # Delimiter bit marks the length.
        return _bits_to_bytes(bits + (True,), len(bits) // BITS_PER_BYTE + 1)

    def deserialize(self, data: bytes) -> tuple[bool, ...]:
        if not data or data[-1] == 0:
            raise InvalidValue(f"{self.type_name()}: missing delimiter bit")
        count = (len(data) - 1) * BITS_PER_BYTE + data[-1].bit_length() - 1
        if count > self.limit:
            raise InvalidValue(f"{self.type_name()}: {count} bits > limit")
        return _bits_from_bytes(data, count)

    def hash_tree_root(self, value: Any) -> bytes:
        bits = self.coerce(value)
        packed = _bits_to_bytes(bits, (len(bits) + BITS_PER_BYTE - 1) // BITS_PER_BYTE)
        chunk_limit = (self.limit + BITS_PER_CHUNK - 1) // BITS_PER_CHUNK
        return mix_in_length(merkleize(pack(packed), limit=chunk_limit), len(bits))

    def to_json(self, value: Any) -> list[bool]:
        return list(value)


def _elements_chunk_limit(elem: SSZType, limit: int) -> int:
    if elem.is_basic():
        return (limit * elem.fixed_size() + BYTES_PER_CHUNK - 1) // BYTES_PER_CHUNK
    return limit


def _elements_root(elem: SSZType, values: tuple, limit: int) -> bytes:
    """Root of a homogeneous sequence sized for `limit` elements."""
    chunk_limit = _elements_chunk_limit(elem, limit)
    if elem.is_basic():
        packed = b"".join(elem.serialize(v) for v in values)
        return merkleize(pack(packed), limit=chunk_limit)
    return merkleize([elem.hash_tree_root(v) for v in values], limit=chunk_limit)


@dataclass(frozen=True)
class Vector(SSZType):
    elem: SSZType
    length: int

    def __post_init__(self):
        if self.length <= 0:
            raise ValueError("Vector length must be positive")
        _check_tree_limit(self, _elements_chunk_limit(self.elem, self.length))

    def is_variable_size(self) -> bool:
        return self.elem.is_variable_size()

    def fixed_size(self) -> int:
        return self.elem.fixed_size() * self.length

    def type_name(self) -> str:
        return f"Vector[{self.elem.type_name()}, {self.length}]"

    def coerce(self, value: Any) -> tuple:
        if isinstance(value, (str, bytes, bytearray)):
            raise InvalidValue(f"{self.type_name()}: expected a sequence")
        items = tuple(value)
        if len(items) != self.length:
            raise InvalidValue(f"{self.type_name()}: got {len(items)} elements")
        return tuple(self.elem.coerce(v) for v in items)

    def serialize(self, value: Any) -> bytes:
        return encode_parts([self.elem] * self.length, self.coerce(value))

    def deserialize(self, data: bytes) -> tuple:
        return tuple(decode_parts([self.elem] * self.length, data))

    def hash_tree_root(self, value: Any) -> bytes:
        return _elements_root(self.elem, self.coerce(value), self.length)

    def to_json(self, value: Any) -> list:
        return [self.elem.to_json(v) for v in value]

    def from_json(self, obj: Any) -> tuple:
        if not isinstance(obj, list):
            raise InvalidValue(f"{self.type_name()}: expected a JSON array")
        return self.coerce([self.elem.from_json(v) for v in obj])


@dataclass(frozen=True)
class List(SSZType):
    elem: SSZType
    limit: int

    def __post_init__(self):
        if self.limit < 0:
            raise ValueError("List limit must be non-negative")
        _check_tree_limit(self, _elements_chunk_limit(self.elem, self.limit))

    def is_variable_size(self) -> bool:
        return True

    def type_name(self) -> str:
        return f"List[{self.elem.type_name()}, {self.limit}]"

    def coerce(self, value: Any) -> tuple:
        if isinstance(value, (str, bytes, bytearray)):
            raise InvalidValue(f"{self.type_name()}: expected a sequence")
        items = tuple(value)
        if len(items) > self.limit:
            raise InvalidValue(f"{self.type_name()}: {len(items)} elements > limit")
        return tuple(self.elem.coerce(v) for v in items)

    def serialize(self, value: Any) -> bytes:
        items = self.coerce(value)
        return encode_parts([self.elem] * len(items), items)

    def _count(self, data: bytes) -> int:
        if not self.elem.is_variable_size():
            size = self.elem.fixed_size()
            if len(data) % size:
                raise InvalidValue(f"{self.type_name()}: {len(data)} bytes not a multiple of {size}")
            return len(data) // size
        if not data:
            return 0
        if len(data) < BYTES_PER_LENGTH_OFFSET:
            raise TruncatedInput(f"{self.type_name()}: no room for first offset")
        first = int.from_bytes(data[:BYTES_PER_LENGTH_OFFSET], "little")
        if first == 0 or first % BYTES_PER_LENGTH_OFFSET or first > len(data):
            raise MalformedOffsets(f"{self.type_name()}: first offset {first} ({len(data)} bytes)")
        return first // BYTES_PER_LENGTH_OFFSET

    def deserialize(self, data: bytes) -> tuple:
        count = self._count(data)
        if count > self.limit:
            raise InvalidValue(f"{self.type_name()}: {count} elements > limit")
        return tuple(decode_parts([self.elem] * count, data))

    def hash_tree_root(self, value: Any) -> bytes:
        items = self.coerce(value)
        return mix_in_length(_elements_root(self.elem, items, self.limit), len(items))

    def to_json(self, value: Any) -> list:
        return [self.elem.to_json(v) for v in value]

    def from_json(self, obj: Any) -> tuple:
        if not isinstance(obj, list):
            raise InvalidValue(f"{self.type_name()}: expected a JSON array")
        return self.coerce([self.elem.from_json(v) for v in obj])


uint8 = Uint(8)
uint16 = Uint(16)
uint32 = Uint(32)
uint64 = Uint(64)
uint128 = Uint(128)
uint256 = Uint(256)
boolean = Boolean()
bytes32 = ByteVector(32)
