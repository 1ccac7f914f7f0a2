"""Fixed/variable aggregate packing.

Layout: [fixed parts, with a u32 offset in place of each variable part] ++ [variable parts].
Offsets are measured from the start of the fixed region.

`variable` may carry precomputed size classes (one bool per type); when omitted
each type is asked.
"""
from __future__ import annotations

import struct
from typing import Any, Sequence

from ssz_core.errors import EncodingTooLarge, MalformedOffsets, TrailingBytes, TruncatedInput
from ssz_core.protocol import BYTES_PER_LENGTH_OFFSET, MAX_OFFSET, OFFSET_FMT


def _size_classes(types: Sequence[Any], variable: Sequence[bool] | None) -> list[bool]:
    if variable is None:
        return [t.is_variable_size() for t in types]
    if len(variable) != len(types):
        raise ValueError(f"{len(variable)} size classes for {len(types)} types")
    return list(variable)


def fixed_region_size(types: Sequence[Any], variable: Sequence[bool] | None = None) -> int:
    return sum(
        BYTES_PER_LENGTH_OFFSET if var else t.fixed_size()
        for t, var in zip(types, _size_classes(types, variable))
    )


def encode_parts(
    types: Sequence[Any], values: Sequence[Any], variable: Sequence[bool] | None = None
) -> bytes:
    fixed_parts: list[bytes | None] = []
    variable_parts: list[bytes] = []
    for t, v, var in zip(types, values, _size_classes(types, variable)):
        if var:
            fixed_parts.append(None)
            variable_parts.append(t.serialize(v))
        else:
            fixed_parts.append(t.serialize(v))
            variable_parts.append(b"")

    fixed_len = sum(BYTES_PER_LENGTH_OFFSET if p is None else len(p) for p in fixed_parts)
    total = fixed_len + sum(len(p) for p in variable_parts)
    if total >= MAX_OFFSET:
        raise EncodingTooLarge(f"{total} bytes")

    out = bytearray()
    offset = fixed_len
    for part, var_part in zip(fixed_parts, variable_parts):
        if part is None:
            out += struct.pack(OFFSET_FMT, offset)
        else:
            out += part
        offset += len(var_part)
    for var_part in variable_parts:
        out += var_part
    return bytes(out)


def decode_parts(
    types: Sequence[Any], data: bytes, variable: Sequence[bool] | None = None
) -> list[Any]:
    classes = _size_classes(types, variable)
    fixed_len = fixed_region_size(types, classes)
    if len(data) < fixed_len:
        raise TruncatedInput(f"need {fixed_len} bytes of fixed region, got {len(data)}")

    fixed_slices: dict[int, bytes] = {}
    offsets: list[tuple[int, int]] = []  # (type index, offset)
    pos = 0
    for i, (t, var) in enumerate(zip(types, classes)):
        if var:
            (off,) = struct.unpack_from(OFFSET_FMT, data, pos)
            offsets.append((i, off))
            pos += BYTES_PER_LENGTH_OFFSET
        else:
            size = t.fixed_size()
            fixed_slices[i] = data[pos : pos + size]
            pos += size

    if not offsets:
        if len(data) != fixed_len:
            raise TrailingBytes(f"{len(data) - fixed_len} bytes after fixed region")
    else:
        if offsets[0][1] != fixed_len:
            raise MalformedOffsets(f"first offset {offsets[0][1]} != fixed region size {fixed_len}")
        bounds = [off for _, off in offsets] + [len(data)]
        for a, b in zip(bounds, bounds[1:]):
            if b < a:
                raise MalformedOffsets(f"offset {b} precedes {a} (buffer {len(data)} bytes)")

    values: list[Any] = [None] * len(types)
    for i, chunk in fixed_slices.items():
        values[i] = types[i].deserialize(chunk)
    for k, (i, off) in enumerate(offsets):
        end = offsets[k + 1][1] if k + 1 < len(offsets) else len(data)
        values[i] = types[i].deserialize(data[off:end])
    return values
