"""BitPresenceVector: which of the N slots carry an element."""
from __future__ import annotations

from typing import Sequence

from ssz_core.errors import InvalidPresenceBits, InvalidValue, SchemaMismatch
from ssz_core.protocol import BITS_PER_BYTE

from .plan import Absent, FieldPlan, Present


def presence_size(capacity: int) -> int:
    return (capacity + BITS_PER_BYTE - 1) // BITS_PER_BYTE


def build_presence(plan: FieldPlan, slots: Sequence) -> tuple[bool, ...]:
    if len(slots) != len(plan.fields):
        raise SchemaMismatch(f"{len(slots)} slots for {len(plan.fields)} fields")
    bits = []
    for f, slot in zip(plan.fields, slots):
        if isinstance(slot, Present):
            bits.append(True)
        elif isinstance(slot, Absent):
            bits.append(False)
        else:
            raise InvalidValue(f"field {f.name!r}: slot must be Present or ABSENT, got {slot!r}")
    return tuple(bits) + (False,) * (plan.capacity - len(plan.fields))


def validate_presence(plan: FieldPlan, bits: Sequence[bool]) -> None:
    if len(bits) != plan.capacity:
        raise InvalidPresenceBits(f"{len(bits)} bits for capacity {plan.capacity}")
    for i in plan.required_indices:
        if not bits[i]:
            raise InvalidPresenceBits(f"required field {plan.fields[i].name!r} absent")
    for i in range(len(plan.fields), plan.capacity):
        if bits[i]:
            raise InvalidPresenceBits(f"bit {i} set beyond {len(plan.fields)} declared fields")


def active_indices(bits: Sequence[bool]) -> list[int]:
    return [i for i, bit in enumerate(bits) if bit]


def serialize_presence(plan: FieldPlan, bits: Sequence[bool]) -> bytes:
    return plan.presence_type.serialize(bits)


def deserialize_presence(plan: FieldPlan, data: bytes) -> tuple[bool, ...]:
    """Read exactly presence_size(N) bytes.

    Any set bit at or past len(fields) is stray, including the padding bits of
    the final byte.
    """
    size = presence_size(plan.capacity)
    if len(data) != size:
        raise InvalidPresenceBits(f"expected {size} presence bytes, got {len(data)}")
    for i in range(len(plan.fields), size * BITS_PER_BYTE):
        if (data[i // BITS_PER_BYTE] >> (i % BITS_PER_BYTE)) & 1:
            raise InvalidPresenceBits(f"bit {i} set beyond {len(plan.fields)} declared fields")
    return tuple(
        bool((data[i // BITS_PER_BYTE] >> (i % BITS_PER_BYTE)) & 1) for i in range(plan.capacity)
    )


def presence_root(plan: FieldPlan, bits: Sequence[bool]) -> bytes:
    return plan.presence_type.hash_tree_root(bits)
