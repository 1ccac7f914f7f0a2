"""Stable record codec.

Wire layout:
    [presence: Bitvector[N], ceil(N/8) bytes]
    [fixed region: active fixed-size fields in place, u32 offset per active variable-size field]
    [variable region: active variable-size fields in field order]

Offsets are measured from the start of the fixed region.
"""
from __future__ import annotations

from typing import Sequence

from ssz_core.aggregate import decode_parts, encode_parts
from ssz_core.errors import TruncatedInput

from .plan import ABSENT, FieldPlan, Present
from .presence import (
    active_indices,
    build_presence,
    deserialize_presence,
    presence_size,
    serialize_presence,
    validate_presence,
)


def encode(plan: FieldPlan, slots: Sequence) -> bytes:
    bits = build_presence(plan, slots)
    validate_presence(plan, bits)

    active = active_indices(bits)
    types = [plan.fields[i].element_type for i in active]
    variable = [plan.variable[i] for i in active]
    values = [slots[i].value for i in active]

    return serialize_presence(plan, bits) + encode_parts(types, values, variable)


def decode(plan: FieldPlan, data: bytes) -> tuple:
    data = bytes(data)
    head = presence_size(plan.capacity)
    if len(data) < head:
        raise TruncatedInput(f"need {head} presence bytes, got {len(data)}")

    bits = deserialize_presence(plan, data[:head])
    validate_presence(plan, bits)

    active = active_indices(bits)
    types = [plan.fields[i].element_type for i in active]
    variable = [plan.variable[i] for i in active]
    values = decode_parts(types, data[head:], variable)

    slots: list = [ABSENT] * len(plan.fields)
    for i, v in zip(active, values):
        slots[i] = Present(v)
    return tuple(slots)
