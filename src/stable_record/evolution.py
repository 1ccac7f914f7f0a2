"""Compatibility between versions of one stable record schema.

A newer version may only append optional fields and relax required fields to
optional. Capacity is part of the type identity and never changes.
"""
from __future__ import annotations

from ssz_core.errors import SchemaMismatch

from .plan import ABSENT
from .record import RecordValue, StableRecordType


def check_extension(older: StableRecordType, newer: StableRecordType) -> tuple[str, ...]:
    """Raise SchemaMismatch unless `newer` extends `older`; return the appended field names."""
    if older.name != newer.name:
        raise SchemaMismatch(f"record name {newer.name!r} != {older.name!r}")
    if older.capacity != newer.capacity:
        raise SchemaMismatch(f"capacity {newer.capacity} != {older.capacity}")
    if len(newer.fields) < len(older.fields):
        raise SchemaMismatch(f"{len(newer.fields)} fields < {len(older.fields)}: fields cannot be removed")

    for i, (old, new) in enumerate(zip(older.fields, newer.fields)):
        if old.name != new.name:
            raise SchemaMismatch(f"field {i} renamed {old.name!r} -> {new.name!r}")
        if old.element_type != new.element_type:
            raise SchemaMismatch(
                f"field {old.name!r} type {old.element_type.type_name()} -> {new.element_type.type_name()}"
            )
        if new.required and not old.required:
            raise SchemaMismatch(f"field {old.name!r} became required")

    appended = newer.fields[len(older.fields):]
    for f in appended:
        if f.required:
            raise SchemaMismatch(f"appended field {f.name!r} must be optional")
    return tuple(f.name for f in appended)


def upgrade(value: RecordValue, newer: StableRecordType) -> RecordValue:
    """Re-express `value` under `newer`; appended fields are absent and the root is unchanged."""
    check_extension(value.record_type, newer)
    extra = len(newer.fields) - len(value.slots)
    return RecordValue(newer, value.slots + (ABSENT,) * extra)
