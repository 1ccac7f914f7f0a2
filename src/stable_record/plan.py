"""Field plans: the static per-schema layout table."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ssz_core.errors import CapacityExceeded, InvalidSchema, SchemaMismatch
from ssz_core.types import Bitvector, SSZType


class Absent:
    """Slot marker for an optional field that carries no element."""

    _instance: Absent | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = Absent()


@dataclass(frozen=True)
class Present:
    value: Any


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    element_type: SSZType
    required: bool = False


def required(name: str, element_type: SSZType) -> FieldDescriptor:
    return FieldDescriptor(name, element_type, True)


def optional(name: str, element_type: SSZType) -> FieldDescriptor:
    return FieldDescriptor(name, element_type, False)


@dataclass(frozen=True)
class FieldPlan:
    """Position, requiredness and size class of every field, fixed for the schema.

    `variable[i]` is computed once here so encode and decode always agree on
    which slots are offsets.
    """

    capacity: int
    fields: tuple[FieldDescriptor, ...]
    variable: tuple[bool, ...] = field(repr=False)
    presence_type: Bitvector = field(repr=False)

    @classmethod
    def build(cls, fields, capacity: int) -> FieldPlan:
        fields = tuple(fields)
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise InvalidSchema(f"capacity must be a positive integer, got {capacity!r}")
        if len(fields) > capacity:
            raise CapacityExceeded(f"{len(fields)} fields > capacity {capacity}")

        seen: set[str] = set()
        for f in fields:
            if not isinstance(f, FieldDescriptor):
                raise InvalidSchema(f"expected FieldDescriptor, got {type(f).__name__}")
            if not f.name:
                raise InvalidSchema("field name must be non-empty")
            if f.name in seen:
                raise InvalidSchema(f"duplicate field {f.name!r}")
            if not isinstance(f.element_type, SSZType):
                raise InvalidSchema(f"field {f.name!r}: not an SSZ type")
            seen.add(f.name)

        return cls(
            capacity=capacity,
            fields=fields,
            variable=tuple(f.element_type.is_variable_size() for f in fields),
            presence_type=Bitvector(capacity),
        )

    def index_of(self, name: str) -> int:
        for i, f in enumerate(self.fields):
            if f.name == name:
                return i
        raise SchemaMismatch(f"unknown field {name!r}")

    @property
    def required_indices(self) -> tuple[int, ...]:
        return tuple(i for i, f in enumerate(self.fields) if f.required)
