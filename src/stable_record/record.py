"""Stable record types and values.

A StableRecordType is an ordinary SSZ type, so records nest inside lists,
vectors and other records. It is always variable-size.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from ssz_core.errors import InvalidValue, SchemaMismatch
from ssz_core.types import SSZType

from . import codec, merkleizer
from .plan import ABSENT, Absent, FieldDescriptor, FieldPlan, Present
from .presence import build_presence, validate_presence


@dataclass(frozen=True)
class StableRecordType(SSZType):
    name: str
    capacity: int
    fields: tuple[FieldDescriptor, ...]
    plan: FieldPlan = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "plan", FieldPlan.build(self.fields, self.capacity))

    def is_variable_size(self) -> bool:
        return True

    def type_name(self) -> str:
        return f"StableRecord[{self.name}, {self.capacity}]"

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def make(self, **kwargs: Any) -> RecordValue:
        """Build a value; omitted, None or ABSENT keyword arguments mean absent."""
        unknown = set(kwargs) - set(self.field_names)
        if unknown:
            raise SchemaMismatch(f"unknown fields {sorted(unknown)} for {self.name}")
        slots = []
        for f in self.fields:
            v = kwargs.get(f.name)
            if v is None or isinstance(v, Absent):
                slots.append(ABSENT)
            else:
                if isinstance(v, Present):
                    v = v.value
                slots.append(Present(f.element_type.coerce(v)))
        return RecordValue(self, tuple(slots))

    def coerce(self, value: Any) -> RecordValue:
        if isinstance(value, RecordValue):
            if value.record_type != self:
                raise SchemaMismatch(
                    f"value of {value.record_type.type_name()} used as {self.type_name()}"
                )
            return value
        if isinstance(value, Mapping):
            return self.make(**value)
        raise InvalidValue(f"{self.type_name()}: expected RecordValue or mapping")

    def serialize(self, value: Any) -> bytes:
        return codec.encode(self.plan, self.coerce(value).slots)

    def deserialize(self, data: bytes) -> RecordValue:
        return RecordValue(self, codec.decode(self.plan, data))

    def hash_tree_root(self, value: Any) -> bytes:
        return merkleizer.root(self.plan, self.coerce(value).slots)

    def prove(self, value: Any, name: str) -> merkleizer.FieldProof:
        return merkleizer.prove(self.plan, self.coerce(value).slots, self.plan.index_of(name))

    def to_json(self, value: Any) -> dict:
        value = self.coerce(value)
        return {
            f.name: f.element_type.to_json(slot.value) if isinstance(slot, Present) else None
            for f, slot in zip(self.fields, value.slots)
        }

    def from_json(self, obj: Any) -> RecordValue:
        if not isinstance(obj, Mapping):
            raise InvalidValue(f"{self.type_name()}: expected a JSON object")
        unknown = set(obj) - set(self.field_names)
        if unknown:
            raise SchemaMismatch(f"unknown fields {sorted(unknown)} for {self.name}")
        values = {}
        for f in self.fields:
            if obj.get(f.name) is not None:
                values[f.name] = f.element_type.from_json(obj[f.name])
        return self.make(**values)


@dataclass(frozen=True)
class RecordValue:
    """Immutable record value: one Present/ABSENT slot per field."""

    record_type: StableRecordType
    slots: tuple

    def __post_init__(self):
        object.__setattr__(self, "slots", tuple(self.slots))
        validate_presence(self.record_type.plan, build_presence(self.record_type.plan, self.slots))

    def slot(self, name: str) -> Present | Absent:
        return self.slots[self.record_type.plan.index_of(name)]

    def __getitem__(self, name: str) -> Any:
        s = self.slot(name)
        return s.value if isinstance(s, Present) else None

    def is_active(self, name: str) -> bool:
        return isinstance(self.slot(name), Present)

    def presence(self) -> tuple[bool, ...]:
        return build_presence(self.record_type.plan, self.slots)

    def as_dict(self) -> dict:
        return {name: self[name] for name in self.record_type.field_names}

    def replace(self, **kwargs: Any) -> RecordValue:
        merged = {k: v for k, v in self.as_dict().items() if v is not None}
        merged.update(kwargs)
        return self.record_type.make(**merged)

    def encode(self) -> bytes:
        return self.record_type.serialize(self)

    def root(self) -> bytes:
        return self.record_type.hash_tree_root(self)
