"""JSON schema files and value documents.

Schema file:
    {"name": "Receipt", "capacity": 8,
     "fields": [{"name": "a", "type": "uint8", "required": true}, ...]}

A field type is a type string (uint64, bytes32, ByteList[64], List[uint64, 16], ...)
or an inline schema object for a nested stable record.
"""
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from ssz_core.errors import InvalidInput, InvalidSchema
from ssz_core.types import (
    Bitlist,
    Bitvector,
    ByteList,
    ByteVector,
    List,
    SSZType,
    Uint,
    Vector,
    boolean,
)

from .plan import FieldDescriptor
from .record import RecordValue, StableRecordType

_UINT_RE = re.compile(r"^uint(\d+)$")
_BYTES_RE = re.compile(r"^bytes(\d+)$")
_GENERIC_RE = re.compile(r"^(\w+)\[(.*)\]$", re.S)

_SIZED = {
    "ByteVector": ByteVector,
    "ByteList": ByteList,
    "Bitvector": Bitvector,
    "Bitlist": Bitlist,
}
_SEQUENCES = {"Vector": Vector, "List": List}


def _load_json(path: Path):
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except ValueError as e:
        raise InvalidInput(f"{path}: {e}") from e


def _split_args(s: str) -> list[str]:
    args, depth, cur = [], 0, ""
    for ch in s:
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
        if ch == "," and depth == 0:
            args.append(cur.strip())
            cur = ""
        else:
            cur += ch
    args.append(cur.strip())
    return args


def _int_arg(s: str, spec: str) -> int:
    try:
        return int(s)
    except ValueError:
        raise InvalidSchema(f"type {spec!r}: {s!r} is not an integer") from None


def parse_type(spec: Any) -> SSZType:
    if isinstance(spec, dict):
        return load_record_type(spec)
    if not isinstance(spec, str):
        raise InvalidSchema(f"type must be a string or object, got {type(spec).__name__}")

    s = spec.strip()
    try:
        if s in ("boolean", "bool"):
            return boolean
        m = _UINT_RE.match(s)
        if m:
            return Uint(int(m.group(1)))
        m = _BYTES_RE.match(s)
        if m:
            return ByteVector(int(m.group(1)))
        m = _GENERIC_RE.match(s)
        if m:
            kind, args = m.group(1), _split_args(m.group(2))
            if kind in _SIZED and len(args) == 1:
                return _SIZED[kind](_int_arg(args[0], spec))
            if kind in _SEQUENCES and len(args) == 2:
                return _SEQUENCES[kind](parse_type(args[0]), _int_arg(args[1], spec))
    except ValueError as e:
        if isinstance(e, InvalidSchema):
            raise
        raise InvalidSchema(f"type {spec!r}: {e}") from e
    raise InvalidSchema(f"unknown type {spec!r}")


def load_record_type(obj: dict, default_name: str | None = None) -> StableRecordType:
    if not isinstance(obj, dict):
        raise InvalidSchema("schema must be a JSON object")
    name = obj.get("name", default_name)
    if not name:
        raise InvalidSchema("schema name missing")
    fields_obj = obj.get("fields")
    if not isinstance(fields_obj, list):
        raise InvalidSchema(f"{name}: 'fields' must be a list")

    fields = []
    for i, f in enumerate(fields_obj):
        if not isinstance(f, dict) or "name" not in f or "type" not in f:
            raise InvalidSchema(f"{name}: field {i} needs 'name' and 'type'")
        t = f["type"]
        element_type = load_record_type(t, default_name=f["name"]) if isinstance(t, dict) else parse_type(t)
        req = f.get("required", False)
        if not isinstance(req, bool):
            raise InvalidSchema(f"{name}.{f['name']}: 'required' must be a boolean")
        fields.append(FieldDescriptor(f["name"], element_type, req))

    return StableRecordType(name, obj.get("capacity"), tuple(fields))


def load_schema(path: Path) -> StableRecordType:
    return load_record_type(_load_json(path))


def load_value(record_type: StableRecordType, path: Path) -> RecordValue:
    return record_type.from_json(_load_json(path))


def dump_type(t: SSZType) -> Any:
    if isinstance(t, StableRecordType):
        return {
            "name": t.name,
            "capacity": t.capacity,
            "fields": [
                {"name": f.name, "type": dump_type(f.element_type), "required": f.required}
                for f in t.fields
            ],
        }
    return t.type_name()
