import json
from pathlib import Path

import pytest

from ssz_core.errors import InvalidInput, InvalidSchema, SchemaMismatch
from ssz_core.types import Bitlist, Bitvector, ByteList, ByteVector, List, Uint, Vector, boolean
from stable_record.evolution import check_extension
from stable_record.record import StableRecordType
from stable_record.schema_io import dump_type, load_record_type, load_schema, load_value, parse_type

SCHEMAS = Path(__file__).resolve().parents[1] / "examples" / "schemas"


def test_parse_type_strings():
    assert parse_type("uint64") == Uint(64)
    assert parse_type("bool") == boolean
    assert parse_type("bytes20") == ByteVector(20)
    assert parse_type("ByteList[64]") == ByteList(64)
    assert parse_type("Bitvector[4]") == Bitvector(4)
    assert parse_type("Bitlist[9]") == Bitlist(9)
    assert parse_type("Vector[uint8, 3]") == Vector(Uint(8), 3)
    assert parse_type("List[List[uint16, 2], 8]") == List(List(Uint(16), 2), 8)


@pytest.mark.parametrize(
    "spec",
    [
        "uint12",
        "Vector[uint8]",
        "List[uint8, x]",
        "float",
        "ByteVector[0]",
        7,
        "ByteList[-1]",
        "Bitlist[-1]",
        "List[uint8, -1]",
        "List[uint64, 1180591620717411303424]",
    ],
)
def test_parse_type_rejects(spec):
    with pytest.raises(InvalidSchema):
        parse_type(spec)


def test_example_schemas_are_compatible():
    v1 = load_schema(SCHEMAS / "receipt_v1.json")
    v2 = load_schema(SCHEMAS / "receipt_v2.json")
    assert v1.capacity == v2.capacity == 8
    assert check_extension(v1, v2) == ("contract_address", "meta")
    meta = v2.fields[-1].element_type
    assert isinstance(meta, StableRecordType)
    assert meta.name == "meta"


def test_dump_type_round_trips():
    v2 = load_schema(SCHEMAS / "receipt_v2.json")
    assert load_record_type(dump_type(v2)) == v2


def test_load_value_and_json_round_trip(tmp_path):
    v2 = load_schema(SCHEMAS / "receipt_v2.json")
    doc = {
        "status": 1,
        "gas_used": 21000,
        "logs": ["0xdead", "0x"],
        "meta": {"flags": [True, False, False, True]},
    }
    p = tmp_path / "value.json"
    p.write_text(json.dumps(doc), encoding="utf-8")
    v = load_value(v2, p)
    assert v["logs"] == (b"\xde\xad", b"")
    assert v["logs_bloom"] is None
    out = v2.to_json(v)
    assert out["meta"] == {"flags": [True, False, False, True], "note": None}
    assert v2.from_json(out) == v


def test_unknown_value_field(tmp_path):
    v1 = load_schema(SCHEMAS / "receipt_v1.json")
    with pytest.raises(SchemaMismatch):
        v1.from_json({"status": 1, "gas_used": 2, "contract_address": "0x00"})


def test_bad_documents(tmp_path):
    p = tmp_path / "bad.json"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(InvalidInput):
        load_schema(p)
    with pytest.raises(InvalidSchema):
        load_record_type({"name": "X", "capacity": 2, "fields": [{"name": "a"}]})
    with pytest.raises(InvalidSchema):
        load_record_type({"name": "X", "capacity": 2, "fields": [{"name": "a", "type": "uint8", "required": "yes"}]})
    with pytest.raises(InvalidSchema):
        load_record_type({"name": "X", "fields": []})
