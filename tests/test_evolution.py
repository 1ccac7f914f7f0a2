import pytest

from ssz_core.errors import SchemaMismatch
from ssz_core.types import ByteList, uint8, uint16
from stable_record.evolution import check_extension, upgrade
from stable_record.plan import optional, required
from stable_record.record import StableRecordType

V1 = StableRecordType("Rec", 8, (required("a", uint8), optional("b", ByteList(4))))


def test_appending_optional_fields():
    v2 = StableRecordType("Rec", 8, V1.fields + (optional("c", uint16), optional("d", uint8)))
    assert check_extension(V1, v2) == ("c", "d")
    assert check_extension(V1, V1) == ()


def test_required_may_become_optional():
    relaxed = StableRecordType("Rec", 8, (optional("a", uint8), optional("b", ByteList(4))))
    check_extension(V1, relaxed)
    with pytest.raises(SchemaMismatch):
        check_extension(relaxed, V1)


@pytest.mark.parametrize(
    "newer",
    [
        StableRecordType("Rec", 16, V1.fields),
        StableRecordType("Other", 8, V1.fields),
        StableRecordType("Rec", 8, V1.fields[:1]),
        StableRecordType("Rec", 8, (required("a", uint8), optional("bb", ByteList(4)))),
        StableRecordType("Rec", 8, (required("a", uint16), optional("b", ByteList(4)))),
        StableRecordType("Rec", 8, V1.fields + (required("c", uint8),)),
    ],
)
def test_incompatible_versions(newer):
    with pytest.raises(SchemaMismatch):
        check_extension(V1, newer)


def test_upgrade_keeps_bytes_and_root():
    v2_type = StableRecordType("Rec", 8, V1.fields + (optional("c", uint16),))
    v = V1.make(a=1, b=b"xy")
    up = upgrade(v, v2_type)
    assert up.encode() == v.encode()
    assert up.root() == v.root()
    assert v2_type.deserialize(v.encode()) == up


def test_cross_capacity_upgrade_rejected():
    wider = StableRecordType("Rec", 16, V1.fields)
    with pytest.raises(SchemaMismatch):
        upgrade(V1.make(a=1), wider)
