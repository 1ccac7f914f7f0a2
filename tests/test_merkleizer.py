import hashlib

import pytest

from ssz_core.errors import CapacityExceeded, InvalidPresenceBits
from ssz_core.types import ByteList, List, uint8, uint64
from stable_record import merkleizer
from stable_record.evolution import upgrade
from stable_record.merkleizer import verify_field_proof
from stable_record.plan import ABSENT, Present, optional, required
from stable_record.record import StableRecordType

ZERO = b"\x00" * 32


def sha(a: bytes, b: bytes) -> bytes:
    return hashlib.sha256(a + b).digest()


T = StableRecordType("T", 4, (required("a", uint8), optional("b", uint8)))
T2 = StableRecordType("T", 4, (required("a", uint8), optional("b", uint8), optional("c", uint8)))


def test_root_matches_hand_computed_tree():
    leaf_a = b"\x05" + b"\x00" * 31
    data_root = sha(sha(leaf_a, ZERO), sha(ZERO, ZERO))
    bits_root = b"\x01" + b"\x00" * 31
    assert T.make(a=5).root() == sha(data_root, bits_root)

    leaf_b = b"\x07" + b"\x00" * 31
    data_root = sha(sha(leaf_a, leaf_b), sha(ZERO, ZERO))
    bits_root = b"\x03" + b"\x00" * 31
    assert T.make(a=5, b=7).root() == sha(data_root, bits_root)


def test_root_stable_under_append():
    v = T.make(a=5, b=7)
    v2 = upgrade(v, T2)
    assert v2.as_dict() == {"a": 5, "b": 7, "c": None}
    assert v2.root() == v.root()
    assert T2.make(a=5, b=7, c=1).root() != v.root()


def test_root_stable_across_required_to_optional():
    relaxed = StableRecordType("T", 4, (optional("a", uint8), optional("b", uint8)))
    assert relaxed.make(a=5).root() == T.make(a=5).root()


def test_absent_differs_from_zero_value():
    assert T.make(a=5).root() != T.make(a=5, b=0).root()


def test_variable_fields_use_element_roots():
    R = StableRecordType("R", 2, (required("xs", List(uint64, 4)), optional("blob", ByteList(40))))
    v = R.make(xs=[1, 2], blob=b"hi")
    expected = sha(
        sha(List(uint64, 4).hash_tree_root((1, 2)), ByteList(40).hash_tree_root(b"hi")),
        b"\x03" + b"\x00" * 31,
    )
    assert v.root() == expected


def test_tree_depth_fixed_by_capacity():
    one = StableRecordType("S", 8, (required("f0", uint8),))
    full = StableRecordType("S", 8, tuple(optional(f"f{i}", uint8) for i in range(8)))
    assert merkleizer.tree_depth(one.plan) == 3
    assert merkleizer.tree_depth(full.plan) == 3

    v1 = one.make(f0=1)
    v8 = full.make(**{f"f{i}": i for i in range(8)})
    p1 = one.prove(v1, "f0")
    p8 = full.prove(v8, "f7")
    assert p1.depth == p8.depth == 3
    assert p1.gindex == 16
    assert p8.gindex == 23
    assert verify_field_proof(v1.root(), p1)
    assert verify_field_proof(v8.root(), p8)


def test_proof_of_absent_and_reserved_slots():
    v = T.make(a=5)
    p = T.prove(v, "b")
    assert p.leaf == ZERO
    assert verify_field_proof(v.root(), p)

    reserved = merkleizer.prove(T.plan, v.slots, 3)
    assert reserved.leaf == ZERO
    assert verify_field_proof(v.root(), reserved)
    with pytest.raises(CapacityExceeded):
        merkleizer.prove(T.plan, v.slots, 4)


def test_tampered_proof_fails():
    v = T.make(a=5, b=7)
    p = T.prove(v, "a")
    forged = merkleizer.FieldProof(p.capacity, p.index, b"\x06" + b"\x00" * 31, p.branch, p.bits_root)
    assert not verify_field_proof(v.root(), forged)
    short = merkleizer.FieldProof(p.capacity, p.index, p.leaf, p.branch[:-1], p.bits_root)
    assert not verify_field_proof(v.root(), short)


def test_root_rejects_missing_required():
    with pytest.raises(InvalidPresenceBits):
        merkleizer.root(T.plan, (ABSENT, Present(1)))


def test_non_power_of_two_capacity():
    F = StableRecordType("F", 5, (required("a", uint8),))
    assert merkleizer.tree_depth(F.plan) == 3
    leaf_a = b"\x09" + b"\x00" * 31
    z1 = sha(ZERO, ZERO)
    data_root = sha(sha(sha(leaf_a, ZERO), z1), sha(z1, z1))
    assert F.make(a=9).root() == sha(data_root, b"\x01" + b"\x00" * 31)
