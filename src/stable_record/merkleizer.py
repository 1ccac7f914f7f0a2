"""Capacity-padded Merkle root and field proofs.

    root = hash(merkleize(leaf[0..N], limit=N) ++ hash_tree_root(presence))

leaf[i] is the element root for an active field and a zero chunk otherwise.
Tree depth is ceil(log2(N)) whatever the current field count.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ssz_core.errors import CapacityExceeded
from ssz_core.hashing import (
    get_tree_depth,
    merkle_branch,
    merkleize,
    mix_in_aux,
    next_power_of_two,
    root_from_branch,
)
from ssz_core.protocol import ZERO_CHUNK

from .plan import FieldPlan
from .presence import build_presence, presence_root, validate_presence


def tree_depth(plan: FieldPlan) -> int:
    return get_tree_depth(plan.capacity)


def field_leaves(plan: FieldPlan, slots: Sequence) -> tuple[list[bytes], tuple[bool, ...]]:
    bits = build_presence(plan, slots)
    validate_presence(plan, bits)
    # Slots len(fields)..N are zero chunks; merkleize pads them in.
    leaves = [
        plan.fields[i].element_type.hash_tree_root(slots[i].value) if bits[i] else ZERO_CHUNK
        for i in range(len(plan.fields))
    ]
    return leaves, bits


def root(plan: FieldPlan, slots: Sequence) -> bytes:
    leaves, bits = field_leaves(plan, slots)
    data_root = merkleize(leaves, limit=plan.capacity)
    return mix_in_aux(data_root, presence_root(plan, bits))


@dataclass(frozen=True)
class FieldProof:
    capacity: int
    index: int
    leaf: bytes
    branch: tuple[bytes, ...]
    bits_root: bytes

    @property
    def depth(self) -> int:
        return len(self.branch)

    @property
    def gindex(self) -> int:
        # Root is 1, data root is 2, presence root is 3.
        return 2 * next_power_of_two(self.capacity) + self.index

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "gindex": self.gindex,
            "depth": self.depth,
            "leaf": "0x" + self.leaf.hex(),
            "branch": ["0x" + b.hex() for b in self.branch],
            "bits_root": "0x" + self.bits_root.hex(),
        }


def prove(plan: FieldPlan, slots: Sequence, index: int) -> FieldProof:
    if not 0 <= index < plan.capacity:
        raise CapacityExceeded(f"slot {index} outside capacity {plan.capacity}")
    leaves, bits = field_leaves(plan, slots)
    leaf = leaves[index] if index < len(leaves) else ZERO_CHUNK
    return FieldProof(
        capacity=plan.capacity,
        index=index,
        leaf=leaf,
        branch=tuple(merkle_branch(leaves, index, limit=plan.capacity)),
        bits_root=presence_root(plan, bits),
    )


def verify_field_proof(expected_root: bytes, proof: FieldProof) -> bool:
    if proof.depth != get_tree_depth(proof.capacity):
        return False
    data_root = root_from_branch(proof.leaf, list(proof.branch), proof.index)
    return mix_in_aux(data_root, proof.bits_root) == expected_root
