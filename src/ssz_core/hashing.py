"""Chunk hashing and binary Merkle trees."""
from __future__ import annotations

import hashlib

from ssz_core.errors import InvalidSchema, InvalidValue
from ssz_core.protocol import BYTES_PER_CHUNK, MAX_TREE_DEPTH, ZERO_CHUNK


def hash_pair(a: bytes, b: bytes) -> bytes:
    h = hashlib.sha256()
    h.update(a)
    h.update(b)
    return h.digest()


def _zero_hashes(depth: int) -> list[bytes]:
    out = [ZERO_CHUNK]
    for _ in range(depth):
        out.append(hash_pair(out[-1], out[-1]))
    return out


# ZERO_HASHES[d] is the root of a full tree of depth d with all-zero leaves.
ZERO_HASHES = _zero_hashes(MAX_TREE_DEPTH)


def next_power_of_two(x: int) -> int:
    if x <= 1:
        return 1
    return 1 << (x - 1).bit_length()


def get_tree_depth(limit: int) -> int:
    """Depth of a tree holding `limit` leaves: ceil(log2(limit)), 0 for one leaf."""
    return (max(limit, 1) - 1).bit_length()


def pack(data: bytes) -> list[bytes]:
    """Split bytes into 32-byte chunks, right-padding the last one with zeros."""
    chunks = []
    for i in range(0, len(data), BYTES_PER_CHUNK):
        chunk = data[i : i + BYTES_PER_CHUNK]
        if len(chunk) < BYTES_PER_CHUNK:
            chunk = chunk + b"\x00" * (BYTES_PER_CHUNK - len(chunk))
        chunks.append(chunk)
    return chunks


def _check_limit(count: int, limit: int | None) -> int:
    if limit is None:
        limit = count
    if count > limit:
        raise InvalidValue(f"too many chunks ({count}) with limit={limit}")
    depth = get_tree_depth(limit)
    if depth > MAX_TREE_DEPTH:
        raise InvalidSchema(f"tree depth {depth} exceeds {MAX_TREE_DEPTH}")
    return depth


def merkleize(chunks: list[bytes], limit: int | None = None) -> bytes:
    """Merkleize chunks into a tree sized for `limit` leaves.

    - If `limit` is None, pad up to next_power_of_two(len(chunks)).
    - Otherwise pad up to next_power_of_two(limit).
    Missing subtrees are taken from ZERO_HASHES instead of being materialized.
    """
    depth = _check_limit(len(chunks), limit)
    if not chunks:
        return ZERO_HASHES[depth]

    layer = list(chunks)
    for d in range(depth):
        if len(layer) % 2:
            layer.append(ZERO_HASHES[d])
        layer = [hash_pair(layer[i], layer[i + 1]) for i in range(0, len(layer), 2)]
    return layer[0]


def merkle_branch(chunks: list[bytes], index: int, limit: int | None = None) -> list[bytes]:
    """Sibling chunks from leaf `index` up to the root, bottom-up."""
    depth = _check_limit(len(chunks), limit)
    if index < 0 or index >= (1 << depth):
        raise InvalidValue(f"leaf index {index} outside tree of depth {depth}")

    branch: list[bytes] = []
    layer = list(chunks)
    for d in range(depth):
        sibling = index ^ 1
        branch.append(layer[sibling] if sibling < len(layer) else ZERO_HASHES[d])
        if len(layer) % 2:
            layer.append(ZERO_HASHES[d])
        layer = [hash_pair(layer[i], layer[i + 1]) for i in range(0, len(layer), 2)]
        index >>= 1
    return branch


def root_from_branch(leaf: bytes, branch: list[bytes], index: int) -> bytes:
    node = leaf
    for i, sibling in enumerate(branch):
        if (index >> i) & 1:
            node = hash_pair(sibling, node)
        else:
            node = hash_pair(node, sibling)
    return node


def mix_in_length(root: bytes, length: int) -> bytes:
    """Mix a list length in as a 256-bit little-endian number."""
    return hash_pair(root, length.to_bytes(BYTES_PER_CHUNK, "little"))


def mix_in_aux(root: bytes, aux_root: bytes) -> bytes:
    """Mix an auxiliary 32-byte root into a tree root."""
    return hash_pair(root, aux_root)
