"""SSZ Core - Shared serialization, hashing and error codes."""
from .errors import ERRORS, SSZError
from .hashing import hash_pair, merkleize, mix_in_aux, mix_in_length
from .types import (
    Bitlist,
    Bitvector,
    Boolean,
    ByteList,
    ByteVector,
    List,
    SSZType,
    Uint,
    Vector,
    boolean,
    bytes32,
    uint8,
    uint16,
    uint32,
    uint64,
    uint128,
    uint256,
)

__all__ = [
    "ERRORS", "SSZError",
    "hash_pair", "merkleize", "mix_in_aux", "mix_in_length",
    "SSZType", "Uint", "Boolean", "ByteVector", "ByteList", "Bitvector", "Bitlist", "Vector", "List",
    "uint8", "uint16", "uint32", "uint64", "uint128", "uint256", "boolean", "bytes32",
]
