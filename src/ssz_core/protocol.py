"""SSZ wire constants.

Single source of truth for chunk sizes and offset layout.
Keep this file stable. Encoders and decoders must remain synchronized.
"""

# Merkle chunking
BYTES_PER_CHUNK = 32
BITS_PER_BYTE = 8
BITS_PER_CHUNK = BYTES_PER_CHUNK * BITS_PER_BYTE
ZERO_CHUNK = b"\x00" * BYTES_PER_CHUNK

# Offsets: [u32 little-endian] measured from the start of the fixed region
BYTES_PER_LENGTH_OFFSET = 4
OFFSET_FMT = "<I"
MAX_OFFSET = 2 ** (BYTES_PER_LENGTH_OFFSET * BITS_PER_BYTE)  # exclusive bound

# Zero-subtree table depth (covers list limits up to 2**64 chunks)
MAX_TREE_DEPTH = 64

# Allowed unsigned integer widths
UINT_BITS = (8, 16, 32, 64, 128, 256)
