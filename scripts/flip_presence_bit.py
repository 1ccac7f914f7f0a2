import sys
from pathlib import Path


def main():
    if len(sys.argv) != 3:
        print("Usage: flip_presence_bit.py <encoded_file> <bit>")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    bit = int(sys.argv[2])
    b = bytearray(p.read_bytes())
    if bit // 8 >= len(b):
        print("Bit outside the encoded record.")
        raise SystemExit(2)

    # Presence bits lead the record, LSB first within each byte.
    # Clearing a required bit or setting a reserved one must make decode fail.
    b[bit // 8] ^= 1 << (bit % 8)
    p.write_bytes(bytes(b))
    print(f"Flipped presence bit {bit} (byte {bit // 8}) in {p}")


if __name__ == "__main__":
    main()
