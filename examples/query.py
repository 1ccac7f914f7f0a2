"""Query reference vectors - compare encoded sizes by presence pattern."""
from __future__ import annotations

import sys
from pathlib import Path

import duckdb


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python query.py <vectors_dir> [status]")
        print("Example: python query.py out/ PASS")
        sys.exit(1)

    out = Path(sys.argv[1])
    status = sys.argv[2] if len(sys.argv) > 2 else "PASS"

    con = duckdb.connect(":memory:")
    con.execute(f"CREATE VIEW vectors AS SELECT * FROM '{out}/vectors.parquet'")

    # Presence byte(s) are the first bytes of each encoding.
    sql = """
    SELECT
        substr(encoded_hex, 3, 2) AS presence,
        count(*) AS n,
        min(length) AS min_len,
        max(length) AS max_len
    FROM vectors
    WHERE status = ?
    GROUP BY presence
    ORDER BY presence
    """

    print(f"--- Vectors: status {status} ---\n")

    df = con.execute(sql, [status]).fetchdf()
    if df.empty:
        print("No matching vectors.")
    else:
        for _, row in df.iterrows():
            print(f"PRESENCE: 0x{row['presence']}")
            print(f"  Count: {row['n']}")
            print(f"  Length: {row['min_len']}..{row['max_len']} bytes")
            print()


if __name__ == "__main__":
    main()
