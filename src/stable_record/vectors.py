from __future__ import annotations

import json
from pathlib import Path
from warnings import warn

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from ssz_core.errors import InvalidInput, SSZError

from .record import StableRecordType

VECTORS_FILE = "vectors.parquet"

VECTORS_SCHEMA = pa.schema(
    [
        ("index", pa.int32()),
        ("value_json", pa.string()),
        ("status", pa.string()),
        ("encoded_hex", pa.string()),
        ("length", pa.int32()),
        ("root", pa.string()),
    ]
)


def _canonical(obj) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def vector_row(record_type: StableRecordType, index: int, obj) -> dict:
    """Encode one JSON value; failures become rows with the error code as status."""
    try:
        value = record_type.from_json(obj)
        encoded = value.encode()
        root = value.root()
    except SSZError as e:
        warn(f"Value {index} rejected: {e}")
        return {
            "index": index,
            "value_json": _canonical(obj),
            "status": e.code,
            "encoded_hex": "",
            "length": 0,
            "root": "",
        }

    return {
        "index": index,
        "value_json": _canonical(record_type.to_json(value)),
        "status": "PASS",
        "encoded_hex": "0x" + encoded.hex(),
        "length": len(encoded),
        "root": "0x" + root.hex(),
    }


def compile_vectors(record_type: StableRecordType, values_path: Path, out_path: Path) -> int:
    """Build <out>/vectors.parquet from a JSONL file of values. Returns the row count."""
    rows: list[dict] = []
    with open(values_path, "rb") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                obj = json.loads(line)
            except ValueError as e:
                raise InvalidInput(f"{values_path}:{lineno}: {e}") from e
            rows.append(vector_row(record_type, len(rows), obj))

    Path(out_path).mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(rows)
    if df.empty:
        return 0

    table = pa.Table.from_pandas(df, schema=VECTORS_SCHEMA, preserve_index=False)
    pq.write_table(table, Path(out_path) / VECTORS_FILE)
    return len(rows)
