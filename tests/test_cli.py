import json
import os
import subprocess
import sys
from pathlib import Path

import pyarrow.parquet as pq

REPO = Path(__file__).resolve().parents[1]
SCHEMAS = REPO / "examples" / "schemas"


def run(*args):
    env = dict(os.environ)
    env["PYTHONPATH"] = str(REPO / "src") + os.pathsep + env.get("PYTHONPATH", "")
    return subprocess.run(
        [sys.executable, *args], cwd=REPO, env=env, check=False, capture_output=True, text=True
    )


def cli(*args):
    return run("-m", "stable_record.cli", *args)


def test_encode_decode_root(tmp_path):
    value = tmp_path / "value.json"
    value.write_text(json.dumps({"status": 1, "gas_used": 21000}), encoding="utf-8")

    r = cli("encode", str(SCHEMAS / "receipt_v1.json"), str(value))
    assert r.returncode == 0, r.stderr + r.stdout
    enc = json.loads(r.stdout)
    assert enc["status"] == "PASS"
    assert enc["encoded"] == "0x03" + "01" + (21000).to_bytes(8, "little").hex()
    assert enc["length"] == 10

    r = cli("decode", str(SCHEMAS / "receipt_v2.json"), enc["encoded"])
    assert r.returncode == 0, r.stderr + r.stdout
    dec = json.loads(r.stdout)
    assert dec["value"]["gas_used"] == 21000
    assert dec["value"]["contract_address"] is None
    # Decoding under the extended schema keeps the root.
    assert dec["root"] == enc["root"]

    r = cli("root", str(SCHEMAS / "receipt_v1.json"), str(value))
    assert json.loads(r.stdout)["root"] == enc["root"]


def test_decode_failure_exits_nonzero(tmp_path):
    # Required "status" bit cleared.
    r = cli("decode", str(SCHEMAS / "receipt_v1.json"), "0x02" + "00" * 8)
    assert r.returncode == 1
    out = json.loads(r.stdout)
    assert out["status"] == "FAIL"
    assert out["error"]["code"] == "E_INVALID_PRESENCE_BITS"

    blob = tmp_path / "rec.bin"
    blob.write_bytes(bytes.fromhex("0301") + (5).to_bytes(8, "little"))
    r = run("scripts/flip_presence_bit.py", str(blob), "7")
    assert r.returncode == 0, r.stderr + r.stdout
    r = cli("decode", str(SCHEMAS / "receipt_v1.json"), f"@{blob}")
    assert r.returncode == 1
    assert json.loads(r.stdout)["error"]["code"] == "E_INVALID_PRESENCE_BITS"


def test_prove_and_check_extension(tmp_path):
    value = tmp_path / "value.json"
    value.write_text(json.dumps({"status": 0, "gas_used": 1}), encoding="utf-8")
    r = cli("prove", str(SCHEMAS / "receipt_v2.json"), str(value), "meta")
    assert r.returncode == 0, r.stderr + r.stdout
    proof = json.loads(r.stdout)
    assert proof["depth"] == 3
    assert proof["gindex"] == 21
    assert proof["leaf"] == "0x" + "00" * 32

    r = cli("check-extension", str(SCHEMAS / "receipt_v1.json"), str(SCHEMAS / "receipt_v2.json"))
    assert r.returncode == 0, r.stderr + r.stdout
    assert json.loads(r.stdout)["added"] == ["contract_address", "meta"]

    r = cli("check-extension", str(SCHEMAS / "receipt_v2.json"), str(SCHEMAS / "receipt_v1.json"))
    assert r.returncode == 1
    assert json.loads(r.stdout)["error"]["code"] == "E_SCHEMA_MISMATCH"


def test_generated_values_to_vectors(tmp_path):
    values = tmp_path / "values.jsonl"
    out = tmp_path / "out"

    r = run("tools/gen_values.py", str(SCHEMAS / "receipt_v2.json"), str(values), "--count", "8", "--invalid")
    assert r.returncode == 0, r.stderr + r.stdout

    r = cli("vectors", str(SCHEMAS / "receipt_v2.json"), str(values), str(out))
    assert r.returncode == 0, r.stderr + r.stdout
    assert json.loads(r.stdout)["rows"] == 8

    rows = pq.read_table(out / "vectors.parquet").to_pylist()
    assert all(r["status"] == "PASS" for r in rows[:-1])
    assert rows[-1]["status"] == "E_INVALID_PRESENCE_BITS"


def test_over_deep_list_limit_fails_closed(tmp_path):
    schema = tmp_path / "deep.json"
    schema.write_text(
        json.dumps({"name": "Deep", "capacity": 4, "fields": [{"name": "xs", "type": f"List[uint64, {2 ** 70}]"}]}),
        encoding="utf-8",
    )
    value = tmp_path / "value.json"
    value.write_text(json.dumps({"xs": [1]}), encoding="utf-8")

    for command in ("root", "encode"):
        r = cli(command, str(schema), str(value))
        assert r.returncode == 1
        lines = r.stdout.strip().splitlines()
        assert len(lines) == 1
        out = json.loads(lines[0])
        assert out["status"] == "FAIL"
        assert out["error"]["code"] == "E_INVALID_SCHEMA"
