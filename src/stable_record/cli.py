import json
from functools import wraps
from pathlib import Path

import click

from ssz_core.errors import InvalidInput, SSZError

from .evolution import check_extension
from .schema_io import load_schema, load_value
from .vectors import VECTORS_FILE, compile_vectors

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}

_file = click.Path(exists=True, dir_okay=False, path_type=Path)


def _emit(obj: dict) -> None:
    click.echo(json.dumps(obj, **CANONICAL_JSON_KW))


def _fail_closed(fn):
    """Report SSZ errors as a single FAIL line and exit 1."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except SSZError as e:
            _emit({"status": "FAIL", "error": e.to_dict()})
            raise SystemExit(1)
    return wrapper


def _read_encoded(arg: str) -> bytes:
    if arg.startswith("@"):
        try:
            return Path(arg[1:]).read_bytes()
        except OSError as e:
            raise InvalidInput(str(e)) from e
    s = arg[2:] if arg.startswith("0x") else arg
    try:
        return bytes.fromhex(s)
    except ValueError as e:
        raise InvalidInput(f"hex argument: {e}") from e


@click.group()
def main():
    pass


@main.command("encode")
@click.argument("schema", type=_file)
@click.argument("value", type=_file)
@_fail_closed
def encode_cmd(schema: Path, value: Path):
    v = load_value(load_schema(schema), value)
    encoded = v.encode()
    _emit({"status": "PASS", "encoded": "0x" + encoded.hex(), "length": len(encoded), "root": "0x" + v.root().hex()})


@main.command("decode")
@click.argument("schema", type=_file)
@click.argument("encoded")
@_fail_closed
def decode_cmd(schema: Path, encoded: str):
    t = load_schema(schema)
    v = t.deserialize(_read_encoded(encoded))
    _emit({"status": "PASS", "value": t.to_json(v), "root": "0x" + v.root().hex()})


@main.command("root")
@click.argument("schema", type=_file)
@click.argument("value", type=_file)
@_fail_closed
def root_cmd(schema: Path, value: Path):
    v = load_value(load_schema(schema), value)
    _emit({"status": "PASS", "root": "0x" + v.root().hex()})


@main.command("prove")
@click.argument("schema", type=_file)
@click.argument("value", type=_file)
@click.argument("field")
@_fail_closed
def prove_cmd(schema: Path, value: Path, field: str):
    t = load_schema(schema)
    v = load_value(t, value)
    proof = t.prove(v, field)
    _emit({"status": "PASS", "field": field, "root": "0x" + v.root().hex(), **proof.to_dict()})


@main.command("check-extension")
@click.argument("old", type=_file)
@click.argument("new", type=_file)
@_fail_closed
def check_extension_cmd(old: Path, new: Path):
    added = check_extension(load_schema(old), load_schema(new))
    _emit({"status": "PASS", "added": list(added)})


@main.command("vectors")
@click.argument("schema", type=_file)
@click.argument("values", type=_file)
@click.argument("out", type=click.Path(file_okay=False, path_type=Path))
@_fail_closed
def vectors_cmd(schema: Path, values: Path, out: Path):
    rows = compile_vectors(load_schema(schema), values, out)
    _emit({"status": "PASS", "rows": rows, "out": str(out / VECTORS_FILE)})


if __name__ == "__main__":
    main()
