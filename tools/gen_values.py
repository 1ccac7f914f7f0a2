import json
import random
import sys
from pathlib import Path

from ssz_core.types import Bitlist, Bitvector, Boolean, ByteList, ByteVector, List, Uint, Vector
from stable_record.record import StableRecordType
from stable_record.schema_io import load_schema


def random_json(t, rng: random.Random):
    """Random JSON value of SSZ type `t`."""
    if isinstance(t, StableRecordType):
        obj = {}
        for f in t.fields:
            if f.required or rng.random() < 0.5:
                obj[f.name] = random_json(f.element_type, rng)
        return obj
    if isinstance(t, Boolean):
        return rng.random() < 0.5
    if isinstance(t, Uint):
        return rng.randrange(1 << min(t.bits, 64))
    if isinstance(t, ByteVector):
        return "0x" + rng.randbytes(t.length).hex()
    if isinstance(t, ByteList):
        return "0x" + rng.randbytes(rng.randint(0, min(t.limit, 64))).hex()
    if isinstance(t, Bitvector):
        return [rng.random() < 0.5 for _ in range(t.length)]
    if isinstance(t, Bitlist):
        return [rng.random() < 0.5 for _ in range(rng.randint(0, min(t.limit, 64)))]
    if isinstance(t, Vector):
        return [random_json(t.elem, rng) for _ in range(t.length)]
    if isinstance(t, List):
        return [random_json(t.elem, rng) for _ in range(rng.randint(0, min(t.limit, 8)))]
    raise TypeError(f"no generator for {t}")


def generate_values(schema_path: str, out_path: str, count: int, seed: int, invalid: bool = False) -> Path:
    t = load_schema(Path(schema_path))
    rng = random.Random(seed)
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    with open(out, "wb") as f:
        for i in range(count):
            obj = random_json(t, rng)
            # Drop a required field to produce a rejected row.
            if invalid and i == count - 1:
                req = [fd.name for fd in t.fields if fd.required]
                if req:
                    obj.pop(req[0], None)
            line = json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
            f.write(line.encode("utf-8") + b"\n")

    print(f"GENERATED: {out} ({count} values)")
    return out


if __name__ == "__main__":
    # Usage:
    #   python tools/gen_values.py SCHEMA OUT.jsonl [--count 16] [--seed 0] [--invalid]

    args = [a for a in sys.argv[1:] if a]

    def pop_flag(arg_list: list[str], flag: str) -> tuple[bool, list[str]]:
        """Remove a boolean flag from an argv-style list."""
        if flag in arg_list:
            return True, [a for a in arg_list if a != flag]
        return False, arg_list

    def pop_int(arg_list: list[str], opt: str, default: int) -> tuple[int, list[str]]:
        if opt not in arg_list:
            return default, arg_list
        i = arg_list.index(opt)
        if i + 1 >= len(arg_list):
            raise SystemExit(f"{opt} requires a value")
        return int(arg_list[i + 1]), arg_list[:i] + arg_list[i + 2:]

    invalid, args = pop_flag(args, "--invalid")
    count, args = pop_int(args, "--count", 16)
    seed, args = pop_int(args, "--seed", 0)

    if len(args) != 2:
        raise SystemExit("Usage: gen_values.py SCHEMA OUT.jsonl [--count N] [--seed S] [--invalid]")

    generate_values(args[0], args[1], count, seed, invalid=invalid)
