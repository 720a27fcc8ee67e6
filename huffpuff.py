#!/usr/bin/env python3
import argparse
import os
import sys
from typing import List, Optional

from huff_key import read_huff_key, write_huff_key
from huffman_utils import (
    HuffFormatError,
    assign_codes,
    build_huffman_tree,
    count_byte_frequency,
    decode_bits,
    encode_chunks,
    iter_file_chunks,
)


HUFF_SUFFIX = ".huff"
OUT_PREFIX = "out_"
COMMANDS = ("huff", "puff")


def huff_output_path(file_path: str) -> str:
    return file_path + HUFF_SUFFIX


def puff_output_path(file_path: str) -> str:
    dirpath, name = os.path.split(file_path)
    if name.endswith(HUFF_SUFFIX):
        name = name[:-len(HUFF_SUFFIX)]
    return os.path.join(dirpath, OUT_PREFIX + name)


def huff(file_path: str) -> str:
    byte_frequency = count_byte_frequency(file_path)
    if byte_frequency:
        codes = assign_codes(build_huffman_tree(byte_frequency))
        payload, huff_len = encode_chunks(iter_file_chunks(file_path), codes)
    else:
        payload, huff_len = b"", 0

    out_path = huff_output_path(file_path)
    with open(out_path, "wb") as f:
        write_huff_key(f, byte_frequency, huff_len)
        f.write(payload)
    return out_path


def decode_huff_file(file_path: str) -> bytes:
    with open(file_path, "rb") as f:
        key = read_huff_key(f)
        payload = f.read()

    if len(payload) * 8 < key.huff_len:
        raise HuffFormatError(f"Payload holds {len(payload) * 8} bits, header declares {key.huff_len}.")
    if not key.byte_frequency:
        if key.huff_len:
            raise HuffFormatError(f"Header declares {key.huff_len} bits but no frequency records.")
        return b""

    root = build_huffman_tree(key.byte_frequency)
    data = decode_bits(payload, root, key.huff_len)
    expected = sum(key.byte_frequency.values())
    if len(data) != expected:
        raise HuffFormatError(f"Decoded {len(data)} bytes, expected {expected}.")
    return data


def puff(file_path: str) -> str:
    data = decode_huff_file(file_path)
    out_path = puff_output_path(file_path)
    with open(out_path, "wb") as f:
        f.write(data)
    return out_path


def run(cmd: str, file_path: str) -> str:
    if cmd == "huff":
        return huff(file_path)
    if cmd == "puff":
        return puff(file_path)
    raise ValueError(f"Invalid command: {cmd}")


def ratio(raw: float, comp: float) -> float:
    return raw / comp if comp > 0 else 0.0


def read_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Compress (huff) or decompress (puff) a file with Huffman coding.")
    parser.add_argument("cmd", choices=COMMANDS, help="huff writes <file>.huff, puff writes out_<file>.")
    parser.add_argument("file_path", help="File to compress, or .huff file to decompress.")
    parser.add_argument("--verify", action="store_true", help="After huff, decode the output and compare with the source.")
    args = parser.parse_args(argv)

    try:
        out_path = run(args.cmd, args.file_path)
    except (OSError, ValueError, RuntimeError) as exc:
        print(f"Application error: {exc}", file=sys.stderr)
        return 1

    if args.cmd == "huff":
        raw = os.path.getsize(args.file_path)
        comp = os.path.getsize(out_path)
        print(f"Wrote {out_path} ({raw} -> {comp} bytes, ratio {ratio(raw, comp):.3f})")
        if args.verify:
            try:
                ok = decode_huff_file(out_path) == read_file(args.file_path)
            except (OSError, ValueError) as exc:
                print(f"Verify failed: {out_path} ({exc})", file=sys.stderr)
                return 2
            if not ok:
                print(f"Mismatch: {out_path}", file=sys.stderr)
                return 2
            print(f"Verified: {out_path}")
    else:
        print(f"Wrote {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
