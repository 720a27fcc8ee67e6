#!/usr/bin/env python3
from typing import BinaryIO, Dict

import numpy as np

from huffman_utils import HuffFormatError


KEY_FIXED_SIZE = 10
KEY_RECORD_DTYPE = np.dtype([("byte", "u1"), ("freq", ">u8")])
KEY_RECORD_SIZE = KEY_RECORD_DTYPE.itemsize  # 9


class HuffKey:
    def __init__(self, key_len: int, huff_len: int, byte_frequency: Dict[int, int]) -> None:
        self.key_len = key_len
        self.huff_len = huff_len
        self.byte_frequency = byte_frequency


def huff_key_size(num_records: int) -> int:
    return KEY_FIXED_SIZE + num_records * KEY_RECORD_SIZE


def write_huff_key(f: BinaryIO, byte_frequency: Dict[int, int], huff_len: int) -> int:
    key_len = huff_key_size(len(byte_frequency))
    records = np.zeros(len(byte_frequency), dtype=KEY_RECORD_DTYPE)
    for i, byte in enumerate(sorted(byte_frequency)):
        records[i] = (byte, byte_frequency[byte])

    f.write(key_len.to_bytes(2, byteorder="big"))
    f.write(huff_len.to_bytes(8, byteorder="big"))
    f.write(records.tobytes())
    return key_len


def read_huff_key(f: BinaryIO) -> HuffKey:
    fixed = f.read(KEY_FIXED_SIZE)
    if len(fixed) < KEY_FIXED_SIZE:
        raise HuffFormatError(f"Compressed input is {len(fixed)} bytes, shorter than the {KEY_FIXED_SIZE}-byte header.")
    key_len = int.from_bytes(fixed[:2], byteorder="big")
    huff_len = int.from_bytes(fixed[2:], byteorder="big")

    if key_len < KEY_FIXED_SIZE or (key_len - KEY_FIXED_SIZE) % KEY_RECORD_SIZE != 0:
        raise HuffFormatError(f"Header length {key_len} does not match a whole number of frequency records.")

    body = f.read(key_len - KEY_FIXED_SIZE)
    if len(body) < key_len - KEY_FIXED_SIZE:
        raise HuffFormatError(f"Header declares {key_len} bytes but only {KEY_FIXED_SIZE + len(body)} are present.")

    records = np.frombuffer(body, dtype=KEY_RECORD_DTYPE) if body else np.zeros(0, dtype=KEY_RECORD_DTYPE)
    byte_frequency: Dict[int, int] = {}
    for byte, freq in zip(records["byte"].tolist(), records["freq"].tolist()):
        if byte in byte_frequency:
            raise HuffFormatError(f"Byte 0x{byte:02x} appears twice in the frequency table.")
        byte_frequency[byte] = freq

    return HuffKey(key_len, huff_len, byte_frequency)
