#!/usr/bin/env python3
import heapq
from typing import Dict, Iterable, Iterator, List, Tuple, Union

import numpy as np


CHUNK_SIZE = 1 << 16


class HuffFormatError(ValueError):
    """Compressed input is truncated or its header is inconsistent."""


class HuffConsistencyError(RuntimeError):
    """Encoder state disagrees with the data being encoded."""


class HuffLeaf:
    def __init__(self, byte: int, freq: int) -> None:
        self.byte = byte
        self.freq = freq

    @property
    def min_byte(self) -> int:
        return self.byte


class HuffInternal:
    def __init__(self, left: "HuffNode", right: "HuffNode") -> None:
        self.left = left
        self.right = right
        self.freq = left.freq + right.freq
        # tie-break key for equal frequencies
        self.min_byte = min(left.min_byte, right.min_byte)


HuffNode = Union[HuffLeaf, HuffInternal]


def iter_file_chunks(path: str, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    with open(path, "rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                return
            yield chunk


def count_byte_frequency(path: str) -> Dict[int, int]:
    counts = np.zeros(256, dtype=np.int64)
    for chunk in iter_file_chunks(path):
        counts += np.bincount(np.frombuffer(chunk, dtype=np.uint8), minlength=256)
    return {int(b): int(c) for b, c in enumerate(counts.tolist()) if c > 0}


def build_huffman_tree(byte_frequency: Dict[int, int]) -> HuffNode:
    """Merge the two lightest nodes until one is left.

    Nodes are ordered by ``(freq, min_byte)``. Subtrees in the pool never
    share a byte, so that key is unique and the merge order is the same for
    every run over the same table. The node popped first becomes the left
    child.
    """
    if not byte_frequency:
        raise ValueError("Cannot build a Huffman tree from an empty frequency table.")

    heap: List[Tuple[int, int, HuffNode]] = []
    for byte, freq in byte_frequency.items():
        heap.append((freq, byte, HuffLeaf(byte, freq)))
    heapq.heapify(heap)

    while len(heap) > 1:
        _, _, left = heapq.heappop(heap)
        _, _, right = heapq.heappop(heap)
        node = HuffInternal(left, right)
        heapq.heappush(heap, (node.freq, node.min_byte, node))

    return heap[0][2]


def assign_codes(root: HuffNode) -> Dict[int, Tuple[int, int]]:
    if isinstance(root, HuffLeaf):
        return {root.byte: (0, 1)}

    codes: Dict[int, Tuple[int, int]] = {}
    stack: List[Tuple[HuffNode, int, int]] = [(root, 0, 0)]
    while stack:
        node, code, length = stack.pop()
        if isinstance(node, HuffLeaf):
            codes[node.byte] = (code, length)
            continue
        stack.append((node.right, (code << 1) | 1, length + 1))
        stack.append((node.left, code << 1, length + 1))
    return codes


class BitWriter:
    def __init__(self) -> None:
        self.buf = bytearray()
        self.acc = 0
        self.bits = 0
        self.bit_length = 0

    def write(self, code: int, length: int) -> None:
        for i in range(length - 1, -1, -1):
            bit = (code >> i) & 1
            self.acc = (self.acc << 1) | bit
            self.bits += 1
            if self.bits == 8:
                self.buf.append(self.acc & 0xFF)
                self.acc = 0
                self.bits = 0
        self.bit_length += length

    def finish(self) -> bytes:
        if self.bits > 0:
            self.acc <<= (8 - self.bits)
            self.buf.append(self.acc & 0xFF)
            self.acc = 0
            self.bits = 0
        return bytes(self.buf)


class BitReader:
    def __init__(self, data: bytes) -> None:
        self.data = data
        self.byte_idx = 0
        self.acc = 0
        self.bits = 0

    def read_bit(self) -> int:
        if self.bits == 0:
            if self.byte_idx >= len(self.data):
                return -1
            self.acc = self.data[self.byte_idx]
            self.byte_idx += 1
            self.bits = 8
        bit = (self.acc >> (self.bits - 1)) & 1
        self.bits -= 1
        return bit


def encode_chunks(chunks: Iterable[bytes], codes: Dict[int, Tuple[int, int]]) -> Tuple[bytes, int]:
    writer = BitWriter()
    for chunk in chunks:
        for byte in chunk:
            entry = codes.get(byte)
            if entry is None:
                raise HuffConsistencyError(f"No Huffman code for byte 0x{byte:02x}.")
            writer.write(entry[0], entry[1])
    return writer.finish(), writer.bit_length


def decode_bits(data: bytes, root: HuffNode, huff_len: int) -> bytes:
    reader = BitReader(data)
    out = bytearray()
    cursor = 0
    while cursor < huff_len:
        node = root
        if isinstance(node, HuffLeaf):
            # single-symbol tree: every code is one bit long
            if reader.read_bit() < 0:
                raise HuffFormatError(f"Bitstream ended at bit {cursor}, expected {huff_len} bits.")
            cursor += 1
        while isinstance(node, HuffInternal):
            bit = reader.read_bit()
            if bit < 0:
                raise HuffFormatError(f"Bitstream ended at bit {cursor}, expected {huff_len} bits.")
            cursor += 1
            node = node.right if bit else node.left
        if cursor > huff_len:
            raise HuffFormatError(f"Encoded length {huff_len} ends inside a Huffman code.")
        out.append(node.byte)
    return bytes(out)
