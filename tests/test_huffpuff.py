import os
import random

import pytest

import huffpuff
from huff_key import huff_key_size
from huffman_utils import HuffFormatError


def _write(tmp_path, name, data):
    path = tmp_path / name
    path.write_bytes(data)
    return str(path)


def _round_trip(tmp_path, data, name="in.bin"):
    src = _write(tmp_path, name, data)
    packed = huffpuff.huff(src)
    assert packed == src + ".huff"
    out = huffpuff.puff(packed)
    assert out == str(tmp_path / ("out_" + name))
    with open(out, "rb") as f:
        return f.read()


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"\x00",
        b"A" * 1000,
        bytes(range(256)),
        b"AAABBC",
        b"This is a test" * 100,
    ],
    ids=["empty", "single", "identical", "all-bytes", "aaabbc", "text"],
)
def test_round_trip(tmp_path, data):
    assert _round_trip(tmp_path, data) == data


def test_round_trip_random_10kb(tmp_path):
    rng = random.Random(1234)
    data = bytes(rng.getrandbits(8) for _ in range(10 * 1024))
    assert _round_trip(tmp_path, data) == data


def test_huff_is_deterministic(tmp_path):
    rng = random.Random(99)
    data = bytes(rng.choice(b"abcdeeeffff\n") for _ in range(5000))
    src = _write(tmp_path, "in.txt", data)
    with open(huffpuff.huff(src), "rb") as f:
        first = f.read()
    with open(huffpuff.huff(src), "rb") as f:
        second = f.read()
    assert first == second


def test_empty_input_writes_bare_header(tmp_path):
    src = _write(tmp_path, "empty.bin", b"")
    with open(huffpuff.huff(src), "rb") as f:
        assert f.read() == b"\x00\x0a" + bytes(8)


def test_single_symbol_uses_one_bit_per_byte(tmp_path):
    src = _write(tmp_path, "same.bin", b"z" * 20)
    with open(huffpuff.huff(src), "rb") as f:
        packed = f.read()
    assert int.from_bytes(packed[:2], "big") == huff_key_size(1)
    assert int.from_bytes(packed[2:10], "big") == 20
    assert packed[10:19] == b"z" + (20).to_bytes(8, "big")
    assert len(packed) == huff_key_size(1) + 3


def test_aaabbc_payload(tmp_path):
    src = _write(tmp_path, "abc.txt", b"AAABBC")
    with open(huffpuff.huff(src), "rb") as f:
        packed = f.read()
    key_len = huff_key_size(3)
    assert int.from_bytes(packed[2:10], "big") == 9
    assert packed[key_len:] == bytes([0b00011111, 0b00000000])


def test_truncated_payload_is_rejected(tmp_path):
    src = _write(tmp_path, "in.txt", b"Hello World" * 50)
    packed = huffpuff.huff(src)
    with open(packed, "rb") as f:
        data = f.read()
    with open(packed, "wb") as f:
        f.write(data[:-3])
    with pytest.raises(HuffFormatError):
        huffpuff.puff(packed)
    assert not os.path.exists(tmp_path / "out_in.txt")


def test_truncated_header_is_rejected(tmp_path):
    packed = _write(tmp_path, "bad.huff", b"\x00\x13\x00\x00")
    with pytest.raises(HuffFormatError):
        huffpuff.puff(packed)


def test_bits_without_records_are_rejected(tmp_path):
    packed = _write(tmp_path, "bad.huff", b"\x00\x0a" + (8).to_bytes(8, "big") + b"\xff")
    with pytest.raises(HuffFormatError):
        huffpuff.decode_huff_file(packed)


def test_output_naming():
    assert huffpuff.huff_output_path("a.txt") == "a.txt.huff"
    assert huffpuff.puff_output_path("a.txt.huff") == "out_a.txt"
    assert huffpuff.puff_output_path(os.path.join("d", "a.txt.huff")) == os.path.join("d", "out_a.txt")
    assert huffpuff.puff_output_path("plain") == "out_plain"


def test_run_rejects_unknown_command(tmp_path):
    src = _write(tmp_path, "in.txt", b"abc")
    with pytest.raises(ValueError):
        huffpuff.run("zip", src)


def test_run_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        huffpuff.run("huff", str(tmp_path / "missing.txt"))
    assert not os.path.exists(tmp_path / "missing.txt.huff")


def test_main_round_trip(tmp_path, capsys):
    src = _write(tmp_path, "notes.txt", b"mississippi river\n" * 40)
    assert huffpuff.main(["huff", src, "--verify"]) == 0
    assert huffpuff.main(["puff", src + ".huff"]) == 0
    out = capsys.readouterr().out
    assert "Wrote " + src + ".huff" in out
    assert "Verified" in out
    assert (tmp_path / "out_notes.txt").read_bytes() == b"mississippi river\n" * 40


def test_main_reports_core_failure(tmp_path, capsys):
    assert huffpuff.main(["puff", str(tmp_path / "missing.huff")]) == 1
    assert "Application error" in capsys.readouterr().err


@pytest.mark.parametrize("argv", [[], ["huff"], ["zip", "a.txt"], ["huff", "a", "b"]])
def test_main_usage_errors(argv, capsys):
    with pytest.raises(SystemExit) as exc:
        huffpuff.main(argv)
    assert exc.value.code != 0
    assert "usage" in capsys.readouterr().err
