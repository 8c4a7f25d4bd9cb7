"""Unit tests for the Huffman coder."""

import struct

import pytest

from myzip import huffman
from myzip.bitio import BitWriter

from conftest import ROUND_TRIP_CASES


@pytest.mark.parametrize("name", sorted(ROUND_TRIP_CASES))
def test_round_trip(name):
    data = ROUND_TRIP_CASES[name]
    assert huffman.decompress(huffman.compress(data)) == data


def test_round_trip_random(random_bytes):
    assert huffman.decompress(huffman.compress(random_bytes)) == random_bytes


def test_empty_input_has_no_header():
    assert huffman.compress(b"") == b""
    assert huffman.decompress(b"") == b""


class TestTree:

    def test_single_symbol_tree_is_a_leaf(self):
        root = huffman.build_tree({65: 10})
        assert root.is_leaf
        assert huffman.generate_codes(root) == {65: "0"}

    def test_codes_are_prefix_free(self):
        freqs = huffman.frequency_table(b"aaaaabbbbcccdde")
        codes = huffman.generate_codes(huffman.build_tree(freqs))
        values = list(codes.values())
        for a in values:
            for b in values:
                if a != b:
                    assert not b.startswith(a)

    def test_frequent_symbols_get_shorter_codes(self):
        codes = huffman.generate_codes(huffman.build_tree({1: 100, 2: 1, 3: 1, 4: 1}))
        assert len(codes[1]) < len(codes[2])

    def test_tree_is_deterministic(self):
        freqs = {i: 5 for i in range(10)}
        assert huffman.generate_codes(huffman.build_tree(freqs)) == huffman.generate_codes(huffman.build_tree(freqs))

    def test_empty_table(self):
        assert huffman.build_tree({}) is None


class TestFormat:

    def test_header_layout(self):
        comp = huffman.compress(b"aab")
        count, = struct.unpack(">H", comp[:2])
        assert count == 2
        assert comp[2] == ord("a")
        assert struct.unpack(">I", comp[3:7])[0] == 2
        assert comp[7] == ord("b")
        assert struct.unpack(">I", comp[8:12])[0] == 1
        assert struct.unpack(">I", comp[12:16])[0] == 3

    def test_single_symbol_uses_no_body_bits(self):
        # header only: the decoder must not need any code bits
        bw = BitWriter()
        bw.write_bits(1, 16)
        bw.write_byte(ord("x"))
        bw.write_bits(7, 32)
        bw.write_bits(7, 32)
        assert huffman.decompress(bw.finish()) == b"x" * 7

    def test_single_symbol_compressed_length(self):
        comp = huffman.compress(b"q" * 1000)
        # 2 + 5 + 4 header bytes, then 1000 one-bit codes
        assert len(comp) == 11 + 125
        assert huffman.decompress(comp) == b"q" * 1000

    def test_truncated_body_stops_early(self):
        data = b"abracadabra" * 50
        comp = huffman.compress(data)
        out = huffman.decompress(comp[:len(comp) // 2])
        assert 0 < len(out) < len(data)
        assert data.startswith(out)

    def test_truncated_header_yields_nothing(self):
        comp = huffman.compress(b"hello world")
        assert huffman.decompress(comp[:4]) == b""
