"""Unit tests for the LZ77 coder."""

import pytest

from myzip import lz77
from myzip.bitio import BitReader, BitWriter
from myzip.errors import InvalidOffset

from conftest import ROUND_TRIP_CASES


def _tokens(comp):
    br = BitReader(comp)
    n = br.read_bits(32)
    produced = 0
    tokens = []
    while produced < n:
        if br.read_bit() == 1:
            off, ln = br.read_bits(12), br.read_bits(5)
            tokens.append(("match", off, ln))
            produced += ln
        else:
            tokens.append(("lit", br.read_byte()))
            produced += 1
    return tokens


@pytest.mark.parametrize("name", sorted(ROUND_TRIP_CASES))
def test_round_trip(name):
    data = ROUND_TRIP_CASES[name]
    assert lz77.decompress(lz77.compress(data)) == data


def test_round_trip_random(random_bytes):
    assert lz77.decompress(lz77.compress(random_bytes)) == random_bytes


def test_round_trip_beyond_window():
    block = bytes(range(256)) * 3
    data = block + b"\x01" * 5000 + block
    assert lz77.decompress(lz77.compress(data)) == data


def test_abcabcabc_tokens():
    comp = lz77.compress(b"ABCABCABC")
    assert _tokens(comp) == [("lit", 65), ("lit", 66), ("lit", 67), ("match", 3, 6)]
    assert lz77.decompress(comp) == b"ABCABCABC"


def test_match_length_capped_by_lookahead():
    tokens = _tokens(lz77.compress(b"a" * 100))
    assert tokens[0] == ("lit", ord("a"))
    assert all(t[2] <= lz77.LOOKAHEAD_SIZE for t in tokens if t[0] == "match")


def test_offsets_fit_in_twelve_bits():
    data = bytes(range(256)) * 40
    for t in _tokens(lz77.compress(data)):
        if t[0] == "match":
            assert 1 <= t[1] <= 4095


def test_find_longest_match_takes_first_maximum():
    data = b"xyzQxyzRxyz"
    assert lz77.find_longest_match(data, 8) == (8, 3)


def test_empty():
    assert lz77.compress(b"") == b""
    assert lz77.decompress(b"") == b""


class TestDecodeErrors:

    def _stream(self, original_len, *tokens):
        bw = BitWriter()
        bw.write_bits(original_len, 32)
        for t in tokens:
            if t[0] == "lit":
                bw.write_bit(0)
                bw.write_byte(t[1])
            else:
                bw.write_bit(1)
                bw.write_bits(t[1], 12)
                bw.write_bits(t[2], 5)
        return bw.finish()

    def test_offset_beyond_output_is_fatal(self):
        comp = self._stream(5, ("lit", 65), ("match", 4, 3))
        with pytest.raises(InvalidOffset):
            lz77.decompress(comp)

    def test_zero_offset_token_is_skipped(self, caplog):
        comp = self._stream(2, ("lit", 65), ("match", 0, 3), ("lit", 66))
        assert lz77.decompress(comp) == b"AB"
        assert "skipping" in caplog.text

    def test_zero_offset_token_strict(self):
        comp = self._stream(2, ("lit", 65), ("match", 0, 3), ("lit", 66))
        with pytest.raises(InvalidOffset):
            lz77.decompress(comp, strict=True)

    def test_overlapping_copy(self):
        comp = self._stream(7, ("lit", 65), ("match", 1, 6))
        assert lz77.decompress(comp) == b"A" * 7

    def test_truncated_stream_stops_early(self):
        data = b"some text that is long enough to be cut in half " * 4
        comp = lz77.compress(data)
        out = lz77.decompress(comp[:len(comp) // 2])
        assert len(out) < len(data)
        assert data.startswith(out)
