"""Unit tests for the MSB-first bit writer/reader."""

import pytest

from myzip.bitio import EOS, BitReader, BitWriter, bitio_selftest
from myzip.errors import InvalidBitCount


class TestBitWriter:

    def test_bits_are_packed_msb_first(self):
        bw = BitWriter()
        for bit in (1, 0, 1, 1, 0, 0, 0, 1):
            bw.write_bit(bit)
        assert bw.finish() == bytes([0b10110001])

    def test_partial_byte_is_zero_padded(self):
        bw = BitWriter()
        bw.write_bits(0b101, 3)
        assert bw.tell_bits() == 3
        assert bw.finish() == bytes([0b10100000])

    def test_write_bits_spanning_bytes(self):
        bw = BitWriter()
        bw.write_bits(0xABCDE, 20)
        assert bw.finish() == bytes([0xAB, 0xCD, 0xE0])

    def test_write_byte_is_eight_bits(self):
        bw = BitWriter()
        bw.write_bit(1)
        bw.write_byte(0xFF)
        assert bw.finish() == bytes([0xFF, 0x80])

    def test_write_32_bits(self):
        bw = BitWriter()
        bw.write_bits(0xDEADBEEF, 32)
        assert bw.finish() == bytes.fromhex("deadbeef")

    def test_zero_bits_writes_nothing(self):
        bw = BitWriter()
        bw.write_bits(0, 0)
        assert bw.finish() == b""

    @pytest.mark.parametrize("nbits", [-1, 33, 64])
    def test_invalid_bit_count(self, nbits):
        with pytest.raises(InvalidBitCount):
            BitWriter().write_bits(0, nbits)

    def test_invalid_bit_value(self):
        with pytest.raises(ValueError):
            BitWriter().write_bit(2)

    def test_value_too_wide(self):
        with pytest.raises(ValueError):
            BitWriter().write_bits(8, 3)

    def test_flush_is_idempotent_on_byte_boundary(self):
        bw = BitWriter()
        bw.write_byte(0x12)
        bw.flush()
        bw.flush()
        assert bw.finish() == b"\x12"


class TestBitReader:

    def test_mirrors_writer(self):
        bw = BitWriter()
        bw.write_bits(5, 3)
        bw.write_bits(1000, 12)
        bw.write_bit(1)
        br = BitReader(bw.finish())
        assert br.read_bits(3) == 5
        assert br.read_bits(12) == 1000
        assert br.read_bit() == 1

    def test_read_bit_returns_eos_when_exhausted(self):
        br = BitReader(b"\x80")
        assert br.read_bit() == 1
        for _ in range(7):
            assert br.read_bit() == 0
        assert br.read_bit() == EOS

    def test_partial_read_returns_eos(self):
        br = BitReader(b"\xff")
        assert br.read_bits(12) == EOS

    def test_read_byte(self):
        br = BitReader(b"\x41\x42")
        assert br.read_byte() == 0x41
        assert br.read_byte() == 0x42
        assert br.read_byte() == EOS

    def test_tell_and_remaining(self):
        br = BitReader(b"\x00\x00")
        br.read_bits(5)
        assert br.tell_bits() == 5
        assert br.remaining_bits() == 11

    def test_invalid_bit_count(self):
        with pytest.raises(InvalidBitCount):
            BitReader(b"\x00" * 8).read_bits(33)


def test_selftest_passes(capsys):
    assert bitio_selftest(verbose=True)
    assert "OK: bit-IO selftest" in capsys.readouterr().out
