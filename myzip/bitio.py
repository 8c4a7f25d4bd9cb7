"""MSB-first bit IO shared by the Huffman and LZ77 coders.

Canonical choices:
  - Bit order: MSB-first within each byte (bit 7 -> bit 0).
  - Final partial byte padding: zero bits.
  - Reads past the end of the buffer return ``EOS`` instead of raising;
    a multi-bit read that cannot be filled returns ``EOS`` too (the bits it
    did find are consumed and dropped).
"""

from __future__ import annotations

from .errors import InvalidBitCount

EOS = -1  # end-of-stream sentinel returned by BitReader
MAX_BITS = 32


def _check_nbits(nbits: int) -> None:
    if nbits < 0 or nbits > MAX_BITS:
        raise InvalidBitCount(nbits)


class BitWriter:
    """Accumulates bits into a byte buffer, most significant bit first."""

    __slots__ = ("_out", "_acc", "_nbits")

    def __init__(self) -> None:
        self._out = bytearray()
        self._acc = 0      # pending bits, stored in the low bits
        self._nbits = 0    # number of valid bits in _acc (0..7)

    def tell_bits(self) -> int:
        """Total bits written so far (including pending bits)."""
        return (len(self._out) * 8) + self._nbits

    def write_bit(self, bit: int) -> None:
        if bit != 0 and bit != 1:
            raise ValueError(f"bit must be 0 or 1, got {bit!r}")
        self.write_bits(bit, 1)

    def write_bits(self, value: int, nbits: int) -> None:
        """
        Append exactly `nbits` bits of `value`, high bit first.

        Raises:
            InvalidBitCount: if nbits is outside 0..32.
            ValueError: if value doesn't fit in nbits.
        """
        _check_nbits(nbits)
        if nbits == 0:
            return
        if value < 0 or value >= (1 << nbits):
            raise ValueError(f"value {value} does not fit in {nbits} bits")

        acc = (self._acc << nbits) | value
        n = self._nbits + nbits
        out = self._out
        while n >= 8:
            n -= 8
            out.append((acc >> n) & 0xFF)
        self._acc = acc & ((1 << n) - 1)
        self._nbits = n

    def write_byte(self, value: int) -> None:
        self.write_bits(value, 8)

    def flush(self) -> None:
        """Pad the pending partial byte with zero bits."""
        if self._nbits:
            self.write_bits(0, 8 - self._nbits)

    def finish(self) -> bytes:
        """Flush and return everything written."""
        self.flush()
        return bytes(self._out)


class BitReader:
    """Mirror of BitWriter over an in-memory buffer."""

    __slots__ = ("_buf", "_off", "_acc", "_nbits")

    def __init__(self, buf: bytes) -> None:
        self._buf = buf
        self._off = 0
        self._acc = 0
        self._nbits = 0  # bits available in _acc

    def remaining_bits(self) -> int:
        return ((len(self._buf) - self._off) * 8) + self._nbits

    def tell_bits(self) -> int:
        """Bit position from start of buffer."""
        return (self._off * 8) - self._nbits

    def read_bit(self) -> int:
        if self._nbits == 0:
            if self._off >= len(self._buf):
                return EOS
            self._acc = self._buf[self._off]
            self._off += 1
            self._nbits = 8
        self._nbits -= 1
        return (self._acc >> self._nbits) & 1

    def read_bits(self, nbits: int) -> int:
        """
        Read `nbits` bits; the first bit read is the most significant.

        Returns EOS if the stream runs out before nbits are available.
        """
        _check_nbits(nbits)
        val = 0
        for _ in range(nbits):
            bit = self.read_bit()
            if bit == EOS:
                return EOS
            val = (val << 1) | bit
        return val

    def read_byte(self) -> int:
        return self.read_bits(8)


def bitio_selftest(verbose: bool = False) -> bool:
    """
    Round-trip a fixed pattern of mixed widths through BitWriter/BitReader.

    Deterministic and cheap; the CLI runs it on request only.
    """
    seq = [(0b1, 1), (0b01, 2), (0b101, 3), (0b11110000, 8), (0b0, 1), (0xABCD, 16), (0xDEADBEEF, 32)]
    bw = BitWriter()
    for v, n in seq:
        bw.write_bits(v, n)
    blob = bw.finish()

    br = BitReader(blob)
    out = [br.read_bits(n) for _, n in seq]
    if [v for v, _ in seq] != out:
        raise AssertionError(f"bitio selftest: roundtrip mismatch: {out} != {[v for v, _ in seq]}")
    if br.remaining_bits() >= 8:
        raise AssertionError("bitio selftest: reader left a whole unread byte")

    bw2 = BitWriter()
    for v, n in seq:
        bw2.write_bits(v, n)
    if bw2.finish() != blob:
        raise AssertionError("bitio selftest: non-deterministic emission")

    if verbose:
        print("OK: bit-IO selftest")
    return True
