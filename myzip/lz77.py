"""Greedy sliding-window LZ77 coder.

Stream layout (BitWriter, MSB-first): ``u32`` original length, then tokens:

* literal: flag ``0`` + 8-bit byte
* match:   flag ``1`` + 12-bit back offset (1..4095) + 5-bit length
"""

from __future__ import annotations

import logging
from typing import Tuple

from .bitio import EOS, BitReader, BitWriter
from .errors import InvalidOffset

logger = logging.getLogger(__name__)

WINDOW_SIZE = 4096     # max back-reference span
LOOKAHEAD_SIZE = 18    # max match length
MIN_MATCH = 3
OFFSET_BITS = 12
LENGTH_BITS = 5
LEN_FIELD_BITS = 32

# 12 bits cannot carry an offset of WINDOW_SIZE itself
MAX_OFFSET = min(WINDOW_SIZE, 1 << OFFSET_BITS) - 1


def find_longest_match(data: bytes, pos: int) -> Tuple[int, int]:
    """
    Return (offset, length) of the longest match for ``data[pos:]``.

    Every window position is considered, oldest first; the first candidate
    reaching the maximum length wins. Matches may run past ``pos`` (overlap).
    Only candidates of at least MIN_MATCH bytes are reported; otherwise (0, 0).
    """
    end = min(len(data), pos + LOOKAHEAD_SIZE)
    max_len = end - pos
    if max_len < MIN_MATCH:
        return 0, 0
    start = max(0, pos - MAX_OFFSET)
    prefix = data[pos:pos + MIN_MATCH]
    best_off = 0
    best_len = 0
    # candidates must share the MIN_MATCH prefix; find() skips the rest cheaply
    i = data.find(prefix, start, pos + MIN_MATCH - 1)
    while i != -1:
        length = MIN_MATCH
        while length < max_len and data[i + length] == data[pos + length]:
            length += 1
        if length > best_len:
            best_len = length
            best_off = pos - i
            if best_len == max_len:
                break
        i = data.find(prefix, i + 1, pos + MIN_MATCH - 1)
    return best_off, best_len


def compress(data: bytes) -> bytes:
    if not data:
        return b""
    bw = BitWriter()
    bw.write_bits(len(data), LEN_FIELD_BITS)
    pos = 0
    n = len(data)
    while pos < n:
        offset, length = find_longest_match(data, pos)
        if length >= MIN_MATCH:
            bw.write_bit(1)
            bw.write_bits(offset, OFFSET_BITS)
            bw.write_bits(length, LENGTH_BITS)
            pos += length
        else:
            bw.write_bit(0)
            bw.write_byte(data[pos])
            pos += 1
    return bw.finish()


def decompress(comp: bytes, *, strict: bool = False) -> bytes:
    """
    Rebuild the original bytes.

    A match token with a zero offset or length is skipped with a warning;
    with ``strict=True`` it raises InvalidOffset instead. An offset reaching
    before the start of the output always raises InvalidOffset. A stream that
    ends early yields the bytes decoded so far.
    """
    if not comp:
        return b""
    br = BitReader(comp)
    original_len = br.read_bits(LEN_FIELD_BITS)
    if original_len == EOS:
        logger.warning("lz77: stream ends before the length field")
        return b""

    out = bytearray()
    while len(out) < original_len:
        flag = br.read_bit()
        if flag == EOS:
            break
        if flag == 1:
            offset = br.read_bits(OFFSET_BITS)
            length = br.read_bits(LENGTH_BITS)
            if offset == EOS or length == EOS:
                break
            if offset <= 0 or length <= 0:
                if strict:
                    raise InvalidOffset(offset, len(out))
                logger.warning("lz77: skipping empty match token (offset=%d length=%d) at output byte %d",
                               offset, length, len(out))
                continue
            if offset > len(out):
                raise InvalidOffset(offset, len(out))
            src = len(out) - offset
            # byte-at-a-time so offset < length repeats the overlapped pattern
            for k in range(length):
                out.append(out[src + k])
        else:
            literal = br.read_byte()
            if literal == EOS:
                break
            out.append(literal)
    return bytes(out)
