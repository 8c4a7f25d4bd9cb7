"""Static Huffman coder over byte frequencies.

Encoded layout (via BitWriter, MSB-first):

* ``u16``  number of distinct byte values
* per value: ``u8`` byte, ``u32`` frequency (ascending byte order)
* ``u32``  original length
* the concatenated codes of every input byte, zero-padded to a byte boundary

Only the frequency table is stored; the decoder rebuilds the same tree.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .bitio import EOS, MAX_BITS, BitReader, BitWriter

logger = logging.getLogger(__name__)

COUNT_BITS = 16
FREQ_BITS = 32
LENGTH_BITS = 32


@dataclass
class HuffmanNode:
    """Leaf when ``symbol`` is set, internal node otherwise."""
    weight: int
    symbol: Optional[int] = None
    left: Optional["HuffmanNode"] = None
    right: Optional["HuffmanNode"] = None

    @property
    def is_leaf(self) -> bool:
        return self.symbol is not None


def frequency_table(data: bytes) -> Dict[int, int]:
    freq = [0] * 256
    for b in data:
        freq[b] += 1
    return {sym: n for sym, n in enumerate(freq) if n}


def build_tree(freqs: Dict[int, int]) -> Optional[HuffmanNode]:
    """
    Merge the two lightest nodes until one root remains.

    Ties are broken by arrival order (a monotonically increasing counter), so
    the same table in the same order always gives the same tree.
    """
    if not freqs:
        return None
    seq = itertools.count()
    heap: List[Tuple[int, int, HuffmanNode]] = []
    for sym, weight in freqs.items():
        heapq.heappush(heap, (weight, next(seq), HuffmanNode(weight=weight, symbol=sym)))
    while len(heap) > 1:
        w1, _, left = heapq.heappop(heap)
        w2, _, right = heapq.heappop(heap)
        parent = HuffmanNode(weight=w1 + w2, left=left, right=right)
        heapq.heappush(heap, (parent.weight, next(seq), parent))
    return heap[0][2]


def generate_codes(root: Optional[HuffmanNode]) -> Dict[int, str]:
    """Map each symbol to its bit string ("0" for a lone leaf)."""
    codes: Dict[int, str] = {}

    def walk(node: Optional[HuffmanNode], prefix: str) -> None:
        if node is None:
            return
        if node.is_leaf:
            codes[node.symbol] = prefix or "0"
            return
        walk(node.left, prefix + "0")
        walk(node.right, prefix + "1")

    walk(root, "")
    return codes


def compress(data: bytes) -> bytes:
    if not data:
        return b""
    freqs = frequency_table(data)
    codes = generate_codes(build_tree(freqs))
    packed = {sym: (int(code, 2), len(code)) for sym, code in codes.items()}

    bw = BitWriter()
    bw.write_bits(len(freqs), COUNT_BITS)
    for sym, weight in freqs.items():
        bw.write_byte(sym)
        bw.write_bits(weight, FREQ_BITS)
    bw.write_bits(len(data), LENGTH_BITS)
    for b in data:
        value, nbits = packed[b]
        # very skewed tables on large inputs can yield codes wider than one write
        while nbits > MAX_BITS:
            nbits -= MAX_BITS
            bw.write_bits(value >> nbits, MAX_BITS)
            value &= (1 << nbits) - 1
        bw.write_bits(value, nbits)
    return bw.finish()


def decompress(comp: bytes) -> bytes:
    if not comp:
        return b""
    br = BitReader(comp)
    count = br.read_bits(COUNT_BITS)
    if count == EOS:
        logger.warning("huffman: stream ends inside the header")
        return b""
    freqs: Dict[int, int] = {}
    for _ in range(count):
        sym = br.read_byte()
        weight = br.read_bits(FREQ_BITS)
        if sym == EOS or weight == EOS:
            logger.warning("huffman: stream ends inside the frequency table")
            return b""
        freqs[sym] = weight
    original_len = br.read_bits(LENGTH_BITS)
    if original_len == EOS:
        logger.warning("huffman: stream ends before the length field")
        return b""

    root = build_tree(freqs)
    if root is None:
        return b""
    if root.is_leaf:
        return bytes([root.symbol]) * original_len

    out = bytearray()
    node = root
    while len(out) < original_len:
        bit = br.read_bit()
        if bit == EOS:
            logger.debug("huffman: stream ended after %d of %d bytes", len(out), original_len)
            break
        node = node.left if bit == 0 else node.right
        if node.is_leaf:
            out.append(node.symbol)
            node = root
    return bytes(out)
