"""DEFLATE-style composite: LZ77 tokens, then Huffman over the token bytes.

The Huffman stage sees the bit-packed LZ77 stream as opaque bytes; the two
stages share nothing but that buffer.
"""

from __future__ import annotations

from . import huffman, lz77


def compress(data: bytes) -> bytes:
    if not data:
        return b""
    return huffman.compress(lz77.compress(data))


def decompress(comp: bytes, *, strict: bool = False) -> bytes:
    if not comp:
        return b""
    return lz77.decompress(huffman.decompress(comp), strict=strict)
