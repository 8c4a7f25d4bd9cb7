"""Algorithm names and dispatch to the individual coders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List

from . import deflate, huffman, lz77, lzw, rle
from .errors import UnknownAlgorithm

# -----------------------------
# Archive algorithm tags (stored in metadata)
# -----------------------------
ALGO_LZW = "LZW"
ALGO_RLE = "RLE"
ALGO_STORE = "STORE"
ALGO_DUPLICATE = "DUPLICATE"
ARCHIVE_ALGORITHMS = frozenset({ALGO_LZW, ALGO_RLE, ALGO_STORE, ALGO_DUPLICATE})

# standalone coders, not selectable by the archive
ALGO_HUFFMAN = "HUFFMAN"
ALGO_LZ77 = "LZ77"
ALGO_DEFLATE = "DEFLATE"


def _store(data: bytes) -> bytes:
    return bytes(data)


@dataclass(frozen=True)
class Codec:
    name: str
    compress: Callable[[bytes], bytes]
    decompress: Callable[[bytes], bytes]


CODECS: Dict[str, Codec] = {
    c.name: c for c in (
        Codec(ALGO_HUFFMAN, huffman.compress, huffman.decompress),
        Codec(ALGO_LZ77, lz77.compress, lz77.decompress),
        Codec(ALGO_DEFLATE, deflate.compress, deflate.decompress),
        Codec(ALGO_LZW, lzw.compress, lzw.decompress),
        Codec(ALGO_RLE, rle.compress, rle.decompress),
        Codec(ALGO_STORE, _store, _store),
    )
}


def get_codec(name: str) -> Codec:
    codec = CODECS.get(name.upper())
    if codec is None:
        raise UnknownAlgorithm(name)
    return codec


def available_codecs() -> List[str]:
    return list(CODECS)


def check_archive_algorithm(algorithm: str) -> str:
    if algorithm not in ARCHIVE_ALGORITHMS:
        raise UnknownAlgorithm(algorithm)
    return algorithm


def compress_blob(data: bytes, algorithm: str) -> bytes:
    """Encode one archive blob; STORE passes the bytes through."""
    check_archive_algorithm(algorithm)
    if algorithm == ALGO_DUPLICATE:
        raise ValueError("duplicates carry no blob")
    return CODECS[algorithm].compress(data)


def decompress_blob(comp: bytes, algorithm: str) -> bytes:
    check_archive_algorithm(algorithm)
    if algorithm in (ALGO_STORE, ALGO_DUPLICATE):
        return bytes(comp)
    return CODECS[algorithm].decompress(comp)
