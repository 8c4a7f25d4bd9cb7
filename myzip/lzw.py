"""LZW with a 4096-entry dictionary that freezes once full.

Stream layout: big-endian ``u32`` code count, then that many ``u16`` codes.
"""

from __future__ import annotations

import struct
from typing import Dict, List

from .errors import InvalidLZWCode, MyZipError

MAX_DICT_SIZE = 4096

COUNT_HDR = struct.Struct(">I")


def encode_codes(data: bytes) -> List[int]:
    """Return the code sequence for ``data`` (no framing)."""
    dictionary: Dict[bytes, int] = {bytes([i]): i for i in range(256)}
    dict_size = 256
    codes: List[int] = []
    current = b""
    for b in data:
        nxt = current + bytes([b])
        if nxt in dictionary:
            current = nxt
            continue
        codes.append(dictionary[current])
        if dict_size < MAX_DICT_SIZE:
            dictionary[nxt] = dict_size
            dict_size += 1
        current = bytes([b])
    if current:
        codes.append(dictionary[current])
    return codes


def decode_codes(codes: List[int]) -> bytes:
    if not codes:
        return b""
    dictionary: Dict[int, bytes] = {i: bytes([i]) for i in range(256)}
    dict_size = 256

    first = codes[0]
    if first not in dictionary:
        raise InvalidLZWCode(first)
    previous = dictionary[first]
    out = bytearray(previous)
    for code in codes[1:]:
        if code in dictionary:
            entry = dictionary[code]
        elif code == dict_size and dict_size < MAX_DICT_SIZE:
            entry = previous + previous[:1]
        else:
            raise InvalidLZWCode(code)
        out += entry
        if dict_size < MAX_DICT_SIZE:
            dictionary[dict_size] = previous + entry[:1]
            dict_size += 1
        previous = entry
    return bytes(out)


def compress(data: bytes) -> bytes:
    if not data:
        return b""
    codes = encode_codes(data)
    return COUNT_HDR.pack(len(codes)) + struct.pack(f">{len(codes)}H", *codes)


def decompress(comp: bytes) -> bytes:
    if not comp:
        return b""
    if len(comp) < COUNT_HDR.size:
        raise MyZipError("truncated LZW header")
    (count,) = COUNT_HDR.unpack_from(comp, 0)
    body = len(comp) - COUNT_HDR.size
    if body < count * 2:
        raise MyZipError(f"truncated LZW stream: {count} code(s) declared, {body // 2} present")
    codes = list(struct.unpack_from(f">{count}H", comp, COUNT_HDR.size))
    return decode_codes(codes)
