"""Run-length coder: (count, value) byte pairs, count in 1..255."""

from __future__ import annotations

from .errors import IncompleteRLERun

MAX_RUN_LENGTH = 255


def compress(data: bytes) -> bytes:
    out = bytearray()
    i = 0
    n = len(data)
    while i < n:
        value = data[i]
        run = 1
        while i + run < n and data[i + run] == value and run < MAX_RUN_LENGTH:
            run += 1
        out.append(run)
        out.append(value)
        i += run
    return bytes(out)


def decompress(comp: bytes) -> bytes:
    if len(comp) % 2:
        raise IncompleteRLERun(len(comp) - 1)
    out = bytearray()
    for i in range(0, len(comp), 2):
        out += bytes([comp[i + 1]]) * comp[i]
    return bytes(out)
