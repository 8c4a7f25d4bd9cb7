"""Error kinds raised by the codecs and the archive layer.

Every class derives from ``ValueError`` so callers that only care about
"this stream is bad" can keep catching that.
"""

from __future__ import annotations


class MyZipError(ValueError):
    """Base class for all myzip failures."""


class InvalidBitCount(MyZipError):
    def __init__(self, nbits: int) -> None:
        super().__init__(f"bit count must be in 0..32, got {nbits}")
        self.nbits = nbits


class InvalidLZWCode(MyZipError):
    def __init__(self, code: int) -> None:
        super().__init__(f"invalid LZW code {code}")
        self.code = code


class IncompleteRLERun(MyZipError):
    def __init__(self, offset: int) -> None:
        super().__init__(f"incomplete RLE run at byte {offset}: length without value")
        self.offset = offset


class InvalidOffset(MyZipError):
    def __init__(self, offset: int, available: int) -> None:
        super().__init__(f"invalid LZ77 offset {offset}: only {available} byte(s) decoded")
        self.offset = offset
        self.available = available


class MissingBlob(MyZipError):
    def __init__(self, content_hash: str) -> None:
        super().__init__(f"no compressed data found for hash {content_hash}")
        self.content_hash = content_hash


class UnknownAlgorithm(MyZipError):
    def __init__(self, algorithm: str) -> None:
        super().__init__(f"unknown compression algorithm {algorithm!r}")
        self.algorithm = algorithm


class ContainerFormatError(MyZipError):
    """Malformed archive container (header, sections or metadata table)."""
