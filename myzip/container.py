"""On-disk archive container.

Layout (little-endian):

    FILE_HDR  magic "MYZ1", u16 format version
    sections  u32-tagged, u64 length-prefixed:
        HEAD  JSON: tool/format version, creation time, stats
        META  metadata table (one record per archived entry, input order)
        BLOB  one per unique content hash: 64B hex hash, 32B BLAKE3 of the
              blob bytes, then the blob bytes
        END!  terminator

Unknown section tags are skipped so newer writers can add sections.
"""

from __future__ import annotations

import io
import json
import logging
import os
import pathlib
import struct
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from . import algorithms
from .errors import ContainerFormatError
from .hashing import blake3_digest, bytes_equal

logger = logging.getLogger(__name__)

MAGIC = b"MYZ1"
FORMAT_VERSION = 1
META_VERSION = 1

FILE_HDR = struct.Struct("<4sH")   # magic, version
SEC_HDR = struct.Struct("<4sQ")    # tag, payload_len
MAX_SECTION = 2 * 1024 * 1024 * 1024  # 2GiB guard

TAG_HEAD = b"HEAD"
TAG_META = b"META"
TAG_BLOB = b"BLOB"
TAG_END = b"END!"

# META payload: u16 record layout version, u32 record count, then records.
# Record fields, in order:
#   str relative_path, str original_name,
#   u64 original_size, u64 compressed_size,
#   str compression_algorithm, str file_type, str hash,
#   u8 is_duplicate, str duplicate_of, i64 timestamp_ms
# str = u32 byte length + UTF-8 bytes
META_HEAD = struct.Struct("<HI")
STR_LEN = struct.Struct("<I")
SIZES = struct.Struct("<QQ")
DUP_FLAG = struct.Struct("<B")
TIMESTAMP = struct.Struct("<q")

# BLOB payload header: ASCII hex content hash, BLAKE3 digest of the blob bytes
BLOB_HDR = struct.Struct("<64s32s")


@dataclass
class Metadata:
    relative_path: str
    original_name: str
    original_size: int = 0
    compressed_size: int = 0
    compression_algorithm: str = algorithms.ALGO_STORE
    file_type: str = ""
    hash: str = ""
    is_duplicate: bool = False
    duplicate_of: str = ""
    timestamp: int = 0  # ms since epoch

    @property
    def compression_ratio(self) -> float:
        """Space saved, in percent of the original size."""
        if self.original_size == 0:
            return 0.0
        return (1.0 - self.compressed_size / self.original_size) * 100.0

    def __str__(self) -> str:
        return (f"Metadata(path={self.relative_path!r}, size={self.original_size}->{self.compressed_size}, "
                f"algo={self.compression_algorithm!r}, type={self.file_type!r}, ratio={self.compression_ratio:.2f}%)")


@dataclass
class Archive:
    path: pathlib.Path
    head: dict
    records: List[Metadata]
    blobs: Dict[str, bytes]
    # hashes whose blob bytes no longer match the stored BLAKE3 fingerprint
    damaged: Set[str] = field(default_factory=set)

# -----------------------------
# I/O sections
# -----------------------------
def write_section(f: io.BufferedWriter, tag: bytes, payload: bytes) -> None:
    if len(tag) != 4:
        raise ValueError("tag must be 4 bytes")
    ln = len(payload)
    if ln > MAX_SECTION:
        raise ValueError(f"section too large: {ln}")
    f.write(SEC_HDR.pack(tag, ln))
    f.write(payload)


def read_section_header(f: io.BufferedReader) -> Tuple[bytes, int]:
    raw = f.read(SEC_HDR.size)
    if not raw:
        raise EOFError
    if len(raw) != SEC_HDR.size:
        raise ContainerFormatError("truncated section header")
    tag, ln = SEC_HDR.unpack(raw)
    if ln > MAX_SECTION:
        raise ContainerFormatError(f"corrupt section length {ln}")
    return tag, int(ln)

# -----------------------------
# Metadata table
# -----------------------------
def _put_str(parts: List[bytes], s: str) -> None:
    b = s.encode("utf-8")
    parts.append(STR_LEN.pack(len(b)))
    parts.append(b)


def _get_str(b: memoryview, off: int) -> Tuple[str, int]:
    if off + STR_LEN.size > len(b):
        raise ContainerFormatError("corrupt META string length")
    (ln,) = STR_LEN.unpack_from(b, off)
    off += STR_LEN.size
    if off + ln > len(b):
        raise ContainerFormatError("corrupt META string")
    try:
        s = bytes(b[off:off + ln]).decode("utf-8")
    except UnicodeDecodeError as e:
        raise ContainerFormatError(f"corrupt META string encoding: {e}") from e
    return s, off + ln


def _get(st: struct.Struct, b: memoryview, off: int, what: str) -> Tuple[tuple, int]:
    if off + st.size > len(b):
        raise ContainerFormatError(f"corrupt META {what}")
    return st.unpack_from(b, off), off + st.size


def build_meta(records: Iterable[Metadata]) -> bytes:
    records = list(records)
    parts: List[bytes] = [META_HEAD.pack(META_VERSION, len(records))]
    for m in records:
        _put_str(parts, m.relative_path)
        _put_str(parts, m.original_name)
        parts.append(SIZES.pack(int(m.original_size), int(m.compressed_size)))
        _put_str(parts, m.compression_algorithm)
        _put_str(parts, m.file_type)
        _put_str(parts, m.hash)
        parts.append(DUP_FLAG.pack(1 if m.is_duplicate else 0))
        _put_str(parts, m.duplicate_of)
        parts.append(TIMESTAMP.pack(int(m.timestamp)))
    return b"".join(parts)


def parse_meta(payload: bytes) -> List[Metadata]:
    b = memoryview(payload)
    (version, count), off = _get(META_HEAD, b, 0, "header")
    if version != META_VERSION:
        raise ContainerFormatError(f"unsupported META record version {version}")
    records: List[Metadata] = []
    for _ in range(count):
        relative_path, off = _get_str(b, off)
        original_name, off = _get_str(b, off)
        (original_size, compressed_size), off = _get(SIZES, b, off, "sizes")
        algorithm, off = _get_str(b, off)
        file_type, off = _get_str(b, off)
        content_hash, off = _get_str(b, off)
        (dup,), off = _get(DUP_FLAG, b, off, "duplicate flag")
        duplicate_of, off = _get_str(b, off)
        (timestamp,), off = _get(TIMESTAMP, b, off, "timestamp")

        algorithms.check_archive_algorithm(algorithm)
        if dup and (algorithm != algorithms.ALGO_DUPLICATE or compressed_size != 0):
            raise ContainerFormatError(f"duplicate record {relative_path!r} carries data")
        records.append(Metadata(
            relative_path=relative_path,
            original_name=original_name,
            original_size=int(original_size),
            compressed_size=int(compressed_size),
            compression_algorithm=algorithm,
            file_type=file_type,
            hash=content_hash,
            is_duplicate=bool(dup),
            duplicate_of=duplicate_of,
            timestamp=int(timestamp),
        ))
    if off != len(b):
        raise ContainerFormatError(f"trailing bytes in META: {len(b) - off}")
    return records

# -----------------------------
# Blobs
# -----------------------------
def build_blob(content_hash: str, data: bytes) -> bytes:
    h = content_hash.encode("ascii")
    if len(h) != 64:
        raise ValueError(f"content hash must be 64 hex chars, got {len(h)}")
    return BLOB_HDR.pack(h, blake3_digest(data)) + data


def parse_blob(payload: bytes) -> Tuple[str, bytes, bool]:
    """Return (content hash, blob bytes, fingerprint ok)."""
    if len(payload) < BLOB_HDR.size:
        raise ContainerFormatError("corrupt BLOB header")
    h, fp = BLOB_HDR.unpack_from(payload, 0)
    try:
        content_hash = h.decode("ascii")
    except UnicodeDecodeError as e:
        raise ContainerFormatError("corrupt BLOB hash") from e
    data = payload[BLOB_HDR.size:]
    return content_hash, data, bytes_equal(blake3_digest(data), fp)

# -----------------------------
# Whole archive
# -----------------------------
def write_archive(out_path: pathlib.Path, head: dict, records: List[Metadata], blobs: Dict[str, bytes]) -> int:
    """
    Write the container atomically and return its size in bytes.

    Everything goes to a sibling ``.tmp`` file first; the target only appears
    (via os.replace) once every section is on disk.
    """
    out_path = pathlib.Path(out_path)
    if out_path.exists() and out_path.is_dir():
        raise IsADirectoryError(f"output path {out_path} is a directory")
    tmp = out_path.with_name(out_path.name + ".tmp")
    try:
        with tmp.open("wb") as fout:
            fout.write(FILE_HDR.pack(MAGIC, FORMAT_VERSION))
            write_section(fout, TAG_HEAD, json.dumps(head, sort_keys=True).encode("utf-8"))
            write_section(fout, TAG_META, build_meta(records))
            for content_hash, data in blobs.items():
                write_section(fout, TAG_BLOB, build_blob(content_hash, data))
            write_section(fout, TAG_END, b"")
        os.replace(tmp, out_path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return out_path.stat().st_size


def parse_archive(path: pathlib.Path) -> Archive:
    path = pathlib.Path(path)
    head: dict = {}
    records: Optional[List[Metadata]] = None
    blobs: Dict[str, bytes] = {}
    damaged: Set[str] = set()

    with path.open("rb") as f:
        hdr = f.read(FILE_HDR.size)
        if len(hdr) != FILE_HDR.size:
            raise ContainerFormatError("truncated header")
        magic, ver = FILE_HDR.unpack(hdr)
        if magic != MAGIC:
            raise ContainerFormatError(f"bad magic {magic!r}")
        if ver != FORMAT_VERSION:
            raise ContainerFormatError(f"unsupported version {ver}")

        while True:
            try:
                tag, ln = read_section_header(f)
            except EOFError:
                break
            payload = f.read(ln)
            if len(payload) != ln:
                raise ContainerFormatError("truncated payload")

            if tag == TAG_HEAD:
                try:
                    head = json.loads(payload.decode("utf-8"))
                except ValueError as e:
                    raise ContainerFormatError(f"corrupt HEAD: {e}") from e
            elif tag == TAG_META:
                if records is not None:
                    raise ContainerFormatError("more than one META section")
                records = parse_meta(payload)
            elif tag == TAG_BLOB:
                content_hash, data, ok = parse_blob(payload)
                if content_hash in blobs:
                    raise ContainerFormatError(f"duplicate BLOB for hash {content_hash}")
                if not ok:
                    logger.warning("blob %s does not match its stored fingerprint", content_hash)
                    damaged.add(content_hash)
                blobs[content_hash] = data
            elif tag == TAG_END:
                break
            else:
                logger.debug("skipping unknown section %r (%d bytes)", tag, ln)

    if records is None:
        raise ContainerFormatError("missing META section")
    return Archive(path=path, head=head, records=records, blobs=blobs, damaged=damaged)
