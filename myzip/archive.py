"""Archive manager: per-entry dedup and codec choice on create, cached
decode and SHA-256 verification on extract."""

from __future__ import annotations

import logging
import os
import pathlib
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Union

from . import __version__, algorithms
from .container import FORMAT_VERSION, Archive, Metadata, parse_archive, write_archive
from .dedup import DeduplicationTable
from .errors import MissingBlob
from .filetypes import algorithm_for, detect_file_type, file_type_label, should_compress
from .hashing import compute_sha256

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


@dataclass
class FileEntry:
    relative_path: str
    file_name: str
    data: bytes


@dataclass
class RestoredFile:
    path: str
    data: bytes
    size: int
    hash: str
    verified: bool


@dataclass
class CompressionResult:
    metadata_list: List[Metadata]
    original_size: int = 0
    compressed_size: int = 0
    duplicate_count: int = 0
    archive_bytes: int = 0

    @property
    def compression_ratio(self) -> float:
        if self.original_size == 0:
            return 0.0
        return (1.0 - self.compressed_size / self.original_size) * 100.0


@dataclass
class DecompressionResult:
    restored_files: List[RestoredFile] = field(default_factory=list)

    @property
    def all_verified(self) -> bool:
        return all(rf.verified for rf in self.restored_files)

    @property
    def failed_paths(self) -> List[str]:
        return [rf.path for rf in self.restored_files if not rf.verified]

# -----------------------------
# Utilities
# -----------------------------
def source_date_epoch_ms() -> Optional[int]:
    """
    Reproducible-build timestamp source.

    If SOURCE_DATE_EPOCH is set (integer seconds since Unix epoch), return it
    in milliseconds. Otherwise return None.
    """
    v = os.environ.get("SOURCE_DATE_EPOCH")
    if not v:
        return None
    try:
        sec = int(v.strip())
    except ValueError:
        return None
    if sec < 0:
        return None
    return sec * 1000


def now_ms() -> int:
    epoch = source_date_epoch_ms()
    if epoch is not None:
        return epoch
    return time.time_ns() // 1_000_000


def format_bytes(n: int) -> str:
    if n < 1024:
        return f"{n} B"
    value = float(n)
    for unit in "KMGTPE":
        value /= 1024.0
        if value < 1024.0 or unit == "E":
            return f"{value:.2f} {unit}B"
    return f"{n} B"

# -----------------------------
# Manager
# -----------------------------
class ArchiveManager:
    """
    One manager per archiving session.

    The dedup table is reset at the start of every create_archive call and
    "first seen" follows input order, so a manager must not be shared between
    concurrent calls.
    """

    def __init__(self) -> None:
        self.dedup = DeduplicationTable()

    def create_archive(
        self,
        entries: Sequence[FileEntry],
        output: PathLike,
        *,
        progress: Optional[Callable[[int, FileEntry], None]] = None,
    ) -> CompressionResult:
        self.dedup.clear()
        records: List[Metadata] = []
        blobs: Dict[str, bytes] = {}
        original_size = 0
        compressed_size = 0
        duplicate_count = 0

        for i, entry in enumerate(entries):
            data = entry.data
            original_size += len(data)
            content_hash = self.dedup.process_file(data, entry.relative_path)
            file_type = detect_file_type(entry.file_name)
            meta = Metadata(
                relative_path=entry.relative_path,
                original_name=entry.file_name,
                original_size=len(data),
                file_type=file_type_label(file_type),
                hash=content_hash,
                timestamp=now_ms(),
            )

            owner = self.dedup.get_original_file(content_hash)
            if owner != entry.relative_path:
                meta.is_duplicate = True
                meta.duplicate_of = owner or ""
                meta.compression_algorithm = algorithms.ALGO_DUPLICATE
                meta.compressed_size = 0
                duplicate_count += 1
                logger.debug("%s: duplicate of %s", entry.relative_path, owner)
            else:
                algorithm = algorithm_for(file_type)
                if should_compress(file_type):
                    blob = algorithms.compress_blob(data, algorithm)
                else:
                    blob = bytes(data)
                meta.compression_algorithm = algorithm
                meta.compressed_size = len(blob)
                compressed_size += len(blob)
                blobs[content_hash] = blob
                logger.debug("%s: %s %d -> %d bytes", entry.relative_path, algorithm, len(data), len(blob))

            records.append(meta)
            if progress is not None:
                progress(i, entry)

        head = {
            "tool_version": __version__,
            "format_version": FORMAT_VERSION,
            "created_ms": now_ms(),
            "stats": {
                "files": len(records),
                "unique_blobs": len(blobs),
                "original_size": original_size,
                "compressed_size": compressed_size,
                "duplicate_count": duplicate_count,
            },
        }
        archive_bytes = write_archive(pathlib.Path(output), head, records, blobs)
        logger.info("wrote %s: files=%d unique=%d duplicates=%d raw=%d stored=%d archive=%d",
                    output, len(records), len(blobs), duplicate_count,
                    original_size, compressed_size, archive_bytes)
        return CompressionResult(
            metadata_list=records,
            original_size=original_size,
            compressed_size=compressed_size,
            duplicate_count=duplicate_count,
            archive_bytes=archive_bytes,
        )

    def extract_archive(self, source: PathLike) -> DecompressionResult:
        return restore_files(parse_archive(pathlib.Path(source)))


def original_algorithm(records: Sequence[Metadata], content_hash: str) -> str:
    """Algorithm of the non-duplicate record owning ``content_hash``."""
    for m in records:
        if m.hash == content_hash and not m.is_duplicate:
            return m.compression_algorithm
    return algorithms.ALGO_STORE


def restore_files(arc: Archive) -> DecompressionResult:
    """
    Decode every record of a parsed archive, in table order.

    Each unique hash is decoded once; a hash mismatch marks the file as
    unverified but does not stop the others.
    """
    restored: List[RestoredFile] = []
    cache: Dict[str, bytes] = {}
    for m in arc.records:
        data = cache.get(m.hash)
        if data is None:
            comp = arc.blobs.get(m.hash)
            if comp is None:
                raise MissingBlob(m.hash)
            algorithm = original_algorithm(arc.records, m.hash) if m.is_duplicate else m.compression_algorithm
            data = algorithms.decompress_blob(comp, algorithm)
            cache[m.hash] = data

        verified = compute_sha256(data) == m.hash
        if not verified:
            logger.warning("%s: content hash mismatch", m.relative_path)
        restored.append(RestoredFile(
            path=m.relative_path,
            data=data,
            size=len(data),
            hash=m.hash,
            verified=verified,
        ))
    logger.info("restored %d file(s) from %s (%d unique)", len(restored), arc.path, len(cache))
    return DecompressionResult(restored_files=restored)


def create_archive(entries: Sequence[FileEntry], output: PathLike, **kwargs) -> CompressionResult:
    return ArchiveManager().create_archive(entries, output, **kwargs)


def extract_archive(source: PathLike) -> DecompressionResult:
    return ArchiveManager().extract_archive(source)
