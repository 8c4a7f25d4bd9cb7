"""Per-session content-addressed duplicate tracking."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Set

from .hashing import compute_sha256


@dataclass
class DeduplicationTable:
    """
    First-seen wins: the first path registered for a hash owns its bytes;
    later paths with the same hash are recorded as duplicates.

    Order-dependent, so one table belongs to one archiving session.
    """
    hash_to_path: Dict[str, str] = field(default_factory=dict)
    hash_to_data: Dict[str, bytes] = field(default_factory=dict)
    duplicate_set: Set[str] = field(default_factory=set)

    def process_file(self, data: bytes, path: str) -> str:
        h = compute_sha256(data)
        if h in self.hash_to_path:
            self.duplicate_set.add(path)
        else:
            self.hash_to_path[h] = path
            self.hash_to_data[h] = data
        return h

    def is_duplicate(self, path: str) -> bool:
        return path in self.duplicate_set

    def has_hash(self, content_hash: str) -> bool:
        return content_hash in self.hash_to_path

    def get_original_file(self, content_hash: str) -> Optional[str]:
        return self.hash_to_path.get(content_hash)

    def get_data_by_hash(self, content_hash: str) -> Optional[bytes]:
        return self.hash_to_data.get(content_hash)

    def store_data(self, content_hash: str, data: bytes) -> None:
        self.hash_to_data[content_hash] = data

    @property
    def duplicate_count(self) -> int:
        return len(self.duplicate_set)

    @property
    def unique_count(self) -> int:
        return len(self.hash_to_path)

    def duplicate_paths(self) -> Set[str]:
        return set(self.duplicate_set)

    def all_hashes(self) -> Set[str]:
        return set(self.hash_to_path)

    def statistics(self) -> Dict[str, int]:
        return {
            "total_hashes": self.unique_count,
            "duplicate_count": self.duplicate_count,
            "unique_files": self.unique_count,
        }

    def clear(self) -> None:
        self.hash_to_path.clear()
        self.hash_to_data.clear()
        self.duplicate_set.clear()
