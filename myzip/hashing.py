"""Content hashes: SHA-256 for identity/integrity, MD5 and BLAKE3 for fingerprints."""

from __future__ import annotations

import hashlib
import hmac

from blake3 import blake3


def compute_sha256(data: bytes) -> str:
    """
    Compute the SHA-256 content hash of data.

    Returns:
        Lowercase hex string (64 characters)
    """
    return hashlib.sha256(data).hexdigest()


def compute_md5(data: bytes) -> str:
    """MD5 hex digest; fast but not for integrity decisions."""
    return hashlib.md5(data).hexdigest()


def compute_blake3(data: bytes) -> str:
    return blake3(data).hexdigest()


def blake3_digest(data: bytes) -> bytes:
    """32-byte BLAKE3 digest, stored alongside each blob in the container."""
    return blake3(data).digest()


def bytes_equal(a: bytes, b: bytes) -> bool:
    return hmac.compare_digest(a, b)


def verify_sha256(data: bytes, expected: str) -> bool:
    """
    Verify that data matches an expected SHA-256 hex digest.

    Args:
        data: Bytes to verify
        expected: Expected hex digest (case-insensitive)

    Returns:
        True if the digest matches, False otherwise
    """
    return hmac.compare_digest(compute_sha256(data), expected.lower())


def verify_md5(data: bytes, expected: str) -> bool:
    return hmac.compare_digest(compute_md5(data), expected.lower())
