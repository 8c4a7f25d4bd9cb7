"""Shared pytest fixtures for all tests."""

import logging
import random

import pytest


ROUND_TRIP_CASES = {
    "empty": b"",
    "single": b"A",
    "run300": b"Z" * 300,
    "abcabc": b"ABCABCABC",
    "text": b"the quick brown fox jumps over the lazy dog. " * 20,
    "random": bytes(random.Random(1234).getrandbits(8) for _ in range(2000)),
    "all_bytes": bytes(range(256)) * 2,
}


@pytest.fixture(autouse=True)
def reset_myzip_logger():
    """Undo CLI logging setup so caplog sees library records in every test."""
    yield
    logger = logging.getLogger("myzip")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def random_bytes():
    """
    Deterministic pseudo-random payload.

    Returns:
        4 KiB of seeded random bytes
    """
    rng = random.Random(42)
    return bytes(rng.getrandbits(8) for _ in range(4096))


@pytest.fixture
def sample_entries():
    """
    FileEntry list with one duplicate pair and one of each codec class.

    Returns:
        List of FileEntry values
    """
    from myzip import FileEntry

    text = b"lorem ipsum dolor sit amet, " * 40
    return [
        FileEntry("docs/a.txt", "a.txt", text),
        FileEntry("img/pic.bmp", "pic.bmp", b"\x00" * 500 + b"\xff" * 300),
        FileEntry("img/photo.png", "photo.png", bytes(range(200))),
        FileEntry("docs/copy/a.txt", "a.txt", text),
        FileEntry("empty.txt", "empty.txt", b""),
    ]


@pytest.fixture
def archive_path(tmp_path):
    """Target path for a new archive."""
    return tmp_path / "out.myz"
