"""myzip: archive container with pluggable codecs and content-addressed dedup."""

__version__ = "0.1.0"

from .archive import (  # noqa: E402
    ArchiveManager,
    CompressionResult,
    DecompressionResult,
    FileEntry,
    RestoredFile,
    create_archive,
    extract_archive,
)
from .container import Metadata  # noqa: E402
from .errors import (  # noqa: E402
    ContainerFormatError,
    IncompleteRLERun,
    InvalidBitCount,
    InvalidLZWCode,
    InvalidOffset,
    MissingBlob,
    MyZipError,
    UnknownAlgorithm,
)

__all__ = [
    "__version__",
    "ArchiveManager",
    "CompressionResult",
    "DecompressionResult",
    "FileEntry",
    "Metadata",
    "RestoredFile",
    "create_archive",
    "extract_archive",
    "ContainerFormatError",
    "IncompleteRLERun",
    "InvalidBitCount",
    "InvalidLZWCode",
    "InvalidOffset",
    "MissingBlob",
    "MyZipError",
    "UnknownAlgorithm",
]
