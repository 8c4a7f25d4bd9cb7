"""Extension-based file classification feeding the archive's codec choice."""

from __future__ import annotations

from enum import Enum

from . import algorithms


class FileType(Enum):
    TEXT = "Text"
    RAW_IMAGE = "Raw Image"
    COMPRESSED = "Pre-compressed"
    UNKNOWN = "Unknown"


TEXT_EXT = {
    "txt", "csv", "log", "md", "markdown", "json", "xml", "html", "css", "js",
    "java", "py", "c", "cpp", "h", "hpp", "go", "rs", "rb", "php", "sh", "bash",
}
RAW_IMAGE_EXT = {"bmp", "ppm", "pgm", "pbm"}
COMPRESSED_EXT = {
    # images
    "jpg", "jpeg", "png", "gif", "webp", "svg", "ico", "tiff", "tif", "heic", "heif",
    # archives
    "zip", "rar", "7z", "gz", "tar", "bz2", "xz", "tgz", "tbz", "jar", "war", "ear",
    # audio
    "mp3", "aac", "ogg", "flac", "wav", "m4a", "wma", "opus", "alac",
    # video
    "mp4", "avi", "mkv", "mov", "wmv", "flv", "webm", "m4v", "mpg", "mpeg", "3gp", "ts",
    # documents
    "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "odt", "ods", "odp",
    # executables and compiled
    "exe", "dll", "so", "dylib", "app", "dmg", "pkg", "deb", "rpm", "apk", "class",
    # databases
    "db", "sqlite", "sqlite3", "mdb",
}


def get_extension(filename: str) -> str:
    dot = filename.rfind(".")
    if dot == -1:
        return ""
    return filename[dot + 1:].lower()


def detect_file_type(filename: str) -> FileType:
    ext = get_extension(filename)
    if ext in TEXT_EXT:
        return FileType.TEXT
    if ext in RAW_IMAGE_EXT:
        return FileType.RAW_IMAGE
    if ext in COMPRESSED_EXT:
        return FileType.COMPRESSED
    # unrecognized: try to compress it
    return FileType.TEXT


def algorithm_for(file_type: FileType) -> str:
    if file_type is FileType.TEXT:
        return algorithms.ALGO_LZW
    if file_type is FileType.RAW_IMAGE:
        return algorithms.ALGO_RLE
    return algorithms.ALGO_STORE


def should_compress(file_type: FileType) -> bool:
    return file_type in (FileType.TEXT, FileType.RAW_IMAGE)


def file_type_label(file_type: FileType) -> str:
    return file_type.value
