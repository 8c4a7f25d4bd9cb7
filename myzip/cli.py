"""Command-line front end.

Subcommands:
  a      create archive
  l      list
  info   show header and stats
  t      test (decode everything, check SHA-256)
  x      extract
  codec  run one coder over a single file
"""

from __future__ import annotations

import argparse
import os
import pathlib
import sys
import time
from typing import List, Optional, Tuple

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from . import __version__, algorithms
from .archive import ArchiveManager, FileEntry, format_bytes, restore_files
from .bitio import bitio_selftest
from .container import FORMAT_VERSION, MAGIC, parse_archive
from .errors import MyZipError
from .logging_config import setup_logging

# -----------------------------
# Input gathering
# -----------------------------
def gather_input_paths(inputs: List[str]) -> Tuple[pathlib.Path, List[pathlib.Path]]:
    ps = [pathlib.Path(x).resolve() for x in inputs]
    root = pathlib.Path(os.path.commonpath([str(p) for p in ps]))
    if root.is_file():
        root = root.parent
    out: List[pathlib.Path] = []
    for p in ps:
        if p.is_dir():
            for dp, _, fnames in os.walk(p):
                for n in fnames:
                    out.append(pathlib.Path(dp, n))
        else:
            out.append(p)
    out = [p for p in out if p.is_file()]
    out.sort()
    return root, out


def relpath_str(root: pathlib.Path, p: pathlib.Path) -> str:
    try:
        rp = str(p.relative_to(root))
    except ValueError:
        rp = p.name
    return rp.replace("\\", "/")


def _progress(label: str, console: Console) -> Progress:
    return Progress(
        TextColumn(f"[bold cyan]{label}[/]"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
    )

# -----------------------------
# Commands
# -----------------------------
def cmd_add(args: argparse.Namespace) -> int:
    out_path = pathlib.Path(args.archive).resolve()
    root, paths = gather_input_paths(args.inputs)
    paths = [p for p in paths if p != out_path]
    entries = [FileEntry(relpath_str(root, p), p.name, p.read_bytes()) for p in paths]

    console = Console()
    t0 = time.time()
    with _progress("Compressing", console) as progress:
        task = progress.add_task("files", total=len(entries))
        result = ArchiveManager().create_archive(
            entries, out_path, progress=lambda _i, _e: progress.advance(task))
    t1 = time.time()

    print(f"[myzip v{__version__}] OK: wrote {out_path}")
    print(f"  files={len(result.metadata_list)} duplicates={result.duplicate_count} "
          f"raw_sum={result.original_size} stored={result.compressed_size} "
          f"archive_bytes={result.archive_bytes} saved={result.compression_ratio:.2f}% time={t1 - t0:.2f}s")
    counts = {}
    for m in result.metadata_list:
        counts[m.compression_algorithm] = counts.get(m.compression_algorithm, 0) + 1
    print("  algorithms: " + ", ".join(f"{k}={v}" for k, v in sorted(counts.items())))
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    arc = parse_archive(pathlib.Path(args.archive))
    table = Table(title=f"{arc.path.name}: {len(arc.records)} file(s)")
    table.add_column("Size", justify="right")
    table.add_column("Stored", justify="right")
    table.add_column("Algorithm")
    table.add_column("Type")
    table.add_column("Path", overflow="fold")
    for m in arc.records:
        stored = f"-> {m.duplicate_of}" if m.is_duplicate else format_bytes(m.compressed_size)
        table.add_row(format_bytes(m.original_size), stored, m.compression_algorithm, m.file_type, m.relative_path)
    Console().print(table)
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    arc = parse_archive(pathlib.Path(args.archive))
    raw_sum = sum(m.original_size for m in arc.records)
    arc_bytes = arc.path.stat().st_size
    ratio = arc_bytes / float(raw_sum if raw_sum else 1)
    counts = {}
    for m in arc.records:
        counts[m.compression_algorithm] = counts.get(m.compression_algorithm, 0) + 1

    print(f"Archive: {arc.path}")
    print(f"  magic: {MAGIC!r}  version: {FORMAT_VERSION}  tool_version: {arc.head.get('tool_version', '?')}")
    print(f"  files: {len(arc.records)}")
    print(f"  blobs: {len(arc.blobs)}")
    print(f"  sum raw sizes: {raw_sum}")
    print(f"  archive bytes: {arc_bytes}")
    print(f"  archive/raw ratio: {ratio:.4f}")
    if "stats" in arc.head:
        print(f"  stats: {arc.head['stats']}")
    print("  algorithms: " + ", ".join(f"{k}={v}" for k, v in sorted(counts.items())))
    if arc.damaged:
        print(f"  damaged blobs: {len(arc.damaged)}")
    return 0


def cmd_test(args: argparse.Namespace) -> int:
    arc = parse_archive(pathlib.Path(args.archive))
    print(f"Testing {arc.path}: {len(arc.records)} file(s)")
    result = restore_files(arc)
    failed = result.failed_paths
    for p in failed:
        print(f"  FAILED: {p}")
    if failed:
        print(f"ERROR: {len(failed)} file(s) failed verification")
        return 1
    print("OK: all files verified (SHA-256)")
    return 0


def cmd_extract(args: argparse.Namespace) -> int:
    outdir = pathlib.Path(args.outdir).resolve()
    result = ArchiveManager().extract_archive(pathlib.Path(args.archive))
    # every target is checked before the first write
    targets = []
    for rf in result.restored_files:
        p = (outdir / rf.path).resolve()
        if outdir != p and outdir not in p.parents:
            raise SystemExit(f"ERROR: refusing to write outside {outdir}: {rf.path}")
        targets.append((p, rf))
    outdir.mkdir(parents=True, exist_ok=True)
    console = Console()
    with _progress("Extracting", console) as progress:
        task = progress.add_task("files", total=len(targets))
        for p, rf in targets:
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_bytes(rf.data)
            progress.advance(task)
    failed = result.failed_paths
    for path in failed:
        print(f"  WARNING: {path} failed verification")
    print(f"OK: extracted {len(result.restored_files)} file(s) to {outdir}")
    return 1 if failed else 0


def cmd_codec(args: argparse.Namespace) -> int:
    codec = algorithms.get_codec(args.algorithm)
    src = pathlib.Path(args.input).read_bytes()
    fn = codec.compress if args.direction == "compress" else codec.decompress
    out = fn(src)
    pathlib.Path(args.output).write_bytes(out)
    print(f"{codec.name} {args.direction}: {len(src)} -> {len(out)} bytes")
    return 0


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="myzip", add_help=True)
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("--log-level", default=None,
                    help="DEBUG, INFO, WARNING or ERROR (default: $LOG_LEVEL or WARNING)")
    ap.add_argument("--bitio-selftest", action="store_true", default=False,
                    help="run the bit-IO round-trip selftest before the command")
    sub = ap.add_subparsers(dest="cmd", required=True)

    pa = sub.add_parser("a", help="create archive")
    pa.add_argument("archive")
    pa.add_argument("inputs", nargs="+")
    pa.set_defaults(func=cmd_add)

    pl = sub.add_parser("l", help="list")
    pl.add_argument("archive")
    pl.set_defaults(func=cmd_list)

    pi = sub.add_parser("info", help="info")
    pi.add_argument("archive")
    pi.set_defaults(func=cmd_info)

    pt = sub.add_parser("t", help="test")
    pt.add_argument("archive")
    pt.set_defaults(func=cmd_test)

    px = sub.add_parser("x", help="extract")
    px.add_argument("archive")
    px.add_argument("outdir")
    px.set_defaults(func=cmd_extract)

    pc = sub.add_parser("codec", help="run a single coder over one file")
    pc.add_argument("direction", choices=["compress", "decompress"])
    pc.add_argument("--algorithm", "-a", required=True, type=str.upper,
                    choices=algorithms.available_codecs())
    pc.add_argument("input")
    pc.add_argument("output")
    pc.set_defaults(func=cmd_codec)

    return ap


def main(argv: Optional[List[str]] = None) -> None:
    args = build_argparser().parse_args(argv)
    setup_logging("myzip", args.log_level or os.getenv("LOG_LEVEL", "WARNING"))
    if args.bitio_selftest:
        bitio_selftest(verbose=True)
    try:
        rc = args.func(args)
    except (MyZipError, OSError) as e:
        raise SystemExit(f"ERROR: {e}") from e
    if rc:
        raise SystemExit(rc)


if __name__ == "__main__":
    main(sys.argv[1:])
