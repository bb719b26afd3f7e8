"""Shared utility functions."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterator

from pctuneup.models.scan_result import SizeReport
from pctuneup.models.clean_result import DeleteReport

log = logging.getLogger(__name__)

_KB = 1024
_MB = 1024 * 1024
_GB = 1024 * 1024 * 1024


def temp_dir() -> Path:
    """Return %TEMP%, defaulting to the interpreter's temp directory."""
    return Path(os.environ.get("TEMP") or tempfile.gettempdir())


def windows_dir() -> Path:
    """Return the Windows installation directory, defaulting to C:\\Windows."""
    return Path(os.environ.get("SystemRoot") or os.environ.get("WINDIR") or r"C:\Windows")


def local_app_data() -> Path:
    """Return %LOCALAPPDATA%, defaulting to ~/AppData/Local."""
    return Path(os.environ.get("LOCALAPPDATA") or Path.home() / "AppData" / "Local")


def _is_link(entry: os.DirEntry) -> bool:
    return entry.is_symlink() or entry.is_junction()


def dir_info(path: Path | str) -> SizeReport:
    """Calculate total size and file count of a directory tree.

    Unreadable files and directories are recorded in ``errors`` and
    contribute nothing. Links are not followed.
    """
    report = SizeReport()
    stack: list[Path | str] = [path]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            report.total_bytes += entry.stat(follow_symlinks=False).st_size
                            report.file_count += 1
                        elif entry.is_dir(follow_symlinks=False) and not _is_link(entry):
                            stack.append(entry.path)
                    except OSError as e:
                        report.errors.append(f"{entry.path}: {e}")
        except OSError as e:
            report.errors.append(f"{current}: {e}")
    if report.errors:
        log.debug("Measured %s with %d unreadable entries", path, len(report.errors))
    return report


def dir_size(path: Path | str) -> int:
    """Calculate total size of a directory tree."""
    return dir_info(path).total_bytes


def _walk_files(root: Path | str, errors: list[str]) -> Iterator[os.DirEntry]:
    """Yield every non-directory entry below *root* without following links."""
    stack: list[Path | str] = [root]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = list(it)
        except OSError as e:
            errors.append(f"{current}: {e}")
            continue
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False) and not _is_link(entry):
                    stack.append(entry.path)
                else:
                    # Links and junctions are removed themselves, never their targets
                    yield entry
            except OSError as e:
                errors.append(f"{entry.path}: {e}")


def delete_contents(path: Path | str) -> DeleteReport:
    """Delete everything inside *path* and return what was freed.

    Files that cannot be removed (usually held open by another process)
    are left in place and counted in ``skipped``. Subdirectories are then
    removed as whole trees; failures there only land in ``errors``.
    The directory itself is kept.
    """
    report = DeleteReport()
    root = Path(path)
    if not root.is_dir():
        return report

    for entry in _walk_files(root, report.errors):
        try:
            size = entry.stat(follow_symlinks=False).st_size
            os.unlink(entry.path)
        except OSError as e:
            log.debug("Skipped %s: %s", entry.path, e)
            report.skipped += 1
            continue
        report.freed_bytes += size

    try:
        subdirs = [p for p in root.iterdir() if p.is_dir() and not p.is_symlink() and not p.is_junction()]
    except OSError as e:
        report.errors.append(f"{root}: {e}")
        return report

    for subdir in subdirs:
        try:
            shutil.rmtree(subdir)
        except OSError as e:
            log.debug("Could not remove %s: %s", subdir, e)
            report.errors.append(f"{subdir}: {e}")

    return report


def format_bytes(size_bytes: int) -> str:
    """Convert byte count to a human-readable string, e.g. '1.50 GB'."""
    if size_bytes >= _GB:
        return f"{size_bytes / _GB:.2f} GB"
    if size_bytes >= _MB:
        return f"{size_bytes / _MB:.2f} MB"
    if size_bytes >= _KB:
        return f"{size_bytes / _KB:.2f} KB"
    return f"{size_bytes} bytes"


def format_elapsed(seconds: float) -> str:
    """Format an elapsed time as a human-readable string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds) // 60
    secs = seconds - minutes * 60
    return f"{minutes}m {secs:.0f}s"
