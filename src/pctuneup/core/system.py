"""Platform system actions: recycle bin, DNS cache, volumes and processes."""

from __future__ import annotations

import ctypes
import logging
import os
import subprocess
import sys
from abc import ABC, abstractmethod
from pathlib import Path

import psutil

log = logging.getLogger(__name__)

# SHEmptyRecycleBinW flags
SHERB_NOCONFIRMATION = 0x00000001
SHERB_NOPROGRESSUI = 0x00000002
SHERB_NOSOUND = 0x00000004

# Timeout for ``ipconfig /flushdns`` (seconds).
_FLUSH_TIMEOUT = 60

_CREATE_NO_WINDOW = 0x08000000


class SystemActionError(Exception):
    """Raised when a platform action fails or is not supported."""


def _matches(process_name: str | None, name: str) -> bool:
    if not process_name:
        return False
    stem = process_name.lower()
    if stem.endswith(".exe"):
        stem = stem[:-4]
    return stem == name.lower()


class SystemActions(ABC):
    """Platform capabilities the engines depend on."""

    @abstractmethod
    def ready_volumes(self) -> list[Path]:
        """Root directories of every mounted, ready volume."""

    @abstractmethod
    def empty_recycle_bin(self) -> None:
        """Empty the recycle bin on all drives without any UI."""

    @abstractmethod
    def flush_dns(self) -> None:
        """Flush the DNS resolver cache and wait for it to finish."""

    @abstractmethod
    def is_elevated(self) -> bool:
        """Whether the current process runs with administrator rights."""

    def process_ids(self, name: str) -> list[int]:
        """PIDs of running processes called *name* (``.exe`` optional)."""
        pids = []
        for proc in psutil.process_iter(["name"]):
            if _matches(proc.info.get("name"), name):
                pids.append(proc.pid)
        return pids

    def terminate_processes(self, name: str, timeout: float = 3.0) -> int:
        """Kill every process called *name* and wait for each to exit.

        Processes that vanish, refuse access or outlive *timeout* are
        ignored. Returns how many were killed.
        """
        killed = 0
        for proc in psutil.process_iter(["name"]):
            if not _matches(proc.info.get("name"), name):
                continue
            try:
                proc.kill()
                proc.wait(timeout=timeout)
                killed += 1
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.TimeoutExpired) as e:
                log.debug("Could not terminate %s (%d): %s", name, proc.pid, e)
        return killed


class WindowsSystemActions(SystemActions):
    """System actions backed by the Win32 shell and ``ipconfig``."""

    def ready_volumes(self) -> list[Path]:
        # Drives without media (empty card readers, optical drives) have no fstype
        return [Path(p.mountpoint) for p in psutil.disk_partitions(all=False) if p.fstype]

    def empty_recycle_bin(self) -> None:
        flags = SHERB_NOCONFIRMATION | SHERB_NOPROGRESSUI | SHERB_NOSOUND
        try:
            result = ctypes.windll.shell32.SHEmptyRecycleBinW(None, None, flags)
        except (AttributeError, OSError) as exc:
            raise SystemActionError(f"Could not empty the Recycle Bin: {exc}") from exc
        # A non-zero HRESULT is also returned when the bin is already empty
        if result != 0:
            log.debug("SHEmptyRecycleBinW returned 0x%08X", result & 0xFFFFFFFF)

    def flush_dns(self) -> None:
        try:
            proc = subprocess.run(
                ["ipconfig", "/flushdns"],
                capture_output=True,
                text=True,
                # ipconfig writes in the OEM code page
                errors="replace",
                timeout=_FLUSH_TIMEOUT,
                creationflags=_CREATE_NO_WINDOW,
            )
        except FileNotFoundError:
            raise SystemActionError("Could not find 'ipconfig'")
        except subprocess.TimeoutExpired:
            raise SystemActionError(f"DNS flush timed out after {_FLUSH_TIMEOUT} seconds")

        if proc.returncode != 0:
            output = (proc.stderr or proc.stdout or "").strip()
            log.warning("ipconfig /flushdns exited with %d: %s", proc.returncode, output)
            return
        log.info("DNS resolver cache flushed")

    def is_elevated(self) -> bool:
        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except (AttributeError, OSError):
            return False


class GenericSystemActions(SystemActions):
    """Fallback for non-Windows hosts.

    Volumes and processes still work through psutil; the Windows-only
    shell actions raise :class:`SystemActionError`.
    """

    def ready_volumes(self) -> list[Path]:
        return [Path(p.mountpoint) for p in psutil.disk_partitions(all=False)]

    def empty_recycle_bin(self) -> None:
        raise SystemActionError(f"Emptying the Recycle Bin is not supported on {sys.platform}")

    def flush_dns(self) -> None:
        raise SystemActionError(f"Flushing the DNS cache is not supported on {sys.platform}")

    def is_elevated(self) -> bool:
        return os.geteuid() == 0


def default_system_actions(platform: str | None = None) -> SystemActions:
    """Return the system actions for *platform* (defaults to the running one)."""
    if (platform or sys.platform) == "win32":
        return WindowsSystemActions()
    return GenericSystemActions()
