"""Tests for platform system actions."""

from __future__ import annotations

import ctypes
import subprocess
from collections import namedtuple
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import psutil
import pytest

from pctuneup.core.system import (
    GenericSystemActions,
    SystemActionError,
    WindowsSystemActions,
    default_system_actions,
)

Partition = namedtuple("Partition", ["device", "mountpoint", "fstype", "opts"])


class FakeProcess:
    def __init__(self, pid: int, name: str, error: Exception | None = None) -> None:
        self.pid = pid
        self.info = {"name": name}
        self._error = error
        self.killed = False

    def kill(self) -> None:
        if self._error:
            raise self._error
        self.killed = True

    def wait(self, timeout=None) -> int:
        return 0


@pytest.fixture
def processes(monkeypatch):
    procs = [
        FakeProcess(10, "chrome.exe"),
        FakeProcess(11, "Chrome.EXE"),
        FakeProcess(12, "chromedriver.exe"),
        FakeProcess(13, "firefox"),
        FakeProcess(14, None),
    ]
    monkeypatch.setattr(psutil, "process_iter", lambda attrs=None: iter(procs))
    return procs


@pytest.fixture
def fake_windll(monkeypatch):
    calls: list[tuple] = []

    def empty_bin(hwnd, root, flags):
        calls.append((hwnd, root, flags))
        return 0

    shell32 = SimpleNamespace(SHEmptyRecycleBinW=empty_bin, IsUserAnAdmin=lambda: 1)
    monkeypatch.setattr(ctypes, "windll", SimpleNamespace(shell32=shell32), raising=False)
    return calls


class TestProcesses:
    def test_process_ids_match_with_or_without_extension(self, processes):
        actions = GenericSystemActions()
        assert actions.process_ids("chrome") == [10, 11]
        assert actions.process_ids("firefox") == [13]
        assert actions.process_ids("msedge") == []

    def test_terminate(self, processes):
        killed = WindowsSystemActions().terminate_processes("chrome", timeout=0.1)
        assert killed == 2
        assert processes[0].killed and processes[1].killed
        assert not processes[2].killed

    def test_terminate_ignores_vanished_processes(self, monkeypatch):
        procs = [
            FakeProcess(1, "msedge.exe", error=psutil.NoSuchProcess(1)),
            FakeProcess(2, "msedge.exe", error=psutil.AccessDenied(2)),
            FakeProcess(3, "msedge.exe"),
        ]
        monkeypatch.setattr(psutil, "process_iter", lambda attrs=None: iter(procs))
        assert WindowsSystemActions().terminate_processes("msedge") == 1


class TestReadyVolumes:
    PARTITIONS = [
        Partition("C:\\", "C:\\", "NTFS", "rw,fixed"),
        Partition("D:\\", "D:\\", "", "cdrom"),
        Partition("E:\\", "E:\\", "exFAT", "rw,removable"),
    ]

    def test_windows_skips_drives_without_media(self, monkeypatch):
        monkeypatch.setattr(psutil, "disk_partitions", lambda all=False: self.PARTITIONS)
        assert WindowsSystemActions().ready_volumes() == [Path("C:\\"), Path("E:\\")]

    def test_generic_lists_mountpoints(self, monkeypatch):
        parts = [Partition("/dev/sda1", "/", "ext4", "rw")]
        monkeypatch.setattr(psutil, "disk_partitions", lambda all=False: parts)
        assert GenericSystemActions().ready_volumes() == [Path("/")]


class TestEmptyRecycleBin:
    def test_silent_flags(self, fake_windll):
        WindowsSystemActions().empty_recycle_bin()
        assert fake_windll == [(None, None, 0x7)]

    def test_already_empty_is_not_an_error(self, monkeypatch):
        shell32 = SimpleNamespace(SHEmptyRecycleBinW=lambda *a: -2147418113)  # E_UNEXPECTED
        monkeypatch.setattr(ctypes, "windll", SimpleNamespace(shell32=shell32), raising=False)
        WindowsSystemActions().empty_recycle_bin()

    def test_missing_shell_api(self, monkeypatch):
        monkeypatch.delattr(ctypes, "windll", raising=False)
        with pytest.raises(SystemActionError, match="Recycle Bin"):
            WindowsSystemActions().empty_recycle_bin()

    def test_generic_not_supported(self):
        with pytest.raises(SystemActionError, match="not supported"):
            GenericSystemActions().empty_recycle_bin()


class TestFlushDns:
    def test_success(self):
        with patch("pctuneup.core.system.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(
                args=[], returncode=0, stdout="Successfully flushed the DNS Resolver Cache.", stderr=""
            )
            WindowsSystemActions().flush_dns()

        mock_run.assert_called_once()
        assert mock_run.call_args[0][0] == ["ipconfig", "/flushdns"]
        assert mock_run.call_args.kwargs["errors"] == "replace"

    def test_nonzero_exit_is_only_logged(self, caplog):
        with patch("pctuneup.core.system.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(
                args=[], returncode=1, stdout="", stderr="requires elevation"
            )
            with caplog.at_level("WARNING", logger="pctuneup.core.system"):
                WindowsSystemActions().flush_dns()

        assert "requires elevation" in caplog.text

    def test_ipconfig_missing(self):
        with patch("pctuneup.core.system.subprocess.run") as mock_run:
            mock_run.side_effect = FileNotFoundError("ipconfig")
            with pytest.raises(SystemActionError, match="Could not find"):
                WindowsSystemActions().flush_dns()

    def test_timeout(self):
        with patch("pctuneup.core.system.subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.TimeoutExpired(cmd="ipconfig", timeout=60)
            with pytest.raises(SystemActionError, match="timed out"):
                WindowsSystemActions().flush_dns()

    def test_generic_not_supported(self):
        with pytest.raises(SystemActionError, match="not supported"):
            GenericSystemActions().flush_dns()


class TestElevation:
    def test_windows_admin(self, fake_windll):
        assert WindowsSystemActions().is_elevated() is True

    def test_windows_without_shell_api(self, monkeypatch):
        monkeypatch.delattr(ctypes, "windll", raising=False)
        assert WindowsSystemActions().is_elevated() is False


class TestDefaultSystemActions:
    def test_windows(self):
        assert isinstance(default_system_actions("win32"), WindowsSystemActions)

    def test_other(self):
        assert isinstance(default_system_actions("linux"), GenericSystemActions)
