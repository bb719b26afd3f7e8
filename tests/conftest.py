"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from pctuneup.core.catalog import WindowsLocations, build_catalog
from pctuneup.core.system import SystemActions, SystemActionError


class FakeSystemActions(SystemActions):
    """System actions that record calls instead of touching the machine."""

    def __init__(
        self,
        volumes: list[Path] | None = None,
        processes: dict[str, int] | None = None,
        fail: bool = False,
        elevated: bool = True,
    ) -> None:
        self.volumes = volumes or []
        self.processes = dict(processes or {})
        self.fail = fail
        self.elevated = elevated
        self.calls: list[str] = []

    def ready_volumes(self) -> list[Path]:
        return list(self.volumes)

    def empty_recycle_bin(self) -> None:
        self.calls.append("empty_recycle_bin")
        if self.fail:
            raise SystemActionError("recycle bin is busy")
        for volume in self.volumes:
            bin_dir = volume / "$Recycle.Bin"
            for item in bin_dir.rglob("*"):
                if item.is_file():
                    item.unlink()

    def flush_dns(self) -> None:
        self.calls.append("flush_dns")
        if self.fail:
            raise SystemActionError("DNS flush timed out after 60 seconds")

    def is_elevated(self) -> bool:
        return self.elevated

    def process_ids(self, name: str) -> list[int]:
        return list(range(self.processes.get(name, 0)))

    def terminate_processes(self, name: str, timeout: float = 3.0) -> int:
        self.calls.append(f"terminate:{name}")
        return self.processes.pop(name, 0)


@pytest.fixture
def fake_windows(tmp_path, monkeypatch):
    """Create a fake Windows directory layout and point the environment at it."""
    windows = tmp_path / "Windows"
    user_temp = tmp_path / "Users" / "me" / "AppData" / "Local" / "Temp"
    local = tmp_path / "Users" / "me" / "AppData" / "Local"
    drive = tmp_path / "C"
    for d in (windows / "Temp", windows / "SoftwareDistribution" / "Download", user_temp, drive):
        d.mkdir(parents=True)

    monkeypatch.setenv("TEMP", str(user_temp))
    monkeypatch.setenv("SystemRoot", str(windows))
    monkeypatch.setenv("LOCALAPPDATA", str(local))

    return {
        "root": tmp_path,
        "windows": windows,
        "temp": user_temp,
        "local": local,
        "drive": drive,
    }


@pytest.fixture
def locations(fake_windows):
    return WindowsLocations.from_environ()


@pytest.fixture
def catalog(locations):
    return build_catalog(locations)


@pytest.fixture
def system(fake_windows):
    return FakeSystemActions(volumes=[fake_windows["drive"]])


@pytest.fixture
def make_system():
    """Factory for fake system actions with custom volumes or processes."""
    return FakeSystemActions
