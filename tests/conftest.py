"""Shared fixtures: a filesystem-backed layout and a fake elevated runner."""

from __future__ import annotations

import shlex
import threading
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest

from unity_installer.discovery import InstallationScanner
from unity_installer.lib.command import CmdResult
from unity_installer.lifecycle import InstallLifecycle
from unity_installer.platforms import PlatformLayout, ScanRoot


def read_version_file(executable: str) -> str:
    """Test editors are text files holding their product version."""
    return Path(executable).read_text(encoding="utf-8").strip()


def write_editor(install_dir: Path, version: str, exe_name: str = "Unity.exe") -> Path:
    exe = install_dir / "Editor" / exe_name
    exe.parent.mkdir(parents=True, exist_ok=True)
    exe.write_text(version + "\n", encoding="utf-8")
    return exe


class FakeRunner:
    """Records calls; an editor installer 'installs' by writing the executable."""

    def __init__(
        self,
        *,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        product_version: str = "2021.3.5f1.43210",
    ) -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.product_version = product_version
        self.calls: List[Tuple[str, str]] = []

    def run_elevated(
        self,
        executable: str,
        arguments: str,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> CmdResult:
        self.calls.append((executable, arguments))
        if self.returncode == 0:
            for arg in shlex.split(arguments):
                if arg.startswith("/D="):
                    write_editor(Path(arg[3:]), self.product_version)
        return CmdResult(
            argv=[executable],
            returncode=self.returncode,
            stdout=self.stdout,
            stderr=self.stderr,
        )


@pytest.fixture
def hub_dir(tmp_path: Path) -> Path:
    d = tmp_path / "Unity" / "Hub" / "Editor"
    d.mkdir(parents=True)
    return d


@pytest.fixture
def make_layout(tmp_path: Path, hub_dir: Path) -> Callable[..., PlatformLayout]:
    def _make(**overrides) -> PlatformLayout:
        fields = dict(
            name="test",
            scan_roots=(ScanRoot(str(hub_dir), children=True),),
            executable_rel="Editor/Unity.exe",
            uninstaller_rel="Editor/Uninstall.exe",
            uninstall_arguments="/AllUsers /Q /S",
            version_reader=read_version_file,
            supports_move=False,
            default_install_paths=str(tmp_path / "installs" / "{major}.{minor}.{patch}{type}{build}"),
        )
        fields.update(overrides)
        return PlatformLayout(**fields)

    return _make


@pytest.fixture
def layout(make_layout) -> PlatformLayout:
    return make_layout()


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def lifecycle(layout: PlatformLayout, runner: FakeRunner) -> InstallLifecycle:
    return InstallLifecycle(layout, runner, InstallationScanner(layout))
