from __future__ import annotations

import os

import pytest

from unity_installer.lib.elevation import SudoElevatedRunner, WindowsElevatedRunner
from unity_installer.platforms import ScanRoot, default_runner, linux_layout, windows_layout


def test_windows_layout_roots(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ProgramFiles", "PF")
    layout = windows_layout()

    assert layout.scan_roots == (
        ScanRoot(os.path.join("PF", "Unity", "Hub", "Editor"), children=True),
        ScanRoot(os.path.join("PF", "Unity", "Editor"), children=False),
        ScanRoot(os.path.join("PF", "Unity", "install-unity"), children=True),
    )
    assert layout.uninstall_arguments == "/AllUsers /Q /S"
    assert not layout.supports_move


def test_windows_destination_is_never_quoted() -> None:
    assert windows_layout().installer_arguments(r"C:\Program Files\Unity 2021") == r"/S /D=C:\Program Files\Unity 2021"


def test_posix_destination_is_shell_quoted() -> None:
    assert linux_layout().installer_arguments("/opt/Unity 2021") == "/S /D='/opt/Unity 2021'"


def test_executable_and_uninstaller_paths() -> None:
    win = windows_layout()
    assert win.executable_for("base") == os.path.join("base", "Editor", "Unity.exe")
    assert win.uninstaller_for("base") == os.path.join("base", "Editor", "Uninstall.exe")
    assert linux_layout().uninstaller_for("base") is None


def test_extra_roots_are_appended() -> None:
    layout = linux_layout().with_extra_roots([ScanRoot("/srv/u", True)])
    assert layout.scan_roots[-1] == ScanRoot("/srv/u", True)


def test_default_runner_matches_layout() -> None:
    assert isinstance(default_runner(windows_layout()), WindowsElevatedRunner)
    runner = default_runner(linux_layout(), elevation_command=["doas"])
    assert isinstance(runner, SudoElevatedRunner)
    assert runner.elevation_command == ["doas"]
