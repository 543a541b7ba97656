from __future__ import annotations

from pathlib import Path

import pytest

from conftest import FakeRunner
from unity_installer.discovery import InstallationScanner
from unity_installer.errors import InstallFailed
from unity_installer.lifecycle import InstallLifecycle, LifecyclePhase
from unity_installer.models import InstallQueue, Package, UnityVersion
from unity_installer.pipeline import ordered_items, run_queue

VERSION = UnityVersion.parse("2022.3.10f1")
EDITOR = Package("Unity", "/dl/UnitySetup64.exe")
IOS = Package("iOS", "/dl/UnitySetup-iOS-Support.exe")
WEBGL = Package("WebGL", "/dl/UnitySetup-WebGL-Support.exe")


def test_editor_is_ordered_first() -> None:
    queue = InstallQueue.of(VERSION, [IOS, EDITOR, WEBGL])
    assert ordered_items(queue) == [EDITOR, IOS, WEBGL]


def test_run_queue_installs_everything(lifecycle: InstallLifecycle, runner: FakeRunner, tmp_path: Path) -> None:
    queue = InstallQueue.of(VERSION, [IOS, EDITOR])

    result = run_queue(lifecycle, queue, f"{tmp_path}/{{major}}.{{minor}}.{{patch}}{{type}}{{build}}")

    assert result.installed == ["Unity", "iOS"]
    assert result.installation is not None
    assert result.installation.path == f"{tmp_path}/2022.3.10f1"
    assert [c[0] for c in runner.calls] == [EDITOR.file_path, IOS.file_path]
    assert lifecycle.phase is LifecyclePhase.IDLE


def test_failure_aborts_and_reraises(layout, tmp_path: Path) -> None:
    lifecycle = InstallLifecycle(layout, FakeRunner(returncode=2, stderr="bad"), InstallationScanner(layout))

    with pytest.raises(InstallFailed):
        run_queue(lifecycle, InstallQueue.of(VERSION, [EDITOR, IOS]), f"{tmp_path}/{{major}}")

    assert lifecycle.phase is LifecyclePhase.IDLE
    assert lifecycle.active is None
