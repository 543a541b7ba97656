from __future__ import annotations

import dataclasses
import os
import shlex
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

from .lib.elevation import ElevatedRunner, SudoElevatedRunner, WindowsElevatedRunner
from .lib.version_info import VersionReader, read_cli_version, read_windows_product_version


@dataclass(frozen=True)
class ScanRoot:
    """A directory known to host installations.

    children=True: every immediate subdirectory is a candidate (Hub style).
    children=False: the directory itself is the candidate.
    """

    path: str
    children: bool = False


@dataclass(frozen=True)
class PlatformLayout:
    name: str
    scan_roots: Tuple[ScanRoot, ...]
    executable_rel: str
    uninstaller_rel: Optional[str]
    uninstall_arguments: str
    version_reader: VersionReader
    supports_move: bool
    default_install_paths: str
    posix_quoting: bool = True

    def executable_for(self, install_dir: str) -> str:
        return str(Path(install_dir, *self.executable_rel.split("/")))

    def uninstaller_for(self, install_dir: str) -> Optional[str]:
        if self.uninstaller_rel is None:
            return None
        return str(Path(install_dir, *self.uninstaller_rel.split("/")))

    def installer_arguments(self, install_dir: str) -> str:
        # NSIS: /S silent, /D= destination; /D must come last and stay unquoted on Windows.
        dest = shlex.quote(install_dir) if self.posix_quoting else install_dir
        return f"/S /D={dest}"

    def with_extra_roots(self, roots: Iterable[ScanRoot]) -> "PlatformLayout":
        return dataclasses.replace(self, scan_roots=self.scan_roots + tuple(roots))


def _program_files() -> str:
    return os.environ.get("ProgramFiles") or r"C:\Program Files"


def windows_layout() -> PlatformLayout:
    unity = os.path.join(_program_files(), "Unity")
    return PlatformLayout(
        name="windows",
        scan_roots=(
            ScanRoot(os.path.join(unity, "Hub", "Editor"), children=True),
            ScanRoot(os.path.join(unity, "Editor"), children=False),
            ScanRoot(os.path.join(unity, "install-unity"), children=True),
        ),
        executable_rel="Editor/Unity.exe",
        uninstaller_rel="Editor/Uninstall.exe",
        uninstall_arguments="/AllUsers /Q /S",
        version_reader=read_windows_product_version,
        supports_move=False,
        default_install_paths=os.path.join(unity, "install-unity", "{major}.{minor}.{patch}{type}{build}"),
        posix_quoting=False,
    )


def linux_layout() -> PlatformLayout:
    home = str(Path.home())
    return PlatformLayout(
        name="linux",
        scan_roots=(
            ScanRoot(os.path.join(home, "Unity", "Hub", "Editor"), children=True),
            ScanRoot("/opt/unity", children=False),
            ScanRoot(os.path.join(home, "Unity", "install-unity"), children=True),
        ),
        executable_rel="Editor/Unity",
        uninstaller_rel=None,
        uninstall_arguments="",
        version_reader=read_cli_version,
        supports_move=True,
        default_install_paths=os.path.join(home, "Unity", "install-unity", "{major}.{minor}.{patch}{type}{build}"),
    )


def current_layout() -> PlatformLayout:
    if sys.platform == "win32":
        return windows_layout()
    return linux_layout()


def default_runner(
    layout: PlatformLayout,
    *,
    elevation_command: Sequence[str] = ("sudo",),
) -> ElevatedRunner:
    if layout.name == "windows":
        return WindowsElevatedRunner()
    return SudoElevatedRunner(elevation_command)
