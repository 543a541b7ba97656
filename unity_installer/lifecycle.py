from __future__ import annotations

import dataclasses
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .discovery import InstallationScanner
from .errors import (
    AlreadyInstalling,
    EditorNotInstalled,
    EditorRequired,
    InstallFailed,
    NothingInProgress,
    UninstallFailed,
)
from .lib.elevation import ElevatedRunner
from .lib.fs import delete_tree, move_tree
from .lib.paths import resolve_unique_path
from .models import InstallQueue, Installation, Package, UnityVersion
from .platforms import PlatformLayout

logger = logging.getLogger(__name__)


class LifecyclePhase(str, Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    INSTALLING_PACKAGES = "installing_packages"
    COMPLETING = "completing"
    ABORTING = "aborting"


@dataclass(frozen=True)
class ActiveInstall:
    """The one installation in flight. Absent when idle."""

    version: UnityVersion
    install_paths: str
    editor_installed: bool = False
    install_dir: Optional[str] = None


class InstallLifecycle:
    """prepare -> install (editor first) -> complete/abort, plus uninstall.

    Holds the state of a single installation. Not thread-safe: callers drain
    one queue at a time.
    """

    def __init__(
        self,
        layout: PlatformLayout,
        runner: ElevatedRunner,
        scanner: Optional[InstallationScanner] = None,
    ) -> None:
        self.layout = layout
        self.runner = runner
        self.scanner = scanner or InstallationScanner(layout)
        self._active: Optional[ActiveInstall] = None
        self._phase = LifecyclePhase.IDLE

    @property
    def phase(self) -> LifecyclePhase:
        return self._phase

    @property
    def active(self) -> Optional[ActiveInstall]:
        return self._active

    def _reset(self) -> None:
        self._active = None
        self._phase = LifecyclePhase.IDLE

    def prepare_install(self, queue: InstallQueue, install_paths: str) -> None:
        if self._active is not None:
            raise AlreadyInstalling(f"Already installing another version: {self._active.version}")

        self._phase = LifecyclePhase.PREPARING
        active = ActiveInstall(version=queue.version, install_paths=install_paths)

        # Modules only: the editor for this exact version must already be there.
        if not queue.has_editor:
            try:
                existing = self.scanner.find_version(queue.version)
            except Exception:
                self._reset()
                raise
            if not existing:
                self._reset()
                raise EditorNotInstalled(
                    f"Not installing editor but version {queue.version} not already installed."
                )
            logger.info("Adding packages to existing installation at %s", existing[0].path)
            active = dataclasses.replace(active, editor_installed=True, install_dir=existing[0].path)

        self._active = active
        self._phase = LifecyclePhase.INSTALLING_PACKAGES
        logger.info("Prepared install of %s (%d packages)", queue.version, len(queue.items))

    def install(
        self,
        queue: InstallQueue,
        item: Package,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        active = self._active
        if active is None:
            raise NothingInProgress("prepare_install() must be called before install()")
        if not item.is_editor and not active.editor_installed:
            raise EditorRequired(f"Cannot install package {item.name} without installing editor first.")

        install_dir = active.install_dir
        if install_dir is None:
            install_dir = resolve_unique_path(active.version, active.install_paths)
            active = dataclasses.replace(active, install_dir=install_dir)
            self._active = active

        logger.info("Installing %s %s into %s", item.name, queue.version, install_dir)
        result = self.runner.run_elevated(
            item.file_path, self.layout.installer_arguments(install_dir), cancel=cancel
        )
        if result.returncode != 0:
            logger.error("Installer for %s exited with %d", item.name, result.returncode)
            raise InstallFailed(
                f"Failed to install {item.file_path}",
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                executable=item.file_path,
            )

        if item.is_editor:
            self._active = dataclasses.replace(active, editor_installed=True)

    def complete_install(self, aborted: bool) -> Optional[Installation]:
        active = self._active
        if active is None:
            raise NothingInProgress("Not installing any version to complete")

        if aborted:
            self._phase = LifecyclePhase.ABORTING
            logger.warning("Install of %s aborted; files left in %s", active.version, active.install_dir)
            self._reset()
            return None

        self._phase = LifecyclePhase.COMPLETING
        install_dir = active.install_dir
        if install_dir is None:
            # Nothing was installed; report where it would have gone.
            install_dir = resolve_unique_path(active.version, active.install_paths)

        installation = Installation(
            version=active.version,
            path=install_dir,
            executable=self.layout.executable_for(install_dir),
        )
        self._reset()
        logger.info("Completed install of %s at %s", installation.version, installation.path)
        return installation

    def uninstall(
        self,
        installation: Installation,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        uninstaller = self.layout.uninstaller_for(installation.path)
        if uninstaller is None:
            delete_tree(installation.path)
            return

        result = self.runner.run_elevated(uninstaller, self.layout.uninstall_arguments, cancel=cancel)
        if result.returncode != 0:
            logger.error("Uninstaller for %s exited with %d", installation.path, result.returncode)
            raise UninstallFailed(
                f"Could not uninstall Unity at {installation.path}",
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                executable=uninstaller,
            )
        logger.info("Uninstalled %s from %s", installation.version, installation.path)

    def move_installation(self, installation: Installation, new_path: str) -> Installation:
        """Relocate an installation where the platform supports it.

        Unsupported platforms leave it in place and return it unchanged.
        """

        if not self.layout.supports_move:
            logger.warning("Moving installations is not supported on %s", self.layout.name)
            return installation

        moved = move_tree(installation.path, new_path)
        return Installation(
            version=installation.version,
            path=moved,
            executable=self.layout.executable_for(moved),
        )
