"""Error taxonomy for the installer backend.

Every failure carries an `ErrorKind` so callers can branch on the kind
instead of the message text. `exit_code` drives the CLI.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    INSTALLER_ERROR = "installer_error"
    ALREADY_INSTALLING = "already_installing"
    NOTHING_IN_PROGRESS = "nothing_in_progress"
    EDITOR_REQUIRED = "editor_required"
    EDITOR_NOT_INSTALLED = "editor_not_installed"
    LAUNCH_FAILED = "launch_failed"
    INSTALL_FAILED = "install_failed"
    UNINSTALL_FAILED = "uninstall_failed"
    RESOLUTION_EXHAUSTED = "resolution_exhausted"
    CANCELLED = "cancelled"
    DELETE_FAILED = "delete_failed"
    NOT_INSTALLED = "not_installed"
    AMBIGUOUS_INSTALLATION = "ambiguous_installation"


class InstallerError(Exception):
    """Base error for all installer backend failures."""

    kind: ErrorKind = ErrorKind.INSTALLER_ERROR
    exit_code: int = 1


class AlreadyInstalling(InstallerError):
    kind = ErrorKind.ALREADY_INSTALLING
    exit_code = 2


class NothingInProgress(InstallerError):
    kind = ErrorKind.NOTHING_IN_PROGRESS
    exit_code = 2


class EditorRequired(InstallerError):
    kind = ErrorKind.EDITOR_REQUIRED
    exit_code = 2


class EditorNotInstalled(InstallerError):
    kind = ErrorKind.EDITOR_NOT_INSTALLED
    exit_code = 2


class NotInstalled(InstallerError):
    kind = ErrorKind.NOT_INSTALLED
    exit_code = 2


class AmbiguousInstallation(InstallerError):
    kind = ErrorKind.AMBIGUOUS_INSTALLATION
    exit_code = 2


class ResolutionExhausted(InstallerError):
    kind = ErrorKind.RESOLUTION_EXHAUSTED
    exit_code = 2


class OperationCancelled(InstallerError):
    kind = ErrorKind.CANCELLED
    exit_code = 130


class LaunchFailed(InstallerError):
    kind = ErrorKind.LAUNCH_FAILED
    exit_code = 3


class DeleteFailed(InstallerError):
    kind = ErrorKind.DELETE_FAILED
    exit_code = 3


class _ProcessFailed(InstallerError):
    """A child process ran but exited non-zero."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int,
        stdout: str = "",
        stderr: str = "",
        executable: Optional[str] = None,
    ) -> None:
        super().__init__(f"{message} (exit {returncode}) output: {stdout} / {stderr}")
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.executable = executable


class InstallFailed(_ProcessFailed):
    kind = ErrorKind.INSTALL_FAILED
    exit_code = 4


class UninstallFailed(_ProcessFailed):
    kind = ErrorKind.UNINSTALL_FAILED
    exit_code = 4


def exit_code_for_exception(exc: BaseException) -> int:
    if isinstance(exc, InstallerError):
        return exc.exit_code
    if isinstance(exc, OSError):
        return 3
    return 1
